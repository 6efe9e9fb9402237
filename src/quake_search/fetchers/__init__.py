"""Upstream HTTP fetchers: USGS feed and geocoding providers."""
