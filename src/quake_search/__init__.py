"""Earthquake search by place or country name over the USGS summary feed."""

__version__ = "0.1.0"
