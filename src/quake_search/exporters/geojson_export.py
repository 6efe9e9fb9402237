"""GeoJSON exporter for search results."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from quake_search.models import EarthquakeRecord, ResolvedLocation, SearchResult


def _make_earthquake_feature(earthquake: EarthquakeRecord, rank: int) -> dict[str, Any]:
    """Create a GeoJSON Feature for an earthquake."""
    time_str = datetime.fromtimestamp(
        earthquake.time_ms / 1000, tz=timezone.utc
    ).isoformat()
    return {
        "type": "Feature",
        "id": earthquake.id,
        "geometry": {
            "type": "Point",
            "coordinates": [earthquake.longitude, earthquake.latitude, earthquake.depth_km],
        },
        "properties": {
            "feature_type": "earthquake",
            "rank": rank,
            "magnitude": earthquake.magnitude,
            "place": earthquake.place,
            "time": time_str,
            "depth_km": earthquake.depth_km,
            "url": earthquake.url,
            "significance": earthquake.significance,
            "event_type": earthquake.event_type,
        },
    }


def _make_location_feature(location: ResolvedLocation) -> dict[str, Any]:
    """Create a GeoJSON Feature for the geocoded search centre."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Point",
            "coordinates": [location.longitude, location.latitude],
        },
        "properties": {"feature_type": "search_location", **asdict(location)},
    }


def result_to_geojson(result: SearchResult) -> dict[str, Any]:
    """Build a FeatureCollection of the returned earthquakes.

    The search centre is included as its own feature when the query was
    geocoded. GeoJSON coordinates are [longitude, latitude(, depth)].
    """
    features: list[dict[str, Any]] = []
    if isinstance(result.search_location, ResolvedLocation):
        features.append(_make_location_feature(result.search_location))
    features.extend(
        _make_earthquake_feature(eq, rank)
        for rank, eq in enumerate(result.earthquakes, start=1)
    )

    search_name = (
        result.search_location.name if result.search_location is not None else None
    )
    return {
        "type": "FeatureCollection",
        "metadata": {
            "generated": datetime.now(tz=timezone.utc).isoformat(),
            "source": "quake-search",
            "search": search_name,
            "search_method": result.search_method,
            "timeframe": result.timeframe,
            "total_found": result.total_found,
            "showing": result.showing,
        },
        "features": features,
    }


def export_geojson(result: SearchResult, output_path: Path) -> Path:
    """Export a search result as a GeoJSON FeatureCollection."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result_to_geojson(result), f, indent=2, ensure_ascii=False)
    return output_path
