"""Shared fixtures for quake_search tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from quake_search.config import QuakeSearchConfig
from quake_search.lexicon import Lexicon, load_lexicon
from quake_search.models import EarthquakeRecord, ResolvedLocation

FIXTURES_DIR = Path(__file__).parent / "fixtures"

USGS_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
GEONAMES_URL = "http://api.geonames.org/searchJSON"


@pytest.fixture
def sample_feed() -> dict:
    return json.loads((FIXTURES_DIR / "usgs_feed_sample.json").read_text())


@pytest.fixture
def config() -> QuakeSearchConfig:
    """Defaults with transport retries off so mocked 5xx fail fast."""
    return QuakeSearchConfig(http_retries=0, request_timeout=5)


@pytest.fixture
def lexicon() -> Lexicon:
    return load_lexicon()


def make_quake(
    id: str,
    place: str,
    magnitude: float | None = 4.0,
    latitude: float = 0.0,
    longitude: float = 0.0,
) -> EarthquakeRecord:
    return EarthquakeRecord(
        id=id,
        magnitude=magnitude,
        place=place,
        time_ms=1760000000000,
        depth_km=10.0,
        latitude=latitude,
        longitude=longitude,
    )


@pytest.fixture
def japan_quakes() -> list[EarthquakeRecord]:
    return [
        make_quake("jp1", "10km SE of Tokyo, Japan", 5.1, 35.62, 139.75),
        make_quake("jp2", "20km N of Osaka, Japan", 6.0, 34.87, 135.5),
        make_quake("ph1", "5km W of Manila, Philippines", 4.2, 14.6, 120.93),
    ]


@pytest.fixture
def tokyo() -> ResolvedLocation:
    return ResolvedLocation(
        latitude=35.6762,
        longitude=139.6503,
        name="Tokyo",
        full_address="Tokyo, Japan",
        country="Japan",
        city="Tokyo",
        type="city",
        importance=0.82,
        provider="nominatim",
    )


def nominatim_hit(
    lat: str = "35.6768601",
    lon: str = "139.7638947",
    display_name: str = "Tokyo, Japan",
    address: dict | None = None,
) -> list[dict]:
    return [
        {
            "lat": lat,
            "lon": lon,
            "display_name": display_name,
            "type": "administrative",
            "importance": 0.82,
            "address": address if address is not None else {"city": "Tokyo", "country": "Japan"},
        }
    ]
