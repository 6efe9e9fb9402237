"""Configuration model for the earthquake search pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from quake_search.http import DEFAULT_USER_AGENT

Timeframe = Literal["hour", "day", "week", "month"]
OutputFormat = Literal["json", "geojson"]

TIMEFRAMES: tuple[str, ...] = ("hour", "day", "week", "month")


class QuakeSearchConfig(BaseSettings):
    """All configurable parameters for the search pipeline.

    Values can be set via constructor arguments, environment variables
    prefixed with QUAKE_SEARCH_, or defaults.
    """

    model_config = {"env_prefix": "QUAKE_SEARCH_"}

    request_timeout: int = Field(
        default=30, ge=1, le=300, description="HTTP request timeout in seconds."
    )
    http_retries: int = Field(
        default=3, ge=0, le=10, description="Transport-level retries on 429/5xx."
    )
    default_radius_km: float = Field(
        default=500.0, gt=0.0, description="Search radius for resolved locations."
    )
    default_timeframe: Timeframe = Field(
        default="month", description="USGS feed window: hour, day, week, or month."
    )
    geonames_username: str = Field(
        default="demo", description="GeoNames account used for the fallback geocoder."
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent sent upstream. Nominatim requires an identifying value.",
    )
    usgs_feed_base: str = Field(
        default="https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/",
        description="Base URL of the USGS summary feeds.",
    )
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim free-text search endpoint.",
    )
    geonames_url: str = Field(
        default="http://api.geonames.org/searchJSON",
        description="GeoNames search endpoint.",
    )
    lexicon_file: Path | None = Field(
        default=None,
        description="JSON file replacing the bundled abbreviation/country lexicons.",
    )
