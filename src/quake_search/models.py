"""Data models for the earthquake search pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

SearchMethod = Literal["coordinates", "place_name", "partial_match", "country", "recent"]


@dataclass(frozen=True)
class EarthquakeRecord:
    """A single event from the USGS summary feed."""

    id: str
    magnitude: float | None
    place: str
    time_ms: int
    depth_km: float
    latitude: float
    longitude: float
    url: str = ""
    significance: int = 0
    event_type: str = "earthquake"


@dataclass(frozen=True)
class ResolvedLocation:
    """A geocoded place."""

    latitude: float
    longitude: float
    name: str
    full_address: str
    country: str
    state: str = ""
    city: str = ""
    type: str = ""
    importance: float | None = None  # informational, never used for ranking
    provider: str = ""


@dataclass(frozen=True)
class Found:
    """Geocoding succeeded."""

    location: ResolvedLocation


@dataclass(frozen=True)
class NotFound:
    """No provider could resolve the query. A valid negative result, not an error."""

    query: str


Resolution = Found | NotFound


@dataclass(frozen=True)
class SearchLocation:
    """Descriptor for searches that did not resolve to coordinates."""

    name: str
    country: str | None = None
    search_terms: list[str] | None = None


@dataclass
class SearchResult:
    """Ranked matches plus how they were found."""

    search_location: ResolvedLocation | SearchLocation | None
    earthquakes: list[EarthquakeRecord] = field(default_factory=list)
    total_found: int = 0
    search_method: SearchMethod = "place_name"
    showing: int | None = None  # set only when a caller limit was applied
    timeframe: str = "month"
