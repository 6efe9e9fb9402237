"""Search orchestrator: validate -> geocode -> fetch -> match -> assemble."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from requests import Session

from quake_search.config import TIMEFRAMES, QuakeSearchConfig
from quake_search.errors import InvalidQueryError
from quake_search.fetchers.geocoding import resolve_place
from quake_search.fetchers.usgs import fetch_all
from quake_search.http import create_session
from quake_search.lexicon import load_lexicon
from quake_search.matching import (
    build_search_terms,
    country_variations,
    match_by_country,
    match_by_place_name,
    match_by_radius,
    match_partial,
    sort_by_magnitude,
)
from quake_search.models import (
    EarthquakeRecord,
    Found,
    ResolvedLocation,
    SearchLocation,
    SearchMethod,
    SearchResult,
)

logger = logging.getLogger(__name__)


def _clean_query(query: str | None, what: str = "Location") -> str:
    cleaned = (query or "").strip()
    if not cleaned:
        raise InvalidQueryError(f"{what} parameter is required")
    return cleaned


def _check_timeframe(timeframe: str) -> None:
    if timeframe not in TIMEFRAMES:
        raise InvalidQueryError(
            f"Unknown timeframe {timeframe!r}; expected one of {', '.join(TIMEFRAMES)}"
        )


def _check_limit(limit: int | None) -> None:
    if limit is not None and limit < 1:
        raise InvalidQueryError(f"limit must be at least 1, got {limit}")


@contextmanager
def _session_scope(config: QuakeSearchConfig, session: Session | None) -> Iterator[Session]:
    """Yield the caller's session, or a fresh one that is closed afterwards."""
    if session is not None:
        yield session
        return
    with create_session(retries=config.http_retries, user_agent=config.user_agent) as owned:
        yield owned


def _fetch(timeframe: str, config: QuakeSearchConfig, session: Session) -> list[EarthquakeRecord]:
    return fetch_all(
        timeframe,
        timeout=config.request_timeout,
        session=session,
        base_url=config.usgs_feed_base,
    )


def _assemble(
    location: ResolvedLocation | SearchLocation | None,
    matched: list[EarthquakeRecord],
    method: SearchMethod,
    timeframe: str,
    limit: int | None,
) -> SearchResult:
    """Build the result; the caller's limit is the only truncation applied."""
    result = SearchResult(
        search_location=location,
        earthquakes=matched,
        total_found=len(matched),
        search_method=method,
        timeframe=timeframe,
    )
    if limit is not None:
        result.earthquakes = matched[:limit]
        result.showing = len(result.earthquakes)
    return result


def search(
    query: str,
    radius_km: float | None = None,
    timeframe: str | None = None,
    limit: int | None = None,
    config: QuakeSearchConfig | None = None,
    session: Session | None = None,
) -> SearchResult:
    """Find earthquakes near a free-text place.

    Strategy order, stopping at the first that applies:
    1. geocode the query and keep events within ``radius_km`` ("coordinates")
    2. substring match on the feed's place text ("place_name")
    3. expanded-term and fuzzy match ("partial_match"), returned even if empty

    The feed is fetched once. FeedFetchError propagates unchanged.
    """
    if config is None:
        config = QuakeSearchConfig()
    if radius_km is None:
        radius_km = config.default_radius_km
    if timeframe is None:
        timeframe = config.default_timeframe

    query = _clean_query(query)
    _check_timeframe(timeframe)
    _check_limit(limit)
    if radius_km < 0:
        raise InvalidQueryError(f"radius must be non-negative, got {radius_km}")
    lexicon = load_lexicon(config.lexicon_file)

    with _session_scope(config, session) as http:
        logger.info("Searching for earthquakes near %r (timeframe=%s)", query, timeframe)
        resolution = resolve_place(query, config=config, session=http)

        if isinstance(resolution, Found):
            location = resolution.location
            logger.info(
                "Resolved %r to %.4f, %.4f via %s",
                query, location.latitude, location.longitude, location.provider,
            )
            earthquakes = _fetch(timeframe, config, http)
            matched = match_by_radius(earthquakes, location, radius_km)
            logger.info("%d events within %.0f km", len(matched), radius_km)
            return _assemble(location, matched, "coordinates", timeframe, limit)

        logger.info("Geocoding failed for %r, trying place-name search", query)
        earthquakes = _fetch(timeframe, config, http)

    matched = match_by_place_name(earthquakes, query)
    if matched:
        return _assemble(SearchLocation(name=query), matched, "place_name", timeframe, limit)

    logger.info("Place-name search found nothing, trying partial matching")
    terms = build_search_terms(query, lexicon)
    logger.debug("Partial match terms: %s", ", ".join(terms))
    matched = match_partial(earthquakes, query, lexicon, terms=terms)
    return _assemble(
        SearchLocation(name=query, search_terms=terms),
        matched,
        "partial_match",
        timeframe,
        limit,
    )


def search_by_country(
    country: str,
    timeframe: str | None = None,
    limit: int | None = None,
    config: QuakeSearchConfig | None = None,
    session: Session | None = None,
) -> SearchResult:
    """Find earthquakes whose place text names ``country`` or an equivalent.

    Skips geocoding: a country rarely reduces to a point worth a radius search.
    """
    if config is None:
        config = QuakeSearchConfig()
    if timeframe is None:
        timeframe = config.default_timeframe

    country = _clean_query(country, what="Country")
    _check_timeframe(timeframe)
    _check_limit(limit)
    lexicon = load_lexicon(config.lexicon_file)

    variations = country_variations(country, lexicon)
    logger.info("Searching for earthquakes in %r (timeframe=%s)", country, timeframe)
    logger.debug("Country variations: %s", ", ".join(variations))

    with _session_scope(config, session) as http:
        earthquakes = _fetch(timeframe, config, http)
    matched = match_by_country(earthquakes, country, lexicon, variations=variations)
    logger.info("%d events matched %r", len(matched), country)
    return _assemble(
        SearchLocation(name=country, country=country),
        matched,
        "country",
        timeframe,
        limit,
    )


def fetch_recent(
    timeframe: str = "day",
    limit: int | None = None,
    config: QuakeSearchConfig | None = None,
    session: Session | None = None,
) -> SearchResult:
    """The whole feed window ranked by magnitude, optionally truncated."""
    if config is None:
        config = QuakeSearchConfig()
    _check_timeframe(timeframe)
    _check_limit(limit)

    with _session_scope(config, session) as http:
        earthquakes = sort_by_magnitude(_fetch(timeframe, config, http))
    return _assemble(None, earthquakes, "recent", timeframe, limit)
