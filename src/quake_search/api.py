"""FastAPI wrapper for the earthquake search pipeline."""

from __future__ import annotations

import logging
import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from quake_search import __version__
from quake_search.config import OutputFormat, QuakeSearchConfig
from quake_search.errors import FeedFetchError, InvalidQueryError, LexiconError
from quake_search.exporters import result_to_dict, result_to_geojson
from quake_search.http import create_session
from quake_search.models import SearchResult
from quake_search.pipeline import fetch_recent, search, search_by_country

logger = logging.getLogger(__name__)

# Web clients have always been shown at most this many rows unless they ask.
DEFAULT_LIMIT = 50

_count_lock = threading.Lock()


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Load settings and open one HTTP session shared by every request."""
    config = QuakeSearchConfig()
    application.state.config = config
    session = create_session(retries=config.http_retries, user_agent=config.user_agent)
    application.state.session = session
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.search_count = 0
    yield
    session.close()


app = FastAPI(
    title="Quake Search API",
    description="Find recent earthquakes near a place or within a country.",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(InvalidQueryError)
def _invalid_query(request: Request, exc: InvalidQueryError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(FeedFetchError)
def _feed_failure(request: Request, exc: FeedFetchError) -> JSONResponse:
    logger.error("Feed fetch failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"success": False, "error": str(exc)})


@app.exception_handler(LexiconError)
def _lexicon_failure(request: Request, exc: LexiconError) -> JSONResponse:
    logger.error("Lexicon unavailable for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


def _record_search() -> None:
    with _count_lock:
        app.state.search_count += 1


def _respond(result: SearchResult, fmt: OutputFormat) -> JSONResponse:
    _record_search()
    if fmt == "geojson":
        return JSONResponse(content=result_to_geojson(result), media_type="application/geo+json")
    return JSONResponse(content={"success": True, "data": result_to_dict(result)})


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, and search count."""
    now = datetime.now(tz=timezone.utc)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "search_count": app.state.search_count,
    }


@app.get("/api/earthquakes")
def get_recent(
    timeframe: Annotated[
        str, Query(description="Feed window: hour, day, week, or month."),
    ] = "day",
    limit: Annotated[
        int, Query(description="Maximum events to return."),
    ] = 20,
) -> JSONResponse:
    """Strongest events in the feed window."""
    result = fetch_recent(
        timeframe=timeframe, limit=limit, config=app.state.config, session=app.state.session
    )
    _record_search()
    return JSONResponse(
        content={
            "success": True,
            "data": [asdict(eq) for eq in result.earthquakes],
            "count": len(result.earthquakes),
        }
    )


@app.get("/api/earthquakes/search")
def search_location(
    location: Annotated[
        str | None, Query(description="Free-text place to search near."),
    ] = None,
    radius: Annotated[
        float, Query(description="Search radius in km for geocoded places."),
    ] = 500.0,
    timeframe: Annotated[
        str, Query(description="Feed window: hour, day, week, or month."),
    ] = "month",
    limit: Annotated[
        int, Query(description="Maximum events to return."),
    ] = DEFAULT_LIMIT,
    format: Annotated[
        OutputFormat, Query(description="Response format: json or geojson."),
    ] = "json",
) -> JSONResponse:
    """Geocode ``location`` and return nearby events, falling back to text matching."""
    result = search(
        location or "",
        radius_km=radius,
        timeframe=timeframe,
        limit=limit,
        config=app.state.config,
        session=app.state.session,
    )
    return _respond(result, format)


@app.get("/api/earthquakes/search-by-country")
def search_country(
    country: Annotated[
        str | None, Query(description="Country name or common alias."),
    ] = None,
    timeframe: Annotated[
        str, Query(description="Feed window: hour, day, week, or month."),
    ] = "month",
    limit: Annotated[
        int, Query(description="Maximum events to return."),
    ] = DEFAULT_LIMIT,
    format: Annotated[
        OutputFormat, Query(description="Response format: json or geojson."),
    ] = "json",
) -> JSONResponse:
    """Events whose place text names the country or one of its aliases."""
    result = search_by_country(
        country or "",
        timeframe=timeframe,
        limit=limit,
        config=app.state.config,
        session=app.state.session,
    )
    return _respond(result, format)
