"""USGS earthquake summary feed fetcher."""

from __future__ import annotations

import logging

from requests import RequestException, Session

from quake_search.config import TIMEFRAMES
from quake_search.errors import FeedFetchError, InvalidQueryError
from quake_search.geo import is_valid_coordinate
from quake_search.http import create_session
from quake_search.models import EarthquakeRecord

logger = logging.getLogger(__name__)

USGS_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/"


def feed_url(timeframe: str, base_url: str = USGS_FEED_BASE) -> str:
    """Return the ``all_<timeframe>.geojson`` resource for a feed window."""
    if timeframe not in TIMEFRAMES:
        raise InvalidQueryError(
            f"Unknown timeframe {timeframe!r}; expected one of {', '.join(TIMEFRAMES)}"
        )
    return f"{base_url.rstrip('/')}/all_{timeframe}.geojson"


def _parse_feature(feat: dict) -> EarthquakeRecord:
    """Map one GeoJSON feature. Coordinates arrive as [lon, lat, depth]."""
    props = feat["properties"]
    coords = feat["geometry"]["coordinates"]
    mag = props.get("mag")
    return EarthquakeRecord(
        id=feat["id"],
        magnitude=float(mag) if mag is not None else None,
        place=props.get("place") or "",
        time_ms=int(props["time"]),
        depth_km=float(coords[2]) if len(coords) > 2 and coords[2] is not None else 0.0,
        latitude=float(coords[1]),
        longitude=float(coords[0]),
        url=props.get("url") or "",
        significance=props.get("sig") or 0,
        event_type=props.get("type") or "earthquake",
    )


def fetch_all(
    timeframe: str = "day",
    timeout: int = 30,
    session: Session | None = None,
    base_url: str = USGS_FEED_BASE,
) -> list[EarthquakeRecord]:
    """Fetch every event in a USGS summary feed window.

    Issues exactly one GET. Transport, HTTP-status and parse failures are
    raised as FeedFetchError; there is no retry beyond the session adapter.
    """
    url = feed_url(timeframe, base_url)
    if session is None:
        session = create_session()

    logger.info("Fetching earthquake feed: %s", url)
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        features = resp.json()["features"]
        records: list[EarthquakeRecord] = []
        for feat in features:
            record = _parse_feature(feat)
            if not is_valid_coordinate(record.latitude, record.longitude):
                logger.warning(
                    "Dropping %s: coordinates out of range (%s, %s)",
                    record.id, record.latitude, record.longitude,
                )
                continue
            records.append(record)
    except RequestException as exc:
        raise FeedFetchError(timeframe, exc) from exc
    except (ValueError, KeyError, TypeError, IndexError) as exc:
        raise FeedFetchError(timeframe, f"malformed feed ({exc!r})") from exc

    logger.info("Retrieved %d events for timeframe %s", len(records), timeframe)
    return records
