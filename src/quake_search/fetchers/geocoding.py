"""Place resolution via Nominatim with a GeoNames fallback."""

from __future__ import annotations

import logging

from requests import Session

from quake_search.config import QuakeSearchConfig
from quake_search.http import create_session
from quake_search.models import Found, NotFound, Resolution, ResolvedLocation

logger = logging.getLogger(__name__)


def search_nominatim(
    place: str,
    session: Session,
    url: str,
    timeout: int = 30,
) -> ResolvedLocation | None:
    """Return the best Nominatim match for ``place``, or None.

    Failures are logged and reported as no result (non-fatal).
    """
    params: dict[str, str | int] = {
        "q": place,
        "format": "json",
        "addressdetails": 1,
        "limit": 1,
        "accept-language": "en",
    }
    try:
        resp = session.get(url, params=params, timeout=timeout)
        if resp.status_code != 200:
            logger.warning("Nominatim returned HTTP %d for %r", resp.status_code, place)
            return None
        data = resp.json()
        if not data:
            return None

        hit = data[0]
        address = hit.get("address") or {}
        display_name = hit.get("display_name", "")
        return ResolvedLocation(
            latitude=float(hit["lat"]),
            longitude=float(hit["lon"]),
            name=display_name.split(",")[0].strip(),
            full_address=display_name,
            country=address.get("country") or "Unknown",
            state=address.get("state") or address.get("province") or "",
            city=address.get("city") or address.get("town") or address.get("village") or "",
            type=hit.get("type", ""),
            importance=hit.get("importance"),
            provider="nominatim",
        )
    except Exception:
        logger.warning("Nominatim search failed for %r", place, exc_info=True)
        return None


def search_geonames(
    place: str,
    session: Session,
    url: str,
    username: str,
    timeout: int = 30,
) -> ResolvedLocation | None:
    """Return the best GeoNames match for ``place``, or None.

    Failures are logged and reported as no result (non-fatal).
    """
    params: dict[str, str | int] = {
        "q": place,
        "maxRows": 1,
        "username": username,
        "style": "full",
    }
    try:
        resp = session.get(url, params=params, timeout=timeout)
        if resp.status_code != 200:
            logger.warning("GeoNames returned HTTP %d for %r", resp.status_code, place)
            return None
        # GeoNames reports quota and auth problems as a 200 with a "status" body.
        payload = resp.json()
        if "status" in payload:
            logger.warning(
                "GeoNames error for %r: %s",
                place, payload["status"].get("message", payload["status"]),
            )
            return None
        rows = payload.get("geonames") or []
        if not rows:
            return None

        hit = rows[0]
        name = hit.get("name", "")
        admin = hit.get("adminName1") or ""
        country = hit.get("countryName") or ""
        return ResolvedLocation(
            latitude=float(hit["lat"]),
            longitude=float(hit["lng"]),
            name=name,
            full_address=f"{name}, {admin}, {country}",
            country=country,
            state=admin,
            city=name,
            type="geonames",
            importance=0.5,
            provider="geonames",
        )
    except Exception:
        logger.warning("GeoNames search failed for %r", place, exc_info=True)
        return None


def resolve_place(
    place: str,
    config: QuakeSearchConfig | None = None,
    session: Session | None = None,
) -> Resolution:
    """Resolve free text to coordinates, trying Nominatim then GeoNames.

    Returns NotFound only once both providers have come up empty.
    """
    if config is None:
        config = QuakeSearchConfig()
    if session is None:
        session = create_session(retries=config.http_retries, user_agent=config.user_agent)

    location = search_nominatim(
        place, session, config.nominatim_url, timeout=config.request_timeout
    )
    if location is not None:
        logger.info("Found location via Nominatim: %s", location.name)
        return Found(location)

    location = search_geonames(
        place,
        session,
        config.geonames_url,
        config.geonames_username,
        timeout=config.request_timeout,
    )
    if location is not None:
        logger.info("Found location via GeoNames: %s", location.name)
        return Found(location)

    logger.info("No geocoding result for %r", place)
    return NotFound(place)
