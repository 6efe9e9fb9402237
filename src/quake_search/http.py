"""Shared HTTP session with retry/backoff."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = "quake-search/0.1 (earthquake place search)"


def create_session(
    retries: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: tuple[int, ...] = (429, 500, 502, 503, 504),
    user_agent: str = DEFAULT_USER_AGENT,
) -> Session:
    """Create a requests Session with exponential backoff retry.

    Backoff schedule (backoff_factor=0.5): 0s, 0.5s, 1s.
    Retries only on GET requests and only for the listed status codes.
    Every request carries ``user_agent``; Nominatim rejects anonymous clients.
    """
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = Session()
    session.headers["User-Agent"] = user_agent
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session
