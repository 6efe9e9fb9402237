"""Error taxonomy for the search pipeline.

Geocoding provider failures are deliberately absent: they are logged and
reported as ``NotFound``, never raised.
"""

from __future__ import annotations


class QuakeSearchError(Exception):
    """Base class for errors that abort a search."""


class InvalidQueryError(QuakeSearchError, ValueError):
    """Caller input rejected before any network call."""


class FeedFetchError(QuakeSearchError):
    """The earthquake feed could not be retrieved or parsed."""

    def __init__(self, timeframe: str, cause: object) -> None:
        self.timeframe = timeframe
        super().__init__(f"Failed to fetch earthquake data ({timeframe}): {cause}")


class LexiconError(QuakeSearchError):
    """The configured lexicon file is missing or does not have the expected shape."""

    def __init__(self, path: object, cause: object) -> None:
        self.path = path
        super().__init__(f"Could not load lexicon from {path}: {cause}")
