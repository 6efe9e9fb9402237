"""Editable term tables used by the textual matchers.

Both tables map a canonical term to its variants. The bundled copy lives in
``quake_search/data/lexicons.json``; set ``QUAKE_SEARCH_LEXICON_FILE`` to use
another file with the same shape.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from quake_search.errors import LexiconError

logger = logging.getLogger(__name__)

_BUNDLED = "lexicons.json"


class Lexicon(BaseModel):
    """Abbreviation and country equivalence tables."""

    abbreviations: dict[str, list[str]] = {}
    countries: dict[str, list[str]] = {}

    @field_validator("abbreviations", "countries")
    @classmethod
    def _normalise(cls, table: dict[str, list[str]]) -> dict[str, list[str]]:
        return {
            key.strip().lower(): [v.strip().lower() for v in variants if v.strip()]
            for key, variants in table.items()
            if key.strip()
        }

    def replacement_pairs(self) -> list[tuple[str, str]]:
        """Directed (from, to) pairs, each abbreviation in both directions."""
        pairs: list[tuple[str, str]] = []
        for canonical, variants in self.abbreviations.items():
            for variant in variants:
                pairs.append((canonical, variant))
                pairs.append((variant, canonical))
        return pairs

    def country_classes(self) -> list[list[str]]:
        """Each equivalence class as [canonical, *variants]."""
        return [[canonical, *variants] for canonical, variants in self.countries.items()]


@lru_cache(maxsize=1)
def _bundled_lexicon() -> Lexicon:
    text = resources.files("quake_search.data").joinpath(_BUNDLED).read_text(encoding="utf-8")
    return Lexicon.model_validate_json(text)


def load_lexicon(path: Path | None = None) -> Lexicon:
    """Load the lexicon from ``path``, or the bundled copy when None.

    Raises LexiconError when the file cannot be read or fails validation.
    """
    if path is None:
        return _bundled_lexicon()
    logger.debug("Loading lexicon from %s", path)
    try:
        return Lexicon.model_validate_json(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise LexiconError(path, exc) from exc
