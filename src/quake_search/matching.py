"""Match strategies over a fetched earthquake feed.

The feed's ``place`` field is unstructured prose ("32 km ENE of Ridgecrest,
CA"), so the textual strategies are heuristics that trade precision for
recall. Every strategy returns a new list; inputs are never mutated.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from quake_search.geo import haversine
from quake_search.lexicon import Lexicon
from quake_search.models import EarthquakeRecord, ResolvedLocation

FUZZY_THRESHOLD = 0.7
FUZZY_MIN_TERM_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")


def magnitude_key(eq: EarthquakeRecord) -> tuple[bool, float]:
    """Sort key for magnitude descending with missing magnitudes last."""
    if eq.magnitude is None:
        return (True, 0.0)
    return (False, -eq.magnitude)


def sort_by_magnitude(earthquakes: Iterable[EarthquakeRecord]) -> list[EarthquakeRecord]:
    return sorted(earthquakes, key=magnitude_key)


def _unique(terms: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for term in terms:
        if term and term not in seen:
            seen[term] = None
    return list(seen)


def match_by_radius(
    earthquakes: Sequence[EarthquakeRecord],
    location: ResolvedLocation,
    radius_km: float,
) -> list[EarthquakeRecord]:
    """Events whose epicentre lies within ``radius_km`` of the location."""
    nearby = [
        eq
        for eq in earthquakes
        if haversine(location.latitude, location.longitude, eq.latitude, eq.longitude)
        <= radius_km
    ]
    return sort_by_magnitude(nearby)


def match_by_place_name(
    earthquakes: Sequence[EarthquakeRecord],
    query: str,
) -> list[EarthquakeRecord]:
    """Case-insensitive substring match on the place text."""
    needle = query.lower()
    return sort_by_magnitude(eq for eq in earthquakes if needle in eq.place.lower())


def expand_abbreviations(query: str, lexicon: Lexicon) -> list[str]:
    """Apply every abbreviation pair whose source occurs in ``query``.

    Replacement is plain substring replacement, so "la" also fires inside
    "island". That widens recall and is accepted.
    """
    return [
        query.replace(source, target)
        for source, target in lexicon.replacement_pairs()
        if source in query
    ]


def build_search_terms(query: str, lexicon: Lexicon) -> list[str]:
    """Expanded, de-duplicated term list for partial matching."""
    query_lower = query.lower().strip()
    return _unique([
        query_lower,
        _WHITESPACE.sub("", query_lower),
        *query_lower.split(),
        *expand_abbreviations(query_lower, lexicon),
    ])


def fuzzy_match(text: str, term: str) -> bool:
    """Character-overlap test.

    Counts the term's characters (with repetition) that occur anywhere in
    ``text``; matches when that fraction is strictly above FUZZY_THRESHOLD.
    Terms shorter than FUZZY_MIN_TERM_LENGTH never fuzzy-match.
    """
    if len(term) < FUZZY_MIN_TERM_LENGTH:
        return False
    hits = sum(1 for ch in term if ch in text)
    return hits / len(term) > FUZZY_THRESHOLD


def match_partial(
    earthquakes: Sequence[EarthquakeRecord],
    query: str,
    lexicon: Lexicon,
    terms: list[str] | None = None,
) -> list[EarthquakeRecord]:
    """Substring-or-fuzzy match against the expanded term list.

    Events containing the whole query rank first; magnitude orders each tier.
    """
    query_lower = query.lower().strip()
    if terms is None:
        terms = build_search_terms(query, lexicon)

    matched = []
    for eq in earthquakes:
        place = eq.place.lower()
        if any(term in place or fuzzy_match(place, term) for term in terms):
            matched.append(eq)

    # Two stable passes: magnitude first, then the exact-query tier.
    ranked = sort_by_magnitude(matched)
    ranked.sort(key=lambda eq: query_lower not in eq.place.lower())
    return ranked


def country_variations(country: str, lexicon: Lexicon) -> list[str]:
    """The query plus every name equivalent to it in the country table."""
    name = country.lower().strip()
    variations = [name]
    for names in lexicon.country_classes():
        if name in names:
            variations.extend(names)
    return _unique(variations)


def _segment_matches(segment: str, variation: str) -> bool:
    return segment == variation or variation in segment or segment in variation


def match_by_country(
    earthquakes: Sequence[EarthquakeRecord],
    country: str,
    lexicon: Lexicon,
    variations: list[str] | None = None,
) -> list[EarthquakeRecord]:
    """Events whose comma-separated place segments name the country.

    A segment matches a variation when either contains the other. Empty
    segments are skipped, or every blank place would match every country.
    """
    if variations is None:
        variations = country_variations(country, lexicon)

    matched = []
    for eq in earthquakes:
        segments = [s.strip() for s in eq.place.lower().split(",")]
        if any(
            _segment_matches(segment, variation)
            for segment in segments
            if segment
            for variation in variations
        ):
            matched.append(eq)
    return sort_by_magnitude(matched)
