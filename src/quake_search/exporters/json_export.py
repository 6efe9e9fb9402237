"""JSON exporter for search results."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from quake_search.models import SearchResult


def result_to_dict(result: SearchResult) -> dict[str, Any]:
    """Plain-dict form of a result, camelCase keys as the web client expects."""
    data = asdict(result)
    return {
        "searchLocation": data["search_location"],
        "earthquakes": data["earthquakes"],
        "totalFound": data["total_found"],
        "showing": data["showing"],
        "searchMethod": data["search_method"],
        "timeframe": data["timeframe"],
    }


def export_json(
    result: SearchResult,
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export a search result to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=indent, ensure_ascii=False)
    return output_path
