"""Exporters for search results."""

from quake_search.exporters.geojson_export import export_geojson, result_to_geojson
from quake_search.exporters.json_export import export_json, result_to_dict

__all__ = ["export_geojson", "export_json", "result_to_dict", "result_to_geojson"]
