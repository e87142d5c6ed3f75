"""Diagnostics: human-readable node summaries and map status reports."""

from rtslam_core.backend.diagnostics.status import (
    format_node,
    format_map,
    map_status,
    map_status_json,
)

__all__ = [
    "format_node",
    "format_map",
    "map_status",
    "map_status_json",
]
