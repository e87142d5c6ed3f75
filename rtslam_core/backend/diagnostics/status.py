"""
Map diagnostics.

Text summaries are informational only and not meant for machine parsing;
map_status() is the structured form for logging/monitoring.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from rtslam_core.backend.state.nodes import EstimationNode
    from rtslam_core.backend.state.slam_map import SlamMap


def format_node(node: "EstimationNode") -> str:
    """Header line (category, id, name, type) plus the node's state block."""
    return node.summary()


def format_map(slam_map: "SlamMap") -> str:
    """All robots with their sensors, then landmarks."""
    blocks = []
    for robot in slam_map.robots.values():
        blocks.append(format_node(robot))
        for sensor in robot.sensors():
            blocks.append(format_node(sensor))
    for landmark in slam_map.landmarks.values():
        blocks.append(format_node(landmark))
    return "\n".join(blocks)


def map_status(slam_map: "SlamMap") -> Dict[str, Any]:
    """
    Snapshot of buffer occupancy and node counts.

    Returns:
        Dict with capacity, used, free, per-category counts, the
        allocator's discovery/no-capacity counters, and per-sensor
        observation counts keyed by sensor id.
    """
    buf = slam_map.state_buffer
    allocator = slam_map.landmark_allocator
    return {
        "capacity": buf.capacity,
        "used": buf.used,
        "free": buf.free_capacity(),
        "landmark_type": slam_map.landmark_parameterization.type_name,
        "n_robots": len(slam_map.robots),
        "n_sensors": len(slam_map.sensors),
        "n_landmarks": len(slam_map.landmarks),
        "landmarks_discovered": allocator.discovered_count,
        "discovery_no_capacity": allocator.no_capacity_count,
        "observations": {
            str(sid): len(sensor.observations) for sid, sensor in slam_map.sensors.items()
        },
    }


def map_status_json(slam_map: "SlamMap") -> str:
    return json.dumps(map_status(slam_map), sort_keys=True)
