"""
Backend package for rtslam_core.

Subpackages:
- structures/: IndexSet, StateBuffer
- fusion/: Gaussian (LOCAL / REMOTE storage)
- state/: Robot, Sensor, Landmark, SlamMap, LandmarkAllocator
- diagnostics/: node summaries and map status
"""

from rtslam_core.backend.structures import IndexSet, StateBuffer, union
from rtslam_core.backend.fusion import Gaussian, StorageMode
from rtslam_core.backend.state import (
    CompositionVariant,
    Landmark,
    LandmarkAllocator,
    NodeCategory,
    Observation,
    Robot,
    Sensor,
    SlamMap,
)

__all__ = [
    "IndexSet",
    "StateBuffer",
    "union",
    "Gaussian",
    "StorageMode",
    "CompositionVariant",
    "Landmark",
    "LandmarkAllocator",
    "NodeCategory",
    "Observation",
    "Robot",
    "Sensor",
    "SlamMap",
]
