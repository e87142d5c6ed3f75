"""
rtslam_core: state management and frame composition for EKF-SLAM.

A single StateBuffer holds the correlated mean and covariance of robots,
sensors and landmarks. Each node's state is a Gaussian that either owns
its data (LOCAL) or views a block of the buffer (REMOTE); frame
composition propagates Jacobians over whichever global states
parameterize a node's global pose.
"""

from rtslam_core.backend import (
    CompositionVariant,
    Gaussian,
    IndexSet,
    Landmark,
    LandmarkAllocator,
    NodeCategory,
    Observation,
    Robot,
    Sensor,
    SlamMap,
    StateBuffer,
    StorageMode,
    union,
)

__version__ = "0.0.1"

__all__ = [
    "CompositionVariant",
    "Gaussian",
    "IndexSet",
    "Landmark",
    "LandmarkAllocator",
    "NodeCategory",
    "Observation",
    "Robot",
    "Sensor",
    "SlamMap",
    "StateBuffer",
    "StorageMode",
    "union",
]
