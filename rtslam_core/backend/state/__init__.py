"""
Estimation nodes and their owner.

SlamMap owns the StateBuffer, robots, sensors and landmarks; the
LandmarkAllocator adds landmarks under the buffer's capacity gate.
"""

from rtslam_core.backend.state.nodes import (
    NodeCategory,
    CompositionVariant,
    EstimationNode,
    FrameNode,
)
from rtslam_core.backend.state.parameterizations import (
    LandmarkParameterization,
    AnchoredHomogeneousPoint,
    EuclideanPoint,
    get_parameterization,
)
from rtslam_core.backend.state.landmark import Landmark, Observation, ObservationContext
from rtslam_core.backend.state.robot import Robot
from rtslam_core.backend.state.sensor import Sensor, CycleState, CycleReport
from rtslam_core.backend.state.landmark_allocator import LandmarkAllocator
from rtslam_core.backend.state.slam_map import SlamMap

__all__ = [
    "NodeCategory",
    "CompositionVariant",
    "EstimationNode",
    "FrameNode",
    "LandmarkParameterization",
    "AnchoredHomogeneousPoint",
    "EuclideanPoint",
    "get_parameterization",
    "Landmark",
    "Observation",
    "ObservationContext",
    "Robot",
    "Sensor",
    "CycleState",
    "CycleReport",
    "LandmarkAllocator",
    "SlamMap",
]
