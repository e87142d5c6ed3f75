"""Landmarks and the sensor-landmark observation association."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from rtslam_core.backend.fusion.gaussian import Gaussian
from rtslam_core.backend.state.nodes import CompositionVariant, EstimationNode, NodeCategory
from rtslam_core.backend.state.parameterizations import LandmarkParameterization
from rtslam_core.backend.structures.index_set import IndexSet

if TYPE_CHECKING:
    from rtslam_core.backend.state.slam_map import SlamMap


class Landmark(EstimationNode):
    """
    Landmark whose state is a REMOTE block reserved at discovery time.

    No parent: the effective index set is the landmark's own block.
    """

    category = NodeCategory.LANDMARK

    def __init__(
        self,
        slam_map: "SlamMap",
        parameterization: LandmarkParameterization,
        size: Optional[int] = None,
        name: str = "",
    ):
        size = parameterization.required_state_size() if size is None else int(size)
        ia = slam_map.state_buffer.reserve(size)
        self.parameterization = parameterization
        super().__init__(
            Gaussian.remote(slam_map.state_buffer, ia),
            CompositionVariant.BOUND,
            slam_map=slam_map,
            name=name,
            type_name=parameterization.type_name,
        )

    def summary(self) -> str:
        return f"{self._header()}\n.state :  {self.state}\n ia: {self.effective_index_set}"


@dataclass(frozen=True)
class Observation:
    """
    Non-owning association of one sensor with one landmark.

    Observations live in their sensor's collection keyed by landmark id.
    """
    sensor_id: int
    landmark_id: int

    @property
    def id(self) -> int:
        return self.landmark_id


@dataclass
class ObservationContext:
    """
    What a data-association / filter-update collaborator receives per
    observation. The landmark state is the live REMOTE Gaussian; corrections
    are written back through its accessors.
    """
    sensor_id: int
    landmark_id: int
    sensor_pose: np.ndarray           # (7,) global sensor pose
    sensor_pose_jacobian: np.ndarray  # (7, len(sensor_index_set))
    sensor_index_set: IndexSet
    landmark_state: Gaussian
