"""Robot: always estimated; its state is a REMOTE block of the map."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import numpy as np

from rtslam_core.backend.fusion.gaussian import Gaussian
from rtslam_core.backend.state.nodes import CompositionVariant, FrameNode, NodeCategory
from rtslam_core.common import constants
from rtslam_core.common.errors import DimensionMismatch
from rtslam_core.common.geometry import identity_pose

if TYPE_CHECKING:
    from rtslam_core.backend.state.slam_map import SlamMap


class Robot(FrameNode):
    """
    Robot with state reserved in the map buffer.

    The state may be longer than a pose (e.g. velocities appended by a
    motion model); the pose is always its first 7 entries.
    """

    category = NodeCategory.ROBOT

    def __init__(
        self,
        slam_map: "SlamMap",
        state_size: int = constants.ROBOT_STATE_SIZE_DEFAULT,
        name: str = "",
        type_name: str = "",
        pose: Optional[np.ndarray] = None,
        pose_std: Optional[np.ndarray] = None,
    ):
        if state_size < constants.POSE_SIZE:
            raise DimensionMismatch(
                f"Robot state must hold a {constants.POSE_SIZE}-pose, got size {state_size}"
            )
        ia = slam_map.state_buffer.reserve(state_size)
        state = Gaussian.remote(slam_map.state_buffer, ia)
        self._pose = state.sub(0, constants.POSE_SIZE)
        self.sensor_ids: List[int] = []
        super().__init__(
            state,
            CompositionVariant.BOUND,
            slam_map=slam_map,
            name=name,
            type_name=type_name,
        )
        self._pose.mean = identity_pose() if pose is None else pose
        if pose_std is not None:
            self._pose.covariance = np.diag(np.square(np.asarray(pose_std, dtype=float)))

    @property
    def pose(self) -> Gaussian:
        return self._pose

    def link_to_sensor(self, sensor_id: int) -> None:
        if sensor_id not in self.sensor_ids:
            self.sensor_ids.append(sensor_id)

    def sensors(self):
        """Installed sensors, resolved through the map."""
        return [self.slam_map.sensor(sid) for sid in self.sensor_ids]

    def summary(self) -> str:
        ids = " ".join(str(sid) for sid in self.sensor_ids)
        return (
            f"{self._header()}\n.pose :  {self.pose}\n.sensors: [ {ids} ]"
            f"\n ia: {self.effective_index_set}"
        )
