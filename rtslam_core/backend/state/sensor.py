"""
Sensor: a frame mounted on a robot, observing landmarks.

Construction paths:
    Sensor(pose)                        STANDALONE, LOCAL pose, no robot
    Sensor.in_map(slam_map)             BOUND, REMOTE pose, no robot yet
    Sensor.on_robot(robot, False, ...)  PARENT_RELATIVE_LOCAL
    Sensor.on_robot(robot, True, ...)   BOUND_WITH_PARENT
    Sensor.at_robot_origin(robot)       BOUND, REMOTE pose aliasing the robot pose

Processing cycle (single writer per cycle on the shared buffer):
    IDLE -> ACQUIRE_RAW -> OBSERVE_KNOWN -> DISCOVER_NEW -> IDLE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import numpy as np

from rtslam_core.backend.fusion.gaussian import Gaussian
from rtslam_core.backend.state.landmark import Landmark, Observation, ObservationContext
from rtslam_core.backend.state.nodes import CompositionVariant, FrameNode, NodeCategory
from rtslam_core.common import constants
from rtslam_core.common.geometry import identity_pose

if TYPE_CHECKING:
    from rtslam_core.backend.state.robot import Robot
    from rtslam_core.backend.state.slam_map import SlamMap

logger = logging.getLogger(__name__)

RawSource = Callable[["Sensor"], Any]
ObservationHandler = Callable[[ObservationContext], None]


class CycleState(Enum):
    IDLE = "IDLE"
    ACQUIRE_RAW = "ACQUIRE_RAW"
    OBSERVE_KNOWN = "OBSERVE_KNOWN"
    DISCOVER_NEW = "DISCOVER_NEW"


# Allowed predecessor of each cycle step
_CYCLE_ORDER = {
    CycleState.ACQUIRE_RAW: CycleState.IDLE,
    CycleState.OBSERVE_KNOWN: CycleState.ACQUIRE_RAW,
    CycleState.DISCOVER_NEW: CycleState.OBSERVE_KNOWN,
}


@dataclass
class CycleReport:
    """Outcome of one processing cycle."""
    sensor_id: int
    observed_landmark_ids: List[int] = field(default_factory=list)
    discovered_landmark_id: Optional[int] = None


def _pose_covariance(pose_std: Optional[np.ndarray]) -> np.ndarray:
    if pose_std is None:
        return np.zeros((constants.POSE_SIZE, constants.POSE_SIZE), dtype=float)
    return np.diag(np.square(np.asarray(pose_std, dtype=float).reshape(-1)))


class Sensor(FrameNode):
    """Sensor with a 7-pose expressed in its robot's frame."""

    category = NodeCategory.SENSOR

    def __init__(
        self,
        pose: Optional[Gaussian] = None,
        variant: CompositionVariant = CompositionVariant.STANDALONE,
        slam_map: Optional["SlamMap"] = None,
        robot_id: Optional[int] = None,
        name: str = "",
        type_name: str = "",
        raw_source: Optional[RawSource] = None,
    ):
        if pose is None:
            pose = Gaussian(
                constants.POSE_SIZE,
                mean=identity_pose(),
                covariance=_pose_covariance(None),
            )
        self.observations: Dict[int, Observation] = {}
        self.observation_handlers: List[ObservationHandler] = []
        self.raw_source = raw_source
        self.raw_data: Any = None
        self.cycle_state = CycleState.IDLE
        super().__init__(
            pose,
            variant,
            slam_map=slam_map,
            name=name,
            type_name=type_name,
            parent_id=robot_id,
        )

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def in_map(
        cls,
        slam_map: "SlamMap",
        pose: Optional[np.ndarray] = None,
        pose_std: Optional[np.ndarray] = None,
        **kwargs,
    ) -> "Sensor":
        """REMOTE pose reserved in the map; no robot association yet."""
        g = Gaussian.remote(slam_map.state_buffer, slam_map.state_buffer.reserve(constants.POSE_SIZE))
        g.mean = identity_pose() if pose is None else pose
        g.covariance = _pose_covariance(pose_std)
        return cls(g, CompositionVariant.BOUND, slam_map=slam_map, **kwargs)

    @classmethod
    def on_robot(
        cls,
        robot: "Robot",
        in_filter: bool = False,
        pose: Optional[np.ndarray] = None,
        pose_std: Optional[np.ndarray] = None,
        **kwargs,
    ) -> "Sensor":
        """
        Sensor installed on `robot`.

        in_filter=True reserves the pose in the robot's map (REMOTE);
        otherwise the pose is a LOCAL, non-estimated mounting pose.
        """
        slam_map = robot.slam_map
        mean = identity_pose() if pose is None else pose
        if in_filter:
            g = Gaussian.remote(slam_map.state_buffer, slam_map.state_buffer.reserve(constants.POSE_SIZE))
            g.mean = mean
            g.covariance = _pose_covariance(pose_std)
            variant = CompositionVariant.BOUND_WITH_PARENT
        else:
            g = Gaussian(constants.POSE_SIZE, mean=mean, covariance=_pose_covariance(pose_std))
            variant = CompositionVariant.PARENT_RELATIVE_LOCAL
        return cls(g, variant, slam_map=slam_map, robot_id=robot.id, **kwargs)

    @classmethod
    def at_robot_origin(cls, robot: "Robot", **kwargs) -> "Sensor":
        """
        Sensor fixed at the robot origin, reserving no states of its own.

        The pose is a REMOTE view of the robot's pose block, so the global
        pose is the robot pose itself and its Jacobian is the identity.
        """
        g = Gaussian.remote(robot.slam_map.state_buffer, robot.pose.index_set)
        return cls(g, CompositionVariant.BOUND, slam_map=robot.slam_map, robot_id=robot.id, **kwargs)

    # -------------------------------------------------------------------------
    # Associations
    # -------------------------------------------------------------------------

    @property
    def robot_id(self) -> Optional[int]:
        return self.parent_id

    @property
    def robot(self) -> Optional["Robot"]:
        if self.parent_id is None or self.slam_map is None:
            return None
        return self.slam_map.robot(self.parent_id)

    def parent(self) -> Optional["Robot"]:
        return self.robot

    def link_to_robot(self, robot: "Robot") -> None:
        """Install on `robot`; variant and effective index set are re-derived."""
        if self.pose.is_remote and self.pose.buffer is not robot.slam_map.state_buffer:
            raise ValueError("Sensor pose and robot live in different state buffers")
        self.slam_map = robot.slam_map
        self.parent_id = robot.id
        if not self.pose.is_remote:
            self._variant = CompositionVariant.PARENT_RELATIVE_LOCAL
        elif self.pose.index_set == robot.pose.index_set:
            self._variant = CompositionVariant.BOUND
        else:
            self._variant = CompositionVariant.BOUND_WITH_PARENT
        self._recompute_effective_index_set()
        robot.link_to_sensor(self.id)

    def link_to_observation(self, obs: Observation) -> None:
        self.observations[obs.id] = obs

    def add_observation_handler(self, handler: ObservationHandler) -> None:
        self.observation_handlers.append(handler)

    def observation_context(self, obs: Observation) -> ObservationContext:
        pose, J = self.global_pose()
        return ObservationContext(
            sensor_id=self.id,
            landmark_id=obs.landmark_id,
            sensor_pose=pose,
            sensor_pose_jacobian=J,
            sensor_index_set=self.effective_index_set,
            landmark_state=self.slam_map.landmark(obs.landmark_id).state,
        )

    # -------------------------------------------------------------------------
    # Processing cycle
    # -------------------------------------------------------------------------

    def _enter(self, state: CycleState) -> None:
        expected = _CYCLE_ORDER[state]
        if self.cycle_state is not expected:
            raise RuntimeError(
                f"Sensor {self.id}: cannot enter {state.value} from "
                f"{self.cycle_state.value} (expected {expected.value})"
            )
        self.cycle_state = state

    def acquire_raw(self) -> Any:
        """Pull raw data from the driver collaborator, if any."""
        self._enter(CycleState.ACQUIRE_RAW)
        self.raw_data = self.raw_source(self) if self.raw_source is not None else None
        return self.raw_data

    def process_raw(self, report: Optional[CycleReport] = None) -> CycleReport:
        """Observe known landmarks, then try to discover one new landmark."""
        report = CycleReport(sensor_id=self.id) if report is None else report
        report.observed_landmark_ids = self.observe_known_landmarks()
        landmark = self.discover_new_landmarks()
        report.discovered_landmark_id = None if landmark is None else landmark.id
        return report

    def run_cycle(self) -> CycleReport:
        self.acquire_raw()
        return self.process_raw()

    def observe_known_landmarks(self) -> List[int]:
        """Hand every observation, in insertion order, to the handlers."""
        self._enter(CycleState.OBSERVE_KNOWN)
        visited = []
        for landmark_id, obs in self.observations.items():
            logger.debug("Sensor %d exploring obs: %d", self.id, landmark_id)
            if self.observation_handlers:
                context = self.observation_context(obs)
                for handler in self.observation_handlers:
                    handler(context)
            visited.append(landmark_id)
        return visited

    def discover_new_landmarks(self) -> Optional[Landmark]:
        """Exactly one discovery attempt per cycle."""
        self._enter(CycleState.DISCOVER_NEW)
        try:
            if self.slam_map is None:
                return None
            landmark = self.slam_map.landmark_allocator.try_discover(self)
            if landmark is not None:
                logger.debug("Sensor %d added lmk: %d", self.id, landmark.id)
            return landmark
        finally:
            self.cycle_state = CycleState.IDLE

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def summary(self) -> str:
        s = f"{self._header()}\n.pose :  {self.pose}"
        s += f"\n.robot: [ {self.robot_id if self.robot_id is not None else '-'} ]"
        if self.pose.is_remote:
            s += f"\n ia_rs: {self.effective_index_set}"
        return s
