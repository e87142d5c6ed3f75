"""
SlamMap: owner of the global state buffer and of every estimation node.

Nodes reference each other by id; this map is the lookup authority. One
IdGenerator per node category hands out ids.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Union

import numpy as np

from rtslam_core.backend.state.landmark import Landmark, Observation
from rtslam_core.backend.state.landmark_allocator import LandmarkAllocator
from rtslam_core.backend.state.parameterizations import (
    LandmarkParameterization,
    get_parameterization,
)
from rtslam_core.backend.state.robot import Robot
from rtslam_core.backend.state.sensor import Sensor
from rtslam_core.backend.structures.state_buffer import StateBuffer
from rtslam_core.common import constants
from rtslam_core.common.ids import IdGenerator

logger = logging.getLogger(__name__)


class SlamMap:
    """
    Attributes:
        state_buffer: the global mean/covariance
        robots, sensors, landmarks: owning collections keyed by id
        landmark_parameterization: type used for newly discovered landmarks
        landmark_allocator: capacity-checked landmark factory
    """

    def __init__(
        self,
        capacity: int = constants.MAP_CAPACITY_DEFAULT,
        landmark_parameterization: Union[str, LandmarkParameterization] = constants.LANDMARK_TYPE_DEFAULT,
    ):
        self.state_buffer = StateBuffer(capacity)
        self.robots: Dict[int, Robot] = {}
        self.sensors: Dict[int, Sensor] = {}
        self.landmarks: Dict[int, Landmark] = {}
        self.robot_ids = IdGenerator()
        self.sensor_ids = IdGenerator()
        self.landmark_ids = IdGenerator()
        if isinstance(landmark_parameterization, str):
            landmark_parameterization = get_parameterization(landmark_parameterization)
        self.landmark_parameterization = landmark_parameterization
        self.landmark_allocator = LandmarkAllocator(self)

    # -------------------------------------------------------------------------
    # Setup-time factories
    # -------------------------------------------------------------------------

    def add_robot(
        self,
        name: str = "",
        state_size: int = constants.ROBOT_STATE_SIZE_DEFAULT,
        pose: Optional[np.ndarray] = None,
        pose_std: Optional[np.ndarray] = None,
        type_name: str = "",
    ) -> Robot:
        robot = Robot(
            self,
            state_size=state_size,
            name=name,
            type_name=type_name,
            pose=pose,
            pose_std=pose_std,
        )
        robot.id = self.robot_ids.get_id()
        self.robots[robot.id] = robot
        logger.info("Added robot %d '%s' at %s", robot.id, name, robot.state.index_set)
        return robot

    def add_sensor(
        self,
        robot: Optional[Robot] = None,
        in_filter: bool = False,
        pose: Optional[np.ndarray] = None,
        pose_std: Optional[np.ndarray] = None,
        name: str = "",
        type_name: str = "",
        raw_source=None,
        at_robot_origin: bool = False,
    ) -> Sensor:
        """
        Create and register a sensor.

        With no robot the pose is reserved in this map (it can be installed
        later with Sensor.link_to_robot). at_robot_origin=True shares the
        robot's pose block instead of holding a pose of its own.
        """
        kwargs = dict(name=name, type_name=type_name, raw_source=raw_source)
        if robot is None:
            if at_robot_origin:
                raise ValueError("at_robot_origin needs a robot")
            sensor = Sensor.in_map(self, pose=pose, pose_std=pose_std, **kwargs)
        elif at_robot_origin:
            sensor = Sensor.at_robot_origin(robot, **kwargs)
        else:
            sensor = Sensor.on_robot(robot, in_filter=in_filter, pose=pose, pose_std=pose_std, **kwargs)
        self.register_sensor(sensor)
        if robot is not None:
            robot.link_to_sensor(sensor.id)
        logger.info(
            "Added sensor %d '%s' (%s), effective ia %s",
            sensor.id, name, sensor.variant.value, sensor.effective_index_set,
        )
        return sensor

    def register_sensor(self, sensor: Sensor) -> Sensor:
        """Assign an id to an externally built sensor and take ownership."""
        sensor.id = self.sensor_ids.get_id()
        sensor.slam_map = self
        self.sensors[sensor.id] = sensor
        return sensor

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def robot(self, robot_id: int) -> Robot:
        return self.robots[robot_id]

    def sensor(self, sensor_id: int) -> Sensor:
        return self.sensors[sensor_id]

    def landmark(self, landmark_id: int) -> Landmark:
        return self.landmarks[landmark_id]

    def iter_sensors(self) -> Iterator[Sensor]:
        """Sensors of every robot, robot by robot, in installation order."""
        for robot in self.robots.values():
            for sid in robot.sensor_ids:
                yield self.sensors[sid]

    # -------------------------------------------------------------------------
    # Landmark bookkeeping
    # -------------------------------------------------------------------------

    def unused_states(self, size: int) -> bool:
        return self.state_buffer.has_capacity(size)

    def link_to_landmark(self, landmark: Landmark) -> None:
        self.landmarks[landmark.id] = landmark

    def add_observations(self, landmark: Landmark) -> List[Observation]:
        """One new observation of `landmark` in every installed sensor."""
        created = []
        for sensor in self.iter_sensors():
            obs = Observation(sensor_id=sensor.id, landmark_id=landmark.id)
            sensor.link_to_observation(obs)
            created.append(obs)
        return created

    def __repr__(self) -> str:
        return (
            f"SlamMap(robots={len(self.robots)}, sensors={len(self.sensors)}, "
            f"landmarks={len(self.landmarks)}, buffer={self.state_buffer!r})"
        )
