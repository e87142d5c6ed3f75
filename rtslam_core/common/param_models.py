"""Pydantic parameter models for building a SlamMap from configuration."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rtslam_core.common import constants


class BaseParams(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class SensorParams(BaseParams):
    """Sensor mounting on its robot."""

    name: str = ""
    type_name: str = ""
    in_filter: bool = False
    position: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], min_length=3, max_length=3)
    euler_deg: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], min_length=3, max_length=3)
    pose_std: List[float] = Field(
        default_factory=lambda: [0.0] * constants.POSE_SIZE,
        min_length=constants.POSE_SIZE,
        max_length=constants.POSE_SIZE,
    )

    @field_validator("pose_std")
    @classmethod
    def _non_negative_std(cls, v: List[float]) -> List[float]:
        if any(s < 0.0 for s in v):
            raise ValueError("pose_std entries must be >= 0")
        return v


class RobotParams(BaseParams):
    """Robot state layout and initial pose."""

    name: str = ""
    type_name: str = ""
    state_size: int = Field(constants.ROBOT_STATE_SIZE_DEFAULT, ge=constants.POSE_SIZE)
    position: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], min_length=3, max_length=3)
    euler_deg: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0], min_length=3, max_length=3)
    pose_std: List[float] = Field(
        default_factory=lambda: [0.0] * constants.POSE_SIZE,
        min_length=constants.POSE_SIZE,
        max_length=constants.POSE_SIZE,
    )
    sensors: List[SensorParams] = Field(default_factory=list)

    @field_validator("pose_std")
    @classmethod
    def _non_negative_std(cls, v: List[float]) -> List[float]:
        if any(s < 0.0 for s in v):
            raise ValueError("pose_std entries must be >= 0")
        return v


class MapParams(BaseParams):
    """Global state buffer sizing and landmark type."""

    capacity: int = Field(constants.MAP_CAPACITY_DEFAULT, ge=0)
    landmark_type: str = constants.LANDMARK_TYPE_DEFAULT


class SlamParams(BaseParams):
    """Complete map setup: buffer plus robots with their sensors."""

    map: MapParams = Field(default_factory=MapParams)
    robots: List[RobotParams] = Field(default_factory=list)
