"""
Landmark parameterizations.

The core needs exactly one fact from a parameterization: how many global
states a landmark of that type occupies. Landmark internals are opaque.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol

from rtslam_core.common import constants


class LandmarkParameterization(Protocol):
    type_name: str

    def required_state_size(self) -> int:
        ...


@dataclass(frozen=True)
class AnchoredHomogeneousPoint:
    """Anchor position (3) + homogeneous direction/inverse-depth point (4)."""
    type_name: str = "AHP"

    def required_state_size(self) -> int:
        return constants.LANDMARK_AHP_SIZE


@dataclass(frozen=True)
class EuclideanPoint:
    """Plain 3D point."""
    type_name: str = "EUCLIDEAN"

    def required_state_size(self) -> int:
        return constants.LANDMARK_EUCLIDEAN_SIZE


_REGISTRY: Dict[str, LandmarkParameterization] = {
    "AHP": AnchoredHomogeneousPoint(),
    "EUCLIDEAN": EuclideanPoint(),
}


def get_parameterization(type_name: str) -> LandmarkParameterization:
    """Look up a parameterization by (case-insensitive) type name."""
    try:
        return _REGISTRY[type_name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown landmark type '{type_name}', expected one of {sorted(_REGISTRY)}"
        ) from None
