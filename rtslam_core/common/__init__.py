"""
Common package for rtslam_core.

Shared constants, error types, id generation and frame geometry used by
the backend structures and estimation nodes.

Subpackages:
- geometry/: quaternion frame composition and Jacobians
"""

from rtslam_core.common import constants
from rtslam_core.common.errors import (
    SlamCoreError,
    InvalidRange,
    CapacityExceeded,
    NotRemote,
    DimensionMismatch,
)
from rtslam_core.common.ids import IdGenerator

__all__ = [
    "constants",
    "SlamCoreError",
    "InvalidRange",
    "CapacityExceeded",
    "NotRemote",
    "DimensionMismatch",
    "IdGenerator",
]
