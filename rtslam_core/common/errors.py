"""
Error types for the estimation core.

All of these are local-contract violations (programmer errors). The only
runtime-legitimate failure, capacity exhaustion during landmark discovery,
is reported by LandmarkAllocator.try_discover returning None.
"""


class SlamCoreError(Exception):
    """Base class for every error raised by rtslam_core."""


class InvalidRange(SlamCoreError, ValueError):
    """Malformed index construction (negative count/start, non-subset lookup)."""


class CapacityExceeded(SlamCoreError, RuntimeError):
    """StateBuffer asked to reserve beyond its remaining capacity."""


class NotRemote(SlamCoreError, AttributeError):
    """Buffer/index information requested from a LOCAL Gaussian."""


class DimensionMismatch(SlamCoreError, ValueError):
    """Mean, covariance or pose of the wrong size."""
