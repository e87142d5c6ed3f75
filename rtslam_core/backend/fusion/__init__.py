"""
Random-variable storage for the EKF map.

Gaussian is either LOCAL (owns mean/covariance) or REMOTE (a view into a
StateBuffer at an IndexSet).
"""

from rtslam_core.backend.fusion.gaussian import Gaussian, StorageMode

__all__ = [
    "Gaussian",
    "StorageMode",
]
