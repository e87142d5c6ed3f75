"""
rtslam_core Constants and Configuration Values.

All magic numbers are centralized here with clear documentation.
"""

# =============================================================================
# Pose / State Layout
# =============================================================================

# Pose vector: [x, y, z, qw, qx, qy, qz] (translation then scalar-first quaternion)
POSE_SIZE = 7
POSITION_SIZE = 3
QUATERNION_SIZE = 4

# Slices into a pose vector
POSE_T = slice(0, 3)
POSE_Q = slice(3, 7)

# Robot state defaults to the bare pose (no velocity or bias blocks)
ROBOT_STATE_SIZE_DEFAULT = POSE_SIZE

# =============================================================================
# Landmark Parameterizations
# =============================================================================

# Anchored homogeneous point: anchor position (3) + homogeneous point (4)
LANDMARK_AHP_SIZE = 7

# Euclidean 3D point
LANDMARK_EUCLIDEAN_SIZE = 3

LANDMARK_TYPE_DEFAULT = "AHP"

# =============================================================================
# Map / Buffer
# =============================================================================

# Default global state capacity: 1 robot + 1 remote sensor + 40 AHP landmarks
MAP_CAPACITY_DEFAULT = POSE_SIZE * 2 + LANDMARK_AHP_SIZE * 40

# First id handed out by every id generator (0 means "not assigned")
ID_START = 1
ID_UNASSIGNED = 0

# =============================================================================
# Numerical Stability Thresholds
# =============================================================================

# Quaternions with norm below this cannot be normalized
QUAT_NORM_EPSILON = 1e-12

# Default isotropic covariance scale for LOCAL Gaussians built from a size only
LOCAL_COV_SCALE_DEFAULT = 1.0

# Step used by finite-difference Jacobian checks in tests and tools
FINITE_DIFF_STEP = 1e-6

# =============================================================================
# Diagnostics
# =============================================================================

# Capacity warnings emitted at WARNING level before dropping to DEBUG
MAX_WARNING_COUNT = 5
