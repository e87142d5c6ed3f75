"""
Rigid frame geometry with quaternion orientation.

Pose representation: (x, y, z, qw, qx, qy, qz) where:
- (x, y, z): translation in R^3
- (qw, qx, qy, qz): scalar-first orientation quaternion

Frame composition G = F ⊕ L of a parent frame F and a child frame L
expressed in F:
    t_G = t_F + R(q_F) · t_L
    q_G = (q_F ⊗ q_L) / |q_F ⊗ q_L|

The Jacobians returned here are closed-form derivatives of exactly these
expressions, renormalization included. The rotation matrix uses the
homogeneous quadratic form R(q) = (w² - u·u) I + 2 u uᵀ + 2 w [u]_×, which
equals the usual rotation matrix for unit q and stays a polynomial in q off
the unit sphere, so the derivatives hold for arbitrary perturbations of q.

References:
- Sola (2017): Quaternion kinematics for the error-state Kalman filter
- Sola et al. (2018): A micro Lie theory for state estimation
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from rtslam_core.common import constants
from rtslam_core.common.errors import DimensionMismatch


# =============================================================================
# Input normalization
# =============================================================================


def _as_vector(x, size: int, what: str) -> np.ndarray:
    """Flatten to a float vector of the expected size."""
    x = np.asarray(x, dtype=float).reshape(-1)
    if x.shape[0] != size:
        raise DimensionMismatch(f"Expected {size}-element {what}, got {x.shape[0]}")
    return x


def _as_quat(q) -> np.ndarray:
    return _as_vector(q, constants.QUATERNION_SIZE, "quaternion")


def _as_pose(p) -> np.ndarray:
    return _as_vector(p, constants.POSE_SIZE, "pose")


def skew(v: np.ndarray) -> np.ndarray:
    """Skew-symmetric matrix from 3-vector (hat operator)."""
    v = _as_vector(v, 3, "vector")
    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ], dtype=float)


# =============================================================================
# Quaternion algebra
# =============================================================================


def identity_quat() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0], dtype=float)


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """Scale q to unit norm."""
    q = _as_quat(q)
    norm = np.linalg.norm(q)
    if norm < constants.QUAT_NORM_EPSILON:
        raise ValueError("Quaternion norm is too small (near zero)")
    return q / norm


def quat_normalize_jacobian(q: np.ndarray) -> np.ndarray:
    """
    4x4 Jacobian of q / |q|.

    ∂(q/|q|)/∂q = (I - q̂ q̂ᵀ) / |q|,  q̂ = q / |q|
    """
    q = _as_quat(q)
    norm = np.linalg.norm(q)
    if norm < constants.QUAT_NORM_EPSILON:
        raise ValueError("Quaternion norm is too small (near zero)")
    qn = q / norm
    return (np.eye(4, dtype=float) - np.outer(qn, qn)) / norm


def quat_conjugate(q: np.ndarray) -> np.ndarray:
    q = _as_quat(q)
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=float)


def quat_left_matrix(q: np.ndarray) -> np.ndarray:
    """
    Left-multiplication matrix: q ⊗ p = Q_L(q) · p.

    This is also ∂(q ⊗ p)/∂p.
    """
    w, x, y, z = _as_quat(q)
    return np.array([
        [w, -x, -y, -z],
        [x, w, -z, y],
        [y, z, w, -x],
        [z, -y, x, w]
    ], dtype=float)


def quat_right_matrix(q: np.ndarray) -> np.ndarray:
    """
    Right-multiplication matrix: p ⊗ q = Q_R(q) · p.

    This is also ∂(p ⊗ q)/∂p.
    """
    w, x, y, z = _as_quat(q)
    return np.array([
        [w, -x, -y, -z],
        [x, w, z, -y],
        [y, -z, w, x],
        [z, y, -x, w]
    ], dtype=float)


def quat_product(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product q1 ⊗ q2."""
    return quat_left_matrix(q1) @ _as_quat(q2)


def quat_to_rotmat(q: np.ndarray) -> np.ndarray:
    """
    Rotation matrix of a scalar-first quaternion (homogeneous form).

    No normalization is applied; for unit q this is the usual rotation
    matrix, for non-unit q it is |q|² times it.
    """
    w, x, y, z = _as_quat(q)
    ww, xx, yy, zz = w * w, x * x, y * y, z * z
    return np.array([
        [ww + xx - yy - zz, 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), ww - xx + yy - zz, 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), ww - xx - yy + zz]
    ], dtype=float)


def rotate_by_quat(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """R(q) · v."""
    return quat_to_rotmat(q) @ _as_vector(v, 3, "vector")


def rotate_by_quat_jacobian(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    3x4 Jacobian ∂(R(q) · v)/∂q for the homogeneous R(q).

    With q = (w, u):
        ∂/∂w = 2 (w v + u × v)
        ∂/∂u = 2 ((u·v) I + u vᵀ - v uᵀ - w [v]_×)
    """
    q = _as_quat(q)
    v = _as_vector(v, 3, "vector")
    w = q[0]
    u = q[1:4]

    J = np.empty((3, 4), dtype=float)
    J[:, 0] = 2.0 * (w * v + np.cross(u, v))
    J[:, 1:4] = 2.0 * (
        float(u @ v) * np.eye(3, dtype=float)
        + np.outer(u, v)
        - np.outer(v, u)
        - w * skew(v)
    )
    return J


# =============================================================================
# Pose construction
# =============================================================================


def identity_pose() -> np.ndarray:
    """Pose at the origin with identity orientation."""
    return np.concatenate([np.zeros(3, dtype=float), identity_quat()])


def make_pose(position, quat) -> np.ndarray:
    return np.concatenate([
        _as_vector(position, 3, "position"),
        quat_normalize(quat),
    ])


def pose_from_rotvec(position, rotvec) -> np.ndarray:
    """Pose from a translation and a rotation vector (axis-angle, radians)."""
    xyzw = Rotation.from_rotvec(_as_vector(rotvec, 3, "rotation vector")).as_quat()
    return make_pose(position, [xyzw[3], xyzw[0], xyzw[1], xyzw[2]])


def pose_from_euler(position, euler, degrees: bool = True) -> np.ndarray:
    """Pose from a translation and extrinsic roll/pitch/yaw ("xyz") angles."""
    euler = _as_vector(euler, 3, "euler angles")
    xyzw = Rotation.from_euler("xyz", euler, degrees=degrees).as_quat()
    return make_pose(position, [xyzw[3], xyzw[0], xyzw[1], xyzw[2]])


def pose_to_rotvec(pose) -> Tuple[np.ndarray, np.ndarray]:
    """Split a pose into (translation, rotation vector)."""
    pose = _as_pose(pose)
    w, x, y, z = quat_normalize(pose[constants.POSE_Q])
    rotvec = Rotation.from_quat([x, y, z, w]).as_rotvec()
    return pose[constants.POSE_T].copy(), rotvec


# =============================================================================
# Frame composition
# =============================================================================


def compose_frames(parent: np.ndarray, child: np.ndarray, normalize: bool = True) -> np.ndarray:
    """
    Compose a child frame expressed in a parent frame: G = F ⊕ L.

    Args:
        parent: parent pose F (7,)
        child: child pose L (7,), relative to F
        normalize: renormalize the composed quaternion to unit norm

    Returns:
        Global pose G (7,)
    """
    F = _as_pose(parent)
    L = _as_pose(child)
    qF = F[constants.POSE_Q]

    t = F[constants.POSE_T] + rotate_by_quat(qF, L[constants.POSE_T])
    q = quat_product(qF, L[constants.POSE_Q])
    if normalize:
        q = quat_normalize(q)
    return np.concatenate([t, q])


def compose_frames_jacobians(
    parent: np.ndarray,
    child: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Compose frames and return the Jacobians wrt both operands.

    Block structure (rows: t_G, q_G; columns: t, q of the operand):
        G_F = [ I3   ∂(R(q_F) t_L)/∂q_F ]      G_L = [ R(q_F)   0          ]
              [ 0    N Q_R(q_L)         ]            [ 0        N Q_L(q_F) ]

    N is the Jacobian of the renormalization at the raw product q_F ⊗ q_L.

    Returns:
        (G, G_F, G_L): global pose (normalized), 7x7, 7x7
    """
    F = _as_pose(parent)
    L = _as_pose(child)
    qF = F[constants.POSE_Q]
    tL = L[constants.POSE_T]
    qL = L[constants.POSE_Q]

    G = compose_frames(F, L)
    N = quat_normalize_jacobian(quat_product(qF, qL))

    G_F = np.zeros((constants.POSE_SIZE, constants.POSE_SIZE), dtype=float)
    G_F[0:3, 0:3] = np.eye(3, dtype=float)
    G_F[0:3, 3:7] = rotate_by_quat_jacobian(qF, tL)
    G_F[3:7, 3:7] = N @ quat_right_matrix(qL)

    G_L = np.zeros((constants.POSE_SIZE, constants.POSE_SIZE), dtype=float)
    G_L[0:3, 0:3] = quat_to_rotmat(qF)
    G_L[3:7, 3:7] = N @ quat_left_matrix(qF)

    return G, G_F, G_L


def compose_frames_by_dglobal(parent: np.ndarray, child: np.ndarray) -> np.ndarray:
    """Jacobian of F ⊕ L wrt the parent frame F only (7x7)."""
    _, G_F, _ = compose_frames_jacobians(parent, child)
    return G_F


def invert_frame(pose: np.ndarray) -> np.ndarray:
    """
    Inverse frame: F ⊕ invert_frame(F) = identity.

    t' = -R(q)ᵀ t,  q' = q* (for unit q)
    """
    F = _as_pose(pose)
    q = quat_normalize(F[constants.POSE_Q])
    t_inv = -quat_to_rotmat(q).T @ F[constants.POSE_T]
    return np.concatenate([t_inv, quat_conjugate(q)])


def assemble_global_jacobian(
    J_parent: np.ndarray,
    parent_indices,
    J_child: np.ndarray,
    child_indices,
    effective_indices,
) -> np.ndarray:
    """
    Place per-operand Jacobians at the columns of their global indices.

    Columns follow the ordering of `effective_indices` (an IndexSet holding
    both operands), so the result is correct whether the parent block sits
    before or after the child block in the global state.
    """
    J_parent = np.asarray(J_parent, dtype=float)
    J_child = np.asarray(J_child, dtype=float)
    J = np.zeros((J_parent.shape[0], len(effective_indices)), dtype=float)
    J[:, effective_indices.positions_of(parent_indices)] += J_parent
    J[:, effective_indices.positions_of(child_indices)] += J_child
    return J
