"""
Geometry package for rtslam_core.

Quaternion frame geometry on 7-vector poses (x, y, z, qw, qx, qy, qz).

Usage:
    from rtslam_core.common.geometry import (
        compose_frames,
        compose_frames_jacobians,
        invert_frame,
        identity_pose,
    )
"""

from __future__ import annotations

from rtslam_core.common.geometry.quat_numpy import (
    # Quaternion operations
    skew,
    identity_quat,
    quat_normalize,
    quat_normalize_jacobian,
    quat_conjugate,
    quat_left_matrix,
    quat_right_matrix,
    quat_product,
    quat_to_rotmat,
    rotate_by_quat,
    rotate_by_quat_jacobian,
    # Pose construction
    identity_pose,
    make_pose,
    pose_from_rotvec,
    pose_from_euler,
    pose_to_rotvec,
    # Frame composition
    compose_frames,
    compose_frames_jacobians,
    compose_frames_by_dglobal,
    invert_frame,
    assemble_global_jacobian,
)

__all__ = [
    # Quaternion operations
    "skew",
    "identity_quat",
    "quat_normalize",
    "quat_normalize_jacobian",
    "quat_conjugate",
    "quat_left_matrix",
    "quat_right_matrix",
    "quat_product",
    "quat_to_rotmat",
    "rotate_by_quat",
    "rotate_by_quat_jacobian",
    # Pose construction
    "identity_pose",
    "make_pose",
    "pose_from_rotvec",
    "pose_from_euler",
    "pose_to_rotvec",
    # Frame composition
    "compose_frames",
    "compose_frames_jacobians",
    "compose_frames_by_dglobal",
    "invert_frame",
    "assemble_global_jacobian",
]
