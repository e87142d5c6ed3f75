"""
Tests for quaternion frame composition and its Jacobians.

Analytic Jacobians are checked against central finite differences of
compose_frames itself (renormalization included) on random poses.
"""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from rtslam_core.common.constants import FINITE_DIFF_STEP
from rtslam_core.common.errors import DimensionMismatch
from rtslam_core.common.geometry import (
    compose_frames,
    compose_frames_by_dglobal,
    compose_frames_jacobians,
    identity_pose,
    invert_frame,
    make_pose,
    pose_from_euler,
    pose_from_rotvec,
    pose_to_rotvec,
    quat_normalize,
    quat_normalize_jacobian,
    quat_product,
    quat_to_rotmat,
    rotate_by_quat_jacobian,
)


def _numerical_jacobian(f, x, eps=FINITE_DIFF_STEP):
    x = np.asarray(x, dtype=float)
    y0 = f(x)
    J = np.zeros((y0.shape[0], x.shape[0]), dtype=float)
    for i in range(x.shape[0]):
        dx = np.zeros_like(x)
        dx[i] = eps
        J[:, i] = (f(x + dx) - f(x - dx)) / (2.0 * eps)
    return J


def _same_pose(a, b, atol=1e-10):
    """Poses equal up to the quaternion double cover."""
    if not np.allclose(a[:3], b[:3], atol=atol):
        return False
    return np.allclose(a[3:], b[3:], atol=atol) or np.allclose(a[3:], -b[3:], atol=atol)


# =============================================================================
# Quaternion basics
# =============================================================================


def test_quat_to_rotmat_matches_scipy(rng):
    for _ in range(20):
        q = quat_normalize(rng.normal(size=4))
        expected = Rotation.from_quat([q[1], q[2], q[3], q[0]]).as_matrix()
        np.testing.assert_allclose(quat_to_rotmat(q), expected, atol=1e-12)


def test_quat_product_matches_scipy_composition(rng):
    q1 = quat_normalize(rng.normal(size=4))
    q2 = quat_normalize(rng.normal(size=4))
    np.testing.assert_allclose(
        quat_to_rotmat(quat_product(q1, q2)),
        quat_to_rotmat(q1) @ quat_to_rotmat(q2),
        atol=1e-12,
    )


def test_quat_normalize_rejects_zero():
    with pytest.raises(ValueError):
        quat_normalize(np.zeros(4))


def test_bad_pose_shape_raises():
    with pytest.raises(DimensionMismatch):
        compose_frames(np.zeros(6), identity_pose())


# =============================================================================
# Pose construction
# =============================================================================


def test_pose_from_euler_yaw():
    pose = pose_from_euler([1.0, 2.0, 3.0], [0.0, 0.0, 90.0], degrees=True)
    s = np.sqrt(0.5)
    np.testing.assert_allclose(pose, [1.0, 2.0, 3.0, s, 0.0, 0.0, s], atol=1e-12)


def test_pose_rotvec_round_trip():
    rotvec = np.array([0.1, -0.4, 0.25])
    t, rv = pose_to_rotvec(pose_from_rotvec([1.0, 0.0, -1.0], rotvec))
    np.testing.assert_allclose(t, [1.0, 0.0, -1.0])
    np.testing.assert_allclose(rv, rotvec, atol=1e-12)


def test_make_pose_normalizes_quaternion():
    pose = make_pose([0.0, 0.0, 0.0], [2.0, 0.0, 0.0, 0.0])
    np.testing.assert_array_equal(pose, identity_pose())


# =============================================================================
# Composition
# =============================================================================


def test_identity_is_neutral(random_poses):
    I = identity_pose()
    for F, _ in random_poses:
        assert _same_pose(compose_frames(I, F), F)
        assert _same_pose(compose_frames(F, I), F)


def test_inverse_composes_to_identity(random_poses):
    for F, _ in random_poses:
        assert _same_pose(compose_frames(F, invert_frame(F)), identity_pose())
        assert _same_pose(compose_frames(invert_frame(F), F), identity_pose())


def test_composition_matches_homogeneous_transforms(random_poses):
    def to_matrix(p):
        T = np.eye(4)
        T[:3, :3] = quat_to_rotmat(p[3:])
        T[:3, 3] = p[:3]
        return T

    for F, L in random_poses:
        np.testing.assert_allclose(
            to_matrix(compose_frames(F, L)), to_matrix(F) @ to_matrix(L), atol=1e-10
        )


def test_composed_quaternion_is_unit(rng):
    F = np.concatenate([rng.normal(size=3), 1.7 * quat_normalize(rng.normal(size=4))])
    G = compose_frames(F, identity_pose())
    assert np.linalg.norm(G[3:]) == pytest.approx(1.0)
    assert np.linalg.norm(compose_frames(F, identity_pose(), normalize=False)[3:]) == pytest.approx(1.7)


# =============================================================================
# Jacobians
# =============================================================================


def test_jacobians_match_finite_differences(random_poses):
    for F, L in random_poses:
        _, G_F, G_L = compose_frames_jacobians(F, L)
        num_F = _numerical_jacobian(lambda x: compose_frames(x, L), F)
        num_L = _numerical_jacobian(lambda x: compose_frames(F, x), L)
        np.testing.assert_allclose(G_F, num_F, atol=1e-6)
        np.testing.assert_allclose(G_L, num_L, atol=1e-6)


def test_jacobians_hold_off_the_unit_sphere(rng):
    F = np.concatenate([rng.normal(size=3), 0.6 * rng.normal(size=4)])
    L = np.concatenate([rng.normal(size=3), 1.4 * rng.normal(size=4)])
    _, G_F, G_L = compose_frames_jacobians(F, L)
    np.testing.assert_allclose(
        G_F, _numerical_jacobian(lambda x: compose_frames(x, L), F), atol=1e-6
    )
    np.testing.assert_allclose(
        G_L, _numerical_jacobian(lambda x: compose_frames(F, x), L), atol=1e-6
    )


def test_quaternion_rows_are_tangent_to_unit_sphere(random_poses):
    # Scaling the composed quaternion does not move the normalized result
    for F, L in random_poses:
        G, G_F, G_L = compose_frames_jacobians(F, L)
        np.testing.assert_allclose(G[3:] @ G_F[3:7], np.zeros(7), atol=1e-12)
        np.testing.assert_allclose(G[3:] @ G_L[3:7], np.zeros(7), atol=1e-12)


def test_normalize_jacobian_matches_finite_differences(rng):
    q = 2.5 * rng.normal(size=4)
    num = _numerical_jacobian(quat_normalize, q)
    np.testing.assert_allclose(quat_normalize_jacobian(q), num, atol=1e-6)


def test_rotate_jacobian_matches_finite_differences(rng):
    q = rng.normal(size=4)
    v = rng.normal(size=3)
    num = _numerical_jacobian(lambda x: quat_to_rotmat(x) @ v, q)
    np.testing.assert_allclose(rotate_by_quat_jacobian(q, v), num, atol=1e-6)


def test_by_dglobal_is_parent_jacobian(random_poses):
    F, L = random_poses[0]
    _, G_F, _ = compose_frames_jacobians(F, L)
    np.testing.assert_array_equal(compose_frames_by_dglobal(F, L), G_F)


def test_jacobians_at_identity():
    I = identity_pose()
    _, G_F, G_L = compose_frames_jacobians(I, I)
    # The scalar part of the composed quaternion is stationary under renormalization
    expected = np.diag([1.0, 1.0, 1.0, 0.0, 1.0, 1.0, 1.0])
    np.testing.assert_allclose(G_F, expected, atol=1e-15)
    np.testing.assert_allclose(G_L, expected, atol=1e-15)
