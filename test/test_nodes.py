"""Composition variants, effective index sets and global-pose Jacobians."""

import numpy as np
import pytest

from rtslam_core.backend.fusion import Gaussian
from rtslam_core.backend.state import CompositionVariant, SlamMap, Sensor
from rtslam_core.backend.structures import IndexSet
from rtslam_core.common.constants import FINITE_DIFF_STEP
from rtslam_core.common.errors import DimensionMismatch
from rtslam_core.common.geometry import (
    compose_frames,
    compose_frames_jacobians,
    identity_pose,
    pose_from_euler,
)


def _robot_and_sensors(slam_map):
    robot = slam_map.add_robot(
        name="rover", pose=pose_from_euler([1.0, 2.0, 0.0], [0.0, 10.0, 30.0])
    )
    mount = pose_from_euler([0.1, 0.0, 0.3], [-90.0, 0.0, -90.0])
    local = slam_map.add_sensor(robot, in_filter=False, pose=mount, name="fixed")
    remote = slam_map.add_sensor(robot, in_filter=True, pose=mount, name="estimated")
    return robot, local, remote


class TestVariants:

    def test_standalone_sensor(self):
        sensor = Sensor()
        assert sensor.variant is CompositionVariant.STANDALONE
        assert len(sensor.effective_index_set) == 0
        pose, J = sensor.global_pose()
        np.testing.assert_array_equal(pose, identity_pose())
        assert J.shape == (7, 0)

    def test_robot_is_bound(self, slam_map):
        robot = slam_map.add_robot()
        assert robot.variant is CompositionVariant.BOUND
        assert robot.effective_index_set == IndexSet.range(0, 7)
        pose, J = robot.global_pose()
        np.testing.assert_array_equal(pose, identity_pose())
        np.testing.assert_array_equal(J, np.eye(7))

    def test_robot_with_extended_state(self):
        slam_map = SlamMap(capacity=20)
        robot = slam_map.add_robot(state_size=13)
        assert robot.state.size == 13
        assert robot.pose.index_set == IndexSet.range(0, 7)
        assert robot.effective_index_set == IndexSet.range(0, 7)

    def test_robot_state_too_small(self, slam_map):
        with pytest.raises(DimensionMismatch):
            slam_map.add_robot(state_size=6)

    def test_sensor_variants_on_robot(self, slam_map):
        robot, local, remote = _robot_and_sensors(slam_map)
        assert local.variant is CompositionVariant.PARENT_RELATIVE_LOCAL
        assert not local.pose.is_remote
        assert local.effective_index_set == robot.effective_index_set

        assert remote.variant is CompositionVariant.BOUND_WITH_PARENT
        assert remote.pose.index_set == IndexSet.range(7, 7)
        assert remote.effective_index_set == IndexSet.range(0, 14)
        assert robot.sensor_ids == [local.id, remote.id]
        assert local.robot is robot

    def test_in_map_sensor_is_bound(self, slam_map):
        sensor = slam_map.add_sensor(None)
        assert sensor.variant is CompositionVariant.BOUND
        assert sensor.robot is None
        assert sensor.effective_index_set == sensor.pose.index_set

    def test_parent_variant_without_parent_raises(self):
        with pytest.raises(RuntimeError):
            Sensor(Gaussian(7, mean=identity_pose()), CompositionVariant.PARENT_RELATIVE_LOCAL)

    def test_link_across_maps_raises(self, slam_map):
        other = SlamMap(capacity=14)
        sensor = other.add_sensor(None)
        robot = slam_map.add_robot()
        with pytest.raises(ValueError):
            sensor.link_to_robot(robot)


class TestGlobalPose:

    def test_local_sensor_jacobian_is_7x7(self, slam_map):
        robot, local, _ = _robot_and_sensors(slam_map)
        pose, J = local.global_pose()
        _, G_F, _ = compose_frames_jacobians(robot.pose.mean, local.pose.mean)
        assert J.shape == (7, 7)
        np.testing.assert_allclose(J, G_F)
        np.testing.assert_allclose(pose, compose_frames(robot.pose.mean, local.pose.mean))

    def test_remote_sensor_jacobian_is_7x14(self, slam_map):
        robot, _, remote = _robot_and_sensors(slam_map)
        pose, J = remote.global_pose()
        _, G_F, G_L = compose_frames_jacobians(robot.pose.mean, remote.pose.mean)
        assert J.shape == (7, 14)
        np.testing.assert_allclose(J[:, 0:7], G_F)
        np.testing.assert_allclose(J[:, 7:14], G_L)

    def test_permuted_union_places_columns_by_index(self):
        # Sensor block reserved before the robot block
        slam_map = SlamMap(capacity=14)
        sensor = slam_map.add_sensor(None, pose=pose_from_euler([0.0, 0.5, 0.0], [0.0, 0.0, 45.0]))
        robot = slam_map.add_robot(pose=pose_from_euler([3.0, 0.0, 1.0], [20.0, 0.0, 0.0]))
        assert sensor.pose.index_set == IndexSet.range(0, 7)
        assert robot.pose.index_set == IndexSet.range(7, 7)

        sensor.link_to_robot(robot)
        assert sensor.variant is CompositionVariant.BOUND_WITH_PARENT
        assert sensor.effective_index_set == IndexSet.range(0, 14)
        assert robot.sensor_ids == [sensor.id]

        _, J = sensor.global_pose()
        _, G_F, G_L = compose_frames_jacobians(robot.pose.mean, sensor.pose.mean)
        np.testing.assert_allclose(J[:, 7:14], G_F)
        np.testing.assert_allclose(J[:, 0:7], G_L)

    def test_pose_follows_buffer_writes(self, slam_map):
        robot, local, _ = _robot_and_sensors(slam_map)
        new_pose = pose_from_euler([5.0, -1.0, 0.0], [0.0, 0.0, -45.0])
        slam_map.state_buffer.write_mean(robot.pose.index_set, new_pose)
        pose, _ = local.global_pose()
        np.testing.assert_allclose(pose, compose_frames(new_pose, local.pose.mean))

    def test_sensor_at_robot_origin_in_21_state_map(self):
        slam_map = SlamMap(capacity=21)
        robot = slam_map.add_robot()
        assert robot.state.index_set == IndexSet.range(0, 7)

        sensor = slam_map.add_sensor(robot, at_robot_origin=True)
        assert sensor.pose.is_remote
        assert sensor.variant is CompositionVariant.BOUND
        assert slam_map.state_buffer.used == 7
        assert sensor.effective_index_set == IndexSet.range(0, 7)

        pose, J = sensor.global_pose()
        np.testing.assert_array_equal(pose, robot.pose.mean)
        np.testing.assert_array_equal(J, np.eye(7))

    def test_robot_origin_sensor_follows_robot(self, slam_map):
        robot = slam_map.add_robot(pose=pose_from_euler([1.0, 0.0, 0.0], [0.0, 0.0, 30.0]))
        sensor = slam_map.add_sensor(robot, at_robot_origin=True)
        assert robot.sensor_ids == [sensor.id]

        moved = pose_from_euler([4.0, -2.0, 0.5], [0.0, 15.0, 0.0])
        robot.pose.mean = moved
        pose, J = sensor.global_pose()
        np.testing.assert_array_equal(pose, moved)
        np.testing.assert_array_equal(J, np.eye(7))

    def test_robot_origin_needs_robot(self, slam_map):
        with pytest.raises(ValueError):
            slam_map.add_sensor(None, at_robot_origin=True)

    def test_identity_mount_projects_out_scalar_part(self):
        slam_map = SlamMap(capacity=21)
        robot = slam_map.add_robot()
        sensor = slam_map.add_sensor(robot, in_filter=False)
        pose, J = sensor.global_pose()
        np.testing.assert_array_equal(pose, robot.pose.mean)
        np.testing.assert_allclose(J, np.diag([1.0, 1.0, 1.0, 0.0, 1.0, 1.0, 1.0]), atol=1e-15)

    @pytest.mark.parametrize("in_filter", [False, True])
    def test_jacobian_matches_buffer_perturbation(self, slam_map, in_filter):
        robot = slam_map.add_robot(pose=pose_from_euler([1.0, 2.0, 0.0], [5.0, 10.0, 30.0]))
        sensor = slam_map.add_sensor(
            robot, in_filter=in_filter, pose=pose_from_euler([0.1, 0.0, 0.3], [-90.0, 0.0, -90.0])
        )
        buf = slam_map.state_buffer
        _, J = sensor.global_pose()

        eps = FINITE_DIFF_STEP
        num = np.zeros_like(J)
        for col, idx in enumerate(sensor.effective_index_set):
            ia = IndexSet([idx])
            x0 = buf.read_mean(ia)
            buf.write_mean(ia, x0 + eps)
            plus, _ = sensor.global_pose()
            buf.write_mean(ia, x0 - eps)
            minus, _ = sensor.global_pose()
            buf.write_mean(ia, x0)
            num[:, col] = (plus - minus) / (2.0 * eps)
        assert J.shape == ((7, 14) if in_filter else (7, 7))
        np.testing.assert_allclose(J, num, atol=1e-6)


class TestSummaries:

    def test_headers(self, slam_map):
        robot, local, remote = _robot_and_sensors(slam_map)
        text = robot.summary()
        assert text.startswith("ROBOT 1: rover, of type ROBOT")
        assert ".sensors: [ 1 2 ]" in text

        assert str(local).startswith("SENSOR 1: fixed, of type SENSOR")
        assert ".robot: [ 1 ]" in local.summary()
        assert "ia_rs" not in local.summary()
        assert "ia_rs: [0..13]" in remote.summary()

    def test_unnamed_node(self):
        assert Sensor().summary().startswith("SENSOR 0: of type SENSOR")
