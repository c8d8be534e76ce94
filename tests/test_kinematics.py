"""Tests for the stateless forward-kinematics chain."""

from __future__ import annotations

import numpy as np
import pytest

from robot_arm_sim.robots.kinematics import KinematicChain, end_effector_position


def test_zero_pose_points_straight_up():
    pos = end_effector_position([0.0, 0.0, 0.0])
    np.testing.assert_allclose(pos, [0.0, 12.2, 0.0], atol=1e-9)


def test_lower_arm_pitch_swings_in_xy_plane():
    pos = end_effector_position([0.0, 90.0, 0.0])
    np.testing.assert_allclose(pos, [-10.2, 2.0, 0.0], atol=1e-9)


def test_base_yaw_rotates_about_vertical_axis():
    pos = end_effector_position([90.0, 90.0, 0.0])
    np.testing.assert_allclose(pos, [0.0, 2.0, 10.2], atol=1e-9)


def test_upper_arm_pitch_is_relative_to_lower_arm():
    pos = end_effector_position([0.0, 45.0, 45.0])
    direct = end_effector_position([0.0, 90.0, 0.0])
    # same total pitch, different elbow position
    assert not np.allclose(pos, direct)
    elbow = KinematicChain().joint_frames([0.0, 45.0, 45.0])[1]
    np.testing.assert_allclose(pos - elbow, [-5.2, 0.0, 0.0], atol=1e-9)


def test_gripper_mount_yaw_does_not_move_jaw_centre():
    a = KinematicChain(gripper_mount_yaw=-90.0).end_effector_position([30.0, 20.0, -10.0])
    b = KinematicChain(gripper_mount_yaw=0.0).end_effector_position([30.0, 20.0, -10.0])
    np.testing.assert_allclose(a, b, atol=1e-9)


def test_joint_frames_end_at_end_effector():
    chain = KinematicChain()
    angles = [12.0, 34.0, -56.0]
    frames = chain.joint_frames(angles)
    assert len(frames) == 4
    np.testing.assert_allclose(frames[0], [0.0, 2.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(frames[-1], chain.end_effector_position(angles))


def test_result_is_a_fresh_array():
    chain = KinematicChain()
    pos = chain.end_effector_position([0.0, 0.0, 0.0])
    pos[0] = 99.0
    assert chain.end_effector_position([0.0, 0.0, 0.0])[0] == pytest.approx(0.0)


def test_wrong_number_of_angles_raises():
    with pytest.raises(ValueError):
        end_effector_position([0.0, 0.0])
