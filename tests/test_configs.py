"""Tests for ArmSimConfig normalisation and validation."""

from __future__ import annotations

import pytest

from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.utils.constants import Joint


def test_defaults():
    cfg = ArmSimConfig()
    assert cfg.joint_limits[Joint.BASE] == (-180.0, 180.0)
    assert cfg.gripper_limits == (0.15, 0.75)
    assert cfg.home_pose == (0.0, 35.0, 45.0)
    assert cfg.routine == "pick_place"


def test_integer_joint_keys_are_normalised():
    cfg = ArmSimConfig(joint_limits={0: (-90, 90), 1: (-10, 10), 2: (-20, 20)})
    assert set(cfg.joint_limits) == set(Joint)
    assert cfg.joint_limits[Joint.LOWER_ARM] == (-10.0, 10.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"joint_limits": {Joint.BASE: (0, 1)}},
        {"joint_limits": {Joint.BASE: (10, -10), Joint.LOWER_ARM: (0, 1), Joint.UPPER_ARM: (0, 1)}},
        {"gripper_limits": (0.8, 0.2)},
        {"joint_smoothing": 0.0},
        {"speed_range": (2.0, 1.0)},
        {"at_target_tolerance": 0.0},
        {"close_threshold": 0.7},
        {"grab_radius": -1.0},
        {"grasp_delay": -0.1},
        {"poll_interval": 0.0},
        {"move_timeout": 0.0},
        {"playback_hold_frames": -1},
        {"fps": 0},
    ],
)
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        ArmSimConfig(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"gripper_limits": (0.0, 0.2)},
        {"gripper_limits": (0.35, 0.75)},
        {"gripper_limits": (0.15, 0.6)},
    ],
)
def test_grasp_thresholds_must_be_reachable(kwargs):
    with pytest.raises(ValueError, match="gripper_limits"):
        ArmSimConfig(**kwargs)


def test_thresholds_inside_custom_gripper_limits_are_accepted():
    cfg = ArmSimConfig(gripper_limits=(0.0, 1.0), close_threshold=0.2, open_threshold=0.8)
    assert cfg.gripper_limits == (0.0, 1.0)
