"""Tests for pose recording and looping playback."""

from __future__ import annotations

import numpy as np
import pytest

from robot_arm_sim.automation.pose_recorder import Pose, PoseRecorder
from robot_arm_sim.utils.constants import Joint


@pytest.fixture
def recorder(controller, config, sink) -> PoseRecorder:
    return PoseRecorder(controller=controller, config=config, sink=sink)


def _command(controller, base, lower, upper, gap):
    controller.set_joint_target(Joint.BASE, base)
    controller.set_joint_target(Joint.LOWER_ARM, lower)
    controller.set_joint_target(Joint.UPPER_ARM, upper)
    controller.set_gripper_target(gap)


def test_record_snapshots_targets(recorder, controller, sink):
    _command(controller, 12.5, -40.25, 100.125, 0.3)
    pose = recorder.record_current_targets()
    assert pose == Pose((12.5, -40.25, 100.125), 0.3)
    assert recorder.poses == [pose]
    assert sink.messages[-1] == "Saved pose #1"


def test_pose_is_immutable(recorder):
    pose = recorder.record_current_targets()
    with pytest.raises(AttributeError):
        pose.aperture = 0.5


def test_record_then_apply_round_trips_exactly(recorder, controller):
    _command(controller, 33.3333, 17.123456789, -88.8, 0.4321)
    before = controller.target_angles.copy()
    gap = controller.target_aperture
    pose = recorder.record_current_targets()

    _command(controller, 0.0, 0.0, 0.0, 0.75)
    recorder.apply_pose(pose)
    np.testing.assert_array_equal(controller.target_angles, before)
    assert controller.target_aperture == gap


def test_start_playback_without_poses_is_refused(recorder, sink):
    assert not recorder.start_playback()
    assert not recorder.playing
    assert sink.messages[-1] == "Play Mode: no saved poses"


def test_start_playback_applies_first_pose(recorder, controller):
    _command(controller, 10.0, 20.0, 30.0, 0.2)
    recorder.record_current_targets()
    _command(controller, -10.0, -20.0, -30.0, 0.7)
    recorder.record_current_targets()

    assert recorder.start_playback()
    assert recorder.playing and recorder.index == 0
    np.testing.assert_array_equal(controller.target_angles, [10.0, 20.0, 30.0])


def test_hold_frames_before_advancing(recorder, controller, config):
    recorder.record_current_targets()
    recorder.record_current_targets()
    recorder.start_playback()
    # already settled on pose 0
    for _ in range(config.playback_hold_frames):
        recorder.tick_playback()
        assert recorder.index == 0
    recorder.tick_playback()
    assert recorder.index == 1
    assert recorder.hold_counter == 0


def test_playback_loops_back_to_first_pose(recorder, controller):
    _command(controller, 0.0, 35.0, 45.0, 0.75)
    recorder.record_current_targets()
    _command(controller, 90.0, 60.0, -20.0, 0.15)
    recorder.record_current_targets()
    _command(controller, -90.0, 20.0, 60.0, 0.45)
    recorder.record_current_targets()

    recorder.start_playback()
    visited = [recorder.index]
    for _ in range(5000):
        controller.tick()
        recorder.tick_playback()
        if recorder.index != visited[-1]:
            visited.append(recorder.index)
        if len(visited) == 4:
            break
    assert visited == [0, 1, 2, 0]
    np.testing.assert_array_equal(controller.target_angles, [0.0, 35.0, 45.0])


def test_playback_waits_for_gripper_too(recorder, controller):
    _command(controller, 75.0, 35.0, 90.0, 0.75)
    recorder.record_current_targets()
    _command(controller, 75.0, 35.0, 90.0, 0.15)
    recorder.record_current_targets()
    recorder.start_playback()
    # joints are on target but the gripper is still opening from 0.55
    for _ in range(3):
        recorder.tick_playback()
    assert recorder.hold_counter == 0


def test_stop_playback_keeps_targets(recorder, controller, sink):
    _command(controller, 10.0, 20.0, 30.0, 0.2)
    recorder.record_current_targets()
    recorder.start_playback()
    recorder.stop_playback()
    assert not recorder.playing
    np.testing.assert_array_equal(controller.target_angles, [10.0, 20.0, 30.0])
    assert sink.messages[-1] == "Play Mode: OFF"
    controller.tick()
    recorder.tick_playback()
    assert recorder.index == 0


def test_toggle_playback_and_record_mode(recorder):
    recorder.record_current_targets()
    assert recorder.toggle_playback() is True
    assert recorder.toggle_playback() is False
    assert recorder.toggle_record_mode() is True
    assert recorder.toggle_record_mode() is False


def test_clear_stops_playback(recorder):
    recorder.record_current_targets()
    recorder.start_playback()
    recorder.clear()
    assert not recorder.playing
    assert recorder.poses == []
