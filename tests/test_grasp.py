"""Tests for proximity grasp detection and object ownership."""

from __future__ import annotations

import numpy as np
import pytest

from robot_arm_sim.robots.grasp import (
    AttachmentDecision,
    GraspDetector,
    ManipulatedObject,
    ObjectHold,
)
from robot_arm_sim.robots.kinematics import KinematicChain

CHAIN = KinematicChain()


@pytest.fixture
def detector() -> GraspDetector:
    return GraspDetector()


def _object_at(position) -> ManipulatedObject:
    return ManipulatedObject(position=np.array(position, dtype=np.float64))


def test_attach_requires_closed_gripper_and_proximity(detector):
    ee = CHAIN.end_effector_position([0.0, 75.0, -30.0])
    obj = _object_at(ee + [0.3, 0.0, 0.0])
    assert detector.evaluate(ee, 0.2, obj) is AttachmentDecision.ATTACH
    assert detector.evaluate(ee, 0.45, obj) is AttachmentDecision.NONE
    far = _object_at(ee + [0.7, 0.0, 0.0])
    assert detector.evaluate(ee, 0.2, far) is AttachmentDecision.NONE


def test_evaluate_does_not_mutate(detector):
    ee = np.zeros(3)
    obj = _object_at([0.1, 0.0, 0.0])
    detector.evaluate(ee, 0.2, obj)
    assert obj.hold is ObjectHold.FREE
    np.testing.assert_array_equal(obj.position, [0.1, 0.0, 0.0])


def test_grasp_track_release_scenario(detector):
    angles = [10.0, 60.0, -20.0]
    ee = CHAIN.end_effector_position(angles)
    obj = _object_at(ee)

    assert detector.update(ee, 0.2, obj) is AttachmentDecision.ATTACH
    assert obj.attached and obj.hold is ObjectHold.HELD_AUTOMATIC

    moved = CHAIN.end_effector_position([40.0, 30.0, 10.0])
    assert detector.update(moved, 0.2, obj) is AttachmentDecision.NONE
    np.testing.assert_array_equal(obj.position, moved)

    assert detector.evaluate(moved, 0.7, obj) is AttachmentDecision.DETACH
    assert detector.update(moved, 0.7, obj) is AttachmentDecision.DETACH
    assert not obj.attached
    np.testing.assert_array_equal(obj.position, moved)

    later = CHAIN.end_effector_position([0.0, 0.0, 0.0])
    detector.update(later, 0.7, obj)
    np.testing.assert_array_equal(obj.position, moved)


def test_no_detach_between_thresholds(detector):
    obj = _object_at([0.0, 0.0, 0.0])
    obj.attach()
    assert detector.evaluate(np.zeros(3), 0.45, obj) is AttachmentDecision.NONE


def test_sync_skips_tiny_deltas(detector):
    obj = _object_at([1.0, 1.0, 1.0])
    obj.attach()
    assert not detector.sync_position([1.0, 1.0, 1.00001], obj)
    np.testing.assert_array_equal(obj.position, [1.0, 1.0, 1.0])
    assert detector.sync_position([1.0, 1.0, 1.1], obj)
    np.testing.assert_allclose(obj.position, [1.0, 1.0, 1.1])


def test_manual_hold_ignores_automatic_release_until_gripper_closes(detector):
    ee = np.zeros(3)
    obj = _object_at(ee)
    obj.attach(manual=True)

    assert detector.update(ee, 0.7, obj) is AttachmentDecision.NONE
    assert obj.hold is ObjectHold.HELD_MANUAL

    detector.update(ee, 0.2, obj)
    assert obj.hold is ObjectHold.HELD_AUTOMATIC
    assert detector.update(ee, 0.7, obj) is AttachmentDecision.DETACH


def test_manual_release_ignores_automatic_grasp_until_gripper_opens(detector):
    ee = np.zeros(3)
    obj = _object_at(ee)
    obj.attach()
    obj.release_at(ee, manual=True)
    assert obj.hold is ObjectHold.RELEASED_MANUAL

    assert detector.update(ee, 0.2, obj) is AttachmentDecision.NONE
    assert not obj.attached

    detector.update(ee, 0.7, obj)
    assert obj.hold is ObjectHold.FREE
    assert detector.update(ee, 0.2, obj) is AttachmentDecision.ATTACH


def test_reset_frees_object():
    obj = _object_at([0.0, 0.0, 0.0])
    obj.attach(manual=True)
    obj.reset((5.0, 0.5, 0.0))
    assert obj.hold is ObjectHold.FREE
    np.testing.assert_array_equal(obj.position, [5.0, 0.5, 0.0])


def test_manual_release_needs_close_then_open_before_regrasp(detector):
    ee = np.zeros(3)
    obj = _object_at(ee)
    obj.attach(manual=True)
    obj.release_at(ee, manual=True)

    # already open: stays released
    detector.update(ee, 0.7, obj)
    assert obj.hold is ObjectHold.RELEASED_MANUAL
    assert detector.update(ee, 0.2, obj) is AttachmentDecision.NONE
    assert obj.hold is ObjectHold.RELEASED_MANUAL
    detector.update(ee, 0.7, obj)
    assert obj.hold is ObjectHold.FREE


def test_manual_release_rearms_when_end_effector_leaves(detector):
    obj = _object_at([0.0, 0.0, 0.0])
    obj.release_at([0.0, 0.0, 0.0], manual=True)
    detector.update([0.0, 0.0, 0.5], 0.7, obj)
    assert obj.hold is ObjectHold.RELEASED_MANUAL
    detector.update([0.0, 0.0, 1.0], 0.7, obj)
    assert obj.hold is ObjectHold.FREE
