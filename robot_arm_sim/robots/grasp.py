"""
Proximity-based grasp and release detection for a single object.

There are no contact forces in this simulation: an object counts as
grasped when the jaw centre is close enough and the gripper has closed,
and counts as released once the gripper opens again.  While grasped, the
object's position is slaved to the end effector.

Who holds the object is explicit state rather than a one-shot flag, so a
manual attach or detach cannot be undone by the automatic rule in the
same tick:

* ``HELD_MANUAL`` ignores the automatic release rule until the gripper has
  closed on the object, at which point it becomes ``HELD_AUTOMATIC``.
* ``RELEASED_MANUAL`` ignores the automatic grasp rule until the gripper
  has opened, at which point it becomes ``FREE``.

Classes:
    ObjectHold: Ownership state of the manipulated object.
    AttachmentDecision: Outcome of one evaluation.
    ManipulatedObject: The object in the scene.
    GraspDetector: Attach/detach rules and position tracking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from robot_arm_sim.utils.constants import (
    GRAB_RADIUS,
    GRIP_CLOSE_THRESHOLD,
    GRIP_OPEN_THRESHOLD,
    OBJECT_SIZE,
    OBJECT_START_POSITION,
    OBJECT_SYNC_EPSILON,
)
from robot_arm_sim.utils.helpers import distance

logger = logging.getLogger(__name__)


class ObjectHold(Enum):
    """Who, if anyone, currently holds the object."""

    FREE = "free"
    HELD_AUTOMATIC = "held_automatic"
    HELD_MANUAL = "held_manual"
    RELEASED_MANUAL = "released_manual"


class AttachmentDecision(Enum):
    NONE = "none"
    ATTACH = "attach"
    DETACH = "detach"


@dataclass
class ManipulatedObject:
    """The box the arm picks up.

    Attributes:
        position: World-space centre [x, y, z].
        size: Bounding box (width, height, depth).
        hold: Current ownership state.
        closed_since_release: Whether the gripper has closed since a manual
            release; only meaningful while ``hold`` is ``RELEASED_MANUAL``.
    """

    position: np.ndarray = field(
        default_factory=lambda: np.array(OBJECT_START_POSITION, dtype=np.float64)
    )
    size: Tuple[float, float, float] = OBJECT_SIZE
    hold: ObjectHold = ObjectHold.FREE
    closed_since_release: bool = False

    @property
    def attached(self) -> bool:
        return self.hold in (ObjectHold.HELD_AUTOMATIC, ObjectHold.HELD_MANUAL)

    def attach(self, manual: bool = False) -> None:
        self.hold = ObjectHold.HELD_MANUAL if manual else ObjectHold.HELD_AUTOMATIC
        self.closed_since_release = False

    def release_at(self, position: Sequence[float], manual: bool = False) -> None:
        """Detach the object and leave it at *position*.

        Args:
            position: World-space drop point.
            manual: Whether an operator (not the detector) released it.
        """
        self.position = np.array(position, dtype=np.float64)
        self.hold = ObjectHold.RELEASED_MANUAL if manual else ObjectHold.FREE
        self.closed_since_release = False

    def reset(self, position: Sequence[float]) -> None:
        """Free the object and move it to *position* unconditionally."""
        self.position = np.array(position, dtype=np.float64)
        self.hold = ObjectHold.FREE
        self.closed_since_release = False


@dataclass(frozen=True)
class GraspDetector:
    """Decides when the object attaches to or detaches from the gripper.

    Attributes:
        grab_radius: Maximum jaw-to-object distance for a grasp.
        close_threshold: Aperture below which the gripper is closed.
        open_threshold: Aperture above which the gripper is open.
        sync_epsilon: Minimum positional delta before a held object moves.
    """

    grab_radius: float = GRAB_RADIUS
    close_threshold: float = GRIP_CLOSE_THRESHOLD
    open_threshold: float = GRIP_OPEN_THRESHOLD
    sync_epsilon: float = OBJECT_SYNC_EPSILON

    def is_near(self, ee_position: Sequence[float], obj: ManipulatedObject) -> bool:
        return distance(ee_position, obj.position) < self.grab_radius

    def evaluate(
        self, ee_position: Sequence[float], aperture: float, obj: ManipulatedObject
    ) -> AttachmentDecision:
        """Apply the automatic rules without touching the object.

        Args:
            ee_position: Current jaw centre.
            aperture: Current gripper gap.
            obj: The tracked object.

        Returns:
            ``ATTACH``, ``DETACH`` or ``NONE``.
        """
        if obj.hold is ObjectHold.FREE:
            if aperture < self.close_threshold and self.is_near(ee_position, obj):
                return AttachmentDecision.ATTACH
        elif obj.hold is ObjectHold.HELD_AUTOMATIC:
            if aperture > self.open_threshold:
                return AttachmentDecision.DETACH
        return AttachmentDecision.NONE

    def update(
        self, ee_position: Sequence[float], aperture: float, obj: ManipulatedObject
    ) -> AttachmentDecision:
        """Evaluate, apply the decision, re-arm manual holds, and track.

        Args:
            ee_position: Current jaw centre.
            aperture: Current gripper gap.
            obj: The tracked object; mutated in place.

        Returns:
            The decision that was applied.
        """
        decision = self.evaluate(ee_position, aperture, obj)
        if decision is AttachmentDecision.ATTACH:
            obj.attach()
            logger.debug("auto attach at %s", np.round(ee_position, 3))
        elif decision is AttachmentDecision.DETACH:
            obj.release_at(ee_position)
            logger.debug("auto detach at %s", np.round(ee_position, 3))
        self._rearm(ee_position, aperture, obj)
        self.sync_position(ee_position, obj)
        return decision

    def _rearm(
        self, ee_position: Sequence[float], aperture: float, obj: ManipulatedObject
    ) -> None:
        """Hand manual holds back to the automatic rules.

        A manual hold re-arms once the gripper closes on it.  A manual
        release re-arms once the end effector leaves the grab radius, or
        once the gripper has closed and then opened again.

        Args:
            ee_position: Current jaw centre.
            aperture: Current gripper gap.
            obj: The tracked object.
        """
        if obj.hold is ObjectHold.HELD_MANUAL:
            if aperture < self.close_threshold:
                obj.hold = ObjectHold.HELD_AUTOMATIC
        elif obj.hold is ObjectHold.RELEASED_MANUAL:
            if not self.is_near(ee_position, obj):
                obj.hold = ObjectHold.FREE
            elif aperture < self.close_threshold:
                obj.closed_since_release = True
            elif aperture > self.open_threshold and obj.closed_since_release:
                obj.hold = ObjectHold.FREE

    def sync_position(self, ee_position: Sequence[float], obj: ManipulatedObject) -> bool:
        """Move a held object onto the end effector if it drifted.

        Args:
            ee_position: Current jaw centre.
            obj: The tracked object.

        Returns:
            True if the object position was written.
        """
        if not obj.attached:
            return False
        if distance(ee_position, obj.position) <= self.sync_epsilon:
            return False
        obj.position = np.array(ee_position, dtype=np.float64)
        return True
