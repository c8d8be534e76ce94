"""
Record operator poses and replay them in an endless loop.

Poses are snapshots of the *targets* (not the current angles), so a pose
can be recorded the moment the operator commands it.  Playback applies one
pose, waits until the arm and gripper have settled on it, holds for a few
ticks, then moves on to the next pose, wrapping around at the end.

Classes:
    Pose: Immutable joint/gripper target snapshot.
    PoseRecorder: Recording and looping playback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.robots.motion_controller import MotionController
from robot_arm_sim.utils.constants import Joint
from robot_arm_sim.utils.status import StatusSink, safe_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pose:
    """Three joint targets (degrees) and one gripper target."""

    joint_targets: Tuple[float, float, float]
    aperture: float


@dataclass
class PoseRecorder:
    """Captures poses and loops through them on demand.

    Attributes:
        controller: Where targets are read from and written to.
        config: Playback tolerances and hold length.
        sink: Status sink.
        poses: Recorded poses, oldest first.
        record_mode: Operator-facing record toggle.
        playing: Whether loop playback is running.
        index: Pose currently being played.
        hold_counter: Ticks spent holding the reached pose.
    """

    controller: MotionController
    config: ArmSimConfig = field(default_factory=ArmSimConfig)
    sink: Optional[StatusSink] = None
    poses: List[Pose] = field(default_factory=list)
    record_mode: bool = False
    playing: bool = field(default=False, init=False)
    index: int = field(default=0, init=False)
    hold_counter: int = field(default=0, init=False)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_current_targets(self) -> Pose:
        """Snapshot the current targets and append them.

        Returns:
            The recorded pose.
        """
        targets = self.controller.target_angles
        pose = Pose(
            joint_targets=(float(targets[0]), float(targets[1]), float(targets[2])),
            aperture=float(self.controller.target_aperture),
        )
        self.poses.append(pose)
        safe_report(self.sink, f"Saved pose #{len(self.poses)}")
        return pose

    def toggle_record_mode(self) -> bool:
        self.record_mode = not self.record_mode
        safe_report(self.sink, f"Record Mode: {'ON' if self.record_mode else 'OFF'}")
        return self.record_mode

    def apply_pose(self, pose: Pose) -> None:
        """Write a pose's targets through the controller."""
        for joint, value in zip(Joint, pose.joint_targets):
            self.controller.set_joint_target(joint, value)
        self.controller.set_gripper_target(pose.aperture)

    def clear(self) -> None:
        """Forget every pose and stop playback."""
        if self.playing:
            self.stop_playback()
        self.poses.clear()

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def start_playback(self) -> bool:
        """Start looping from the first pose.

        Returns:
            False when there is nothing to play.
        """
        if not self.poses:
            safe_report(self.sink, "Play Mode: no saved poses")
            return False
        self.playing = True
        self.index = 0
        self.hold_counter = 0
        self.apply_pose(self.poses[0])
        safe_report(self.sink, "Play Mode: ON (loop)")
        return True

    def stop_playback(self) -> None:
        """Leave loop mode; the current targets stay where they are."""
        self.playing = False
        safe_report(self.sink, "Play Mode: OFF")

    def toggle_playback(self) -> bool:
        if self.playing:
            self.stop_playback()
        else:
            self.start_playback()
        return self.playing

    def tick_playback(self) -> None:
        """Advance to the next pose once the current one is reached and held."""
        if not self.playing or not self.poses:
            return
        settled = self.controller.is_settled(
            self.config.playback_joint_tolerance, self.config.playback_gripper_tolerance
        )
        if not settled:
            return
        if self.hold_counter < self.config.playback_hold_frames:
            self.hold_counter += 1
            return
        self.hold_counter = 0
        self.index = (self.index + 1) % len(self.poses)
        logger.debug("playback -> pose %d", self.index)
        self.apply_pose(self.poses[self.index])
        safe_report(self.sink, f"Play pose #{self.index + 1}")
