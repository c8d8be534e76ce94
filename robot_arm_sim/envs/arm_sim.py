"""
Host for the arm motion core: one object, one tick, one motion driver.

``ArmSimulation`` owns every core component and the manipulated object,
drives them in a fixed order on each tick, and exposes the command and
query surfaces that a UI or input shell binds to.  Rendering and input
handling stay outside; they call in here and read ``get_status``.

Tick order:

1. ``MotionController.tick`` integrates targets into current values.
2. ``GraspDetector.update`` attaches, detaches and tracks the object.
3. ``AutomationSequencer.update`` polls its pending wait.
4. ``PoseRecorder.tick_playback`` checks playback progress.

Classes:
    MotionDriver: Which component currently owns joint targets.
    ArmStatus: Side-effect-free status snapshot.
    ArmSimulation: The host.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import numpy as np

from robot_arm_sim.automation.pose_recorder import Pose, PoseRecorder
from robot_arm_sim.automation.routine import Routine, load_routine
from robot_arm_sim.automation.sequencer import AutomationSequencer
from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.robots.grasp import (
    AttachmentDecision,
    GraspDetector,
    ManipulatedObject,
)
from robot_arm_sim.robots.kinematics import KinematicChain
from robot_arm_sim.robots.motion_controller import MotionController
from robot_arm_sim.utils.clock import SimClock
from robot_arm_sim.utils.constants import Joint
from robot_arm_sim.utils.status import StatusSink, safe_report

logger = logging.getLogger(__name__)


class MotionDriver(Enum):
    OPERATOR = "operator"
    AUTOMATION = "automation"
    PLAYBACK = "playback"


@dataclass(frozen=True)
class ArmStatus:
    """Everything a UI needs to reflect the arm, in one snapshot.

    Attributes:
        automation_state: Sequencer state name.
        gripper_state: ``open``, ``closed``, ``opening`` or ``closing``.
        holding_object: Whether the object is attached to the gripper.
        step_index: Current routine step (0-based).
        total_steps: Routine length.
        active: Whether automation is running.
        playback_active: Whether pose playback is running.
        speed_multiplier: Current speed multiplier.
        motion_driver: Which component owns joint targets.
    """

    automation_state: str
    gripper_state: str
    holding_object: bool
    step_index: int
    total_steps: int
    active: bool
    playback_active: bool
    speed_multiplier: float
    motion_driver: str


@dataclass
class ArmSimulation:
    """Owns and ticks the motion core.

    Attributes:
        config: Tunables for every component.
        sink: Status sink shared by all components.
        clock: Zero-argument callable returning seconds.
        routine: Automation routine; resolved from ``config.routine`` if unset.
    """

    config: ArmSimConfig = field(default_factory=ArmSimConfig)
    sink: Optional[StatusSink] = None
    clock: Callable[[], float] = time.monotonic
    routine: Optional[Routine] = None
    chain: KinematicChain = field(default_factory=KinematicChain)
    controller: MotionController = field(init=False)
    detector: GraspDetector = field(init=False)
    obj: ManipulatedObject = field(init=False)
    sequencer: AutomationSequencer = field(init=False)
    recorder: PoseRecorder = field(init=False)
    tick_count: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        cfg = self.config
        if self.routine is None:
            self.routine = load_routine(cfg.routine)
        self.controller = MotionController(config=cfg, sink=self.sink)
        self.detector = GraspDetector(
            grab_radius=cfg.grab_radius,
            close_threshold=cfg.close_threshold,
            open_threshold=cfg.open_threshold,
            sync_epsilon=cfg.object_sync_epsilon,
        )
        self.obj = ManipulatedObject(
            position=np.array(cfg.object_start_position, dtype=np.float64),
            size=cfg.object_size,
        )
        self.sequencer = AutomationSequencer(
            controller=self.controller,
            obj=self.obj,
            routine=self.routine,
            config=cfg,
            chain=self.chain,
            sink=self.sink,
            clock=self.clock,
        )
        self.recorder = PoseRecorder(controller=self.controller, config=cfg, sink=self.sink)
        safe_report(self.sink, "Robot Arm Initialized")

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def _guarded(self, stage: str, fn: Callable[[], object]) -> None:
        """Run one tick stage; contain and report anything it raises.

        Args:
            stage: Stage name for the log and status line.
            fn: The stage body.
        """
        try:
            fn()
        except Exception as exc:
            logger.exception("Tick %d: %s failed", self.tick_count, stage)
            safe_report(self.sink, f"Tick error in {stage}: {exc}")

    def _update_grasp(self) -> None:
        decision = self.detector.update(
            self.end_effector_position(), self.controller.aperture, self.obj
        )
        if decision is AttachmentDecision.ATTACH:
            safe_report(self.sink, "Object attached to gripper")
        elif decision is AttachmentDecision.DETACH:
            safe_report(self.sink, "Object detached from gripper")

    def tick(self, dt_scale: float = 1.0) -> None:
        """Advance the whole core by one tick, in the fixed order.

        Args:
            dt_scale: Frame-time scale forwarded to the controller.
        """
        self._guarded("motion", lambda: self.controller.tick(dt_scale))
        self._guarded("grasp", self._update_grasp)
        self._guarded("automation", self.sequencer.update)
        self._guarded("playback", self.recorder.tick_playback)
        self.tick_count += 1

    def run(self, seconds: float, dt_scale: float = 1.0) -> int:
        """Tick at ``config.fps`` for *seconds* of simulated time.

        Requires ``clock`` to be a ``SimClock``; it is advanced by one frame
        before every tick.

        Args:
            seconds: Simulated duration.
            dt_scale: Frame-time scale forwarded to the controller.

        Returns:
            Number of ticks run.

        Raises:
            TypeError: If the clock cannot be advanced.
        """
        if not isinstance(self.clock, SimClock):
            raise TypeError("run() needs a SimClock; tick() manually with a wall clock")
        frame = 1.0 / self.config.fps
        ticks = int(round(seconds * self.config.fps))
        for _ in range(ticks):
            self.clock.advance(frame)
            self.tick(dt_scale)
        return ticks

    def run_until_idle(self, max_seconds: float = 120.0) -> bool:
        """Tick until automation finishes or *max_seconds* pass.

        Args:
            max_seconds: Simulated time budget.

        Returns:
            True if automation ended within the budget.
        """
        if not isinstance(self.clock, SimClock):
            raise TypeError("run_until_idle() needs a SimClock")
        frame = 1.0 / self.config.fps
        deadline = self.clock() + max_seconds
        while self.sequencer.active and self.clock() < deadline:
            self.clock.advance(frame)
            self.tick()
        return not self.sequencer.active

    # ------------------------------------------------------------------
    # Motion driver ownership
    # ------------------------------------------------------------------

    @property
    def motion_driver(self) -> MotionDriver:
        if self.sequencer.active:
            return MotionDriver.AUTOMATION
        if self.recorder.playing:
            return MotionDriver.PLAYBACK
        return MotionDriver.OPERATOR

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    def start_automation(self) -> bool:
        """Start the routine unless playback currently owns the joints."""
        if self.recorder.playing:
            safe_report(self.sink, "Cannot start automation while playback is running")
            return False
        return self.sequencer.start()

    def stop_automation(self) -> None:
        self.sequencer.stop()

    def reset_to_home(self) -> None:
        """Cancel every driver and return the arm and object to home."""
        if self.recorder.playing:
            self.recorder.stop_playback()
        self.sequencer.reset_to_home()

    def open_gripper(self) -> None:
        self.controller.open_gripper()

    def close_gripper(self) -> None:
        self.controller.close_gripper()

    def toggle_gripper(self) -> None:
        self.controller.toggle_gripper()

    def set_joint_target(self, joint: Joint, degrees: float) -> float:
        return self.controller.set_joint_target(joint, degrees)

    def nudge_joint(self, joint: Joint, delta_degrees: float) -> float:
        return self.controller.add_joint_target(joint, delta_degrees)

    def set_gripper_target(self, aperture: float) -> float:
        return self.controller.set_gripper_target(aperture)

    def set_gripper_percent(self, percent: float) -> float:
        return self.controller.set_gripper_target_percent(percent)

    def set_speed_multiplier(self, value: float) -> float:
        return self.controller.set_speed_multiplier(value)

    def increase_speed(self) -> float:
        return self.controller.increase_speed()

    def decrease_speed(self) -> float:
        return self.controller.decrease_speed()

    def toggle_record_mode(self) -> bool:
        return self.recorder.toggle_record_mode()

    def record_pose(self) -> Optional[Pose]:
        """Record the current targets, honouring ``require_record_mode``."""
        if self.config.require_record_mode and not self.recorder.record_mode:
            safe_report(self.sink, "Record Mode is OFF")
            return None
        return self.recorder.record_current_targets()

    def toggle_playback(self) -> bool:
        """Start or stop playback; refuses to start during automation."""
        if not self.recorder.playing and self.sequencer.active:
            safe_report(self.sink, "Cannot start playback while automation is running")
            return False
        return self.recorder.toggle_playback()

    def attach_object(self) -> bool:
        """Operator override: attach the object to the gripper now."""
        if self.obj.attached:
            safe_report(self.sink, "Object already attached")
            return False
        self.obj.attach(manual=True)
        self.obj.position = self.end_effector_position()
        safe_report(self.sink, "Manual pick: attached to gripper")
        return True

    def detach_object(self) -> bool:
        """Operator override: drop the object at the gripper now."""
        if not self.obj.attached:
            safe_report(self.sink, "Object is not attached")
            return False
        self.obj.release_at(self.end_effector_position(), manual=True)
        safe_report(self.sink, "Manual release: dropped at gripper position")
        return True

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    def end_effector_position(self) -> np.ndarray:
        return self.chain.end_effector_position(self.controller.angles)

    def _gripper_state(self) -> str:
        ctl = self.controller
        if ctl.aperture == ctl.target_aperture:
            mid = 0.5 * (ctl.gripper_min + ctl.gripper_max)
            return "open" if ctl.aperture > mid else "closed"
        return "opening" if ctl.target_aperture > ctl.aperture else "closing"

    def get_status(self) -> ArmStatus:
        """Return a snapshot of the whole core without changing it."""
        auto = self.sequencer.get_status()
        return ArmStatus(
            automation_state=auto.automation_state,
            gripper_state=self._gripper_state(),
            holding_object=self.obj.attached,
            step_index=auto.step_index,
            total_steps=auto.total_steps,
            active=auto.active,
            playback_active=self.recorder.playing,
            speed_multiplier=self.controller.speed_multiplier,
            motion_driver=self.motion_driver.value,
        )
