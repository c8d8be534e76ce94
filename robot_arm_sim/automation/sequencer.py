"""
Tick-polled state machine that runs a pick-and-place routine.

The sequencer never blocks and never schedules callbacks.  Whenever it has
to wait (startup, joint convergence, gripper settle, pause between steps)
it stores a ``_Wait`` record holding the phase, its start time and its
duration, and the host's tick calls ``update`` to poll it.  Moves wait for
convergence but are bounded by a timeout: a joint that cannot reach its
target (for example one held against a limit) costs precision, never
progress.

Classes:
    AutomationState: Externally visible sequencer state.
    AutomationStatus: Side-effect-free status snapshot.
    AutomationSequencer: The routine runner.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from robot_arm_sim.automation.routine import (
    GraspStep,
    LiftStep,
    MoveStep,
    ReleaseStep,
    Routine,
    RoutineStep,
    pick_and_place_routine,
)
from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.robots.grasp import ManipulatedObject
from robot_arm_sim.robots.kinematics import KinematicChain
from robot_arm_sim.robots.motion_controller import MotionController
from robot_arm_sim.utils.constants import Joint
from robot_arm_sim.utils.status import StatusSink, safe_report

logger = logging.getLogger(__name__)


class AutomationState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    MOVING = "moving"
    GRASPING = "grasping"
    RELEASING = "releasing"


class _WaitPhase(Enum):
    STARTUP = "startup"
    CONVERGE = "converge"
    GRASP = "grasp"
    RELEASE = "release"
    SETTLE = "settle"


@dataclass
class _Wait:
    """A pending wait: what we wait for, since when, and for how long."""

    phase: _WaitPhase
    started_at: float
    duration: float
    last_poll: float = 0.0

    def __post_init__(self) -> None:
        self.last_poll = self.started_at

    def elapsed(self, now: float) -> float:
        return now - self.started_at


@dataclass(frozen=True)
class AutomationStatus:
    """Snapshot of the sequencer for UI reflection.

    Attributes:
        automation_state: Current state name.
        step_index: Index of the step being run (0-based).
        total_steps: Routine length.
        active: Whether a run is in progress.
    """

    automation_state: str
    step_index: int
    total_steps: int
    active: bool


@dataclass
class AutomationSequencer:
    """Runs a routine against a ``MotionController``, one tick at a time.

    Attributes:
        controller: Target sink for joints and gripper.
        obj: The object the routine picks and places.
        routine: Steps to execute, in order.
        config: Timings, tolerances, home pose and object start position.
        chain: Forward kinematics used to place released objects.
        sink: Status sink for step and event reports.
        clock: Zero-argument callable returning seconds.
    """

    controller: MotionController
    obj: ManipulatedObject
    routine: Routine = field(default_factory=pick_and_place_routine)
    config: ArmSimConfig = field(default_factory=ArmSimConfig)
    chain: KinematicChain = field(default_factory=KinematicChain)
    sink: Optional[StatusSink] = None
    clock: Callable[[], float] = time.monotonic
    active: bool = field(default=False, init=False)
    state: AutomationState = field(default=AutomationState.IDLE, init=False)
    step_index: int = field(default=0, init=False)
    _wait: Optional[_Wait] = field(default=None, init=False, repr=False)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Begin the routine from step 0 after the startup delay.

        The object is put back at its start position and the gripper is
        opened before any motion.

        Returns:
            False if a run was already active (nothing changes).
        """
        if self.active:
            safe_report(self.sink, "Automation already running")
            return False
        self.active = True
        self.step_index = 0
        self.state = AutomationState.STARTING
        self.obj.reset(self.config.object_start_position)
        self.controller.open_gripper()
        safe_report(self.sink, f"=== Starting routine ({len(self.routine)} steps) ===")
        self._begin_wait(_WaitPhase.STARTUP, self.config.startup_delay)
        return True

    def stop(self) -> None:
        """Abandon the run immediately; partial motion is left as is."""
        was_active = self.active
        self.active = False
        self.state = AutomationState.IDLE
        self._wait = None
        if was_active:
            logger.debug("stopped at step %d", self.step_index)
            safe_report(self.sink, "Automation stopped")

    def reset_to_home(self) -> None:
        """Stop, drive to the home pose, open, and put the object back."""
        self.stop()
        self.controller.set_joint_targets(self.config.home_pose)
        self.controller.open_gripper()
        self.obj.reset(self.config.object_start_position)
        safe_report(self.sink, "Arm reset to home position")

    # ------------------------------------------------------------------
    # Step dispatch
    # ------------------------------------------------------------------

    @property
    def _handlers(self) -> Dict[type, Callable[[RoutineStep], None]]:
        return {
            MoveStep: self._begin_move,
            LiftStep: self._begin_lift,
            GraspStep: self._begin_grasp,
            ReleaseStep: self._begin_release,
        }

    def advance_step(self) -> None:
        """Dispatch the current step, or finish if the routine is done."""
        if not self.active:
            return
        total = len(self.routine)
        if self.step_index >= total:
            self._complete()
            return
        step = self.routine[self.step_index]
        safe_report(self.sink, f"[Step {self.step_index + 1}/{total}] {step.description}")
        handler = self._handlers.get(type(step))
        if handler is None:
            safe_report(self.sink, f"Skipping unsupported step {type(step).__name__}")
            self._finish_step()
            return
        handler(step)

    def _begin_move(self, step: MoveStep) -> None:
        self.state = AutomationState.MOVING
        self.controller.set_joint_targets(step.targets)
        self._begin_wait(_WaitPhase.CONVERGE, self.config.move_timeout)

    def _begin_lift(self, step: LiftStep) -> None:
        """Offset the lower-arm target and wait like a move.

        Args:
            step: Lift step with a signed delta in degrees.
        """
        self.state = AutomationState.MOVING
        lower = float(self.controller.target_angles[Joint.LOWER_ARM])
        self.controller.set_joint_target(Joint.LOWER_ARM, lower + step.delta_degrees)
        self._begin_wait(_WaitPhase.CONVERGE, self.config.move_timeout)

    def _begin_grasp(self, step: GraspStep) -> None:
        self.state = AutomationState.GRASPING
        self.controller.close_gripper()
        self._begin_wait(_WaitPhase.GRASP, self.config.grasp_delay)

    def _begin_release(self, step: ReleaseStep) -> None:
        self.state = AutomationState.RELEASING
        self.controller.open_gripper()
        self._begin_wait(_WaitPhase.RELEASE, self.config.release_delay)

    def _complete(self) -> None:
        self.active = False
        self.state = AutomationState.IDLE
        self._wait = None
        safe_report(self.sink, "=== Routine completed ===")

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    def _begin_wait(self, phase: _WaitPhase, duration: float) -> None:
        self._wait = _Wait(phase, self.clock(), duration)
        logger.debug("step %d: waiting %s (%.2fs)", self.step_index, phase.value, duration)

    def _finish_step(self) -> None:
        """Count the current step as done and pause before the next one."""
        self.step_index += 1
        self._begin_wait(_WaitPhase.SETTLE, self.config.settle_delay)

    def update(self) -> None:
        """Poll the pending wait; called once per tick after the controller."""
        if not self.active or self._wait is None:
            return
        now = self.clock()
        wait = self._wait
        if wait.phase is _WaitPhase.CONVERGE:
            self._poll_convergence(wait, now)
        elif wait.elapsed(now) >= wait.duration:
            self._expire(wait)

    def _poll_convergence(self, wait: _Wait, now: float) -> None:
        """Check joint convergence at most once per poll interval.

        Args:
            wait: The pending convergence wait.
            now: Current clock reading.
        """
        if now - wait.last_poll < self.config.poll_interval:
            return
        wait.last_poll = now
        if self.controller.is_at_target(self.config.at_target_tolerance):
            logger.debug("step %d: reached target after %.2fs", self.step_index, wait.elapsed(now))
            self._finish_step()
        elif wait.elapsed(now) > wait.duration:
            logger.warning(
                "Movement timeout at step %d: angles=%s targets=%s",
                self.step_index + 1,
                self.controller.angles.round(1).tolist(),
                self.controller.target_angles.round(1).tolist(),
            )
            safe_report(self.sink, f"Movement timeout at step {self.step_index + 1}; continuing")
            self._finish_step()

    def _expire(self, wait: _Wait) -> None:
        """Act on a fixed-duration wait that has run its course.

        Args:
            wait: The expired wait.
        """
        if wait.phase is _WaitPhase.GRASP:
            self.obj.attach()
            safe_report(self.sink, "Object grasped")
            self._finish_step()
        elif wait.phase is _WaitPhase.RELEASE:
            ee = self.chain.end_effector_position(self.controller.angles)
            self.obj.release_at(ee)
            safe_report(self.sink, "Object released")
            self._finish_step()
        else:
            self._wait = None
            self.advance_step()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return len(self.routine)

    def get_status(self) -> AutomationStatus:
        """Return a snapshot without changing any state."""
        return AutomationStatus(
            automation_state=self.state.value,
            step_index=self.step_index,
            total_steps=len(self.routine),
            active=self.active,
        )
