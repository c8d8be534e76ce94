"""
Joint and gripper smoothing controller for the simulated arm.

The controller is the single owner of the arm's current and target
values.  Every other component (operator input, automation, playback)
only writes *targets*; ``tick`` is the one place where current angles and
the gripper aperture change.  Targets are clamped to their limits on the
way in, and current values follow them with first-order exponential
smoothing that snaps onto the target once the remaining delta is tiny.

Classes:
    MotionController: Target-tracking controller with limit enforcement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.utils.constants import JOINT_NAMES, Joint
from robot_arm_sim.utils.helpers import clamp
from robot_arm_sim.utils.status import StatusSink, safe_report

logger = logging.getLogger(__name__)


@dataclass
class MotionController:
    """Smooths three joints and a gripper toward their commanded targets.

    Attributes:
        config: Limits, smoothing factors, and epsilons.
        sink: Status sink notified on every target change.
        angles: Current joint angles in degrees.
        target_angles: Commanded joint angles in degrees (always in limits).
        aperture: Current gripper gap.
        target_aperture: Commanded gripper gap (always in limits).
        speed_multiplier: Scale on both smoothing factors.
    """

    config: ArmSimConfig = field(default_factory=ArmSimConfig)
    sink: Optional[StatusSink] = None
    speed_multiplier: float = 1.0
    angles: np.ndarray = field(init=False)
    target_angles: np.ndarray = field(init=False)
    aperture: float = field(init=False)
    target_aperture: float = field(init=False)

    def __post_init__(self) -> None:
        base, lower, upper, gap = self.config.initial_pose
        self.set_initial_pose(base, lower, upper, gap)
        lo, hi = self.config.speed_range
        self.speed_multiplier = clamp(float(self.speed_multiplier), lo, hi)

    # ------------------------------------------------------------------
    # Limits
    # ------------------------------------------------------------------

    def joint_limits(self, joint: Joint) -> tuple:
        """Return the (min, max) limits of *joint* in degrees."""
        return self.config.joint_limits[Joint(joint)]

    @property
    def gripper_min(self) -> float:
        return self.config.gripper_limits[0]

    @property
    def gripper_max(self) -> float:
        return self.config.gripper_limits[1]

    def _clip_joint(self, joint: Joint, degrees: float) -> float:
        lo, hi = self.joint_limits(joint)
        return clamp(float(degrees), lo, hi)

    # ------------------------------------------------------------------
    # Joint targets
    # ------------------------------------------------------------------

    def set_joint_target(self, joint: Joint, degrees: float) -> float:
        """Clamp *degrees* to the joint's limits and store it as the target.

        Args:
            joint: Joint to command.
            degrees: Requested angle; out-of-range values are clamped.

        Returns:
            The stored (clamped) target.
        """
        joint = Joint(joint)
        value = self._clip_joint(joint, degrees)
        self.target_angles[joint] = value
        safe_report(self.sink, f"{JOINT_NAMES[joint]} target = {value:g}°")
        return value

    def add_joint_target(self, joint: Joint, delta_degrees: float) -> float:
        """Nudge a joint target by ``delta_degrees * motion_scale``.

        Args:
            joint: Joint to command.
            delta_degrees: Signed increment before scaling.

        Returns:
            The stored (clamped) target.
        """
        joint = Joint(joint)
        current = float(self.target_angles[joint])
        return self.set_joint_target(joint, current + delta_degrees * self.config.motion_scale)

    def set_joint_targets(self, degrees: Sequence[float]) -> None:
        """Set all three joint targets in joint order."""
        for joint, value in zip(Joint, degrees):
            self.set_joint_target(joint, value)

    # ------------------------------------------------------------------
    # Gripper targets
    # ------------------------------------------------------------------

    def set_gripper_target(self, aperture: float) -> float:
        """Clamp *aperture* to the gripper limits and store it as the target.

        Args:
            aperture: Requested gap.

        Returns:
            The stored (clamped) target.
        """
        self.target_aperture = clamp(float(aperture), self.gripper_min, self.gripper_max)
        safe_report(self.sink, f"Grip target = {self.target_aperture:.2f}")
        return self.target_aperture

    def add_gripper_target(self, delta: float) -> float:
        return self.set_gripper_target(self.target_aperture + delta)

    def set_gripper_target_percent(self, percent: float) -> float:
        """Map 0-100 % onto the gripper limits and store the result.

        Args:
            percent: Opening percentage; clamped to [0, 100].

        Returns:
            The stored target.
        """
        p = clamp(float(percent), 0.0, 100.0) / 100.0
        return self.set_gripper_target(self.gripper_min + p * (self.gripper_max - self.gripper_min))

    def open_gripper(self) -> None:
        self.target_aperture = self.gripper_max
        safe_report(self.sink, "Gripper opening")

    def close_gripper(self) -> None:
        self.target_aperture = self.gripper_min
        safe_report(self.sink, "Gripper closing")

    def toggle_gripper(self) -> None:
        """Close when currently more than half open, otherwise open."""
        mid = 0.5 * (self.gripper_min + self.gripper_max)
        if self.aperture > mid:
            self.close_gripper()
        else:
            self.open_gripper()

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------

    def set_speed_multiplier(self, value: float) -> float:
        """Clamp and store the speed multiplier.

        Args:
            value: Requested multiplier.

        Returns:
            The stored multiplier.
        """
        lo, hi = self.config.speed_range
        self.speed_multiplier = clamp(float(value), lo, hi)
        safe_report(self.sink, f"Speed multiplier = {self.speed_multiplier:.2f}x")
        return self.speed_multiplier

    def increase_speed(self) -> float:
        return self.set_speed_multiplier(self.speed_multiplier + self.config.speed_step)

    def decrease_speed(self) -> float:
        return self.set_speed_multiplier(self.speed_multiplier - self.config.speed_step)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def _gain(self, smoothing: float, dt_scale: float) -> float:
        return min(1.0, smoothing * self.speed_multiplier * dt_scale)

    def _step_joints(self, dt_scale: float) -> None:
        """Advance every joint toward its target, snapping inside epsilon.

        Args:
            dt_scale: Frame-time scale applied to the smoothing gain.
        """
        gain = self._gain(self.config.joint_smoothing, dt_scale)
        diff = self.target_angles - self.angles
        snap = np.abs(diff) < self.config.joint_snap_epsilon
        self.angles = np.where(snap, self.target_angles, self.angles + diff * gain)

    def _step_gripper(self, dt_scale: float) -> None:
        """Advance the gripper toward its target, snapping inside epsilon.

        Args:
            dt_scale: Frame-time scale applied to the smoothing gain.
        """
        diff = self.target_aperture - self.aperture
        if abs(diff) < self.config.gripper_snap_epsilon:
            self.aperture = self.target_aperture
        else:
            self.aperture += diff * self._gain(self.config.gripper_smoothing, dt_scale)

    def tick(self, dt_scale: float = 1.0) -> None:
        """Advance current joint angles and the gripper by one tick.

        Args:
            dt_scale: Frame-time scale (1.0 for one nominal frame).
        """
        self._step_joints(dt_scale)
        self._step_gripper(dt_scale)

    # ------------------------------------------------------------------
    # Convergence queries
    # ------------------------------------------------------------------

    def is_at_target(self, tolerance: Optional[float] = None) -> bool:
        """Return True when every joint is strictly within *tolerance*.

        Args:
            tolerance: Degrees; defaults to ``config.at_target_tolerance``.

        Returns:
            ``all(|angle - target| < tolerance)``.
        """
        tol = self.config.at_target_tolerance if tolerance is None else tolerance
        return bool(np.all(np.abs(self.angles - self.target_angles) < tol))

    def is_settled(self, joint_tolerance: float, gripper_tolerance: float) -> bool:
        """Return True when joints *and* gripper are within tolerance."""
        return self.is_at_target(joint_tolerance) and abs(self.aperture - self.target_aperture) < gripper_tolerance

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def set_initial_pose(self, base: float, lower: float, upper: float, aperture: float) -> None:
        """Place the arm at a pose instantly, current and target together.

        Args:
            base: Base angle in degrees.
            lower: Lower-arm angle in degrees.
            upper: Upper-arm angle in degrees.
            aperture: Gripper gap.
        """
        values = [self._clip_joint(j, v) for j, v in zip(Joint, (base, lower, upper))]
        self.angles = np.array(values, dtype=np.float64)
        self.target_angles = self.angles.copy()
        self.aperture = clamp(float(aperture), self.gripper_min, self.gripper_max)
        self.target_aperture = self.aperture
        logger.debug("initial pose %s aperture %.3f", values, self.aperture)

    def get_state(self) -> np.ndarray:
        """Return ``[base, lower, upper, aperture]`` as a flat vector.

        Returns:
            1-D NumPy array of shape ``(4,)``.
        """
        return np.concatenate([self.angles, [self.aperture]])
