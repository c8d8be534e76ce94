"""
Dataclass configurations for the arm simulation and its Gymnasium wrapper.

Every tunable number of the motion core lives in ``ArmSimConfig`` so a
deployment changes behaviour by supplying one config value rather than by
editing constants scattered across modules.  The Gymnasium configs follow
the upstream LeRobot ``EnvConfig`` pattern so policies/tools built for
LeRobot can consume them without modification.

Classes:
    ArmSimConfig: Tunables for the motion core and its host.
    SimEnvConfig: Abstract base configuration shared by all sim envs.
    ArmPickPlaceEnvConfig: Configuration for the pick-and-place env.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Dict, Tuple

from robot_arm_sim.utils.constants import (
    ACTION,
    AT_TARGET_TOLERANCE,
    DEFAULT_FPS,
    DEFAULT_JOINT_LIMITS,
    FeatureType,
    GRAB_RADIUS,
    GRASP_DELAY,
    GRIP_CLOSE_THRESHOLD,
    GRIP_OPEN_THRESHOLD,
    GRIPPER_MAX,
    GRIPPER_MIN,
    GRIPPER_SMOOTHING,
    GRIPPER_SNAP_EPSILON,
    HOME_POSE,
    INITIAL_POSE,
    JOINT_SMOOTHING,
    JOINT_SNAP_EPSILON,
    Joint,
    MOTION_SCALE,
    MOVE_TIMEOUT,
    NUM_JOINTS,
    OBJECT_PLACE_POSITION,
    OBJECT_SIZE,
    OBJECT_START_POSITION,
    OBJECT_SYNC_EPSILON,
    OBS_STATE,
    PLAYBACK_GRIPPER_TOLERANCE,
    PLAYBACK_HOLD_FRAMES,
    PLAYBACK_JOINT_TOLERANCE,
    POLL_INTERVAL,
    PolicyFeature,
    RELEASE_DELAY,
    SETTLE_DELAY,
    SPEED_MAX,
    SPEED_MIN,
    SPEED_STEP,
    STARTUP_DELAY,
)


@dataclass
class ArmSimConfig:
    """Tunables for the motion core, grasp detection, automation, and playback.

    Attributes:
        joint_limits: Per-joint (min, max) in degrees.
        gripper_limits: (fully closed, fully open) gap.
        joint_smoothing: Per-tick convergence factor for joints.
        gripper_smoothing: Per-tick convergence factor for the gripper.
        joint_snap_epsilon: Remaining joint delta (deg) that snaps to target.
        gripper_snap_epsilon: Remaining gripper delta that snaps to target.
        speed_range: Allowed (min, max) speed multiplier.
        speed_step: Increment used by increase/decrease speed.
        motion_scale: Multiplier applied to incremental joint nudges.
        at_target_tolerance: Joint tolerance (deg) for move completion.
        startup_delay: Seconds between automation start and the first step.
        settle_delay: Seconds between a completed step and the next.
        grasp_delay: Seconds the gripper is given to close on a grasp.
        release_delay: Seconds the gripper is given to open on a release.
        poll_interval: Seconds between convergence checks.
        move_timeout: Seconds before a move/lift step is force-advanced.
        grab_radius: Attach distance between jaw centre and object.
        close_threshold: Aperture below which the gripper counts as closed.
        open_threshold: Aperture above which the gripper counts as open.
        object_sync_epsilon: Minimum delta before an attached object moves.
        object_start_position: Canonical object position on start/reset.
        object_place_position: Where the routine is meant to drop the object.
        object_size: Object bounding box (x, y, z).
        home_pose: Joint targets used by reset-to-home.
        initial_pose: (base, lower, upper, aperture) at construction.
        playback_joint_tolerance: Joint tolerance (deg) for pose playback.
        playback_gripper_tolerance: Gripper tolerance for pose playback.
        playback_hold_frames: Ticks to hold a reached pose before the next.
        require_record_mode: Refuse to record poses unless record mode is on.
        fps: Nominal tick rate used by headless runs.
        routine: Registry name or JSON path of the automation routine.
    """

    joint_limits: Dict[Joint, Tuple[float, float]] = field(
        default_factory=lambda: dict(DEFAULT_JOINT_LIMITS)
    )
    gripper_limits: Tuple[float, float] = (GRIPPER_MIN, GRIPPER_MAX)
    joint_smoothing: float = JOINT_SMOOTHING
    gripper_smoothing: float = GRIPPER_SMOOTHING
    joint_snap_epsilon: float = JOINT_SNAP_EPSILON
    gripper_snap_epsilon: float = GRIPPER_SNAP_EPSILON
    speed_range: Tuple[float, float] = (SPEED_MIN, SPEED_MAX)
    speed_step: float = SPEED_STEP
    motion_scale: float = MOTION_SCALE
    at_target_tolerance: float = AT_TARGET_TOLERANCE
    startup_delay: float = STARTUP_DELAY
    settle_delay: float = SETTLE_DELAY
    grasp_delay: float = GRASP_DELAY
    release_delay: float = RELEASE_DELAY
    poll_interval: float = POLL_INTERVAL
    move_timeout: float = MOVE_TIMEOUT
    grab_radius: float = GRAB_RADIUS
    close_threshold: float = GRIP_CLOSE_THRESHOLD
    open_threshold: float = GRIP_OPEN_THRESHOLD
    object_sync_epsilon: float = OBJECT_SYNC_EPSILON
    object_start_position: Tuple[float, float, float] = OBJECT_START_POSITION
    object_place_position: Tuple[float, float, float] = OBJECT_PLACE_POSITION
    object_size: Tuple[float, float, float] = OBJECT_SIZE
    home_pose: Tuple[float, float, float] = HOME_POSE
    initial_pose: Tuple[float, float, float, float] = INITIAL_POSE
    playback_joint_tolerance: float = PLAYBACK_JOINT_TOLERANCE
    playback_gripper_tolerance: float = PLAYBACK_GRIPPER_TOLERANCE
    playback_hold_frames: int = PLAYBACK_HOLD_FRAMES
    require_record_mode: bool = False
    fps: int = DEFAULT_FPS
    routine: str = "pick_place"

    def __post_init__(self) -> None:
        """Normalise joint-limit keys and validate every range."""
        self.joint_limits = {Joint(k): (float(lo), float(hi)) for k, (lo, hi) in self.joint_limits.items()}
        self._validate_limits()
        self._validate_motion()
        self._validate_grasp()
        self._validate_timing()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _validate_limits(self) -> None:
        """Raise if any joint or gripper limit pair is missing or inverted.

        Raises:
            ValueError: On a missing joint or ``min > max``.
        """
        if len(self.joint_limits) != NUM_JOINTS:
            raise ValueError(f"joint_limits must cover all {NUM_JOINTS} joints")
        for joint, (lo, hi) in self.joint_limits.items():
            if lo > hi:
                raise ValueError(f"Inverted limits for {joint.name}: ({lo}, {hi})")
        lo, hi = self.gripper_limits
        if not 0.0 <= lo <= hi:
            raise ValueError(f"Invalid gripper_limits {self.gripper_limits}")

    def _validate_motion(self) -> None:
        """Raise if smoothing factors or the speed range are unusable.

        Raises:
            ValueError: On non-positive factors or an inverted speed range.
        """
        if self.joint_smoothing <= 0.0 or self.gripper_smoothing <= 0.0:
            raise ValueError("Smoothing factors must be positive")
        lo, hi = self.speed_range
        if not 0.0 < lo <= hi:
            raise ValueError(f"Invalid speed_range {self.speed_range}")
        if self.at_target_tolerance <= 0.0:
            raise ValueError("at_target_tolerance must be positive")

    def _validate_grasp(self) -> None:
        """Raise if the grasp thresholds are unreachable or the radius is non-positive.

        Both thresholds must lie strictly inside ``gripper_limits`` so a
        full close attaches and a full open detaches.

        Raises:
            ValueError: Unless ``gripper_min < close_threshold <
                open_threshold < gripper_max``, or when ``grab_radius <= 0``.
        """
        grip_lo, grip_hi = self.gripper_limits
        if not grip_lo < self.close_threshold < self.open_threshold < grip_hi:
            raise ValueError(
                f"Grasp thresholds ({self.close_threshold}, {self.open_threshold}) "
                f"must lie strictly inside gripper_limits {self.gripper_limits} "
                "with close_threshold below open_threshold"
            )
        if self.grab_radius <= 0.0:
            raise ValueError("grab_radius must be positive")

    def _validate_timing(self) -> None:
        """Raise on negative delays or a non-positive timeout/poll interval.

        Raises:
            ValueError: On any invalid timing value.
        """
        delays = (self.startup_delay, self.settle_delay, self.grasp_delay, self.release_delay)
        if any(d < 0.0 for d in delays):
            raise ValueError("Delays must be non-negative")
        if self.poll_interval <= 0.0 or self.move_timeout <= 0.0:
            raise ValueError("poll_interval and move_timeout must be positive")
        if self.playback_hold_frames < 0:
            raise ValueError("playback_hold_frames must be non-negative")
        if self.fps <= 0:
            raise ValueError("fps must be positive")


@dataclass
class SimEnvConfig(abc.ABC):
    """Base configuration shared by all robot_arm_sim environments.

    Attributes:
        task: Human-readable task identifier.
        fps: Simulation frames per second.
        episode_length: Maximum steps per episode.
        seed: Random seed for reproducibility.
        features: Mapping of feature key to ``PolicyFeature`` metadata.
        features_map: Mapping of raw env keys to LeRobot-standard keys.
    """

    task: str = "base"
    fps: int = DEFAULT_FPS
    episode_length: int = 300
    seed: int = 42
    features: Dict[str, PolicyFeature] = field(default_factory=dict)
    features_map: Dict[str, str] = field(default_factory=dict)

    @property
    def env_type(self) -> str:
        """Return a short string identifying the environment type.

        Returns:
            The ``task`` field value.
        """
        return self.task

    @property
    @abc.abstractmethod
    def gym_kwargs(self) -> dict:
        """Return keyword arguments forwarded to ``gymnasium.make()``.

        Returns:
            A dictionary of environment-specific kwargs.
        """
        raise NotImplementedError


@dataclass
class ArmPickPlaceEnvConfig(SimEnvConfig):
    """Configuration for the pick-and-place env built on ``ArmSimulation``.

    The agent commands absolute joint and gripper targets; the motion core
    smooths toward them for ``substeps`` ticks per env step.

    Attributes:
        task: Fixed to ``'ArmPickPlace-Sim-v0'``.
        episode_length: 400 steps per episode.
        action_dim: Three joint targets plus the gripper target.
        state_dim: Angles (3), aperture, end effector (3), object (3), attached.
        substeps: Simulation ticks per env step.
        sim: Motion-core configuration.
    """

    task: str = "ArmPickPlace-Sim-v0"
    fps: int = 20
    episode_length: int = 400
    action_dim: int = 4
    state_dim: int = 11
    substeps: int = 3
    sim: ArmSimConfig = field(default_factory=ArmSimConfig)

    def __post_init__(self) -> None:
        """Populate ``features`` and ``features_map``."""
        self.features[ACTION] = PolicyFeature(
            type=FeatureType.ACTION, shape=(self.action_dim,)
        )
        self.features["agent_pos"] = PolicyFeature(
            type=FeatureType.STATE, shape=(self.state_dim,)
        )
        self.features_map[ACTION] = ACTION
        self.features_map["agent_pos"] = OBS_STATE
        if self.substeps < 1:
            raise ValueError("substeps must be at least 1")

    @property
    def gym_kwargs(self) -> dict:
        """Return pick-and-place Gymnasium kwargs.

        Returns:
            Dictionary with ``max_episode_steps``.
        """
        return {"max_episode_steps": self.episode_length}
