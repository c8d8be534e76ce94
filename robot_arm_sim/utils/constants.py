"""
Shared constants and type aliases for the robot_arm_sim package.

Collects the arm geometry, joint identifiers, default limits, and the
canonical motion/grasp/timing values so that every component (and every
deployment config) starts from one consistent set of numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Observation / action key names (match upstream LeRobot constants)
# ---------------------------------------------------------------------------
ACTION: str = "action"
OBS_STATE: str = "observation.state"

# ---------------------------------------------------------------------------
# Arm geometry (world units)
# ---------------------------------------------------------------------------
BASE_HEIGHT: float = 2.0
LOWER_ARM_HEIGHT: float = 5.0
UPPER_ARM_HEIGHT: float = 5.0
GRIPPER_MOUNT_YAW: float = -90.0
GRIPPER_JAW_OFFSET: float = 0.2


class Joint(IntEnum):
    """Revolute joints of the serial chain, addressed by index."""

    BASE = 0
    LOWER_ARM = 1
    UPPER_ARM = 2


NUM_JOINTS: int = len(Joint)

JOINT_NAMES: Dict[Joint, str] = {
    Joint.BASE: "Base",
    Joint.LOWER_ARM: "Lower Arm",
    Joint.UPPER_ARM: "Upper Arm",
}

# ---------------------------------------------------------------------------
# Limits (degrees for joints, world units for the gripper gap)
# ---------------------------------------------------------------------------
DEFAULT_JOINT_LIMITS: Dict[Joint, Tuple[float, float]] = {
    Joint.BASE: (-180.0, 180.0),
    Joint.LOWER_ARM: (-150.0, 150.0),
    Joint.UPPER_ARM: (-150.0, 150.0),
}
GRIPPER_MIN: float = 0.15
GRIPPER_MAX: float = 0.75

# ---------------------------------------------------------------------------
# Smoothing
# ---------------------------------------------------------------------------
JOINT_SMOOTHING: float = 0.15
GRIPPER_SMOOTHING: float = 0.12
JOINT_SNAP_EPSILON: float = 0.05
GRIPPER_SNAP_EPSILON: float = 0.005
SPEED_MIN: float = 0.25
SPEED_MAX: float = 3.0
SPEED_STEP: float = 0.25
MOTION_SCALE: float = 0.5
AT_TARGET_TOLERANCE: float = 1.0

# ---------------------------------------------------------------------------
# Poses (degrees, gripper gap)
# ---------------------------------------------------------------------------
HOME_POSE: Tuple[float, float, float] = (0.0, 35.0, 45.0)
INITIAL_POSE: Tuple[float, float, float, float] = (75.0, 35.0, 90.0, 0.55)

# ---------------------------------------------------------------------------
# Manipulated object (world units)
# ---------------------------------------------------------------------------
OBJECT_START_POSITION: Tuple[float, float, float] = (5.0, 0.5, 0.0)
OBJECT_PLACE_POSITION: Tuple[float, float, float] = (-5.0, 0.5, 0.0)
OBJECT_SIZE: Tuple[float, float, float] = (0.5, 0.5, 0.5)

# ---------------------------------------------------------------------------
# Grasp detection
# ---------------------------------------------------------------------------
GRAB_RADIUS: float = 0.6
GRIP_CLOSE_THRESHOLD: float = 0.30
GRIP_OPEN_THRESHOLD: float = 0.60
OBJECT_SYNC_EPSILON: float = 1e-4

# ---------------------------------------------------------------------------
# Automation timing (seconds)
# ---------------------------------------------------------------------------
STARTUP_DELAY: float = 1.0
SETTLE_DELAY: float = 0.5
GRASP_DELAY: float = 1.0
RELEASE_DELAY: float = 1.0
POLL_INTERVAL: float = 0.05
MOVE_TIMEOUT: float = 10.0

# ---------------------------------------------------------------------------
# Pose playback
# ---------------------------------------------------------------------------
PLAYBACK_JOINT_TOLERANCE: float = 0.1
PLAYBACK_GRIPPER_TOLERANCE: float = 0.01
PLAYBACK_HOLD_FRAMES: int = 10

DEFAULT_FPS: int = 60


class FeatureType(Enum):
    """Enumeration of observation feature types, matching LeRobot upstream."""

    ACTION = "action"
    STATE = "state"


@dataclass(frozen=True)
class PolicyFeature:
    """Describes a single feature consumed or produced by a policy.

    Attributes:
        type: The semantic category of the feature.
        shape: Tuple of integers describing the tensor shape (excluding batch).
    """

    type: FeatureType
    shape: Tuple[int, ...]
