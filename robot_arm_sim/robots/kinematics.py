"""
Forward kinematics for the 3-joint arm with a wrist-mounted gripper.

The chain is a base yaw followed by two pitch joints.  Each link is a
fixed translation along the local +Y axis; the gripper hangs off the end
of the upper arm through a fixed yaw and a short offset to the jaw centre.
Everything here is a pure function of the joint angles so it can be tested
without any rendering back-end.

Classes:
    KinematicChain: Stateless forward-kinematics model.

Functions:
    end_effector_position: FK with the default geometry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from robot_arm_sim.utils.constants import (
    BASE_HEIGHT,
    GRIPPER_JAW_OFFSET,
    GRIPPER_MOUNT_YAW,
    LOWER_ARM_HEIGHT,
    NUM_JOINTS,
    UPPER_ARM_HEIGHT,
)
from robot_arm_sim.utils.helpers import rotation_y, rotation_z, translation


@dataclass(frozen=True)
class KinematicChain:
    """Serial chain geometry: base yaw, lower-arm pitch, upper-arm pitch.

    Attributes:
        base_height: Offset from the base pivot to the lower-arm joint.
        lower_arm_height: Length of the lower arm.
        upper_arm_height: Length of the upper arm.
        gripper_mount_yaw: Fixed yaw of the gripper mount (degrees).
        gripper_jaw_offset: Distance from the mount to the jaw centre.
    """

    base_height: float = BASE_HEIGHT
    lower_arm_height: float = LOWER_ARM_HEIGHT
    upper_arm_height: float = UPPER_ARM_HEIGHT
    gripper_mount_yaw: float = GRIPPER_MOUNT_YAW
    gripper_jaw_offset: float = GRIPPER_JAW_OFFSET

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def end_effector_position(self, joint_angles: Sequence[float]) -> np.ndarray:
        """Return the world-space jaw centre for the given joint angles.

        Args:
            joint_angles: (base, lower, upper) in degrees.

        Returns:
            NumPy array of shape ``(3,)`` with [x, y, z].
        """
        return self._frames(joint_angles)[-1][:3, 3].copy()

    def joint_frames(self, joint_angles: Sequence[float]) -> List[np.ndarray]:
        """Return the origins of every frame along the chain.

        The list holds the lower-arm pivot, the elbow, the wrist (end of
        the upper arm), and the jaw centre, in that order.

        Args:
            joint_angles: (base, lower, upper) in degrees.

        Returns:
            List of four ``(3,)`` arrays.
        """
        frames = self._frames(joint_angles)
        return [frames[i][:3, 3].copy() for i in (0, 1, 2, 4)]

    # ------------------------------------------------------------------
    # Transform composition
    # ------------------------------------------------------------------

    def _validate(self, joint_angles: Sequence[float]) -> np.ndarray:
        angles = np.asarray(joint_angles, dtype=np.float64)
        if angles.shape != (NUM_JOINTS,):
            raise ValueError(
                f"Expected {NUM_JOINTS} joint angles, got shape {angles.shape}"
            )
        return angles

    def _frames(self, joint_angles: Sequence[float]) -> List[np.ndarray]:
        """Compose the chain and keep each intermediate transform.

        Returns:
            [lower pivot, elbow, wrist, gripper mount, jaw centre] as 4x4
            matrices.
        """
        base, lower, upper = self._validate(joint_angles)
        m = rotation_y(base) @ translation(0.0, self.base_height, 0.0)
        lower_pivot = m
        m = m @ rotation_z(lower) @ translation(0.0, self.lower_arm_height, 0.0)
        elbow = m
        m = m @ rotation_z(upper) @ translation(0.0, self.upper_arm_height, 0.0)
        wrist = m
        mount = m @ rotation_y(self.gripper_mount_yaw)
        jaw = mount @ translation(0.0, self.gripper_jaw_offset, 0.0)
        return [lower_pivot, elbow, wrist, mount, jaw]


_DEFAULT_CHAIN = KinematicChain()


def end_effector_position(joint_angles: Sequence[float]) -> np.ndarray:
    """Forward kinematics with the default arm geometry.

    Args:
        joint_angles: (base, lower, upper) in degrees.

    Returns:
        NumPy array of shape ``(3,)``.
    """
    return _DEFAULT_CHAIN.end_effector_position(joint_angles)
