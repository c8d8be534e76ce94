"""
Small stateless helpers used across the robot_arm_sim package.

Provides numerical clamping and the 4x4 homogeneous transform builders
used by the kinematic chain.
"""

from __future__ import annotations

import math

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Return *value* clamped to the closed interval [*lo*, *hi*].

    Args:
        value: The scalar to clamp.
        lo: Lower bound (inclusive).
        hi: Upper bound (inclusive).

    Returns:
        The clamped scalar.
    """
    return max(lo, min(hi, value))


def translation(x: float, y: float, z: float) -> np.ndarray:
    """Return a 4x4 homogeneous translation matrix.

    Args:
        x: Offset along X.
        y: Offset along Y.
        z: Offset along Z.

    Returns:
        (4, 4) float64 array.
    """
    m = np.eye(4)
    m[:3, 3] = (x, y, z)
    return m


def rotation_y(degrees: float) -> np.ndarray:
    """Return a 4x4 rotation about +Y (right-handed).

    Args:
        degrees: Rotation angle in degrees.

    Returns:
        (4, 4) float64 array.
    """
    c = math.cos(math.radians(degrees))
    s = math.sin(math.radians(degrees))
    m = np.eye(4)
    m[0, 0], m[0, 2] = c, s
    m[2, 0], m[2, 2] = -s, c
    return m


def rotation_z(degrees: float) -> np.ndarray:
    """Return a 4x4 rotation about +Z (right-handed).

    Args:
        degrees: Rotation angle in degrees.

    Returns:
        (4, 4) float64 array.
    """
    c = math.cos(math.radians(degrees))
    s = math.sin(math.radians(degrees))
    m = np.eye(4)
    m[0, 0], m[0, 1] = c, -s
    m[1, 0], m[1, 1] = s, c
    return m


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two 3-D points."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))
