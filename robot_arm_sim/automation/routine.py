"""
Routine definitions for the automation sequencer.

A routine is an immutable tuple of steps built once at startup, either
from the built-in registry or from a JSON file shaped like::

    [
        {"type": "move", "base": 0, "lower": 75, "upper": -30,
         "description": "Moving to pick position"},
        {"type": "grasp", "description": "Grasping object"},
        {"type": "lift", "delta": -30, "description": "Lifting object"},
        {"type": "release", "description": "Releasing object"}
    ]

Classes:
    MoveStep, GraspStep, ReleaseStep, LiftStep: Step variants.
    RoutineError: Raised for malformed routine definitions.

Functions:
    pick_and_place_routine: The default six-step routine.
    pick_and_place_lift_routine: Variant that lifts with relative moves.
    routine_from_dicts: Build a routine from plain dictionaries.
    load_routine: Resolve a registry name or JSON path.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Tuple, Union

from robot_arm_sim.utils.constants import HOME_POSE


class RoutineError(ValueError):
    """A routine definition could not be parsed or resolved."""


@dataclass(frozen=True)
class MoveStep:
    """Move all three joints to absolute targets (degrees)."""

    base: float
    lower: float
    upper: float
    description: str = "Moving"

    @property
    def targets(self) -> Tuple[float, float, float]:
        return (self.base, self.lower, self.upper)


@dataclass(frozen=True)
class GraspStep:
    description: str = "Grasping object"


@dataclass(frozen=True)
class ReleaseStep:
    description: str = "Releasing object"


@dataclass(frozen=True)
class LiftStep:
    """Offset the lower-arm target by a signed delta (degrees)."""

    delta_degrees: float
    description: str = "Lifting object"


RoutineStep = Union[MoveStep, GraspStep, ReleaseStep, LiftStep]
Routine = Tuple[RoutineStep, ...]

PICK_POSITION: Tuple[float, float, float] = (0.0, 75.0, -30.0)
PLACE_POSITION: Tuple[float, float, float] = (180.0, 75.0, -30.0)
LIFT_POSITION: Tuple[float, float, float] = (0.0, 45.0, 0.0)


def pick_and_place_routine() -> Routine:
    """Pick at the front, lift, swing round, place, and return home."""
    return (
        MoveStep(*PICK_POSITION, description="Moving to pick position"),
        GraspStep("Grasping object"),
        MoveStep(*LIFT_POSITION, description="Lifting object"),
        MoveStep(*PLACE_POSITION, description="Moving to place position"),
        ReleaseStep("Releasing object"),
        MoveStep(*HOME_POSE, description="Returning to home"),
    )


def pick_and_place_lift_routine() -> Routine:
    """Same task, lifting and lowering with relative lower-arm moves."""
    return (
        MoveStep(*PICK_POSITION, description="Moving to pick position"),
        GraspStep("Grasping object"),
        LiftStep(-30.0, "Lifting object"),
        MoveStep(PLACE_POSITION[0], PICK_POSITION[1] - 30.0, PLACE_POSITION[2], description="Moving to place position"),
        LiftStep(30.0, "Lowering object"),
        ReleaseStep("Releasing object"),
        LiftStep(-30.0, "Clearing object"),
        MoveStep(*HOME_POSE, description="Returning to home"),
    )


_ROUTINE_REGISTRY: Dict[str, Callable[[], Routine]] = {
    "pick_place": pick_and_place_routine,
    "pick_place_lift": pick_and_place_lift_routine,
}


def available_routines() -> Tuple[str, ...]:
    return tuple(_ROUTINE_REGISTRY)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _require_number(entry: Dict[str, Any], key: str, index: int) -> float:
    """Fetch a numeric field from a step dictionary.

    Args:
        entry: Raw step mapping.
        key: Field name.
        index: Step position, for error messages.

    Returns:
        The value as a float.

    Raises:
        RoutineError: If the field is missing or not a number.
    """
    if key not in entry:
        raise RoutineError(f"Step {index}: missing '{key}'")
    value = entry[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RoutineError(f"Step {index}: '{key}' must be a number, got {value!r}")
    return float(value)


def _parse_step(entry: Any, index: int) -> RoutineStep:
    """Convert one mapping into a step variant.

    Args:
        entry: Raw step mapping with a ``type`` key.
        index: Step position, for error messages.

    Returns:
        The parsed step.

    Raises:
        RoutineError: On an unknown type or a malformed field.
    """
    if not isinstance(entry, dict):
        raise RoutineError(f"Step {index}: expected an object, got {type(entry).__name__}")
    kind = str(entry.get("type", "")).lower()
    desc = entry.get("description")
    if kind == "move":
        nums = [_require_number(entry, k, index) for k in ("base", "lower", "upper")]
        return MoveStep(*nums, description=desc or "Moving")
    if kind == "grasp":
        return GraspStep(desc or "Grasping object")
    if kind == "release":
        return ReleaseStep(desc or "Releasing object")
    if kind == "lift":
        return LiftStep(_require_number(entry, "delta", index), desc or "Lifting object")
    raise RoutineError(f"Step {index}: unknown step type {entry.get('type')!r}")


def routine_from_dicts(entries: Iterable[Any]) -> Routine:
    """Build a routine from a sequence of step mappings.

    Args:
        entries: Iterable of dictionaries (see module docstring).

    Returns:
        An immutable routine.

    Raises:
        RoutineError: If the routine is empty or any step is malformed.
    """
    steps = tuple(_parse_step(e, i) for i, e in enumerate(entries))
    if not steps:
        raise RoutineError("Routine must contain at least one step")
    return steps


def load_routine(source: Union[str, Path]) -> Routine:
    """Resolve a built-in routine name or load one from a JSON file.

    Args:
        source: Registry name (``'pick_place'``, ``'pick_place_lift'``) or a
            path to a JSON file holding a list of steps.

    Returns:
        An immutable routine.

    Raises:
        RoutineError: If the name is unknown or the file is unreadable or
            malformed.
    """
    if isinstance(source, str) and source in _ROUTINE_REGISTRY:
        return _ROUTINE_REGISTRY[source]()
    path = Path(source)
    if not path.is_file():
        raise RoutineError(
            f"Unknown routine '{source}'. Choose from {list(_ROUTINE_REGISTRY)} or pass a JSON file"
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RoutineError(f"Cannot read routine file {path}: {exc}") from exc
    if not isinstance(data, list):
        raise RoutineError(f"Routine file {path} must hold a JSON list of steps")
    return routine_from_dicts(data)
