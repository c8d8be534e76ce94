"""Tests for routine definitions and JSON loading."""

from __future__ import annotations

import json

import pytest

from robot_arm_sim.automation.routine import (
    GraspStep,
    LiftStep,
    MoveStep,
    ReleaseStep,
    RoutineError,
    available_routines,
    load_routine,
    pick_and_place_routine,
    routine_from_dicts,
)


def test_default_routine_shape():
    routine = pick_and_place_routine()
    assert [type(s) for s in routine] == [MoveStep, GraspStep, MoveStep, MoveStep, ReleaseStep, MoveStep]
    assert routine[0].targets == (0.0, 75.0, -30.0)
    assert routine[2].targets == (0.0, 45.0, 0.0)
    assert routine[3].targets == (180.0, 75.0, -30.0)
    assert routine[5].targets == (0.0, 35.0, 45.0)


def test_registry_names_resolve():
    assert set(available_routines()) == {"pick_place", "pick_place_lift"}
    assert load_routine("pick_place") == pick_and_place_routine()
    lift = load_routine("pick_place_lift")
    assert len(lift) == 8
    assert any(isinstance(s, LiftStep) for s in lift)


def test_steps_are_immutable():
    step = MoveStep(0, 0, 0)
    with pytest.raises(AttributeError):
        step.base = 10


def test_load_from_json(tmp_path):
    path = tmp_path / "routine.json"
    path.write_text(
        json.dumps(
            [
                {"type": "move", "base": 10, "lower": 20, "upper": 30, "description": "Go"},
                {"type": "GRASP"},
                {"type": "lift", "delta": -15},
                {"type": "release", "description": "Drop"},
            ]
        ),
        encoding="utf-8",
    )
    routine = load_routine(str(path))
    assert routine == (
        MoveStep(10.0, 20.0, 30.0, "Go"),
        GraspStep(),
        LiftStep(-15.0),
        ReleaseStep("Drop"),
    )


@pytest.mark.parametrize(
    "entries,fragment",
    [
        ([], "at least one step"),
        ([{"type": "teleport"}], "unknown step type"),
        ([{"type": "move", "base": 0, "lower": 0}], "missing 'upper'"),
        ([{"type": "lift", "delta": "up"}], "must be a number"),
        ([{"type": "move", "base": True, "lower": 0, "upper": 0}], "must be a number"),
        (["move"], "expected an object"),
    ],
)
def test_malformed_routines_raise(entries, fragment):
    with pytest.raises(RoutineError, match=fragment):
        routine_from_dicts(entries)


def test_unknown_name_raises():
    with pytest.raises(RoutineError, match="Unknown routine"):
        load_routine("does_not_exist")


def test_bad_json_file_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RoutineError, match="Cannot read"):
        load_routine(path)
    path.write_text(json.dumps({"type": "move"}), encoding="utf-8")
    with pytest.raises(RoutineError, match="JSON list"):
        load_routine(path)


def test_routine_error_is_value_error():
    assert issubclass(RoutineError, ValueError)
