"""Shared fixtures for the robot_arm_sim test suite."""

from __future__ import annotations

import pytest

from robot_arm_sim.envs.arm_sim import ArmSimulation
from robot_arm_sim.envs.configs import ArmSimConfig
from robot_arm_sim.robots.grasp import ManipulatedObject
from robot_arm_sim.robots.motion_controller import MotionController
from robot_arm_sim.utils.clock import SimClock
from robot_arm_sim.utils.status import RecordingStatusSink

FRAME = 1.0 / 60.0


@pytest.fixture
def config() -> ArmSimConfig:
    return ArmSimConfig()


@pytest.fixture
def clock() -> SimClock:
    return SimClock()


@pytest.fixture
def sink() -> RecordingStatusSink:
    return RecordingStatusSink()


@pytest.fixture
def controller(config: ArmSimConfig, sink: RecordingStatusSink) -> MotionController:
    return MotionController(config=config, sink=sink)


@pytest.fixture
def obj(config: ArmSimConfig) -> ManipulatedObject:
    return ManipulatedObject()


@pytest.fixture
def sim(config: ArmSimConfig, sink: RecordingStatusSink, clock: SimClock) -> ArmSimulation:
    return ArmSimulation(config=config, sink=sink, clock=clock)
