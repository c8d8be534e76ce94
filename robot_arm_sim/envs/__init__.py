"""
Configuration, simulation host, and Gymnasium environment for the arm.

``ArmSimulation`` (``robot_arm_sim.envs.arm_sim``) hosts the motion core;
``ArmPickPlaceEnv`` (``robot_arm_sim.envs.pick_place``) exposes it through
the Gymnasium API.  Both are imported from their modules directly because
the core components depend on ``envs.configs``.
"""

from robot_arm_sim.envs.configs import ArmPickPlaceEnvConfig, ArmSimConfig, SimEnvConfig
from robot_arm_sim.envs.factory import make_arm_env

__all__ = [
    "ArmSimConfig",
    "SimEnvConfig",
    "ArmPickPlaceEnvConfig",
    "make_arm_env",
]
