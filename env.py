"""
EnvHub entry point for loading robot_arm_sim via the HF Hub.

LeRobot's hub loader imports this file and calls ``make_env`` with its own
keyword names, so the signature below is fixed::

    from lerobot.envs.factory import make_env
    envs = make_env("your-user/robot-arm-sim", trust_remote_code=True)
"""

from __future__ import annotations

from typing import Dict

import gymnasium as gym

from robot_arm_sim.envs.factory import EnvConfigLike, make_arm_env


def make_env(
    n_envs: int = 1,
    use_async_envs: bool = False,
    cfg: EnvConfigLike = None,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Build the arm pick-and-place suite in the hub's calling convention."""
    return make_arm_env(cfg, n_envs=n_envs, use_async_envs=use_async_envs)
