"""
Vectorised construction of the arm pick-and-place environment.

``make_arm_env`` accepts either a full env config or just the motion-core
``ArmSimConfig`` and returns the ``{suite: {0: VectorEnv}}`` mapping that
LeRobot-style evaluation loops expect.

Functions:
    make_arm_env: Create one or more vectorised pick-and-place envs.
"""

from __future__ import annotations

from functools import partial
from typing import Dict, Union

import gymnasium as gym

from robot_arm_sim.envs.configs import ArmPickPlaceEnvConfig, ArmSimConfig

EnvConfigLike = Union[ArmPickPlaceEnvConfig, ArmSimConfig, None]


def _as_env_config(cfg: EnvConfigLike) -> ArmPickPlaceEnvConfig:
    """Wrap a bare motion-core config in the default env config.

    Args:
        cfg: Env config, motion-core config, or *None* for defaults.

    Returns:
        An ``ArmPickPlaceEnvConfig``.

    Raises:
        TypeError: For any other config type.
    """
    if cfg is None:
        return ArmPickPlaceEnvConfig()
    if isinstance(cfg, ArmSimConfig):
        return ArmPickPlaceEnvConfig(sim=cfg)
    if isinstance(cfg, ArmPickPlaceEnvConfig):
        return cfg
    raise TypeError(f"Expected ArmPickPlaceEnvConfig or ArmSimConfig, got {type(cfg).__name__}")


def make_arm_env(
    cfg: EnvConfigLike = None,
    n_envs: int = 1,
    use_async_envs: bool = False,
) -> Dict[str, Dict[int, gym.vector.VectorEnv]]:
    """Create *n_envs* pick-and-place envs behind one vector env.

    Every copy runs its own ``ArmSimulation`` on its own simulated clock,
    so copies never share motion state.

    Args:
        cfg: Env config, motion-core config, or *None* for defaults.
        n_envs: Number of parallel environments.
        use_async_envs: Use ``AsyncVectorEnv`` (subprocesses) if True.

    Returns:
        ``{task: {0: VectorEnv}}``.

    Raises:
        ValueError: When ``n_envs < 1``.
    """
    if n_envs < 1:
        raise ValueError("`n_envs` must be at least 1")
    env_cfg = _as_env_config(cfg)
    # the env module pulls in the whole motion core, which imports envs.configs
    from robot_arm_sim.envs.pick_place import ArmPickPlaceEnv

    vector_cls = gym.vector.AsyncVectorEnv if use_async_envs else gym.vector.SyncVectorEnv
    vec = vector_cls([partial(ArmPickPlaceEnv, env_cfg) for _ in range(n_envs)])
    return {env_cfg.task: {0: vec}}
