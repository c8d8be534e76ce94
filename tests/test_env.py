"""Tests for the Gymnasium pick-and-place wrapper and the env factory."""

from __future__ import annotations

import numpy as np
import pytest

from robot_arm_sim.envs import ArmPickPlaceEnvConfig, ArmSimConfig, make_arm_env
from robot_arm_sim.envs.pick_place import ArmPickPlaceEnv
from robot_arm_sim.utils.constants import ACTION, OBS_STATE, Joint


@pytest.fixture
def env():
    env = ArmPickPlaceEnv()
    yield env
    env.close()


def test_reset_observation_layout(env):
    obs, info = env.reset(seed=0)
    state = obs["agent_pos"]
    assert state.shape == (11,)
    assert state.dtype == np.float32
    assert env.observation_space.contains(obs)
    np.testing.assert_allclose(state[:4], [75.0, 35.0, 90.0, 0.55], atol=1e-6)
    np.testing.assert_allclose(state[7:10], [5.0, 0.5, 0.0])
    assert state[10] == 0.0
    assert info == {}


def test_action_space_matches_limits(env):
    np.testing.assert_allclose(env.action_space.low, [-180.0, -150.0, -150.0, 0.15])
    np.testing.assert_allclose(env.action_space.high, [180.0, 150.0, 150.0, 0.75])


def test_step_clips_and_moves_toward_targets(env):
    env.reset()
    obs, reward, terminated, truncated, info = env.step(np.array([1000.0, 35.0, 90.0, 9.0]))
    ctl = env.sim.controller
    assert ctl.target_angles[Joint.BASE] == 180.0
    assert ctl.target_aperture == 0.75
    assert 75.0 < obs["agent_pos"][0] < 180.0
    assert reward < 0.0
    assert not terminated and not truncated
    assert info["is_success"] is False


def test_episode_truncates_at_length():
    env = ArmPickPlaceEnv(ArmPickPlaceEnvConfig(episode_length=2))
    env.reset()
    action = env.action_space.sample()
    assert not env.step(action)[3]
    assert env.step(action)[3]
    env.close()


def test_reset_rebuilds_simulation(env):
    env.reset()
    env.step(np.array([0.0, 0.0, 0.0, 0.15]))
    first = env.sim
    obs, _ = env.reset()
    assert env.sim is not first
    np.testing.assert_allclose(obs["agent_pos"][:3], [75.0, 35.0, 90.0])


def test_config_features():
    cfg = ArmPickPlaceEnvConfig()
    assert cfg.features[ACTION].shape == (4,)
    assert cfg.features["agent_pos"].shape == (11,)
    assert cfg.features_map["agent_pos"] == OBS_STATE
    assert cfg.gym_kwargs == {"max_episode_steps": 400}
    with pytest.raises(ValueError):
        ArmPickPlaceEnvConfig(substeps=0)


def test_make_arm_env_returns_vector_env():
    envs = make_arm_env(n_envs=2)
    assert list(envs) == ["ArmPickPlace-Sim-v0"]
    vec = envs["ArmPickPlace-Sim-v0"][0]
    try:
        obs, _ = vec.reset(seed=0)
        assert obs["agent_pos"].shape == (2, 11)
    finally:
        vec.close()


def test_make_arm_env_wraps_motion_core_config():
    sim_cfg = ArmSimConfig(gripper_limits=(0.1, 0.9))
    vec = make_arm_env(sim_cfg)["ArmPickPlace-Sim-v0"][0]
    try:
        np.testing.assert_allclose(vec.single_action_space.high[3], 0.9, rtol=1e-6)
    finally:
        vec.close()


def test_make_arm_env_rejects_bad_arguments():
    with pytest.raises(ValueError):
        make_arm_env(n_envs=0)
    with pytest.raises(TypeError):
        make_arm_env("pick_place")


def test_envhub_entry_point_defaults_to_pick_place():
    from env import make_env

    envs = make_env(n_envs=1)
    vec = envs["ArmPickPlace-Sim-v0"][0]
    try:
        assert vec.num_envs == 1
    finally:
        vec.close()
