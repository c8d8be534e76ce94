"""
Pick-and-place environment over the arm motion core (Gymnasium-compatible).

The agent commands absolute targets for the three joints and the gripper;
``ArmSimulation`` smooths toward them, runs grasp detection, and carries
the object.  The task is to move the object from its start position to the
place position and let go of it there.

Classes:
    ArmPickPlaceEnv: Gymnasium environment for the pick-and-place task.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from robot_arm_sim.envs.arm_sim import ArmSimulation
from robot_arm_sim.envs.configs import ArmPickPlaceEnvConfig
from robot_arm_sim.utils.clock import SimClock
from robot_arm_sim.utils.constants import Joint
from robot_arm_sim.utils.helpers import distance


class ArmPickPlaceEnv(gym.Env):
    """Gymnasium environment for the 3-joint arm pick-and-place task.

    Observations hold joint angles, gripper aperture, end-effector
    position, object position, and an attached flag in one flat vector.

    Attributes:
        metadata: Gymnasium metadata (no render modes; rendering is external).
        cfg: ``ArmPickPlaceEnvConfig`` controlling episode length, substeps, etc.
    """

    metadata: Dict[str, Any] = {"render_modes": []}

    def __init__(self, cfg: ArmPickPlaceEnvConfig | None = None) -> None:
        """Initialise the environment.

        Args:
            cfg: Optional configuration; a default ``ArmPickPlaceEnvConfig``
                is used when *None*.
        """
        super().__init__()
        self.cfg = cfg or ArmPickPlaceEnvConfig()
        self._step_count = 0
        self._clock = SimClock()
        self._sim = self._build_sim()
        self._init_spaces()

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    def _build_sim(self) -> ArmSimulation:
        self._clock = SimClock()
        return ArmSimulation(config=self.cfg.sim, clock=self._clock)

    def _init_spaces(self) -> None:
        """Define action and observation Gymnasium spaces."""
        limits = self.cfg.sim.joint_limits
        grip_lo, grip_hi = self.cfg.sim.gripper_limits
        low = [limits[j][0] for j in Joint] + [grip_lo]
        high = [limits[j][1] for j in Joint] + [grip_hi]
        self.action_space = spaces.Box(
            low=np.array(low, dtype=np.float32),
            high=np.array(high, dtype=np.float32),
            dtype=np.float32,
        )
        self.observation_space = spaces.Dict(
            {
                "agent_pos": spaces.Box(
                    low=-np.inf, high=np.inf, shape=(self.cfg.state_dim,), dtype=np.float32
                )
            }
        )

    @property
    def sim(self) -> ArmSimulation:
        return self._sim

    # ------------------------------------------------------------------
    # Gymnasium API
    # ------------------------------------------------------------------

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """Reset the environment and return the initial observation.

        Args:
            seed: Optional RNG seed.
            options: Unused; for Gymnasium compatibility.

        Returns:
            Tuple of (observation dict, info dict).
        """
        super().reset(seed=seed)
        self._step_count = 0
        self._sim = self._build_sim()
        return self._build_observation(), {}

    def _apply_action(self, action: np.ndarray) -> None:
        """Clip the action into the box and write it as targets.

        Args:
            action: ``[base, lower, upper, aperture]``.
        """
        clipped = np.clip(action, self.action_space.low, self.action_space.high)
        ctl = self._sim.controller
        for joint in Joint:
            ctl.set_joint_target(joint, float(clipped[joint]))
        ctl.set_gripper_target(float(clipped[len(Joint)]))

    def _advance(self) -> None:
        """Run ``substeps`` simulation ticks for one env step."""
        frame = 1.0 / (self.cfg.fps * self.cfg.substeps)
        for _ in range(self.cfg.substeps):
            self._clock.advance(frame)
            self._sim.tick()

    def _compute_reward(self) -> Tuple[float, bool]:
        """Compute shaped reward and success flag.

        Returns:
            Tuple of (scalar reward, success boolean).
        """
        obj = self._sim.obj
        dist = distance(obj.position, self.cfg.sim.object_place_position)
        success = (not obj.attached) and dist < self.cfg.sim.grab_radius
        return -dist, success

    def step(
        self, action: np.ndarray
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """Advance the environment by one step.

        Args:
            action: 4-D array of joint targets (3) + gripper target (1).

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._apply_action(np.asarray(action, dtype=np.float64))
        self._advance()
        self._step_count += 1
        reward, success = self._compute_reward()
        truncated = self._step_count >= self.cfg.episode_length
        return (
            self._build_observation(),
            reward,
            success,
            truncated,
            {"is_success": success},
        )

    # ------------------------------------------------------------------
    # Observation builder
    # ------------------------------------------------------------------

    def _build_state_vector(self) -> np.ndarray:
        """Concatenate arm state, end effector, object position, and flag.

        Returns:
            1-D float32 array of length ``state_dim``.
        """
        sim = self._sim
        flag = np.array([1.0 if sim.obj.attached else 0.0])
        return np.concatenate(
            [sim.controller.get_state(), sim.end_effector_position(), sim.obj.position, flag]
        ).astype(np.float32)

    def _build_observation(self) -> Dict[str, np.ndarray]:
        return {"agent_pos": self._build_state_vector()}
