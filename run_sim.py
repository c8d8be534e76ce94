#!/usr/bin/env python3
"""
Main entry point for the Robot Arm Simulation.

Runs the motion core headless on a simulated clock: the automation
routine end to end, a looping pose playback demo, or random targets
through the Gymnasium environment.  Run directly with ``python run_sim.py``
or import the components for custom hosts.

Usage examples::

    # Run the default pick-and-place routine to completion
    python run_sim.py --mode auto

    # Use the lift variant at double speed
    python run_sim.py --mode auto --routine pick_place_lift --speed 2

    # Load a routine from JSON
    python run_sim.py --mode auto --routine my_routine.json

    # Record three poses and loop them for 20 simulated seconds
    python run_sim.py --mode playback --seconds 20

    # Drive the Gymnasium env with random targets
    python run_sim.py --mode gym
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from robot_arm_sim.envs.arm_sim import ArmSimulation
from robot_arm_sim.envs.configs import ArmPickPlaceEnvConfig, ArmSimConfig
from robot_arm_sim.envs.pick_place import ArmPickPlaceEnv
from robot_arm_sim.utils.clock import SimClock
from robot_arm_sim.utils.constants import Joint
from robot_arm_sim.utils.status import ConsoleStatusSink

# ======================================================================
# Builders
# ======================================================================


def _build_config(args: argparse.Namespace) -> ArmSimConfig:
    """Construct an ``ArmSimConfig`` from parsed CLI arguments.

    Args:
        args: Namespace from ``argparse``.

    Returns:
        An ``ArmSimConfig`` instance.
    """
    return ArmSimConfig(fps=args.fps, routine=args.routine)


def _build_simulation(cfg: ArmSimConfig, args: argparse.Namespace) -> ArmSimulation:
    """Create a simulation on a ``SimClock`` with a console status sink.

    Args:
        cfg: Motion-core configuration.
        args: Parsed CLI arguments.

    Returns:
        A ready ``ArmSimulation``.
    """
    sink = ConsoleStatusSink()
    sim = ArmSimulation(config=cfg, sink=sink, clock=SimClock())
    sink.angles = lambda: sim.controller.angles.tolist()
    sim.set_speed_multiplier(args.speed)
    return sim


# ======================================================================
# Mode runners
# ======================================================================


def _run_auto(cfg: ArmSimConfig, args: argparse.Namespace) -> None:
    """Run the configured routine until it completes or time runs out.

    Args:
        cfg: Motion-core configuration.
        args: Parsed CLI arguments.
    """
    sim = _build_simulation(cfg, args)
    sim.start_automation()
    finished = sim.run_until_idle(max_seconds=args.seconds)
    status = sim.get_status()
    print(f"\nFinished: {finished} | ticks={sim.tick_count} | {status}")
    print(f"Object at {np.round(sim.obj.position, 2).tolist()}")


def _run_playback(cfg: ArmSimConfig, args: argparse.Namespace) -> None:
    """Record three demo poses and loop through them.

    Args:
        cfg: Motion-core configuration.
        args: Parsed CLI arguments.
    """
    sim = _build_simulation(cfg, args)
    demo = [(0.0, 35.0, 45.0, 0.75), (90.0, 60.0, -20.0, 0.15), (-90.0, 20.0, 60.0, 0.45)]
    for base, lower, upper, gap in demo:
        sim.set_joint_target(Joint.BASE, base)
        sim.set_joint_target(Joint.LOWER_ARM, lower)
        sim.set_joint_target(Joint.UPPER_ARM, upper)
        sim.set_gripper_target(gap)
        sim.record_pose()
    sim.toggle_playback()
    sim.run(args.seconds)
    sim.toggle_playback()
    print(f"\nPlayback stopped at pose #{sim.recorder.index + 1} after {sim.tick_count} ticks")


def _run_gym(cfg: ArmSimConfig, args: argparse.Namespace) -> None:
    """Step the Gymnasium env with random targets for one episode.

    Args:
        cfg: Motion-core configuration.
        args: Parsed CLI arguments.
    """
    env = ArmPickPlaceEnv(ArmPickPlaceEnvConfig(sim=cfg, seed=args.seed))
    env.action_space.seed(args.seed)
    obs, _ = env.reset(seed=args.seed)
    total_reward = 0.0
    done = False
    steps = 0
    while not done:
        obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
        total_reward += reward
        steps += 1
        done = terminated or truncated
    print(f"Episode done after {steps} steps (reward={total_reward:.2f}, success={info['is_success']})")


# ======================================================================
# CLI
# ======================================================================


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed ``argparse.Namespace``.
    """
    parser = argparse.ArgumentParser(description="Robot Arm Simulation")
    parser.add_argument("--mode", choices=["auto", "playback", "gym"], default="auto")
    parser.add_argument("--routine", default="pick_place", help="registry name or JSON path")
    parser.add_argument("--speed", type=float, default=1.0)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--seconds", type=float, default=120.0)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING"
    )
    return parser.parse_args()


# ======================================================================
# Dispatch
# ======================================================================


# Mapping from mode name to runner function
_MODE_DISPATCH = {
    "auto": _run_auto,
    "playback": _run_playback,
    "gym": _run_gym,
}


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------
if __name__ == "__main__":
    # Parse CLI arguments
    args = _parse_args()
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    # Build motion-core configuration from the CLI
    try:
        cfg = _build_config(args)
        print(f"Mode: {args.mode} | Routine: {cfg.routine} | fps={cfg.fps} | speed={args.speed}")
        print("-" * 60)
        runner = _MODE_DISPATCH[args.mode]
        runner(cfg, args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(2)
