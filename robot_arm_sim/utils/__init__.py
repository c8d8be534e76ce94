"""
Shared constants, helper utilities, and the simulation clock.

Centralizes arm geometry, default limits and timings, transform builders,
and the deterministic ``SimClock`` used across the robot_arm_sim package.
"""
