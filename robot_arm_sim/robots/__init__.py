"""
Kinematics, motion control, and grasp detection for the simulated arm.

Provides the stateless forward-kinematics chain, the joint/gripper
smoothing controller with limit enforcement, and the proximity-based
grasp detector.
"""
