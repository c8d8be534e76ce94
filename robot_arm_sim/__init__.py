"""
Robot Arm Simulation.

Motion-control core of a simulated three-joint manipulator with a
one-DOF gripper: forward kinematics, target smoothing with joint limits,
proximity grasp detection, a pick-and-place automation sequencer, and pose
recording with looping playback.  A Gymnasium wrapper lets policies drive
the same core.  Rendering and input handling are left to the host.

Modules:
    robots: Kinematic chain, motion controller, and grasp detector.
    automation: Routines, the automation sequencer, and pose playback.
    envs: Configuration, the ``ArmSimulation`` host, and the Gymnasium env.
    utils: Shared constants, helpers, status sinks, and the sim clock.
"""

__version__ = "0.1.0"
