"""
Automated motion drivers for the simulated arm.

Provides routine definitions, the tick-polled pick-and-place sequencer,
and the pose recorder with looping playback.
"""
