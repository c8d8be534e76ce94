"""
Manually advanced clock for deterministic simulation timing.

The automation sequencer reads time through any zero-argument callable
returning seconds.  ``time.monotonic`` serves interactive hosts; a
``SimClock`` serves tests and headless runs where time must only move when
the host says so.

Classes:
    SimClock: Callable clock advanced explicitly by the host.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SimClock:
    """A callable clock whose time only moves on ``advance``.

    Attributes:
        now: Current simulated time in seconds.
    """

    now: float = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        """Move time forward by *seconds* and return the new time.

        Args:
            seconds: Non-negative time increment.

        Returns:
            The updated time.

        Raises:
            ValueError: If *seconds* is negative.
        """
        if seconds < 0.0:
            raise ValueError(f"Cannot advance clock by negative time {seconds}")
        self.now += seconds
        return self.now
