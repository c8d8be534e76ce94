"""
Status sinks: where the motion core sends its human-readable reports.

The core calls ``report(message)`` on every target change, step
transition, grasp/release event, and error condition.  What happens to the
message is up to the host; a sink never returns anything and the core
never lets a misbehaving sink break a tick.

Classes:
    StatusSink: Structural type for any object with ``report(str)``.
    ConsoleStatusSink: Prints messages with a joint-angle suffix.
    LoggingStatusSink: Forwards messages to a ``logging.Logger``.
    RecordingStatusSink: Keeps messages in memory.

Functions:
    safe_report: Deliver a message, containing any sink failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class StatusSink(Protocol):
    """Anything that can receive a status line."""

    def report(self, message: str) -> None: ...


@dataclass
class ConsoleStatusSink:
    """Print status lines to stdout, tagged ``[Motion]``.

    When *angles* is set, the current joint angles are appended to every
    line so the console doubles as a live readout.

    Attributes:
        angles: Optional callable returning (base, lower, upper) in degrees.
    """

    angles: Optional[Callable[[], Sequence[float]]] = None

    def report(self, message: str) -> None:
        line = message
        if self.angles is not None:
            base, lower, upper = self.angles()
            line = f"{message} | Base: {base:.1f}° Lower: {lower:.1f}° Upper: {upper:.1f}°"
        print(f"[Motion] {line}")


@dataclass
class LoggingStatusSink:
    """Forward status lines to a logger at a fixed level."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("robot_arm_sim.status"))
    level: int = logging.INFO

    def report(self, message: str) -> None:
        self.logger.log(self.level, message)


@dataclass
class RecordingStatusSink:
    """Keep every status line in order.

    Attributes:
        messages: Reported lines, oldest first.
    """

    messages: List[str] = field(default_factory=list)

    def report(self, message: str) -> None:
        self.messages.append(message)

    def contains(self, fragment: str) -> bool:
        """Return True if any recorded line contains *fragment*."""
        return any(fragment in m for m in self.messages)

    def clear(self) -> None:
        self.messages.clear()


def safe_report(sink: Optional[StatusSink], message: str) -> None:
    """Send *message* to *sink*, logging instead of raising on failure.

    Args:
        sink: Destination sink, or *None* to only log at DEBUG.
        message: Status line.
    """
    logger.debug("status: %s", message)
    if sink is None:
        return
    try:
        sink.report(message)
    except Exception:
        logger.exception("Status sink %r failed on message %r", sink, message)
