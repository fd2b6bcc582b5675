"""
Time sources for the game loop.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Anything that tells the current time in milliseconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """
    Milliseconds from the interpreter's monotonic clock.
    """

    def now(self) -> float:
        return time.monotonic() * 1000.0
