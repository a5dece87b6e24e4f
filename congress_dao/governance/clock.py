"""
Logical clocks.

The governance core never reads the wall clock itself. Every state-changing
call asks a Clock for the current logical time in integer seconds. Clocks
must be monotonic: time may stand still but never move backwards.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of the current logical time."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time in whole seconds since the epoch."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        # Clamp so an NTP step backwards cannot rewind logical time
        self._last = max(self._last, int(time.time()))
        return self._last


class ManualClock:
    """
    A clock that only moves when told to.

    Used by tests and simulations to fast-forward through terms, e.g.
    ``clock.advance(3 * SECONDS_PER_YEAR)``.
    """

    def __init__(self, start: int = 1_700_000_000) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Move time forward by ``seconds`` and return the new time."""
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to ``timestamp``, which must not precede the current time."""
        if timestamp < self._now:
            raise ValueError(
                f"ManualClock cannot move backwards: {timestamp} < {self._now}"
            )
        self._now = timestamp
