"""
Trigger scheduler.

Wakeups are aligned to multiples of the polling period since the UTC epoch.
Each iteration covers the half-open Window (previous_wake, current_wake]; an
instant "triggers" when it falls inside the Window that just elapsed. Windows
are contiguous and never skipped: a late iteration simply does not sleep.

Time is read and slept through an injected clock so the loop can be driven
deterministically in tests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from core.errors import ConversionError
from core.events import puzzle_unlock
from shared.logging.logger import get_logger

log = get_logger("core.scheduler")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# first Advent of Code event
FIRST_YEAR = 2015


def truncate(instant: datetime, period: timedelta) -> datetime:
    """Round `instant` down to a multiple of `period` since the UTC epoch."""

    if period <= timedelta(0):
        raise ConversionError(f"Cannot truncate to non-positive period {period}")
    try:
        return EPOCH + ((instant - EPOCH) // period) * period
    except OverflowError as e:
        raise ConversionError(f"Cannot truncate {instant} to {period}: {e}") from e


def initial_live_years(now: datetime) -> List[int]:
    """Years from the first event up to now, including now's year once it has unlocked."""

    live = list(range(FIRST_YEAR, now.year))
    if puzzle_unlock(now.year, 1) <= now:
        live.append(now.year)
    return live


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(frozen=True)
class Window:
    previous: datetime
    current: datetime

    def triggered(self, instant: datetime) -> bool:
        return self.previous < instant <= self.current


class TriggerScheduler:
    def __init__(self, period: timedelta, clock=None):
        if period <= timedelta(0):
            raise ConversionError(f"Polling period must be positive, got {period}")
        self.period = period
        self.clock = clock or SystemClock()
        self._previous: Optional[datetime] = None

    @property
    def previous_wake(self) -> Optional[datetime]:
        return self._previous

    def align(self) -> datetime:
        """Seed previous_wake by truncating the clock's now to the period."""

        self._previous = truncate(self.clock.now(), self.period)
        log.debug(f"Scheduler aligned to {self._previous.isoformat()}")
        return self._previous

    def next_window(self) -> Window:
        if self._previous is None:
            self.align()
        return Window(previous=self._previous, current=self._previous + self.period)

    async def wait(self, window: Window) -> bool:
        """
        Suspend until the window's end. Returns False without sleeping when
        the end has already passed (a previous iteration overran).
        """
        remaining = (window.current - self.clock.now()).total_seconds()
        if remaining < 0:
            log.info("Not sleeping, a previous iteration overran")
            return False

        log.info(f"Sleeping until {window.current.isoformat()}")
        await self.clock.sleep(remaining)
        log.info(f"Woke at {self.clock.now().isoformat()}")
        return True

    def advance(self, window: Window) -> None:
        """Roll over to the next window regardless of how this one went."""

        self._previous = window.current

    def heartbeat_instant(self, window: Window, heartbeat: timedelta) -> datetime:
        return truncate(window.current, heartbeat)

    def standings_instant(self, window: Window, standings: timedelta) -> datetime:
        return truncate(window.current, standings)
