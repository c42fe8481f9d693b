"""
The notify cycle.

One strictly sequential pass per Window: heartbeat, live-year extension,
then for each polled year fetch, replay new completions (checkpointing after
each one) and, in December, the puzzle-unlock, standings and sign-off
announcements. Any error aborts the pass and propagates to core.app.
"""

from __future__ import annotations

from typing import List, Optional

from core.events import LAST_PUZZLE_DAY, Event, puzzle_unlock
from core.scheduler import TriggerScheduler, Window, initial_live_years
from core.standings import standings_report
from services.adventofcode.api.leaderboard import LeaderboardAPI
from services.discord.announcements import AnnouncementManager
from shared.config.settings import FestiveConfig
from shared.logging.logger import get_logger
from shared.storage.checkpoints import CheckpointStore

log = get_logger("core.cycle")


class NotifyCycle:
    def __init__(
        self,
        *,
        config: FestiveConfig,
        api: LeaderboardAPI,
        announcements: AnnouncementManager,
        checkpoints: CheckpointStore,
        scheduler: TriggerScheduler,
    ):
        self.config = config
        self.api = api
        self.announcements = announcements
        self.checkpoints = checkpoints
        self.scheduler = scheduler

        # append-only, ascending
        self.live_years: List[int] = []

    # ------------------------------------------------------------

    async def startup(self):
        log.info("Initialising")
        await self.announcements.initialising()

        log.info("Determining currently-live years")
        self.live_years = initial_live_years(self.scheduler.clock.now())

        # truncated so the first window covers everything since the last boundary
        self.scheduler.align()

        log.info(f"Initialisation successful, live years: {self.live_years}")
        await self.announcements.initialised(self.config.describe(self.live_years))

    def polled_years(self, year: int) -> List[int]:
        return [y for y in self.live_years if self.config.all_years or y == year]

    # ------------------------------------------------------------

    async def run_pass(self, window: Window):
        year = window.current.year

        if self.config.heartbeat is not None:
            heartbeat = self.scheduler.heartbeat_instant(window, self.config.heartbeat)
            if window.triggered(heartbeat):
                await self.announcements.heartbeat(heartbeat)

        if window.triggered(puzzle_unlock(year, 1)) and year not in self.live_years:
            log.info(f"Adding {year} to live years")
            self.live_years.append(year)
            await self.announcements.live_year_added(year)

        for request_year in self.polled_years(year):
            events = await self.api.events(request_year)
            await self._replay(request_year, events, window)

            if request_year == year and window.current.month == 12:
                await self._december(year, events, window)

    async def _replay(self, year: int, events: List[Event], window: Window):
        checkpoint = self.checkpoints.read(year, window.current)
        pending = self.checkpoints.pending(events, checkpoint, window.current)
        log.info(f"{len(pending)} new events for {year} since {checkpoint.isoformat()}")

        for event in pending:
            await self.announcements.completion(event)
            self.checkpoints.advance(year, event.timestamp)

    async def _december(self, year: int, events: List[Event], window: Window):
        day = window.current.day

        if day <= LAST_PUZZLE_DAY and window.triggered(puzzle_unlock(year, day)):
            if day == 1:
                await self.announcements.year_live(year)
            await self.announcements.puzzle_unlocked(year, day)

        standings = self.scheduler.standings_instant(window, self.config.standings)
        if window.triggered(standings):
            await self.announcements.standings(year, day, standings_report(events))

        if (window.current + self.scheduler.period).year != year:
            await self.announcements.sign_off(year)

    # ------------------------------------------------------------

    async def iterate(self) -> Window:
        window = self.scheduler.next_window()
        await self.scheduler.wait(window)
        await self.run_pass(window)
        self.scheduler.advance(window)
        log.info(f"Completed iteration at {self.scheduler.clock.now().isoformat()}")
        return window

    async def run(self, iterations: Optional[int] = None):
        """Start up, then iterate forever (or `iterations` times)."""

        await self.startup()
        completed = 0
        while iterations is None or completed < iterations:
            await self.iterate()
            completed += 1
