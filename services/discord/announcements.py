"""
Announcements.

Every message the bot posts is worded here, on top of the webhook
dispatcher. Status-channel messages describe the bot itself; notify-channel
messages describe the leaderboard.
"""

from __future__ import annotations

from datetime import datetime

from core.events import Event
from runtime.version import VERSION
from services.discord.webhook import Attachment, WebhookChannel, WebhookDispatcher
from shared.logging.logger import get_logger

log = get_logger("discord.announcements")


class AnnouncementManager:
    def __init__(self, dispatcher: WebhookDispatcher):
        self._dispatcher = dispatcher

    # --------------------------------------------------
    # Status channel
    # --------------------------------------------------

    async def initialising(self):
        await self._status(f"🦀 Festive Bot v{VERSION} is initialising...")

    async def initialised(self, params: str):
        await self._status(
            "🦀 Initialisation successful!",
            Attachment.text("params.txt", params),
        )

    async def heartbeat(self, instant: datetime):
        await self._status(f"🦀 Heartbeat {instant.isoformat()}")

    async def live_year_added(self, year: int):
        await self._status(f"🦀 Adding {year} to live years!")

    async def terminating(self):
        await self._status("🦀 Received termination signal, exiting!")

    async def fatal(self, error: BaseException):
        """
        Report an unrecoverable error. Failures here are logged and
        swallowed so they never mask the original error.
        """
        for text in (
            "⚠ Festive Bot experienced an unrecoverable error, exiting!",
            f"⚠ Error: {error!r}",
        ):
            try:
                await self._status(text)
            except Exception as e:
                log.warning(f"Failed to report fatal error: {e}")

    # --------------------------------------------------
    # Notify channel
    # --------------------------------------------------

    async def completion(self, event: Event):
        await self._notify(event.message())

    async def year_live(self, year: int):
        await self._notify(f"🎄 [{year}] Advent of Code is now live! 🎉")

    async def puzzle_unlocked(self, year: int, day: int):
        await self._notify(f"🎄 [{year}] Puzzle {day:02} is now unlocked! 🔓")

    async def standings(self, year: int, day: int, report: str):
        await self._notify(
            f"🎄 [{year}] Current Standings 🏆",
            Attachment.text(f"standings_{year}_12_{day:02}.txt", report),
        )

    async def sign_off(self, year: int):
        await self._notify(f"🎄 [{year}] Festive Bot signing off. Happy New Year! 👋")

    # --------------------------------------------------

    async def _status(self, content: str, *attachments: Attachment):
        await self._dispatcher.send(content, attachments, WebhookChannel.STATUS)

    async def _notify(self, content: str, *attachments: Attachment):
        await self._dispatcher.send(content, attachments, WebhookChannel.NOTIFY)
