"""
Checkpoint store.

One record per (year, leaderboard): the RFC 3339 timestamp of the most
recently delivered event. Records are written after every delivery, never
batched, so a crash between a send and its write repeats at most that one
notification on restart.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List

from core.errors import FilesystemError
from core.events import Event
from shared.logging.logger import get_logger
from shared.storage.paths import get_checkpoint_path

log = get_logger("shared.checkpoints")

DEFAULT_HORIZON = timedelta(days=28)


def parse_rfc3339(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class CheckpointStore:
    def __init__(self, state_dir: Path | str, leaderboard: str):
        self._state_dir = Path(state_dir)
        self._leaderboard = leaderboard

    def path(self, year: int) -> Path:
        return get_checkpoint_path(self._state_dir, year, self._leaderboard)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read(self, year: int, window_end: datetime) -> datetime:
        """
        Return the last delivered timestamp for `year`, or `window_end`
        minus 28 days when no valid record exists.
        """
        path = self.path(year)
        log.debug(f"Reading checkpoint {path}")

        try:
            checkpoint = parse_rfc3339(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            log.info(f"No checkpoint for {year}, defaulting to 28 days before {window_end}")
            return window_end - DEFAULT_HORIZON
        except (OSError, ValueError) as e:
            log.warning(f"Checkpoint {path} unreadable ({e}), defaulting to 28 days before {window_end}")
            return window_end - DEFAULT_HORIZON

        log.debug(f"Obtained checkpoint {checkpoint.isoformat()} for {year}")
        return checkpoint

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def advance(self, year: int, instant: datetime) -> None:
        """Durably overwrite the record for `year` with `instant`."""

        path = self.path(year)
        serialized = instant.astimezone(timezone.utc).isoformat()
        log.debug(f"Updating checkpoint {path} to {serialized}")

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=path.parent, delete=False, encoding="utf-8"
            ) as tmp:
                tmp.write(serialized)
                tmp.flush()
                os.fsync(tmp.fileno())
                temp_path = Path(tmp.name)

            temp_path.replace(path)
        except OSError as e:
            raise FilesystemError(f"Failed to persist checkpoint {path}: {e}") from e

    # ------------------------------------------------------------------
    # Replay selection
    # ------------------------------------------------------------------

    @staticmethod
    def pending(
        events: Iterable[Event],
        checkpoint: datetime,
        window_end: datetime,
    ) -> List[Event]:
        """
        Events strictly after the checkpoint and strictly before the end of
        the window, in chronological order. Events at or after the window
        end belong to the next window.
        """
        return [
            e for e in events
            if checkpoint < e.timestamp < window_end
        ]
