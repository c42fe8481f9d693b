"""
Shared storage path utilities.

Checkpoint files live directly inside the configured state directory and
are named deterministically from the year and leaderboard identity, so a
restarted process (or an operator) always finds the same record.
"""

from __future__ import annotations

from pathlib import Path


def checkpoint_name(year: int, leaderboard: str) -> str:
    return f"timestamp_{year}_{leaderboard}"


def get_checkpoint_path(state_dir: Path | str, year: int, leaderboard: str) -> Path:
    """
    Return the checkpoint path for (year, leaderboard).

    This function DOES NOT write files.
    """

    return Path(state_dir) / checkpoint_name(year, leaderboard)
