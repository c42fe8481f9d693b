"""
Festive Bot configuration.

The configuration is assembled exactly once at startup from the process
environment (optionally seeded from a .env file by core.app) and the
command-line arguments, then passed by reference into the core. Nothing
below core.app reads the environment directly.

Environment:
- FESTIVE_BOT_LEADERBOARD  (required) private leaderboard id
- FESTIVE_BOT_SESSION      (required) session cookie value
- FESTIVE_BOT_NOTIFY       (optional) webhook url for announcements
- FESTIVE_BOT_STATUS       (optional) webhook url for lifecycle/heartbeat
- FESTIVE_BOT_STATE_DIR    (optional) checkpoint directory, default cwd

The webhook variable names live in services.discord.webhook.CHANNEL_ENV.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from core.errors import ConfigMissingError
from services.discord.webhook import CHANNEL_ENV, WebhookChannel
from shared.logging.logger import get_logger

log = get_logger("shared.config.settings")

ENV_LEADERBOARD = "FESTIVE_BOT_LEADERBOARD"
ENV_SESSION = "FESTIVE_BOT_SESSION"
ENV_STATE_DIR = "FESTIVE_BOT_STATE_DIR"

MINUTES_PER_DAY = 1440
MINUTES_PER_WEEK = MINUTES_PER_DAY * 7

MIN_PERIOD = 15
DEFAULT_PERIOD = 60
DEFAULT_STANDINGS = MINUTES_PER_DAY

# every period must divide the day so wakeups land on the same clock times daily
PERIOD_FACTORS: List[int] = [
    m for m in range(MIN_PERIOD, MINUTES_PER_DAY + 1) if MINUTES_PER_DAY % m == 0
]


@dataclass(frozen=True)
class FestiveConfig:
    leaderboard: str
    session: str
    notify_url: Optional[str] = None
    status_url: Optional[str] = None
    all_years: bool = False
    period: timedelta = timedelta(minutes=DEFAULT_PERIOD)
    standings: timedelta = timedelta(minutes=DEFAULT_STANDINGS)
    heartbeat: Optional[timedelta] = None
    state_dir: Path = Path(".")

    def describe(self, live_years: Sequence[int]) -> str:
        """Plain-text parameter listing attached to the startup status message."""

        heartbeat = _minutes(self.heartbeat) if self.heartbeat else None
        return (
            f"leaderboard: {self.leaderboard}\n"
            f"all years:   {str(self.all_years).lower()}\n"
            f"period:      {_minutes(self.period)}\n"
            f"standings:   {_minutes(self.standings)}\n"
            f"heartbeat:   {heartbeat}\n"
            f"live years:  {list(live_years)}\n"
        )


def _minutes(value: timedelta) -> int:
    return int(value.total_seconds() // 60)


# ------------------------------------------------------------
# Rounding rules
# ------------------------------------------------------------

def round_period(mins: int) -> int:
    """Round up to the next divisor of one day (15..1440 accepted)."""

    for factor in PERIOD_FACTORS:
        if factor >= mins:
            return factor
    return MINUTES_PER_DAY


def round_to_multiple(mins: int, period: int) -> int:
    """Round up to the next multiple of the period."""

    return (mins + period - 1) // period * period


# ------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------

def _bounded(name: str, low: int, high: int):
    def _parse(raw: str) -> int:
        try:
            value = int(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{name} must be an integer number of minutes")
        if not low <= value <= high:
            raise argparse.ArgumentTypeError(f"{name} must be between {low} and {high} minutes")
        return value

    return _parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="festive-bot",
        description="Announce Advent of Code private leaderboard progress to Discord webhooks",
    )
    parser.add_argument(
        "--all-years",
        action="store_true",
        help="Poll every live year each iteration instead of only the current one",
    )
    parser.add_argument(
        "--period",
        type=_bounded("--period", MIN_PERIOD, MINUTES_PER_DAY),
        default=DEFAULT_PERIOD,
        metavar="MINS",
        help="Iteration period, rounded up to the next divisor of one day (default: 60)",
    )
    parser.add_argument(
        "--standings",
        type=_bounded("--standings", 1, MINUTES_PER_WEEK),
        default=DEFAULT_STANDINGS,
        metavar="MINS",
        help="Interval between standings announcements, rounded up to a multiple of the period (default: 1440)",
    )
    parser.add_argument(
        "--heartbeat",
        type=_bounded("--heartbeat", 1, MINUTES_PER_WEEK),
        default=None,
        metavar="MINS",
        help="Interval between heartbeat status messages, rounded up to a multiple of the period (default: off)",
    )
    parser.add_argument(
        "--state-dir",
        type=Path,
        default=None,
        help=f"Directory holding checkpoint files (default: ${ENV_STATE_DIR} or the working directory)",
    )
    return parser


def _required(environ: Mapping[str, str], key: str) -> str:
    value = (environ.get(key) or "").strip()
    if not value:
        raise ConfigMissingError(key)
    return value


def _optional(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = (environ.get(key) or "").strip()
    return value or None


def load_config(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FestiveConfig:
    """
    Build the configuration from command-line arguments and environment.

    Raises ConfigMissingError when a required variable is absent; invalid
    arguments exit through argparse with a usage message.
    """
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)

    leaderboard = _required(environ, ENV_LEADERBOARD)
    session = _required(environ, ENV_SESSION)

    period = round_period(args.period)
    if period != args.period:
        log.info(f"--period {args.period} rounded up to {period} minutes")

    standings = round_to_multiple(args.standings, period)
    heartbeat = (
        round_to_multiple(args.heartbeat, period)
        if args.heartbeat is not None
        else None
    )

    state_dir = args.state_dir or Path(environ.get(ENV_STATE_DIR) or ".")

    config = FestiveConfig(
        leaderboard=leaderboard,
        session=session,
        notify_url=_optional(environ, CHANNEL_ENV[WebhookChannel.NOTIFY]),
        status_url=_optional(environ, CHANNEL_ENV[WebhookChannel.STATUS]),
        all_years=args.all_years,
        period=timedelta(minutes=period),
        standings=timedelta(minutes=standings),
        heartbeat=timedelta(minutes=heartbeat) if heartbeat is not None else None,
        state_dir=state_dir,
    )

    log.debug(
        "Configuration resolved: "
        f"leaderboard={config.leaderboard} "
        f"session={'SET' if config.session else 'MISSING'} "
        f"notify={'SET' if config.notify_url else 'MISSING'} "
        f"status={'SET' if config.status_url else 'MISSING'}"
    )
    return config
