"""
Configuration validation script.

Resolves the Festive Bot configuration exactly as the runtime would
(.env file, environment, command-line flags) and reports the result
without contacting any upstream or webhook endpoint.

Usage:
    python -m scripts.validate_config --period 30 --heartbeat 360
"""

from __future__ import annotations

import sys
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

from core.errors import ConfigMissingError
from core.scheduler import SystemClock, initial_live_years
from services.discord.webhook import CHANNEL_ENV, WebhookChannel
from shared.config.settings import load_config


def _error(msg: str):
    print(f"[CONFIG ERROR] {msg}", file=sys.stderr)


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    if environ is None:
        load_dotenv()

    try:
        config = load_config(argv, environ)
    except ConfigMissingError as e:
        _error(e.message)
        print("Configuration validation failed.", file=sys.stderr)
        return 1

    if not config.notify_url:
        print(f"note: {CHANNEL_ENV[WebhookChannel.NOTIFY]} unset, announcements will only be logged")
    if not config.status_url:
        print(f"note: {CHANNEL_ENV[WebhookChannel.STATUS]} unset, status messages will only be logged")

    print(config.describe(initial_live_years(SystemClock().now())), end="")
    print("Configuration validation passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
