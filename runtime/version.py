"""Runtime version metadata for Festive Bot.

This module is import-safe and exposes authoritative version identifiers for
other runtime modules without executing side effects on import.
"""

from __future__ import annotations

PROJECT_NAME = "Festive Bot"
VERSION = "0.4.0"
HOMEPAGE = "https://github.com/festive-bot/festive-bot"
LICENSE = "MIT"

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "HOMEPAGE",
    "LICENSE",
    "as_string",
    "user_agent",
]


def as_string() -> str:
    """Return a concise version string."""

    return f"{PROJECT_NAME} v{VERSION}"


def user_agent() -> str:
    """User agent sent with every upstream request, as the API operators ask."""

    return f"{as_string()}; {HOMEPAGE}"
