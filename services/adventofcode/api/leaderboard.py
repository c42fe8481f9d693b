"""
Advent of Code private leaderboard API.

Responsibilities:
- Fetch the raw leaderboard JSON for one year (session cookie auth)
- Parse the payload into a chronologically sorted list of Events

Parsing is not incremental: every call re-derives the full event list for
the year from the upstream payload.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any, Dict, List, Mapping, Union

import httpx

from core.errors import ConversionError, HttpError, ParseError
from core.events import Event, Identifier
from shared.logging.logger import get_logger

log = get_logger("adventofcode.leaderboard")

LEADERBOARD_URL = "https://adventofcode.com/{year}/leaderboard/private/view/{leaderboard}.json"

_DIGITS = re.compile(r"[0-9]+")


# ------------------------------------------------------------
# Parsing
# ------------------------------------------------------------

def _as_int(value: Any, field: str) -> int:
    """Unsigned decimal integer, as a JSON number or a string of ASCII digits."""

    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if isinstance(value, str) and _DIGITS.fullmatch(value):
        return int(value)
    raise ParseError(f"{field} must be an unsigned integer, got {value!r}")


def _as_object(value: Any, field: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ParseError(f"{field} must be an object, got {type(value).__name__}")
    return value


def _timestamp(value: Any, field: str) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"{field} must be an integer timestamp, got {value!r}")
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ConversionError(f"{field} {value} is not a representable instant: {e}") from e


def parse_leaderboard(raw: Union[str, bytes, Mapping[str, Any]]) -> List[Event]:
    """
    Convert a leaderboard payload into Events sorted by completion time.

    Raises ParseError for malformed payloads and ConversionError for
    timestamps outside the representable calendar range.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise ParseError(f"Leaderboard payload is not valid JSON: {e}") from e
    else:
        data = raw

    data = _as_object(data, "payload")
    year = _as_int(data.get("event"), "event")
    members = _as_object(data.get("members"), "members")

    events: List[Event] = []
    for member_key, member in members.items():
        member = _as_object(member, f"members[{member_key}]")
        numeric_id = _as_int(member_key, "member id")
        participant = Identifier.from_member(numeric_id, member.get("name"))

        completion = _as_object(
            member.get("completion_day_level", {}),
            f"members[{member_key}].completion_day_level",
        )
        for day_key, stars in completion.items():
            day = _as_int(day_key, "day")
            stars = _as_object(stars, f"day {day}")

            for star_key, contents in stars.items():
                star = _as_int(star_key, "star")
                contents = _as_object(contents, f"day {day} star {star}")

                events.append(Event(
                    timestamp=_timestamp(contents.get("get_star_ts"), "get_star_ts"),
                    year=year,
                    day=day,
                    star=star,
                    participant=participant,
                ))

    # stable: equal timestamps keep payload order
    events.sort(key=attrgetter("timestamp"))
    return events


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------

class LeaderboardAPI:
    """
    Read-only client for one private leaderboard.

    The httpx client is owned by the caller so one connection pool (and
    user agent) is shared across the whole run.
    """

    def __init__(self, *, leaderboard: str, session: str, client: httpx.AsyncClient):
        self.leaderboard = leaderboard
        self._session = session
        self._client = client

    def url(self, year: int) -> str:
        return LEADERBOARD_URL.format(year=year, leaderboard=self.leaderboard)

    async def fetch(self, year: int) -> str:
        url = self.url(year)
        log.info(f"Sending leaderboard request for {year}")

        try:
            r = await self._client.get(url, headers={"Cookie": f"session={self._session}"})
        except httpx.HTTPError as e:
            raise HttpError(f"Leaderboard request for {year} failed: {e}") from e

        if r.status_code == httpx.codes.OK:
            return r.text

        # AoC answers with a server error when the session cookie is no longer valid
        if r.is_server_error:
            log.error("Leaderboard request rejected, the session cookie might have expired")

        raise HttpError(
            f"Leaderboard request for {year} returned {r.status_code}",
            status_code=r.status_code,
        )

    async def events(self, year: int) -> List[Event]:
        response = await self.fetch(year)
        log.debug("Parsing leaderboard response")
        events = parse_leaderboard(response)
        log.info(f"Parsed {len(events)} events for {year}")
        return events
