"""
Shared pytest fixtures.

HTTP is served by httpx.MockTransport and time by FakeClock, so no test
touches the network or sleeps for real.
"""
import json
import os
import tempfile
from datetime import datetime, timedelta, timezone

# keep per-run log files out of the working tree
os.environ.setdefault("FESTIVE_BOT_LOG_DIR", tempfile.mkdtemp(prefix="festive-logs-"))

import httpx  # noqa: E402
import pytest  # noqa: E402

from core.events import Event, Identifier, puzzle_unlock  # noqa: E402
from shared.config.settings import FestiveConfig  # noqa: E402

NOTIFY_URL = "https://discord.test/api/webhooks/notify"
STATUS_URL = "https://discord.test/api/webhooks/status"
LEADERBOARD = "123456"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_event(name="alice", numeric_id=1, year=2022, day=1, star=1, after=timedelta(0)):
    return Event(
        timestamp=puzzle_unlock(year, day) + after,
        year=year,
        day=day,
        star=star,
        participant=Identifier(name, numeric_id),
    )


def payload(year, members):
    """
    Build a leaderboard payload from
    {member_id: (name, [(day, star, unix_ts), ...])}.
    """
    doc = {"event": str(year), "owner_id": 1, "members": {}}
    for member_id, (name, stars) in members.items():
        completion = {}
        for day, star, ts in stars:
            completion.setdefault(str(day), {})[str(star)] = {
                "get_star_ts": ts,
                "star_index": 0,
            }
        doc["members"][str(member_id)] = {
            "id": member_id,
            "name": name,
            "stars": len(stars),
            "local_score": 0,
            "global_score": 0,
            "last_star_ts": max((ts for _, _, ts in stars), default=0),
            "completion_day_level": completion,
        }
    return doc


class FakeClock:
    def __init__(self, now: datetime):
        self._now = now
        self.sleeps = []

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += timedelta(seconds=seconds)


class FakeServer:
    """Routes leaderboard GETs to canned payloads and records webhook POSTs."""

    def __init__(self):
        self.payloads = {}
        self.requests = []
        self.webhook_responses = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "adventofcode.com":
            year = int(request.url.path.split("/")[1])
            if year not in self.payloads:
                return httpx.Response(404)
            return httpx.Response(200, text=json.dumps(self.payloads[year]))
        if self.webhook_responses:
            return self.webhook_responses.pop(0)
        return httpx.Response(204)

    def posts(self, url):
        return [r for r in self.requests if r.method == "POST" and str(r.url) == url]

    def contents(self, url):
        result = []
        for r in self.posts(url):
            if r.headers.get("content-type", "").startswith("application/json"):
                result.append(json.loads(r.content)["content"])
            else:
                result.append(r.content.decode("utf-8", errors="replace"))
        return result


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def config(tmp_path):
    return FestiveConfig(
        leaderboard=LEADERBOARD,
        session="cookie",
        notify_url=NOTIFY_URL,
        status_url=STATUS_URL,
        state_dir=tmp_path,
    )
