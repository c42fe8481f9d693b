"""
Puzzle completion events.

An Event is one star earned by one participant. Events are delivered in
chronological order and scored by how many full days after the puzzle's
unlock they happened.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from fractions import Fraction

from core.errors import ConversionError, ParseError

DAY = timedelta(days=1)

# puzzles unlock at midnight EST, i.e. 05:00 UTC
UNLOCK_HOUR_UTC = 5
LAST_PUZZLE_DAY = 25


def puzzle_unlock(year: int, day: int) -> datetime:
    """
    Unlock instant of puzzle `day` in December `year`.

    Also used for days 26..31, which have no puzzle, as the daily
    reference instant for the remainder of December.
    """
    try:
        return datetime(year, 12, day, UNLOCK_HOUR_UTC, tzinfo=timezone.utc)
    except (ValueError, OverflowError, TypeError) as e:
        raise ConversionError(f"No unlock instant for {year}-12-{day}: {e}") from e


def whole_days(delta: timedelta) -> int:
    """Whole days in `delta`, truncated toward zero."""

    days = abs(delta) // DAY
    return -days if delta < timedelta(0) else days


@dataclass(frozen=True, order=True)
class Identifier:
    """A leaderboard member, ordered by (name, numeric_id)."""

    name: str
    numeric_id: int

    @classmethod
    def from_member(cls, member_id: int, name) -> "Identifier":
        if name is None:
            name = f"anonymous user #{member_id}"
        return cls(name=str(name), numeric_id=member_id)


@dataclass(frozen=True)
class Event:
    timestamp: datetime
    year: int
    day: int
    star: int
    participant: Identifier

    def unlock(self) -> datetime:
        return puzzle_unlock(self.year, self.day)

    def days_after_unlock(self) -> int:
        return whole_days(self.timestamp - self.unlock())

    def score(self) -> Fraction:
        """
        Reciprocal of one plus the full days between unlock and completion.

        Negative day counts are kept as-is; a day count of exactly -1 has no
        score and raises ConversionError.
        """
        denominator = 1 + self.days_after_unlock()
        if denominator == 0:
            raise ConversionError(
                f"Completion at {self.timestamp.isoformat()} is one full day "
                f"before unlock of {self.year} day {self.day}"
            )
        return Fraction(1, denominator)

    def message(self) -> str:
        """Notification text announcing this completion."""

        if self.star == 1:
            part, stars = "one", ":star:"
        elif self.star == 2:
            part, stars = "two", ":star: :star:"
        else:
            raise ParseError(f"Unexpected star {self.star} for {self.participant.name}")

        score = self.score()
        plural = "" if score == 1 else "s"
        return (
            f":christmas_tree: [{self.year}] {self.participant.name} has completed "
            f"puzzle {self.day:02}, part {part}, scoring {score} point{plural}! {stars}"
        )
