"""
Tests for the event model: unlock instants, scoring and message text.
"""
from datetime import timedelta
from fractions import Fraction

import pytest

from conftest import make_event, utc
from core.errors import ConversionError, ParseError
from core.events import Identifier, puzzle_unlock, whole_days


class TestPuzzleUnlock:
    def test_unlocks_at_five_utc(self):
        assert puzzle_unlock(2022, 1) == utc(2022, 12, 1, 5)

    def test_days_after_christmas_are_valid(self):
        assert puzzle_unlock(2022, 31) == utc(2022, 12, 31, 5)

    def test_invalid_day_raises_conversion_error(self):
        with pytest.raises(ConversionError):
            puzzle_unlock(2022, 32)


class TestWholeDays:
    def test_truncates_positive(self):
        assert whole_days(timedelta(days=2, hours=23)) == 2

    def test_truncates_negative_toward_zero(self):
        assert whole_days(timedelta(hours=-3)) == 0
        assert whole_days(-timedelta(days=2, hours=1)) == -2


class TestScore:
    @pytest.mark.parametrize("k", [0, 1, 2, 5, 24])
    def test_reciprocal_of_full_days(self, k):
        event = make_event(after=timedelta(days=k, hours=3))
        assert event.score() == Fraction(1, 1 + k)

    def test_score_is_one_only_on_unlock_day(self):
        assert make_event(after=timedelta(hours=23, minutes=59)).score() == 1
        assert make_event(after=timedelta(days=1)).score() != 1

    def test_score_is_exact_fraction(self):
        assert isinstance(make_event(after=timedelta(days=2)).score(), Fraction)

    def test_completion_just_before_unlock_scores_one(self):
        assert make_event(after=timedelta(minutes=-5)).score() == 1

    def test_two_days_before_unlock_is_not_clamped(self):
        assert make_event(after=timedelta(days=-2)).score() == Fraction(-1)

    def test_one_day_before_unlock_has_no_score(self):
        with pytest.raises(ConversionError):
            make_event(after=timedelta(days=-1, hours=-1)).score()

    def test_invalid_day_raises_conversion_error(self):
        event = make_event(day=1)
        bad = event.__class__(
            timestamp=event.timestamp, year=event.year, day=40,
            star=1, participant=event.participant,
        )
        with pytest.raises(ConversionError):
            bad.score()


class TestMessage:
    def test_first_star_same_day(self):
        event = make_event(name="alice", day=3, star=1, after=timedelta(minutes=10))
        assert event.message() == (
            ":christmas_tree: [2022] alice has completed puzzle 03, "
            "part one, scoring 1 point! :star:"
        )

    def test_second_star_pluralises_fractional_score(self):
        event = make_event(name="bob", day=12, star=2, after=timedelta(days=2))
        assert event.message() == (
            ":christmas_tree: [2022] bob has completed puzzle 12, "
            "part two, scoring 1/3 points! :star: :star:"
        )

    def test_unknown_star_raises_parse_error(self):
        with pytest.raises(ParseError):
            make_event(star=3).message()


class TestIdentifier:
    def test_null_name_is_synthesised(self):
        assert Identifier.from_member(42, None) == Identifier("anonymous user #42", 42)

    def test_same_name_different_accounts_are_distinct(self):
        assert Identifier("sam", 1) != Identifier("sam", 2)
        assert Identifier("sam", 1) < Identifier("sam", 2)

    def test_orders_by_name_first(self):
        assert Identifier("a", 9) < Identifier("b", 1)
