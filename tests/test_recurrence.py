"""Tests for recurrence expansion."""

from datetime import date

import pytest

from tutordesk.core.blocks import Block, make_property
from tutordesk.core.dates import add_days, days_between
from tutordesk.core.properties import (
    DateValue,
    PropertyType,
    RepeatConfig,
    RepeatType,
    RepeatValue,
)
from tutordesk.core.recurrence import appears_on_date, expand_week, occurrences_between


def dated(day: str, config: RepeatConfig | None = None, block_id: str = "b") -> Block:
    properties = [make_property(PropertyType.DATE, DateValue(date=day))]
    if config is not None:
        properties.append(make_property(PropertyType.REPEAT, RepeatValue(config=config)))
    return Block(id=block_id, properties=tuple(properties))


class TestAnchor:
    def test_no_date_never_appears(self):
        assert appears_on_date(Block(id="x"), "2025-01-15") is False

    def test_anchor_day_always_matches(self):
        for rule in RepeatType:
            block = dated("2025-01-15", RepeatConfig(type=rule, weekdays=()))
            assert appears_on_date(block, "2025-01-15") is True

    def test_anchor_matches_even_past_end_date(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY, end_date="2025-01-10"))
        assert appears_on_date(block, "2025-01-15") is True

    def test_never_before_anchor(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY))
        assert appears_on_date(block, "2025-01-14") is False

    def test_one_off_only_on_anchor(self):
        block = dated("2025-01-15")
        assert occurrences_between(block, "2025-01-01", "2025-01-31") == ["2025-01-15"]

    def test_accepts_date_objects(self):
        assert appears_on_date(dated("2025-01-15"), date(2025, 1, 15)) is True

    def test_malformed_target_is_false(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY))
        assert appears_on_date(block, "2025-13-45") is False


class TestDaily:
    def test_every_day_after_anchor(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY))
        assert len(occurrences_between(block, "2025-01-15", "2025-01-21")) == 7

    def test_end_date_inclusive(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY, end_date="2025-01-17"))
        assert occurrences_between(block, "2025-01-01", "2025-01-31") == [
            "2025-01-15",
            "2025-01-16",
            "2025-01-17",
        ]

    def test_interval_is_not_applied(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY, interval=2))
        assert appears_on_date(block, "2025-01-16") is True


class TestWeekly:
    @pytest.fixture
    def monday_wednesday(self):
        # 2024-01-01 is a Monday
        return dated("2024-01-01", RepeatConfig(type=RepeatType.WEEKLY, weekdays=(1, 3)))

    def test_first_two_weeks(self, monday_wednesday):
        assert occurrences_between(monday_wednesday, "2024-01-01", "2024-01-14") == [
            "2024-01-01",
            "2024-01-03",
            "2024-01-08",
            "2024-01-10",
        ]

    def test_only_listed_weekdays_after_anchor(self, monday_wednesday):
        for day in days_between("2024-01-02", "2024-03-31"):
            expected = date.fromisoformat(day).weekday() in (0, 2)
            assert appears_on_date(monday_wednesday, day) is expected

    def test_empty_weekdays_only_anchor(self):
        block = dated("2024-01-01", RepeatConfig(type=RepeatType.WEEKLY, weekdays=()))
        assert occurrences_between(block, "2024-01-01", "2024-01-31") == ["2024-01-01"]

    def test_missing_weekdays_only_anchor(self):
        block = dated("2024-01-01", RepeatConfig(type=RepeatType.WEEKLY))
        assert occurrences_between(block, "2024-01-01", "2024-01-31") == ["2024-01-01"]

    def test_sunday_is_zero(self):
        block = dated("2024-01-01", RepeatConfig(type=RepeatType.WEEKLY, weekdays=(0,)))
        assert appears_on_date(block, "2024-01-07") is True


class TestMonthly:
    def test_same_day_next_month(self):
        block = dated("2024-03-10", RepeatConfig(type=RepeatType.MONTHLY))
        assert appears_on_date(block, "2024-04-10") is True
        assert appears_on_date(block, "2024-04-11") is False

    def test_31st_skips_short_months(self):
        block = dated("2024-01-31", RepeatConfig(type=RepeatType.MONTHLY))
        assert occurrences_between(block, "2024-01-01", "2024-05-31") == [
            "2024-01-31",
            "2024-03-31",
            "2024-05-31",
        ]


class TestYearly:
    def test_same_month_and_day(self):
        block = dated("2024-03-10", RepeatConfig(type=RepeatType.YEARLY))
        assert appears_on_date(block, "2025-03-10") is True
        assert appears_on_date(block, "2025-04-10") is False

    def test_leap_day_only_in_leap_years(self):
        block = dated("2024-02-29", RepeatConfig(type=RepeatType.YEARLY))
        assert appears_on_date(block, "2025-02-28") is False
        assert appears_on_date(block, "2028-02-29") is True


class TestExpandWeek:
    def test_monday_first_week(self):
        block = dated("2025-01-15", RepeatConfig(type=RepeatType.DAILY), block_id="daily")
        week = expand_week([block], "2025-01-15")
        assert list(week) == [add_days("2025-01-13", i) for i in range(7)]
        assert [len(week[d]) for d in week] == [0, 0, 1, 1, 1, 1, 1]
