"""Tests for view filtering and date projections."""

from datetime import datetime, timedelta, timezone

import pytest

from tutordesk.core.blocks import DEFAULT_CUSTOM_VIEWS, Block, Tag, make_property, soft_delete
from tutordesk.core.properties import (
    CheckboxValue,
    DateValue,
    DurationValue,
    PersonValue,
    PriorityLevel,
    PriorityValue,
    PropertyType,
    RepeatConfig,
    RepeatType,
    RepeatValue,
    TagValue,
)
from tutordesk.core.views import (
    ScheduleEvent,
    SortType,
    View,
    ViewType,
    bucket_deadlines,
    deadlines,
    filter_for_view,
    group_by_date,
    lesson_minutes,
    pinned_first,
    sort_blocks,
    today_deadlines,
    today_lessons,
    weekly_schedule,
)


@pytest.fixture
def today():
    # Wednesday
    return "2025-01-15"


def date_prop(day: str, time: str | None = None):
    return make_property(PropertyType.DATE, DateValue(date=day, time=time))


def checkbox(checked: bool = False):
    return make_property(PropertyType.CHECKBOX, CheckboxValue(checked=checked))


def person(*ids: str):
    return make_property(PropertyType.PERSON, PersonValue(block_ids=ids))


def weekly(*weekdays: int):
    return make_property(PropertyType.REPEAT, RepeatValue(config=RepeatConfig(type=RepeatType.WEEKLY, weekdays=weekdays)))


def block(block_id: str, *properties, **kwargs) -> Block:
    return Block(id=block_id, properties=tuple(properties), **kwargs)


@pytest.fixture
def sample(today):
    return [
        block("plain"),
        block("todo-today", checkbox(), date_prop(today)),
        block("todo-overdue", checkbox(), date_prop("2025-01-10")),
        block("done-overdue", checkbox(True), date_prop("2025-01-10")),
        block("tagged", make_property(PropertyType.TAG, TagValue(tag_ids=("t1",)))),
        block("weekly-wed", date_prop("2025-01-01"), weekly(3)),
        block("future", date_prop("2025-01-20")),
        soft_delete(block("deleted", checkbox(), date_prop(today))),
    ]


def ids(blocks):
    return [b.id for b in blocks]


class TestFilterForView:
    def test_all_excludes_deleted(self, sample):
        assert "deleted" not in ids(filter_for_view(sample, View(ViewType.ALL)))
        assert len(filter_for_view(sample, View(ViewType.ALL))) == 7

    def test_todo(self, sample):
        assert ids(filter_for_view(sample, View(ViewType.TODO))) == ["todo-today", "todo-overdue", "done-overdue"]

    def test_today_includes_recurring_and_overdue(self, sample, today):
        result = ids(filter_for_view(sample, View(ViewType.TODAY), today=today))
        assert result == ["todo-today", "todo-overdue", "weekly-wed"]

    def test_today_requires_day(self, sample):
        with pytest.raises(ValueError):
            filter_for_view(sample, View(ViewType.TODAY))

    def test_tag(self, sample):
        assert ids(filter_for_view(sample, View(ViewType.TAG, tag_id="t1"))) == ["tagged"]

    def test_tag_without_id_is_all(self, sample):
        assert len(filter_for_view(sample, View(ViewType.TAG))) == 7

    def test_unknown_tag_is_empty(self, sample):
        tags = [Tag(id="t1", name="exam", color="#fff")]
        resolver = lambda tid: next((t for t in tags if t.id == tid), None)  # noqa: E731
        assert filter_for_view(sample, View(ViewType.TAG, tag_id="t9"), tag_resolver=resolver) == []

    def test_calendar_without_date_lists_dated(self, sample):
        result = ids(filter_for_view(sample, View(ViewType.CALENDAR)))
        assert result == ["todo-today", "todo-overdue", "done-overdue", "weekly-wed", "future"]

    def test_calendar_date_exact_without_recurrence(self, sample, today):
        assert ids(filter_for_view(sample, View(ViewType.CALENDAR, date=today))) == ["todo-today"]

    def test_custom_view_or_semantics(self, sample):
        view = View(ViewType.CUSTOM, custom_view_id="view-todo")
        assert len(filter_for_view(sample, view, custom_views=DEFAULT_CUSTOM_VIEWS)) == 3

    def test_unknown_custom_view_is_empty(self, sample):
        view = View(ViewType.CUSTOM, custom_view_id="nope")
        assert filter_for_view(sample, view, custom_views=DEFAULT_CUSTOM_VIEWS) == []


class TestSorting:
    @pytest.fixture
    def now(self):
        return datetime(2025, 1, 15, tzinfo=timezone.utc)

    def test_newest_and_oldest(self, now):
        a = block("a", created_at=now - timedelta(hours=1))
        b = block("b", created_at=now)
        assert ids(sort_blocks([a, b], SortType.NEWEST)) == ["b", "a"]
        assert ids(sort_blocks([b, a], SortType.OLDEST)) == ["a", "b"]

    def test_date_then_time_undated_last(self):
        blocks = [
            block("undated"),
            block("late", date_prop("2025-01-15", "18:00")),
            block("early", date_prop("2025-01-15", "09:00")),
            block("before", date_prop("2025-01-14")),
        ]
        assert ids(sort_blocks(blocks, SortType.DATE)) == ["before", "early", "late", "undated"]

    def test_priority_high_first(self):
        def prio(block_id, level):
            return block(block_id, make_property(PropertyType.PRIORITY, PriorityValue(level=level)))

        blocks = [prio("low", PriorityLevel.LOW), block("none"), prio("high", PriorityLevel.HIGH)]
        assert ids(sort_blocks(blocks, SortType.PRIORITY)) == ["high", "low", "none"]

    def test_pinned_first_is_stable(self):
        blocks = [block("a"), block("b", is_pinned=True), block("c"), block("d", is_pinned=True)]
        assert ids(pinned_first(blocks)) == ["b", "d", "a", "c"]


class TestDeadlines:
    @pytest.fixture
    def dated(self):
        return [
            block("lesson", date_prop("2025-01-15"), person("s1")),
            block("overdue", date_prop("2025-01-14")),
            block("today", date_prop("2025-01-15")),
            block("sunday", date_prop("2025-01-19")),
            block("next-monday", date_prop("2025-01-20")),
            block("next-sunday", date_prop("2025-01-26")),
            block("later", date_prop("2025-01-27")),
        ]

    def test_excludes_lessons(self, dated):
        assert "lesson" not in ids(deadlines(dated))

    def test_buckets(self, dated, today):
        buckets = bucket_deadlines(dated, today)
        assert ids(buckets.overdue) == ["overdue"]
        assert ids(buckets.today) == ["today"]
        assert ids(buckets.this_week) == ["sunday"]
        assert ids(buckets.next_week) == ["next-monday", "next-sunday"]
        assert ids(buckets.later) == ["later"]

    def test_group_by_date(self, dated):
        grouped = group_by_date(dated)
        assert ids(grouped["2025-01-15"]) == ["lesson", "today"]


class TestToday:
    def test_lessons_and_deadlines_split(self, today):
        blocks = [
            block("lesson-late", date_prop("2025-01-08", "19:00"), person("s1"), weekly(3)),
            block("lesson-early", date_prop(today, "15:00"), person("s1")),
            block("task", date_prop(today)),
        ]
        assert ids(today_lessons(blocks, today)) == ["lesson-early", "lesson-late"]
        assert ids(today_deadlines(blocks, today)) == ["task"]


class TestWeeklySchedule:
    @pytest.fixture
    def student(self):
        return block("s1", make_property(PropertyType.DURATION, DurationValue(minutes=90)), name="Mina")

    def test_only_timed_blocks(self, student, today):
        blocks = [student, block("untimed", date_prop(today)), block("timed", date_prop(today, "10:00"))]
        schedule = weekly_schedule(blocks, today)
        assert list(schedule) == [f"2025-01-{d}" for d in range(13, 20)]
        assert [e.block.id for e in schedule[today]] == ["timed"]

    def test_recurring_lessons_projected(self, student, today):
        lesson = block("lesson", date_prop("2025-01-13", "19:00"), person("s1"), weekly(1, 3))
        schedule = weekly_schedule([student, lesson], today)
        assert [day for day, events in schedule.items() if events] == ["2025-01-13", "2025-01-15"]

    def test_duration_precedence(self, student):
        own = block("own", make_property(PropertyType.DURATION, DurationValue(minutes=30)), person("s1"))
        inherited = block("inherited", person("s1"))
        fallback = block("fallback")
        blocks = [student, own, inherited, fallback]
        assert lesson_minutes(own, blocks) == 30
        assert lesson_minutes(inherited, blocks) == 90
        assert lesson_minutes(fallback, blocks, default_minutes=45) == 45

    def test_event_details(self, student, today):
        lesson = block("lesson", date_prop(today, "19:00"), person("s1"))
        event = weekly_schedule([student, lesson], today)[today][0]
        assert event.student_name == "Mina"
        assert event.minutes == 90
        assert event.end_time == "20:30"

    def test_events_sorted_by_time(self, today):
        blocks = [block("late", date_prop(today, "18:00")), block("early", date_prop(today, "08:30"))]
        assert [e.block.id for e in weekly_schedule(blocks, today)[today]] == ["early", "late"]

    def test_end_time_rolls_past_hour(self):
        event = ScheduleEvent(block=block("x"), date="2025-01-15", start_time="09:40", minutes=50)
        assert event.end_time == "10:30"

    def test_end_time_wraps_past_midnight(self):
        event = ScheduleEvent(block=block("x"), date="2025-01-15", start_time="23:30", minutes=50)
        assert event.end_time == "00:20"
