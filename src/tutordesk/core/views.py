"""View filtering and date projections over a block collection. Pure, no I/O."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable

from .blocks import (
    Block,
    CustomView,
    Tag,
    find_block,
    get_checkbox,
    get_date,
    get_date_value,
    get_duration,
    get_person_ids,
    get_priority,
    get_tag_ids,
    has_property,
    live_blocks,
)
from .dates import add_days, iso_day, week_days, week_start
from .properties import DEFAULT_LESSON_MINUTES, PriorityLevel, PropertyType
from .recurrence import appears_on_date


class ViewType(str, Enum):
    ALL = "all"
    TODAY = "today"
    TODO = "todo"
    TAG = "tag"
    CALENDAR = "calendar"
    CUSTOM = "custom"


@dataclass(frozen=True)
class View:
    """A named view selection."""

    type: ViewType = ViewType.ALL
    tag_id: str | None = None
    date: str | None = None
    custom_view_id: str | None = None


class SortType(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    DATE = "date"
    PRIORITY = "priority"


TagResolver = Callable[[str], Tag | None]


def _has_date(block: Block) -> bool:
    return bool(get_date(block))


def _is_overdue(block: Block, today: str) -> bool:
    """Unchecked todo whose date has passed."""
    day = get_date(block)
    return (
        has_property(block, PropertyType.CHECKBOX)
        and not get_checkbox(block)
        and bool(day)
        and day < today
    )


def filter_for_view(
    blocks: list[Block],
    view: View,
    tag_resolver: TagResolver | None = None,
    custom_views: list[CustomView] | tuple[CustomView, ...] = (),
    today: date | str | None = None,
) -> list[Block]:
    """
    Blocks belonging to a view, soft-deleted blocks excluded.

    - all: everything
    - tag: blocks tagged with view.tag_id
    - calendar: blocks with a date, or dated exactly view.date (no recurrence)
    - custom: blocks carrying any property type the custom view lists
    - todo: blocks with a checkbox
    - today: blocks occurring today (recurrence applied) plus overdue todos
    """
    live = live_blocks(blocks)

    match view.type:
        case ViewType.ALL:
            return live
        case ViewType.TAG:
            if not view.tag_id:
                return live
            if tag_resolver is not None and tag_resolver(view.tag_id) is None:
                return []
            return [b for b in live if view.tag_id in get_tag_ids(b)]
        case ViewType.CALENDAR:
            if not view.date:
                return [b for b in live if has_property(b, PropertyType.DATE)]
            day = iso_day(view.date)
            return [b for b in live if get_date(b) == day]
        case ViewType.CUSTOM:
            custom = next((v for v in custom_views if v.id == view.custom_view_id), None)
            if custom is None:
                return []
            wanted = set(custom.property_ids)
            return [b for b in live if any(p.property_type.value in wanted for p in b.properties)]
        case ViewType.TODO:
            return [b for b in live if has_property(b, PropertyType.CHECKBOX)]
        case ViewType.TODAY:
            if today is None:
                raise ValueError("The today view needs the current day")
            day = iso_day(today)
            return [b for b in live if appears_on_date(b, day) or _is_overdue(b, day)]
    return live


def group_by_date(blocks: list[Block]) -> dict[str, list[Block]]:
    """Live dated blocks keyed by their anchor day, in first-seen order."""
    grouped: dict[str, list[Block]] = {}
    for block in live_blocks(blocks):
        day = get_date(block)
        if day:
            grouped.setdefault(day, []).append(block)
    return grouped


# ============== Sorting ==============

# Higher weight sorts first in the generic priority sort
_PRIORITY_RANK: dict[PriorityLevel, int] = {
    PriorityLevel.HIGH: 3,
    PriorityLevel.MEDIUM: 2,
    PriorityLevel.LOW: 1,
    PriorityLevel.NONE: 0,
}


def _date_time_key(block: Block) -> tuple[int, str, str]:
    value = get_date_value(block)
    if value is None or not value.date:
        return (1, "", "")
    return (0, value.date, value.time or "")


def sort_blocks(blocks: list[Block], sort_type: SortType) -> list[Block]:
    """Generic list ordering; stable for ties."""
    match sort_type:
        case SortType.NEWEST:
            return sorted(blocks, key=lambda b: b.created_at, reverse=True)
        case SortType.OLDEST:
            return sorted(blocks, key=lambda b: b.created_at)
        case SortType.DATE:
            return sorted(blocks, key=_date_time_key)
        case SortType.PRIORITY:
            return sorted(blocks, key=lambda b: -_PRIORITY_RANK[get_priority(b)])
    return list(blocks)


def pinned_first(blocks: list[Block]) -> list[Block]:
    return [b for b in blocks if b.is_pinned] + [b for b in blocks if not b.is_pinned]


# ============== Deadlines and today ==============


def deadlines(blocks: list[Block]) -> list[Block]:
    """
    Dated live blocks that are not lessons, by date then time.

    Blocks linked to a person are lessons and are listed separately.
    """
    return sorted(
        [b for b in live_blocks(blocks) if _has_date(b) and not has_property(b, PropertyType.PERSON)],
        key=_date_time_key,
    )


@dataclass
class DeadlineBuckets:
    overdue: list[Block]
    today: list[Block]
    this_week: list[Block]
    next_week: list[Block]
    later: list[Block]


def bucket_deadlines(blocks: list[Block], today: date | str) -> DeadlineBuckets:
    """Split deadlines by how far away they are (weeks start on Monday)."""
    today = iso_day(today)
    this_week_end = add_days(week_start(today), 6)
    next_week_end = add_days(this_week_end, 7)
    buckets = DeadlineBuckets([], [], [], [], [])

    for block in deadlines(blocks):
        day = get_date(block)
        if day < today:
            buckets.overdue.append(block)
        elif day == today:
            buckets.today.append(block)
        elif day <= this_week_end:
            buckets.this_week.append(block)
        elif day <= next_week_end:
            buckets.next_week.append(block)
        else:
            buckets.later.append(block)
    return buckets


def _by_time(block: Block) -> str:
    value = get_date_value(block)
    return (value.time or "") if value else ""


def today_deadlines(blocks: list[Block], today: date | str) -> list[Block]:
    """Non-lesson blocks occurring today, by time."""
    day = iso_day(today)
    return sorted(
        [b for b in live_blocks(blocks) if not has_property(b, PropertyType.PERSON) and appears_on_date(b, day)],
        key=_by_time,
    )


def today_lessons(blocks: list[Block], today: date | str) -> list[Block]:
    """Lessons (person-linked blocks) occurring today, by time."""
    day = iso_day(today)
    return sorted(
        [b for b in live_blocks(blocks) if has_property(b, PropertyType.PERSON) and appears_on_date(b, day)],
        key=_by_time,
    )


# ============== Weekly schedule ==============


@dataclass(frozen=True)
class ScheduleEvent:
    """One timed occurrence of a block in the weekly grid."""

    block: Block
    date: str
    start_time: str
    minutes: int
    student_name: str | None = None

    @property
    def end_time(self) -> str:
        hours, minutes = (int(part) for part in self.start_time.split(":")[:2])
        # Wraps past midnight
        total = (hours * 60 + minutes + self.minutes) % (24 * 60)
        return f"{total // 60:02d}:{total % 60:02d}"


def _student_for(block: Block, blocks: list[Block]) -> Block | None:
    person_ids = get_person_ids(block)
    return find_block(blocks, person_ids[0]) if person_ids else None


def lesson_minutes(block: Block, blocks: list[Block], default_minutes: int = DEFAULT_LESSON_MINUTES) -> int:
    """Block's own duration, else its student's, else the default."""
    own = get_duration(block)
    if own is not None:
        return own
    student = _student_for(block, blocks)
    if student is not None:
        student_minutes = get_duration(student)
        if student_minutes is not None:
            return student_minutes
    return default_minutes


def weekly_schedule(
    blocks: list[Block],
    week_of: date | str,
    default_minutes: int = DEFAULT_LESSON_MINUTES,
) -> dict[str, list[ScheduleEvent]]:
    """
    Timed occurrences for each day (Monday first) of the week containing `week_of`.

    Only blocks whose date property has a time are placed on the grid.
    """
    live = live_blocks(blocks)
    timed = [b for b in live if get_date_value(b) is not None and get_date_value(b).time]
    schedule: dict[str, list[ScheduleEvent]] = {}

    for day in week_days(week_of):
        events = []
        for block in timed:
            if not appears_on_date(block, day):
                continue
            student = _student_for(block, live)
            events.append(
                ScheduleEvent(
                    block=block,
                    date=day,
                    start_time=get_date_value(block).time,
                    minutes=lesson_minutes(block, live, default_minutes),
                    student_name=student.display_name if student else None,
                )
            )
        schedule[day] = sorted(events, key=lambda e: e.start_time)
    return schedule
