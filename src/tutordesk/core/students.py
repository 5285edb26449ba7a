"""Per-student lesson counts for the current week."""

from dataclasses import dataclass
from datetime import date

from .blocks import Block, get_date, get_person_ids, get_repeat, has_property, live_blocks
from .dates import add_days, week_days, week_start
from .properties import PropertyType, RepeatType


@dataclass(frozen=True)
class StudentSummary:
    id: str
    name: str
    regular_lessons: int
    irregular_lessons: int

    @property
    def total_lessons(self) -> int:
        return self.regular_lessons + self.irregular_lessons


def student_blocks(blocks: list[Block]) -> list[Block]:
    """Live blocks with contact details."""
    return [b for b in live_blocks(blocks) if has_property(b, PropertyType.CONTACT)]


def lesson_blocks(blocks: list[Block]) -> list[Block]:
    return [
        b
        for b in live_blocks(blocks)
        if has_property(b, PropertyType.PERSON) and has_property(b, PropertyType.DATE)
    ]


def student_summaries(blocks: list[Block], today: date | str) -> list[StudentSummary]:
    """
    Lesson counts per student for the Monday-first week containing `today`.

    Weekly-repeating lessons count once per listed weekday falling on or after
    the lesson's anchor day (regular). One-off lessons count when dated inside
    the week (irregular). Other repeat types are not counted.
    """
    days = week_days(today)
    start = week_start(today)
    end = add_days(start, 6)
    # weekday (0=Sunday) -> day in this week
    by_weekday = {(i + 1) % 7: day for i, day in enumerate(days)}
    lessons = lesson_blocks(blocks)

    summaries = []
    for student in student_blocks(blocks):
        regular = 0
        irregular = 0
        for lesson in lessons:
            if student.id not in get_person_ids(lesson):
                continue
            anchor = get_date(lesson)
            if not anchor:
                continue
            config = get_repeat(lesson)
            if config is None:
                if start <= anchor <= end:
                    irregular += 1
            elif config.type == RepeatType.WEEKLY:
                regular += sum(1 for wd in config.weekdays or () if wd in by_weekday and by_weekday[wd] >= anchor)
        summaries.append(
            StudentSummary(
                id=student.id,
                name=student.display_name,
                regular_lessons=regular,
                irregular_lessons=irregular,
            )
        )
    return summaries


def search_students(summaries: list[StudentSummary], query: str) -> list[StudentSummary]:
    """Case-insensitive substring match on name; blank query returns all."""
    if not query.strip():
        return summaries
    lowered = query.lower()
    return [s for s in summaries if lowered in s.name.lower()]

