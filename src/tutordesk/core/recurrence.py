"""Recurrence expansion - does a block appear on a given day. Pure, no I/O."""

from datetime import date

from .blocks import Block, get_date, get_repeat
from .dates import days_between, iso_day, parse_day, week_days, weekday_sunday_first
from .properties import RepeatType


def appears_on_date(block: Block, target_date: date | str) -> bool:
    """
    Whether the block occurs on `target_date`.

    The anchor day (the block's date property) always matches. Later days
    match according to the repeat rule, bounded by its end date. Nothing is
    projected backwards. Comparisons are on ISO day strings, so the answer
    never depends on the caller's clock or timezone.

    Pure and total - malformed days yield False instead of raising.
    """
    anchor = get_date(block)
    if not anchor:
        return False

    target = iso_day(target_date)
    if target == anchor:
        return True
    if target < anchor:
        return False

    config = get_repeat(block)
    if config is None:
        return False
    if config.end_date and target > config.end_date:
        return False

    target_day = parse_day(target)
    anchor_day = parse_day(anchor)
    if target_day is None or anchor_day is None:
        return False

    match config.type:
        case RepeatType.DAILY:
            return True
        case RepeatType.WEEKLY:
            return weekday_sunday_first(target_day) in (config.weekdays or ())
        case RepeatType.MONTHLY:
            # No clamping: an anchor on the 31st never lands in a 30-day month
            return target_day.day == anchor_day.day
        case RepeatType.YEARLY:
            return (target_day.month, target_day.day) == (anchor_day.month, anchor_day.day)
    return False


def occurrences_between(block: Block, start: date | str, end: date | str) -> list[str]:
    """Days in [start, end] on which the block appears."""
    return [d for d in days_between(start, end) if appears_on_date(block, d)]


def expand_week(blocks: list[Block], any_day: date | str) -> dict[str, list[Block]]:
    """
    Blocks appearing on each day of the Monday-first week containing `any_day`.

    O(blocks x 7) calls to appears_on_date.
    """
    return {day: [b for b in blocks if appears_on_date(b, day)] for day in week_days(any_day)}
