"""
Quick-input parsing.

Supported inline syntax:
- `#tag` adds a tag (several allowed)
- `@today`, `@tomorrow`, `@dayafter`, `@nextweek`, `@thisweek` set the date
- a leading `[]` or `/todo` adds a checkbox
"""

import html
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .blocks import Block, Tag, create_block, find_or_create_tag, make_property
from .dates import add_days, iso_day, parse_day, weekday_sunday_first
from .properties import CheckboxValue, DateValue, PropertyType, TagValue

NAME_MAX_LENGTH = 30

_TAG_PATTERN = re.compile(r"#(\w+)", re.UNICODE)
_DATE_KEYWORDS = ("today", "tomorrow", "dayafter", "nextweek", "thisweek")
_DATE_PATTERN = re.compile(r"@(" + "|".join(_DATE_KEYWORDS) + r")\b", re.IGNORECASE)


@dataclass
class ParsedInput:
    content: str
    tags: list[str] = field(default_factory=list)
    date: str | None = None
    has_checkbox: bool = False

    @property
    def has_properties(self) -> bool:
        return bool(self.tags) or self.date is not None or self.has_checkbox


@dataclass
class ProcessedInput:
    name: str
    content: str
    was_split: bool


def resolve_date_keyword(keyword: str, today: date | str) -> str:
    """Day for a date keyword, relative to `today`."""
    today = iso_day(today)
    match keyword.lower():
        case "today":
            return today
        case "tomorrow":
            return add_days(today, 1)
        case "dayafter":
            return add_days(today, 2)
        case "nextweek":
            return add_days(today, 7)
        case "thisweek":
            # Coming Sunday; a Sunday rolls to the next one
            return add_days(today, 7 - weekday_sunday_first(parse_day(today)))
    raise ValueError(f"Unknown date keyword: {keyword}")


def parse_quick_input(text: str, today: date | str) -> ParsedInput:
    """Pull checkbox, date and tag markers out of a one-line entry."""
    content = text.strip()
    has_checkbox = False

    if content.startswith("[]"):
        has_checkbox = True
        content = content[2:].strip()
    elif content.lower().startswith("/todo"):
        has_checkbox = True
        content = content[5:].strip()

    # First keyword wins; all of them are stripped
    day = None
    match = _DATE_PATTERN.search(content)
    if match:
        day = resolve_date_keyword(match.group(1), today)
    content = _DATE_PATTERN.sub("", content)

    tags: list[str] = []
    for name in _TAG_PATTERN.findall(content):
        if name not in tags:
            tags.append(name)
    content = _TAG_PATTERN.sub("", content)

    content = re.sub(r"\s+", " ", content).strip()
    return ParsedInput(content=content, tags=tags, date=day, has_checkbox=has_checkbox)


def _paragraphs(lines: list[str]) -> str:
    return "".join(f"<p>{html.escape(line.strip()) or '<br>'}</p>" for line in lines)


def split_block_input(text: str, is_paste: bool = False) -> ProcessedInput:
    """
    Split typed text into a block name and HTML content.

    - short single line: name only
    - long single line: truncated name, full line as content
    - several lines or a paste: first line as name, every line as content
    """
    trimmed = text.strip()
    if not trimmed:
        return ProcessedInput(name="", content="", was_split=False)

    lines = trimmed.split("\n")
    first_line = lines[0].strip()
    is_long = len(first_line) > NAME_MAX_LENGTH
    name = first_line[:NAME_MAX_LENGTH] + "…" if is_long else first_line

    if len(lines) > 1 or is_paste:
        return ProcessedInput(name=name, content=_paragraphs(lines), was_split=True)
    if is_long:
        return ProcessedInput(name=name, content=_paragraphs([first_line]), was_split=True)
    return ProcessedInput(name=first_line, content="", was_split=False)


def build_block_from_input(
    text: str,
    today: date | str,
    tags: list[Tag],
    now: datetime | None = None,
) -> tuple[Block, list[Tag]]:
    """
    Create a block from a quick-input line.

    Unknown tag names are created. Returns (block, tags) with any new tags
    appended to the tag list.
    """
    parsed = parse_quick_input(text, today)
    split = split_block_input(parsed.content)
    block = create_block(content=split.content, name=split.name, now=now)

    properties = []
    if parsed.has_checkbox:
        properties.append(make_property(PropertyType.CHECKBOX, CheckboxValue(checked=False)))
    if parsed.date:
        properties.append(make_property(PropertyType.DATE, DateValue(date=parsed.date)))
    if parsed.tags:
        tag_ids = []
        for name in parsed.tags:
            tag, tags = find_or_create_tag(tags, name)
            tag_ids.append(tag.id)
        properties.append(make_property(PropertyType.TAG, TagValue(tag_ids=tuple(tag_ids))))

    return replace(block, properties=tuple(properties)), tags
