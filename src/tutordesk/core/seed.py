"""Starter workspace used when nothing usable is stored yet."""

from datetime import date, datetime

from .blocks import Block, Property, Tag, utc_now
from .dates import add_days, iso_day, parse_day, weekday_sunday_first
from .properties import (
    DEFAULT_PROPERTY_NAMES,
    CheckboxValue,
    ContactValue,
    DateValue,
    DurationValue,
    MemoValue,
    PersonValue,
    PriorityLevel,
    PriorityValue,
    PropertyType,
    PropertyValue,
    RepeatConfig,
    RepeatType,
    RepeatValue,
    TagValue,
)

SEED_TAGS = [
    Tag(id="tag-1", name="lesson", color="#3b82f6"),
    Tag(id="tag-2", name="homework", color="#f59e0b"),
    Tag(id="tag-3", name="exam", color="#ef4444"),
    Tag(id="tag-4", name="high-school", color="#8b5cf6"),
    Tag(id="tag-5", name="middle-school", color="#10b981"),
    Tag(id="tag-6", name="toeic", color="#ec4899"),
]


def _prop(block_id: str, value: PropertyValue) -> Property:
    property_type = PropertyType(value.type)
    return Property(
        id=f"{block_id}-{property_type.value}",
        property_type=property_type,
        name=DEFAULT_PROPERTY_NAMES[property_type],
        value=value,
    )


def _block(block_id: str, name: str, values: list[PropertyValue], now: datetime, indent: int = 0) -> Block:
    return Block(
        id=block_id,
        name=name,
        content=f"<p>{name}</p>",
        properties=tuple(_prop(block_id, v) for v in values),
        created_at=now,
        updated_at=now,
        indent=indent,
    )


def seed_blocks(today: date | str, now: datetime | None = None) -> list[Block]:
    """Sample students, lessons, todos and a routine, dated relative to `today`."""
    today = iso_day(today)
    now = now or utc_now()
    weekday = weekday_sunday_first(parse_day(today))

    return [
        _block(
            "block-1",
            "Check Mina's reading homework",
            [
                CheckboxValue(checked=False),
                DateValue(date=today),
                PriorityValue(level=PriorityLevel.HIGH),
                TagValue(tag_ids=("tag-4",)),
            ],
            now,
        ),
        _block(
            "block-2",
            "Grade Seo-yeon's TOEIC mock test",
            [CheckboxValue(checked=True), DateValue(date=today), TagValue(tag_ids=("tag-6",))],
            now,
        ),
        _block(
            "block-3",
            "Print vocabulary quiz",
            [
                CheckboxValue(checked=False),
                DateValue(date=add_days(today, 1)),
                PriorityValue(level=PriorityLevel.MEDIUM),
                TagValue(tag_ids=("tag-5", "tag-3")),
            ],
            now,
        ),
        _block("block-10", "Students", [], now),
        _block(
            "block-11",
            "Mina Kim (grade 12)",
            [
                ContactValue(phone="010-1234-5678", email="parent1@example.com"),
                TagValue(tag_ids=("tag-4",)),
                MemoValue(text="Exam prep, Tue/Thu 19:00, weak on grammar"),
            ],
            now,
            indent=1,
        ),
        _block(
            "block-12",
            "Seo-yeon Lee (adult)",
            [
                ContactValue(phone="010-2345-6789", email="seoyeon@example.com"),
                TagValue(tag_ids=("tag-6",)),
                MemoValue(text="TOEIC 900 target, Saturday 10:00"),
                DurationValue(minutes=90),
            ],
            now,
            indent=1,
        ),
        _block(
            "block-20",
            "Mina: grammar lesson",
            [
                DateValue(date=today, time="19:00"),
                PersonValue(block_ids=("block-11",)),
                RepeatValue(config=RepeatConfig(type=RepeatType.WEEKLY, weekdays=(weekday, (weekday + 2) % 7))),
                TagValue(tag_ids=("tag-1",)),
            ],
            now,
        ),
        _block(
            "block-21",
            "Seo-yeon: reading section",
            [
                DateValue(date=add_days(today, 2), time="10:00"),
                PersonValue(block_ids=("block-12",)),
                TagValue(tag_ids=("tag-1", "tag-6")),
            ],
            now,
        ),
        _block(
            "block-30",
            "Prepare weekly materials",
            [
                DateValue(date=today),
                RepeatValue(config=RepeatConfig(type=RepeatType.WEEKLY, weekdays=(weekday,))),
            ],
            now,
        ),
        _block("block-40", "Ideas for the summer intensive", [], now),
    ]


def seed_tags() -> list[Tag]:
    return list(SEED_TAGS)
