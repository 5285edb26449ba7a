"""Tests for auto-classification."""

from datetime import datetime, timedelta, timezone

import pytest

from tutordesk.core.blocks import Block, make_property, soft_delete
from tutordesk.core.classify import (
    CLASSIFICATION_ORDER,
    Classification,
    classified_sections,
    classify,
    count_by_classification,
    group_by_classification,
    name_key,
    sort_in_classification,
)
from tutordesk.core.properties import (
    CheckboxValue,
    ContactValue,
    DateValue,
    MemoValue,
    PersonValue,
    PriorityLevel,
    PriorityValue,
    PropertyType,
    RepeatConfig,
    RepeatType,
    RepeatValue,
)

CONTACT = make_property(PropertyType.CONTACT, ContactValue(phone="010"))
PERSON = make_property(PropertyType.PERSON, PersonValue(block_ids=("s1",)))
DATE = make_property(PropertyType.DATE, DateValue(date="2025-01-15"))
REPEAT = make_property(PropertyType.REPEAT, RepeatValue(config=RepeatConfig(type=RepeatType.DAILY)))
CHECKBOX = make_property(PropertyType.CHECKBOX, CheckboxValue())
MEMO = make_property(PropertyType.MEMO, MemoValue(text="note"))


def block(block_id: str, *properties, **kwargs) -> Block:
    return Block(id=block_id, properties=tuple(properties), **kwargs)


class TestClassify:
    def test_no_properties(self):
        assert classify(block("x")) == Classification.UNCLASSIFIED

    def test_contact_is_student(self):
        assert classify(block("x", CONTACT)) == Classification.STUDENT

    def test_contact_beats_everything(self):
        assert classify(block("x", CHECKBOX, REPEAT, PERSON, DATE, CONTACT)) == Classification.STUDENT

    def test_person_and_date_is_lesson(self):
        assert classify(block("x", PERSON, DATE)) == Classification.LESSON

    def test_lesson_beats_routine_and_todo(self):
        assert classify(block("x", CHECKBOX, REPEAT, PERSON, DATE)) == Classification.LESSON

    def test_person_without_date_falls_through(self):
        assert classify(block("x", PERSON, CHECKBOX)) == Classification.TODO

    def test_repeat_is_routine(self):
        assert classify(block("x", REPEAT, CHECKBOX)) == Classification.ROUTINE

    def test_checkbox_is_todo(self):
        assert classify(block("x", CHECKBOX, DATE)) == Classification.TODO

    def test_other_properties_unclassified(self):
        assert classify(block("x", MEMO, DATE)) == Classification.UNCLASSIFIED


class TestGrouping:
    def test_every_category_present_in_order(self):
        groups = group_by_classification([])
        assert list(groups) == CLASSIFICATION_ORDER
        assert CLASSIFICATION_ORDER[0] == Classification.UNCLASSIFIED

    def test_deleted_blocks_excluded(self):
        counts = count_by_classification([block("a", CHECKBOX), soft_delete(block("b", CHECKBOX))])
        assert counts[Classification.TODO] == 1


class TestSorting:
    @pytest.fixture
    def now(self):
        return datetime(2025, 1, 15, tzinfo=timezone.utc)

    def test_unclassified_newest_first(self, now):
        old = block("old", created_at=now - timedelta(days=1))
        new = block("new", created_at=now)
        assert [b.id for b in sort_in_classification([old, new], Classification.UNCLASSIFIED)] == ["new", "old"]

    def test_students_by_name(self):
        blocks = [block("b", CONTACT, name="bora"), block("a", CONTACT, name="Ahn")]
        assert [b.id for b in sort_in_classification(blocks, Classification.STUDENT)] == ["a", "b"]

    def test_lessons_by_date_undated_last(self):
        undated = block("none", PERSON)
        later = block("later", PERSON, make_property(PropertyType.DATE, DateValue(date="2025-02-01")))
        sooner = block("sooner", PERSON, make_property(PropertyType.DATE, DateValue(date="2025-01-20")))
        result = sort_in_classification([undated, later, sooner], Classification.LESSON)
        assert [b.id for b in result] == ["sooner", "later", "none"]

    def test_todos_by_priority_then_date(self):
        def todo(block_id, level, day=None):
            props = [CHECKBOX, make_property(PropertyType.PRIORITY, PriorityValue(level=level))]
            if day:
                props.append(make_property(PropertyType.DATE, DateValue(date=day)))
            return block(block_id, *props)

        blocks = [
            todo("low", PriorityLevel.LOW, "2025-01-10"),
            todo("high-undated", PriorityLevel.HIGH),
            todo("high-dated", PriorityLevel.HIGH, "2025-01-20"),
            todo("none", PriorityLevel.NONE, "2025-01-01"),
        ]
        result = sort_in_classification(blocks, Classification.TODO)
        assert [b.id for b in result] == ["high-dated", "high-undated", "low", "none"]

    def test_name_key_case_insensitive(self):
        assert name_key("ABC") == name_key("abc")

    def test_sections_sorted(self):
        sections = dict(classified_sections([block("b", CONTACT, name="b"), block("a", CONTACT, name="a")]))
        assert [b.id for b in sections[Classification.STUDENT]] == ["a", "b"]
