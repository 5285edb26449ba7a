"""
GTD-style auto-classification of blocks by their property set.

First match wins:
- no properties -> unclassified
- contact -> student
- person + date -> lesson
- repeat -> routine
- checkbox -> todo
- anything else -> unclassified
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum

from .blocks import Block, get_date, get_priority, has_property, live_blocks
from .properties import PriorityLevel, PropertyType


class Classification(str, Enum):
    UNCLASSIFIED = "unclassified"
    STUDENT = "student"
    LESSON = "lesson"
    TODO = "todo"
    ROUTINE = "routine"


@dataclass(frozen=True)
class ClassificationInfo:
    label: str
    icon: str
    rank: int  # display order, lower first


CLASSIFICATION_INFO: dict[Classification, ClassificationInfo] = {
    Classification.UNCLASSIFIED: ClassificationInfo("Unsorted", "□", 0),
    Classification.STUDENT: ClassificationInfo("Students", "○", 1),
    Classification.LESSON: ClassificationInfo("Lessons", "◇", 2),
    Classification.TODO: ClassificationInfo("Todos", "☐", 3),
    Classification.ROUTINE: ClassificationInfo("Routines", "↻", 4),
}

CLASSIFICATION_ORDER = sorted(CLASSIFICATION_INFO, key=lambda c: CLASSIFICATION_INFO[c].rank)

PRIORITY_WEIGHT: dict[PriorityLevel, int] = {
    PriorityLevel.HIGH: 0,
    PriorityLevel.MEDIUM: 1,
    PriorityLevel.LOW: 2,
    PriorityLevel.NONE: 3,
}

# Sorts after every real ISO day
_NO_DATE = "9999-12-31"


def classify(block: Block) -> Classification:
    """Map a block to exactly one category. Pure function."""
    if not block.properties:
        return Classification.UNCLASSIFIED
    if has_property(block, PropertyType.CONTACT):
        return Classification.STUDENT
    if has_property(block, PropertyType.PERSON) and has_property(block, PropertyType.DATE):
        return Classification.LESSON
    if has_property(block, PropertyType.REPEAT):
        return Classification.ROUTINE
    if has_property(block, PropertyType.CHECKBOX):
        return Classification.TODO
    return Classification.UNCLASSIFIED


def group_by_classification(blocks: list[Block]) -> dict[Classification, list[Block]]:
    """Live blocks grouped by category; every category key is present, in display order."""
    groups: dict[Classification, list[Block]] = {c: [] for c in CLASSIFICATION_ORDER}
    for block in live_blocks(blocks):
        groups[classify(block)].append(block)
    return groups


def count_by_classification(blocks: list[Block]) -> dict[Classification, int]:
    return {c: len(group) for c, group in group_by_classification(blocks).items()}


def name_key(name: str) -> str:
    """Case- and width-insensitive collation key for names."""
    return unicodedata.normalize("NFKC", name).casefold()


def _date_key(block: Block) -> str:
    return get_date(block) or _NO_DATE


def sort_in_classification(blocks: list[Block], classification: Classification) -> list[Block]:
    """
    Order blocks within one category.

    - unclassified: newest first
    - student, routine: by name
    - lesson: by date, undated last
    - todo: by priority (high first), then date, undated last
    """
    match classification:
        case Classification.UNCLASSIFIED:
            return sorted(blocks, key=lambda b: b.created_at, reverse=True)
        case Classification.STUDENT | Classification.ROUTINE:
            return sorted(blocks, key=lambda b: name_key(b.name))
        case Classification.LESSON:
            return sorted(blocks, key=_date_key)
        case Classification.TODO:
            return sorted(blocks, key=lambda b: (PRIORITY_WEIGHT[get_priority(b)], _date_key(b)))
    return list(blocks)


def classified_sections(blocks: list[Block]) -> list[tuple[Classification, list[Block]]]:
    """Display-ordered (category, sorted blocks) pairs for live blocks."""
    return [
        (classification, sort_in_classification(group, classification))
        for classification, group in group_by_classification(blocks).items()
    ]
