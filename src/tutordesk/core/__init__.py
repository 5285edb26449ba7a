"""Functional core - pure business logic with no I/O."""

from .properties import PropertyType, PriorityLevel, RepeatType, RepeatConfig, create_default_value
from .blocks import Block, Property, Tag, CustomView, create_block, add_property, live_blocks
from .recurrence import appears_on_date, expand_week
from .classify import Classification, classify, classified_sections
from .top3 import Top3History, add_to_top3, remove_from_top3, archive_expired
from .views import View, ViewType, SortType, filter_for_view, weekly_schedule, bucket_deadlines
from .students import StudentSummary, student_summaries
from .quick_input import parse_quick_input, build_block_from_input

__all__ = [
    # Properties
    "PropertyType",
    "PriorityLevel",
    "RepeatType",
    "RepeatConfig",
    "create_default_value",
    # Blocks
    "Block",
    "Property",
    "Tag",
    "CustomView",
    "create_block",
    "add_property",
    "live_blocks",
    # Recurrence
    "appears_on_date",
    "expand_week",
    # Classification
    "Classification",
    "classify",
    "classified_sections",
    # TOP 3
    "Top3History",
    "add_to_top3",
    "remove_from_top3",
    "archive_expired",
    # Views
    "View",
    "ViewType",
    "SortType",
    "filter_for_view",
    "weekly_schedule",
    "bucket_deadlines",
    # Students
    "StudentSummary",
    "student_summaries",
    # Quick input
    "parse_quick_input",
    "build_block_from_input",
]
