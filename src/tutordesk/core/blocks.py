"""Block domain model and pure mutations - no I/O dependencies."""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from .properties import (
    DEFAULT_PROPERTY_NAMES,
    SINGULAR_TYPES,
    CheckboxValue,
    ContactValue,
    DateValue,
    DurationValue,
    PersonValue,
    PriorityLevel,
    PriorityValue,
    PropertyType,
    PropertyValue,
    RepeatConfig,
    RepeatValue,
    TagValue,
    UrgentValue,
    create_default_value,
)

TAG_COLORS = [
    "#ef4444",  # red
    "#f97316",  # orange
    "#eab308",  # yellow
    "#22c55e",  # green
    "#3b82f6",  # blue
    "#8b5cf6",  # purple
    "#ec4899",  # pink
]

_HTML_TAG = re.compile(r"<[^>]*>")


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlockColumn(str, Enum):
    """Board column a block sits in (layout only)."""

    FOCUS = "focus"
    QUEUE = "queue"
    INBOX = "inbox"


@dataclass(frozen=True)
class Property:
    """A typed, named value attached to a block."""

    id: str
    property_type: PropertyType
    name: str
    value: PropertyValue


@dataclass(frozen=True)
class Block:
    """The atomic note/task unit."""

    id: str
    name: str = ""
    content: str = ""
    properties: tuple[Property, ...] = ()
    is_pinned: bool = False
    is_deleted: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    indent: int = 0
    is_collapsed: bool = False
    column: BlockColumn = BlockColumn.INBOX
    deleted_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Name if set, else the first line of the plain-text content."""
        if self.name.strip():
            return self.name.strip()
        first_line = plain_text(self.content).split("\n")[0].strip()
        return first_line or "(untitled)"


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    color: str


@dataclass(frozen=True)
class CustomView:
    """A saved view: blocks carrying any of `property_ids` (OR semantics)."""

    id: str
    name: str
    property_ids: tuple[str, ...]
    icon: str = ""
    color: str = "#6b7280"
    created_at: datetime = field(default_factory=utc_now)


DEFAULT_CUSTOM_VIEWS = (
    CustomView(id="view-todo", name="Todo", icon="✅", color="#f59e0b", property_ids=("checkbox",)),
    CustomView(id="view-schedule", name="Schedule", icon="📅", color="#3b82f6", property_ids=("date",)),
)


def plain_text(html: str) -> str:
    """Strip HTML tags from rich-text content."""
    return _HTML_TAG.sub("", html).strip()


def create_block(
    content: str = "",
    name: str = "",
    column: BlockColumn = BlockColumn.INBOX,
    indent: int = 0,
    now: datetime | None = None,
) -> Block:
    """Create an empty block with a fresh id."""
    now = now or utc_now()
    return Block(
        id=new_id(),
        name=name,
        content=content,
        column=column,
        indent=indent,
        created_at=now,
        updated_at=now,
    )


def make_property(
    property_type: PropertyType | str,
    value: PropertyValue,
    name: str | None = None,
) -> Property:
    """Build a property record, defaulting its display name from the type."""
    property_type = PropertyType(property_type)
    if value.type != property_type:
        raise ValueError(f"{property_type.value} property cannot hold a {value.type.value} value")
    return Property(
        id=new_id(),
        property_type=property_type,
        name=name or DEFAULT_PROPERTY_NAMES[property_type],
        value=value,
    )


# ============== Lookups ==============


def get_property(block: Block, property_type: PropertyType | str) -> Property | None:
    """First property of the given type, or None."""
    property_type = PropertyType(property_type)
    return next((p for p in block.properties if p.property_type == property_type), None)


def has_property(block: Block, property_type: PropertyType | str) -> bool:
    return get_property(block, property_type) is not None


def get_checkbox(block: Block) -> bool:
    """True only when a checkbox exists and is checked."""
    prop = get_property(block, PropertyType.CHECKBOX)
    return isinstance(prop.value, CheckboxValue) and prop.value.checked if prop else False


def get_date_value(block: Block) -> DateValue | None:
    prop = get_property(block, PropertyType.DATE)
    if prop and isinstance(prop.value, DateValue):
        return prop.value
    return None


def get_date(block: Block) -> str:
    """Anchor day of the block, or empty string."""
    value = get_date_value(block)
    return value.date if value else ""


def get_tag_ids(block: Block) -> tuple[str, ...]:
    prop = get_property(block, PropertyType.TAG)
    return prop.value.tag_ids if prop and isinstance(prop.value, TagValue) else ()


def get_priority(block: Block) -> PriorityLevel:
    prop = get_property(block, PropertyType.PRIORITY)
    return prop.value.level if prop and isinstance(prop.value, PriorityValue) else PriorityLevel.NONE


def get_repeat(block: Block) -> RepeatConfig | None:
    prop = get_property(block, PropertyType.REPEAT)
    return prop.value.config if prop and isinstance(prop.value, RepeatValue) else None


def get_contact(block: Block) -> tuple[str, str]:
    """(phone, email), empty strings when unset."""
    prop = get_property(block, PropertyType.CONTACT)
    if prop and isinstance(prop.value, ContactValue):
        return prop.value.phone or "", prop.value.email or ""
    return "", ""


def get_urgent(block: Block) -> UrgentValue | None:
    prop = get_property(block, PropertyType.URGENT)
    return prop.value if prop and isinstance(prop.value, UrgentValue) else None


def get_urgent_slot(block: Block) -> int | None:
    urgent = get_urgent(block)
    return urgent.slot_index if urgent else None


def get_duration(block: Block) -> int | None:
    prop = get_property(block, PropertyType.DURATION)
    return prop.value.minutes if prop and isinstance(prop.value, DurationValue) else None


def get_person_ids(block: Block) -> tuple[str, ...]:
    prop = get_property(block, PropertyType.PERSON)
    return prop.value.block_ids if prop and isinstance(prop.value, PersonValue) else ()


# ============== Block mutations ==============


def _touch(block: Block, now: datetime | None, **changes) -> Block:
    return replace(block, updated_at=now or utc_now(), **changes)


def add_property(
    block: Block,
    property_type: PropertyType | str,
    today: str,
    name: str | None = None,
    value: PropertyValue | None = None,
    now: datetime | None = None,
) -> Block:
    """
    Append a property, defaulting its value for the type.

    Adding a singular type the block already carries is a no-op and returns
    the block unchanged.
    """
    property_type = PropertyType(property_type)
    if property_type in SINGULAR_TYPES and has_property(block, property_type):
        return block
    prop = make_property(property_type, value or create_default_value(property_type, today), name)
    return _touch(block, now, properties=block.properties + (prop,))


def update_property(block: Block, property_id: str, value: PropertyValue, now: datetime | None = None) -> Block:
    """Replace the whole value of the property with this id."""
    target = next((p for p in block.properties if p.id == property_id), None)
    if target is None or target.property_type != value.type:
        return block
    properties = tuple(replace(p, value=value) if p.id == property_id else p for p in block.properties)
    return _touch(block, now, properties=properties)


def update_property_by_type(block: Block, value: PropertyValue, now: datetime | None = None) -> Block:
    """Replace the value of the first property whose type matches the value's type."""
    target = get_property(block, value.type)
    if target is None:
        return block
    return update_property(block, target.id, value, now)


def rename_property(block: Block, property_id: str, name: str, now: datetime | None = None) -> Block:
    if not any(p.id == property_id for p in block.properties):
        return block
    properties = tuple(replace(p, name=name) if p.id == property_id else p for p in block.properties)
    return _touch(block, now, properties=properties)


def remove_property(block: Block, property_id: str, now: datetime | None = None) -> Block:
    properties = tuple(p for p in block.properties if p.id != property_id)
    if len(properties) == len(block.properties):
        return block
    return _touch(block, now, properties=properties)


def remove_property_by_type(block: Block, property_type: PropertyType | str, now: datetime | None = None) -> Block:
    """Remove the first property of the given type."""
    target = get_property(block, property_type)
    if target is None:
        return block
    return remove_property(block, target.id, now)


def apply_type(
    block: Block,
    property_types: list[PropertyType | str],
    today: str,
    names: list[str] | None = None,
    now: datetime | None = None,
) -> Block:
    """Add several properties at once, skipping types already present."""
    properties = list(block.properties)
    for index, property_type in enumerate(property_types):
        property_type = PropertyType(property_type)
        if any(p.property_type == property_type for p in properties):
            continue
        name = names[index] if names and index < len(names) else None
        properties.append(make_property(property_type, create_default_value(property_type, today), name))
    if len(properties) == len(block.properties):
        return block
    return _touch(block, now, properties=tuple(properties))


def toggle_pin(block: Block, now: datetime | None = None) -> Block:
    return _touch(block, now, is_pinned=not block.is_pinned)


def set_checked(block: Block, checked: bool, now: datetime | None = None) -> Block:
    """Set the checkbox state; blocks without a checkbox are left alone."""
    return update_property_by_type(block, CheckboxValue(checked=checked), now)


def soft_delete(block: Block, now: datetime | None = None) -> Block:
    """Mark deleted. The urgent marker is dropped so the TOP 3 slot frees up."""
    if block.is_deleted:
        return block
    now = now or utc_now()
    properties = tuple(p for p in block.properties if p.property_type != PropertyType.URGENT)
    return _touch(block, now, is_deleted=True, deleted_at=now, properties=properties)


def restore(block: Block, now: datetime | None = None) -> Block:
    """Undelete. A restored block never comes back into the TOP 3."""
    if not block.is_deleted:
        return block
    properties = tuple(p for p in block.properties if p.property_type != PropertyType.URGENT)
    return _touch(block, now, is_deleted=False, deleted_at=None, properties=properties)


def duplicate_block(block: Block, now: datetime | None = None) -> Block:
    """Copy with a new id and fresh property ids; never copies the urgent marker."""
    now = now or utc_now()
    properties = tuple(
        replace(p, id=new_id()) for p in block.properties if p.property_type != PropertyType.URGENT
    )
    return replace(block, id=new_id(), properties=properties, created_at=now, updated_at=now)


# ============== Collection helpers ==============


def live_blocks(blocks: list[Block]) -> list[Block]:
    """Blocks that are not soft-deleted."""
    return [b for b in blocks if not b.is_deleted]


def find_block(blocks: list[Block], block_id: str) -> Block | None:
    return next((b for b in blocks if b.id == block_id), None)


def replace_block(blocks: list[Block], updated: Block) -> list[Block]:
    """New collection with the block of the same id swapped for `updated`."""
    return [updated if b.id == updated.id else b for b in blocks]


def update_block(blocks: list[Block], block_id: str, fn, *args, **kwargs) -> list[Block]:
    """
    Apply `fn(block, *args, **kwargs)` to one block.

    Returns the original list object when the block is missing or `fn`
    returns it unchanged, so callers can detect a no-op with `is`.
    """
    block = find_block(blocks, block_id)
    if block is None:
        return blocks
    updated = fn(block, *args, **kwargs)
    if updated is block:
        return blocks
    return replace_block(blocks, updated)


def insert_block(blocks: list[Block], block: Block, after_id: str | None = None) -> list[Block]:
    """Insert after `after_id`, or at the top when absent or unknown."""
    if after_id is not None:
        for index, existing in enumerate(blocks):
            if existing.id == after_id:
                return blocks[: index + 1] + [block] + blocks[index + 1 :]
    return [block] + blocks


def purge_completed_todos(blocks: list[Block], now: datetime | None = None) -> list[Block]:
    """Soft-delete every live block whose checkbox is checked."""
    now = now or utc_now()
    return [soft_delete(b, now) if not b.is_deleted and get_checkbox(b) else b for b in blocks]


# ============== Tags ==============


def find_tag_by_name(tags: list[Tag], name: str) -> Tag | None:
    """Case-insensitive lookup."""
    lowered = name.lower()
    return next((t for t in tags if t.name.lower() == lowered), None)


def find_or_create_tag(tags: list[Tag], name: str) -> tuple[Tag, list[Tag]]:
    """
    Existing tag by name, or a new one with the next palette color.

    Returns (tag, tags) where `tags` includes the new tag when one was created.
    """
    existing = find_tag_by_name(tags, name)
    if existing:
        return existing, tags
    tag = Tag(id=new_id(), name=name, color=TAG_COLORS[len(tags) % len(TAG_COLORS)])
    return tag, tags + [tag]
