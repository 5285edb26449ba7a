"""TOP 3 daily priority slots and end-of-day archival. Pure, no I/O."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .blocks import (
    Block,
    find_block,
    get_checkbox,
    get_urgent,
    has_property,
    live_blocks,
    make_property,
    replace_block,
    utc_now,
)
from .dates import iso_day, previous_day
from .properties import CheckboxValue, PropertyType, UrgentValue

logger = logging.getLogger(__name__)

MAX_TOP3 = 3
NO_SLOT = -1


@dataclass(frozen=True)
class HistoryItem:
    id: str
    content: str
    completed: bool


@dataclass(frozen=True)
class Top3History:
    """Archived TOP 3 entries for one day."""

    date: str
    blocks: tuple[HistoryItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ArchiveResult:
    blocks: list[Block]
    history: list[Top3History]
    archived: tuple[HistoryItem, ...]


def top3_blocks(blocks: list[Block]) -> list[Block]:
    """Live blocks carrying an urgent marker, ordered by slot."""
    urgent = [b for b in live_blocks(blocks) if has_property(b, PropertyType.URGENT)]
    return sorted(urgent, key=lambda b: get_urgent(b).slot_index)


def used_slots(blocks: list[Block]) -> set[int]:
    return {get_urgent(b).slot_index for b in top3_blocks(blocks)}


def next_available_slot(blocks: list[Block]) -> int:
    """Lowest free slot index, or NO_SLOT when all three are taken."""
    taken = used_slots(blocks)
    return next((i for i in range(MAX_TOP3) if i not in taken), NO_SLOT)


def can_add_to_top3(blocks: list[Block]) -> bool:
    return len(top3_blocks(blocks)) < MAX_TOP3


def is_in_top3(blocks: list[Block], block_id: str) -> bool:
    return any(b.id == block_id for b in top3_blocks(blocks))


def add_to_top3(
    blocks: list[Block],
    block_id: str,
    today: date | str,
    slot_index: int | None = None,
    now: datetime | None = None,
) -> list[Block]:
    """
    Put a block into a TOP 3 slot.

    Silently returns `blocks` unchanged when the block is missing or deleted,
    already urgent, all slots are taken, or the requested slot is out of
    range or occupied. A block without a checkbox gets an unchecked one so
    every TOP 3 item can be completed.
    """
    block = find_block(blocks, block_id)
    if block is None or block.is_deleted or has_property(block, PropertyType.URGENT):
        return blocks
    if not can_add_to_top3(blocks):
        return blocks

    if slot_index is None:
        slot_index = next_available_slot(blocks)
    if slot_index not in range(MAX_TOP3) or slot_index in used_slots(blocks):
        return blocks

    properties = block.properties
    if not has_property(block, PropertyType.CHECKBOX):
        properties += (make_property(PropertyType.CHECKBOX, CheckboxValue(checked=False)),)
    properties += (make_property(PropertyType.URGENT, UrgentValue(added_at=iso_day(today), slot_index=slot_index)),)

    updated = replace(block, properties=properties, updated_at=now or utc_now())
    return replace_block(blocks, updated)


def _strip_urgent(block: Block, now: datetime) -> Block:
    properties = tuple(p for p in block.properties if p.property_type != PropertyType.URGENT)
    return replace(block, properties=properties, updated_at=now)


def remove_from_top3(blocks: list[Block], block_id: str, now: datetime | None = None) -> list[Block]:
    """Drop the urgent marker. Idempotent."""
    block = find_block(blocks, block_id)
    if block is None or not has_property(block, PropertyType.URGENT):
        return blocks
    return replace_block(blocks, _strip_urgent(block, now or utc_now()))


def clear_deleted_urgent(blocks: list[Block], now: datetime | None = None) -> list[Block]:
    """
    Drop urgent markers left on soft-deleted blocks.

    Deleted blocks do not hold TOP 3 slots. Returns `blocks` itself when
    there is nothing to clear.
    """
    stale = {b.id for b in blocks if b.is_deleted and has_property(b, PropertyType.URGENT)}
    if not stale:
        return blocks
    now = now or utc_now()
    logger.info(f"Clearing TOP 3 markers from {len(stale)} deleted block(s)")
    return [_strip_urgent(b, now) if b.is_deleted and b.id in stale else b for b in blocks]


def merge_history(history: list[Top3History], entry: Top3History) -> list[Top3History]:
    """
    Merge an entry into the ledger keyed by date.

    An existing bucket for the date keeps its items; new items are appended
    unless an item with the same id is already there. Never overwrites.
    """
    for index, existing in enumerate(history):
        if existing.date != entry.date:
            continue
        known = {item.id for item in existing.blocks}
        added = tuple(item for item in entry.blocks if item.id not in known)
        if not added:
            return history
        merged = replace(existing, blocks=existing.blocks + added)
        return history[:index] + [merged] + history[index + 1 :]
    return history + [entry]


def archive_expired(
    blocks: list[Block],
    history: list[Top3History],
    today: date | str,
    now: datetime | None = None,
) -> ArchiveResult:
    """
    End-of-day archival.

    Every block whose urgent marker was added before `today` is recorded as
    {id, content, completed} under yesterday's date and loses its marker.
    Running it again on its own output changes nothing.
    """
    today = iso_day(today)
    now = now or utc_now()
    archived: list[HistoryItem] = []
    result: list[Block] = []

    for block in blocks:
        urgent = get_urgent(block)
        if urgent is not None and urgent.added_at < today:
            archived.append(HistoryItem(id=block.id, content=block.content, completed=get_checkbox(block)))
            result.append(_strip_urgent(block, now))
        else:
            result.append(block)

    if not archived:
        return ArchiveResult(blocks=blocks, history=history, archived=())

    yesterday = previous_day(today)
    logger.info(f"Archiving {len(archived)} TOP 3 item(s) under {yesterday}")
    new_history = merge_history(history, Top3History(date=yesterday, blocks=tuple(archived)))
    return ArchiveResult(blocks=result, history=new_history, archived=tuple(archived))


def check_top3_invariant(blocks: list[Block]) -> None:
    """At most three urgent blocks, with distinct in-range slots."""
    slots = [get_urgent(b).slot_index for b in blocks if get_urgent(b) is not None]
    assert len(slots) <= MAX_TOP3, f"{len(slots)} blocks carry an urgent marker"
    assert len(set(slots)) == len(slots), f"Duplicate TOP 3 slots: {sorted(slots)}"
    assert all(0 <= s < MAX_TOP3 for s in slots), f"Slot out of range: {sorted(slots)}"
