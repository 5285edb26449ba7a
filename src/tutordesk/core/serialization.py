"""JSON-compatible dict conversion for blocks, history, tags and custom views."""

from datetime import datetime, timezone

from .blocks import Block, BlockColumn, CustomView, Property, Tag, utc_now
from .properties import DEFAULT_PROPERTY_NAMES, PropertyType, value_from_dict, value_to_dict
from .top3 import HistoryItem, Top3History


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC, missing as now."""
    if not value:
        return utc_now()
    # Older interpreters reject the trailing Z
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============== Properties ==============


def property_to_dict(prop: Property) -> dict:
    return {
        "id": prop.id,
        "propertyType": prop.property_type.value,
        "name": prop.name,
        "value": value_to_dict(prop.value),
    }


def property_from_dict(data: dict) -> Property:
    try:
        property_type = PropertyType(data["propertyType"])
        value = value_from_dict(data["value"])
        prop_id = data["id"]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed property {data!r}: {e}") from e
    if value.type != property_type:
        raise ValueError(f"Property {prop_id} is {property_type.value} but holds a {value.type.value} value")
    return Property(
        id=prop_id,
        property_type=property_type,
        name=data.get("name") or DEFAULT_PROPERTY_NAMES[property_type],
        value=value,
    )


# ============== Blocks ==============


def block_to_dict(block: Block) -> dict:
    data = {
        "id": block.id,
        "name": block.name,
        "content": block.content,
        "properties": [property_to_dict(p) for p in block.properties],
        "isPinned": block.is_pinned,
        "isDeleted": block.is_deleted,
        "createdAt": format_timestamp(block.created_at),
        "updatedAt": format_timestamp(block.updated_at),
        "indent": block.indent,
        "isCollapsed": block.is_collapsed,
        "column": block.column.value,
    }
    if block.deleted_at is not None:
        data["deletedAt"] = format_timestamp(block.deleted_at)
    return data


def block_from_dict(data: dict) -> Block:
    """
    Parse a persisted block.

    Raises ValueError when the record or any of its properties is malformed.
    """
    if not isinstance(data, dict) or not data.get("id"):
        raise ValueError(f"Malformed block: {data!r}")
    try:
        return Block(
            id=data["id"],
            name=data.get("name") or "",
            content=data.get("content") or "",
            properties=tuple(property_from_dict(p) for p in data.get("properties") or []),
            is_pinned=bool(data.get("isPinned", False)),
            is_deleted=bool(data.get("isDeleted", False)),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
            indent=int(data.get("indent") or 0),
            is_collapsed=bool(data.get("isCollapsed", False)),
            column=BlockColumn(data.get("column") or BlockColumn.INBOX.value),
            deleted_at=parse_timestamp(data["deletedAt"]) if data.get("deletedAt") else None,
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Malformed block {data.get('id')}: {e}") from e


def blocks_to_list(blocks: list[Block]) -> list[dict]:
    return [block_to_dict(b) for b in blocks]


def blocks_from_list(data: list) -> list[Block]:
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of blocks, got {type(data).__name__}")
    return [block_from_dict(item) for item in data]


# ============== TOP 3 history ==============


def history_to_dict(entry: Top3History) -> dict:
    return {
        "date": entry.date,
        "blocks": [{"id": i.id, "content": i.content, "completed": i.completed} for i in entry.blocks],
    }


def history_from_dict(data: dict) -> Top3History:
    try:
        return Top3History(
            date=data["date"],
            blocks=tuple(
                HistoryItem(id=item["id"], content=item.get("content", ""), completed=bool(item.get("completed")))
                for item in data.get("blocks") or []
            ),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed history entry {data!r}: {e}") from e


def history_from_list(data: list) -> list[Top3History]:
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of history entries, got {type(data).__name__}")
    return [history_from_dict(item) for item in data]


# ============== Tags and custom views ==============


def tag_to_dict(tag: Tag) -> dict:
    return {"id": tag.id, "name": tag.name, "color": tag.color}


def tag_from_dict(data: dict) -> Tag:
    try:
        return Tag(id=data["id"], name=data["name"], color=data.get("color") or "#6b7280")
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed tag {data!r}: {e}") from e


def custom_view_to_dict(view: CustomView) -> dict:
    return {
        "id": view.id,
        "name": view.name,
        "icon": view.icon,
        "color": view.color,
        "propertyIds": list(view.property_ids),
        "createdAt": format_timestamp(view.created_at),
    }


def custom_view_from_dict(data: dict) -> CustomView:
    try:
        return CustomView(
            id=data["id"],
            name=data["name"],
            property_ids=tuple(data.get("propertyIds") or ()),
            icon=data.get("icon") or "",
            color=data.get("color") or "#6b7280",
            created_at=parse_timestamp(data.get("createdAt")),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed custom view {data!r}: {e}") from e
