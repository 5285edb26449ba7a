"""Typed property values - a closed tagged union, no I/O."""

import re
from dataclasses import dataclass
from enum import Enum

from .dates import parse_day


class PropertyType(str, Enum):
    """Every kind of value a block property can hold."""

    CHECKBOX = "checkbox"
    DATE = "date"
    TAG = "tag"
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    PERSON = "person"
    REPEAT = "repeat"
    PRIORITY = "priority"
    CONTACT = "contact"
    MEMO = "memo"
    URGENT = "urgent"
    DURATION = "duration"


class PriorityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class RepeatType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# A block carries at most one property of each of these types
SINGULAR_TYPES = frozenset(
    {
        PropertyType.CHECKBOX,
        PropertyType.DATE,
        PropertyType.PRIORITY,
        PropertyType.REPEAT,
        PropertyType.URGENT,
    }
)

DEFAULT_PROPERTY_NAMES: dict[PropertyType, str] = {
    PropertyType.CHECKBOX: "Done",
    PropertyType.DATE: "Date",
    PropertyType.TAG: "Tags",
    PropertyType.TEXT: "Text",
    PropertyType.NUMBER: "Number",
    PropertyType.SELECT: "Select",
    PropertyType.PERSON: "Student",
    PropertyType.REPEAT: "Repeat",
    PropertyType.PRIORITY: "Priority",
    PropertyType.CONTACT: "Contact",
    PropertyType.MEMO: "Memo",
    PropertyType.URGENT: "Urgent",
    PropertyType.DURATION: "Lesson length",
}

DEFAULT_LESSON_MINUTES = 50


@dataclass(frozen=True)
class RepeatConfig:
    """Recurrence rule anchored on a block's date property."""

    type: RepeatType
    interval: int = 1
    end_date: str | None = None
    weekdays: tuple[int, ...] | None = None  # 0=Sunday .. 6=Saturday


@dataclass(frozen=True)
class CheckboxValue:
    checked: bool = False
    type = PropertyType.CHECKBOX


@dataclass(frozen=True)
class DateValue:
    date: str
    end_date: str | None = None
    time: str | None = None
    end_time: str | None = None
    type = PropertyType.DATE


@dataclass(frozen=True)
class TagValue:
    tag_ids: tuple[str, ...] = ()
    type = PropertyType.TAG


@dataclass(frozen=True)
class TextValue:
    text: str = ""
    type = PropertyType.TEXT


@dataclass(frozen=True)
class NumberValue:
    value: float = 0
    type = PropertyType.NUMBER


@dataclass(frozen=True)
class SelectValue:
    selected: str = ""
    type = PropertyType.SELECT


@dataclass(frozen=True)
class PersonValue:
    block_ids: tuple[str, ...] = ()
    type = PropertyType.PERSON


@dataclass(frozen=True)
class RepeatValue:
    config: RepeatConfig | None = None
    type = PropertyType.REPEAT


@dataclass(frozen=True)
class PriorityValue:
    level: PriorityLevel = PriorityLevel.NONE
    type = PropertyType.PRIORITY


@dataclass(frozen=True)
class ContactValue:
    phone: str | None = None
    email: str | None = None
    type = PropertyType.CONTACT


@dataclass(frozen=True)
class MemoValue:
    text: str = ""
    type = PropertyType.MEMO


@dataclass(frozen=True)
class UrgentValue:
    added_at: str
    slot_index: int = 0
    type = PropertyType.URGENT


@dataclass(frozen=True)
class DurationValue:
    minutes: int = DEFAULT_LESSON_MINUTES
    type = PropertyType.DURATION


PropertyValue = (
    CheckboxValue
    | DateValue
    | TagValue
    | TextValue
    | NumberValue
    | SelectValue
    | PersonValue
    | RepeatValue
    | PriorityValue
    | ContactValue
    | MemoValue
    | UrgentValue
    | DurationValue
)


def create_default_value(property_type: PropertyType | str, today: str) -> PropertyValue:
    """
    Canonical empty value for a property type.

    Pure function - `today` is the current local day (YYYY-MM-DD) and seeds
    the date and urgent variants.
    """
    match PropertyType(property_type):
        case PropertyType.CHECKBOX:
            return CheckboxValue(checked=False)
        case PropertyType.DATE:
            return DateValue(date=today)
        case PropertyType.TAG:
            return TagValue()
        case PropertyType.TEXT:
            return TextValue()
        case PropertyType.NUMBER:
            return NumberValue()
        case PropertyType.SELECT:
            return SelectValue()
        case PropertyType.PERSON:
            return PersonValue()
        case PropertyType.REPEAT:
            return RepeatValue(config=None)
        case PropertyType.PRIORITY:
            return PriorityValue()
        case PropertyType.CONTACT:
            return ContactValue()
        case PropertyType.MEMO:
            return MemoValue()
        case PropertyType.URGENT:
            return UrgentValue(added_at=today, slot_index=0)
        case PropertyType.DURATION:
            return DurationValue()


# ============== JSON shape ==============


def repeat_config_to_dict(config: RepeatConfig) -> dict:
    data: dict = {"type": config.type.value, "interval": config.interval}
    if config.end_date:
        data["endDate"] = config.end_date
    if config.weekdays is not None:
        data["weekdays"] = list(config.weekdays)
    return data


_DAY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_PATTERN = re.compile(r"([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?")


def _day(value, field: str, required: bool = False) -> str | None:
    """A `YYYY-MM-DD` string, or None for an absent optional day."""
    if not value and not required:
        return None
    if not isinstance(value, str) or not _DAY_PATTERN.fullmatch(value) or parse_day(value) is None:
        raise ValueError(f"{field} must be a YYYY-MM-DD day, got {value!r}")
    return value


def _time(value, field: str) -> str | None:
    """An `HH:MM` string, or None when absent."""
    if not value:
        return None
    if not isinstance(value, str) or not _TIME_PATTERN.fullmatch(value):
        raise ValueError(f"{field} must be an HH:MM time, got {value!r}")
    return value


def _ids(value, field: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{field} must be a list of ids, got {value!r}")
    return tuple(value)


def repeat_config_from_dict(data: dict) -> RepeatConfig:
    if not isinstance(data, dict):
        raise ValueError(f"Repeat config must be an object, got {data!r}")
    weekdays = data.get("weekdays")
    if weekdays is not None and not isinstance(weekdays, list):
        raise ValueError(f"weekdays must be a list, got {weekdays!r}")
    return RepeatConfig(
        type=RepeatType(data["type"]),
        interval=int(data.get("interval") or 1),
        end_date=_day(data.get("endDate"), "endDate"),
        weekdays=tuple(int(d) for d in weekdays) if weekdays is not None else None,
    )


def _drop_none(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


def value_to_dict(value: PropertyValue) -> dict:
    """Serialize a value to its persisted JSON object."""
    match value:
        case CheckboxValue(checked=checked):
            body = {"checked": checked}
        case DateValue():
            body = _drop_none(
                {
                    "date": value.date,
                    "endDate": value.end_date,
                    "time": value.time,
                    "endTime": value.end_time,
                }
            )
        case TagValue(tag_ids=tag_ids):
            body = {"tagIds": list(tag_ids)}
        case TextValue(text=text) | MemoValue(text=text):
            body = {"text": text}
        case NumberValue(value=number):
            body = {"value": number}
        case SelectValue(selected=selected):
            body = {"selected": selected}
        case PersonValue(block_ids=block_ids):
            body = {"blockIds": list(block_ids)}
        case RepeatValue(config=config):
            body = {"config": repeat_config_to_dict(config) if config else None}
        case PriorityValue(level=level):
            body = {"level": level.value}
        case ContactValue(phone=phone, email=email):
            body = _drop_none({"phone": phone, "email": email})
        case UrgentValue(added_at=added_at, slot_index=slot_index):
            body = {"addedAt": added_at, "slotIndex": slot_index}
        case DurationValue(minutes=minutes):
            body = {"minutes": minutes}
        case _:
            raise ValueError(f"Unknown property value: {value!r}")
    return {"type": value.type.value, **body}


def value_from_dict(data: dict) -> PropertyValue:
    """
    Parse a persisted value object.

    Raises ValueError for an unknown type tag, a missing required field, or
    a day, time or id list of the wrong shape.
    """
    try:
        kind = PropertyType(data["type"])
        match kind:
            case PropertyType.CHECKBOX:
                return CheckboxValue(checked=bool(data.get("checked", False)))
            case PropertyType.DATE:
                return DateValue(
                    date=_day(data["date"], "date", required=True),
                    end_date=_day(data.get("endDate"), "endDate"),
                    time=_time(data.get("time"), "time"),
                    end_time=_time(data.get("endTime"), "endTime"),
                )
            case PropertyType.TAG:
                return TagValue(tag_ids=_ids(data.get("tagIds"), "tagIds"))
            case PropertyType.TEXT:
                return TextValue(text=data.get("text", ""))
            case PropertyType.NUMBER:
                return NumberValue(value=data.get("value", 0))
            case PropertyType.SELECT:
                return SelectValue(selected=data.get("selected", ""))
            case PropertyType.PERSON:
                return PersonValue(block_ids=_ids(data.get("blockIds"), "blockIds"))
            case PropertyType.REPEAT:
                config = data.get("config")
                return RepeatValue(config=repeat_config_from_dict(config) if config else None)
            case PropertyType.PRIORITY:
                return PriorityValue(level=PriorityLevel(data.get("level", "none")))
            case PropertyType.CONTACT:
                return ContactValue(phone=data.get("phone"), email=data.get("email"))
            case PropertyType.MEMO:
                return MemoValue(text=data.get("text", ""))
            case PropertyType.URGENT:
                return UrgentValue(
                    added_at=_day(data["addedAt"], "addedAt", required=True),
                    slot_index=int(data.get("slotIndex", 0)),
                )
            case PropertyType.DURATION:
                return DurationValue(minutes=int(data.get("minutes", DEFAULT_LESSON_MINUTES)))
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed property value {data!r}: {e}") from e
