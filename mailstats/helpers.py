"""Small helpers for reading values out of Outlook COM objects."""

from datetime import datetime, date
from typing import Any, Iterator, Optional

# Outlook reports "no date" as 1 Jan 4501.
OUTLOOK_NULL_YEAR = 4501


def safe_str(x: Any) -> str:
    try:
        return "" if x is None else str(x)
    except Exception:
        return ""


def safe_get(obj: Any, name: str, default: Any = None) -> Any:
    try:
        return getattr(obj, name, default)
    except Exception:
        return default


def to_us_outlook_datetime(dt: datetime) -> str:
    return dt.strftime("%m/%d/%Y %I:%M %p")


def to_minute(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


def start_of_day(d: date) -> datetime: return datetime(d.year, d.month, d.day, 0, 0, 0)

def end_of_day(d: date) -> datetime:   return datetime(d.year, d.month, d.day, 23, 59, 59)


def as_naive_datetime(value: Any) -> Optional[datetime]:
    """Normalize a COM timestamp; None for missing or Outlook's null date."""
    if not isinstance(value, datetime):
        return None
    if value.year >= OUTLOOK_NULL_YEAR:
        return None
    # pywin32 stamps Outlook's local wall-clock time with a UTC tzinfo
    if value.tzinfo is not None:
        value = value.replace(tzinfo=None)
    return value


def com_count(collection: Any) -> int:
    try:
        return int(getattr(collection, "Count", 0))
    except Exception:
        return 0


def iter_com_collection(collection: Any) -> Iterator[Any]:
    """Yield members of a 1-based COM collection (Folders, Recipients, ...)."""
    for i in range(1, com_count(collection) + 1):
        yield collection.Item(i)
