from datetime import datetime
from typing import Any, Dict, Iterable

from time_utils import as_utc, now_utc

PROTECTED_FIELDS = {"id", "created_at", "updated_at"}


def _normalize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return as_utc(value)
    return value


def stamp_write(values: Dict[str, Any], *, insert: bool = False, protected: Iterable[str] = ()) -> Dict[str, Any]:
    """Drop caller-supplied keys we own (ids, timestamps) and stamp the write with the current time."""
    blocked = PROTECTED_FIELDS | set(protected)
    stamped = {key: _normalize_value(value) for key, value in values.items() if key not in blocked}
    now = now_utc()
    stamped["updated_at"] = now
    if insert:
        stamped["created_at"] = now
    return stamped


def apply_updates(row: Any, values: Dict[str, Any]) -> Any:
    columns = row.__table__.columns
    for key, value in values.items():
        if key in columns:
            setattr(row, key, value)
    return row
