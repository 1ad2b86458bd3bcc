from sqlalchemy.orm import Session

from models import SystemConfig
from results import QueryResult, store_call
from time_utils import now_utc

DUPLICATE_REGISTRATION_CHECK_KEY = "duplicate_registration_check"


def _to_flag(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@store_call("Failed to read configuration")
def get_flag(db: Session, key: str, default: bool) -> QueryResult[bool]:
    row = db.query(SystemConfig).filter(SystemConfig.key == key).limit(1).one_or_none()
    if row is None:
        return QueryResult.ok(default)
    return QueryResult.ok(_to_flag(row.value))


@store_call("Failed to update configuration")
def set_flag(db: Session, key: str, enabled: bool) -> QueryResult[bool]:
    row = db.query(SystemConfig).filter(SystemConfig.key == key).first()
    value = "true" if enabled else "false"
    if row:
        row.value = value
        row.updated_at = now_utc()
    else:
        db.add(SystemConfig(key=key, value=value, updated_at=now_utc()))
    db.commit()
    return QueryResult.ok(enabled)
