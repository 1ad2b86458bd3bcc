from __future__ import annotations

import logging
from datetime import datetime, timezone

from config import DUPLICATE_REGISTRATION_CHECK
from database import Base, engine, get_db
from models import ProfileRole, SystemConfig
from queries import profiles as profile_queries
from queries.system_config import DUPLICATE_REGISTRATION_CHECK_KEY
from results import QueryResult

logger = logging.getLogger(__name__)

BOOTSTRAP_MARKER_KEY = "bootstrap:club_portal:v1"


def has_bootstrap_marker() -> bool:
    Base.metadata.create_all(bind=engine, tables=[SystemConfig.__table__])
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == BOOTSTRAP_MARKER_KEY).first()
        return marker is not None
    finally:
        db.close()


def set_bootstrap_marker() -> None:
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == BOOTSTRAP_MARKER_KEY).first()
        value = datetime.now(timezone.utc).isoformat()
        if marker:
            marker.value = value
        else:
            db.add(SystemConfig(key=BOOTSTRAP_MARKER_KEY, value=value))
        db.commit()
    finally:
        db.close()


def clear_bootstrap_marker() -> bool:
    db = next(get_db())
    try:
        marker = db.query(SystemConfig).filter(SystemConfig.key == BOOTSTRAP_MARKER_KEY).first()
        if not marker:
            return False
        db.delete(marker)
        db.commit()
        return True
    finally:
        db.close()


def ensure_default_config(db) -> None:
    duplicate_check = db.query(SystemConfig).filter(SystemConfig.key == DUPLICATE_REGISTRATION_CHECK_KEY).first()
    if not duplicate_check:
        db.add(SystemConfig(key=DUPLICATE_REGISTRATION_CHECK_KEY, value="true" if DUPLICATE_REGISTRATION_CHECK else "false"))
        db.commit()
        logger.info("Seeded %s=%s", DUPLICATE_REGISTRATION_CHECK_KEY, DUPLICATE_REGISTRATION_CHECK)


def run_bootstrap() -> None:
    Base.metadata.create_all(bind=engine)
    db = next(get_db())
    try:
        ensure_default_config(db)
    finally:
        db.close()


def promote_profile(email: str, role: ProfileRole) -> QueryResult:
    """Direct administrative role change; there is no action for this."""
    db = next(get_db())
    try:
        return profile_queries.set_profile_role(db, email, role)
    finally:
        db.close()
