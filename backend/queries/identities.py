from typing import Optional

from sqlalchemy.orm import Session

from models import Identity
from queries.common import stamp_write
from results import ErrorKind, QueryResult, store_call
from time_utils import now_utc


@store_call("Failed to fetch identity")
def get_identity_by_id(db: Session, identity_id: str) -> QueryResult[Identity]:
    identity = db.query(Identity).filter(Identity.id == identity_id).first()
    if not identity:
        return QueryResult.not_found("Identity")
    return QueryResult.ok(identity)


@store_call("Failed to fetch identity")
def find_identity_by_email(db: Session, email: str) -> QueryResult[Optional[Identity]]:
    identity = db.query(Identity).filter(Identity.email == email.strip().lower()).limit(1).one_or_none()
    return QueryResult.ok(identity)


@store_call("Failed to create account")
def create_identity(db: Session, email: str, hashed_password: str, metadata: Optional[dict] = None) -> QueryResult[Identity]:
    normalized = email.strip().lower()
    if db.query(Identity.id).filter(Identity.email == normalized).first():
        return QueryResult.fail("An account with this email already exists", ErrorKind.CONFLICT)
    identity = Identity(
        **stamp_write(
            {"email": normalized, "hashed_password": hashed_password, "user_metadata": metadata or {}},
            insert=True,
        )
    )
    db.add(identity)
    db.commit()
    db.refresh(identity)
    return QueryResult.ok(identity)


@store_call("Failed to record sign-in")
def touch_sign_in(db: Session, identity: Identity) -> QueryResult[Identity]:
    now = now_utc()
    identity.last_sign_in_at = now
    identity.updated_at = now
    db.commit()
    db.refresh(identity)
    return QueryResult.ok(identity)
