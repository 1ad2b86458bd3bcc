from typing import Optional

from sqlalchemy.orm import Session

from models import Profile, ProfileRole
from queries.common import apply_updates, stamp_write
from results import QueryResult, store_call

# Role and email only change through direct administrative updates.
PROFILE_READONLY_FIELDS = {"role", "email"}


@store_call("Failed to fetch user profile")
def get_profile_by_id(db: Session, user_id: str) -> QueryResult[Profile]:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        return QueryResult.not_found("Profile")
    return QueryResult.ok(profile)


@store_call("Failed to fetch user profile")
def find_profile_by_email(db: Session, email: str) -> QueryResult[Optional[Profile]]:
    """Single round trip; "no profile yet" is a normal outcome, not an error."""
    profile = db.query(Profile).filter(Profile.email == email.strip().lower()).limit(1).one_or_none()
    return QueryResult.ok(profile)


@store_call("Failed to create user profile")
def create_profile(db: Session, user_id: str, email: str, name: str = "", batch: Optional[str] = None) -> QueryResult[Profile]:
    profile = Profile(
        id=user_id,
        role=ProfileRole.MEMBER,
        **stamp_write({"email": email.strip().lower(), "name": name or "", "batch": batch or None}, insert=True),
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return QueryResult.ok(profile)


@store_call("Failed to update user profile")
def update_profile(db: Session, user_id: str, values: dict) -> QueryResult[Profile]:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        return QueryResult.not_found("Profile")
    apply_updates(profile, stamp_write(values, protected=PROFILE_READONLY_FIELDS))
    db.commit()
    db.refresh(profile)
    return QueryResult.ok(profile)


@store_call("Failed to update user role")
def set_profile_role(db: Session, email: str, role: ProfileRole) -> QueryResult[Profile]:
    """Administrative role change; used by the bootstrap CLI only."""
    profile = db.query(Profile).filter(Profile.email == email.strip().lower()).first()
    if not profile:
        return QueryResult.not_found("Profile")
    profile.role = role
    apply_updates(profile, stamp_write({}))
    db.commit()
    db.refresh(profile)
    return QueryResult.ok(profile)
