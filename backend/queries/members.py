import re
from collections import OrderedDict
from typing import Dict, List

from sqlalchemy.orm import Session

from models import Member
from queries.common import apply_updates, stamp_write
from results import QueryResult, store_call

DESIGNATION_PRIORITY = [
    "president",
    "vice president",
    "general secretary",
    "organising secretary",
    "organizing secretary",
]
UNKNOWN_SESSION = "Unknown"
MODERATORS_SESSION = "moderators"


def _designation_key(member: Member):
    designation = (member.designation or "").strip().lower()
    if designation in DESIGNATION_PRIORITY:
        return (0, DESIGNATION_PRIORITY.index(designation), "")
    return (1, 0, designation)


def _session_key(session: str):
    # "2024-25" sorts after "2023-24" and "2019-20" after "2009-10": compare the numbers, not the text.
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", session)]


def sort_sessions(sessions: List[str]) -> List[str]:
    """Newest session first, then members without a session, with the moderators group always last."""
    trailing = (UNKNOWN_SESSION.lower(), MODERATORS_SESSION)
    regular = sorted(
        (s for s in sessions if s.lower() not in trailing),
        key=_session_key,
        reverse=True,
    )
    unknown = [s for s in sessions if s.lower() == UNKNOWN_SESSION.lower()]
    moderators = [s for s in sessions if s.lower() == MODERATORS_SESSION]
    return regular + unknown + moderators


@store_call("Failed to fetch members")
def list_members(db: Session) -> QueryResult[List[Member]]:
    members = db.query(Member).order_by(Member.created_at.desc()).all()
    return QueryResult.ok(members)


@store_call("Failed to fetch members by session")
def list_members_by_session(db: Session) -> QueryResult[Dict[str, List[Member]]]:
    members = db.query(Member).order_by(Member.position.asc()).all()
    grouped: Dict[str, List[Member]] = {}
    for member in members:
        grouped.setdefault(member.session or UNKNOWN_SESSION, []).append(member)

    ordered = OrderedDict()
    for session in sort_sessions(list(grouped.keys())):
        ordered[session] = sorted(grouped[session], key=_designation_key)
    return QueryResult.ok(ordered)


@store_call("Failed to fetch sessions")
def list_unique_sessions(db: Session) -> QueryResult[List[str]]:
    rows = db.query(Member.session).filter(Member.session.isnot(None)).distinct().all()
    sessions = [session for (session,) in rows if session]
    return QueryResult.ok(sort_sessions(sessions))


@store_call("Failed to fetch member")
def get_member(db: Session, member_id: str) -> QueryResult[Member]:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        return QueryResult.not_found("Member")
    return QueryResult.ok(member)


@store_call("Failed to create member")
def create_member(db: Session, values: dict) -> QueryResult[Member]:
    member = Member(**stamp_write(values, insert=True))
    db.add(member)
    db.commit()
    db.refresh(member)
    return QueryResult.ok(member)


@store_call("Failed to update member")
def update_member(db: Session, member_id: str, values: dict) -> QueryResult[Member]:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        return QueryResult.not_found("Member")
    apply_updates(member, stamp_write(values))
    db.commit()
    db.refresh(member)
    return QueryResult.ok(member)


@store_call("Failed to delete member")
def delete_member(db: Session, member_id: str) -> QueryResult[None]:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        return QueryResult.not_found("Member")
    db.delete(member)
    db.commit()
    return QueryResult.ok(None)
