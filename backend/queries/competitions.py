from typing import Dict, List

from sqlalchemy import bindparam, func, update
from sqlalchemy.orm import Session

from models import Competition, Event
from queries.common import apply_updates, stamp_write
from results import ErrorKind, QueryResult, store_call
from time_utils import now_utc

# display_order is owned by the ordering endpoints; event_id never moves.
COMPETITION_OWNED_FIELDS = {"display_order", "event_id"}


@store_call("Failed to fetch competitions")
def list_event_competitions(db: Session, event_id: str, published_only: bool = False) -> QueryResult[List[Competition]]:
    query = db.query(Competition).filter(Competition.event_id == event_id)
    if published_only:
        query = query.filter(Competition.is_published.is_(True))
    competitions = query.order_by(Competition.display_order.asc(), Competition.created_at.asc()).all()
    return QueryResult.ok(competitions)


@store_call("Failed to fetch competition")
def get_competition(db: Session, competition_id: str) -> QueryResult[Competition]:
    competition = db.query(Competition).filter(Competition.id == competition_id).first()
    if not competition:
        return QueryResult.not_found("Competition")
    return QueryResult.ok(competition)


@store_call("Failed to create competition")
def create_competition(db: Session, event_id: str, values: dict) -> QueryResult[Competition]:
    if not db.query(Event.id).filter(Event.id == event_id).first():
        return QueryResult.not_found("Event")
    next_order = db.query(func.count(Competition.id)).filter(Competition.event_id == event_id).scalar() or 0
    competition = Competition(
        event_id=event_id,
        display_order=int(next_order),
        **stamp_write(values, insert=True, protected=COMPETITION_OWNED_FIELDS),
    )
    db.add(competition)
    db.commit()
    db.refresh(competition)
    return QueryResult.ok(competition)


def _update_competition(db: Session, competition_id: str, values: dict) -> QueryResult[Competition]:
    competition = db.query(Competition).filter(Competition.id == competition_id).first()
    if not competition:
        return QueryResult.not_found("Competition")
    apply_updates(competition, stamp_write(values, protected=COMPETITION_OWNED_FIELDS))
    db.commit()
    db.refresh(competition)
    return QueryResult.ok(competition)


@store_call("Failed to update competition")
def update_competition(db: Session, competition_id: str, values: dict) -> QueryResult[Competition]:
    return _update_competition(db, competition_id, values)


@store_call("Failed to toggle competition status")
def toggle_competition_status(db: Session, competition_id: str, is_published: bool) -> QueryResult[Competition]:
    return _update_competition(db, competition_id, {"is_published": bool(is_published)})


@store_call("Failed to delete competition")
def delete_competition(db: Session, competition_id: str) -> QueryResult[Dict]:
    competition = db.query(Competition).filter(Competition.id == competition_id).first()
    if not competition:
        return QueryResult.not_found("Competition")
    event_id = competition.event_id
    removed_order = competition.display_order
    db.delete(competition)
    db.flush()
    # Close the gap so the remaining siblings stay a dense 0..n-1 run.
    (
        db.query(Competition)
        .filter(Competition.event_id == event_id, Competition.display_order > removed_order)
        .update(
            {Competition.display_order: Competition.display_order - 1, Competition.updated_at: now_utc()},
            synchronize_session=False,
        )
    )
    db.commit()
    return QueryResult.ok({"id": competition_id, "event_id": event_id})


@store_call("Failed to update competition order")
def update_competition_order(db: Session, event_id: str, assignments: List[Dict]) -> QueryResult[None]:
    """Persist a full order reassignment as one batched UPDATE in one transaction.

    ``assignments`` is ``[{"id": ..., "display_order": ...}, ...]`` as computed
    by the caller; no order is recomputed here.
    """
    if not assignments:
        return QueryResult.ok(None)
    ids = [item["id"] for item in assignments]
    known = {
        cid
        for (cid,) in db.query(Competition.id)
        .filter(Competition.event_id == event_id, Competition.id.in_(ids))
        .all()
    }
    missing = [cid for cid in ids if cid not in known]
    if missing:
        return QueryResult.fail(f"Competition not found: {missing[0]}", ErrorKind.NOT_FOUND)

    table = Competition.__table__
    stmt = (
        update(table)
        .where(table.c.id == bindparam("b_id"))
        .values(display_order=bindparam("b_order"), updated_at=bindparam("b_updated"))
    )
    now = now_utc()
    db.execute(
        stmt,
        [{"b_id": item["id"], "b_order": int(item["display_order"]), "b_updated": now} for item in assignments],
    )
    db.commit()
    return QueryResult.ok(None)
