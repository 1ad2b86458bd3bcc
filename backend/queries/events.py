from typing import List

from sqlalchemy.orm import Session

from models import Event
from queries.common import apply_updates, stamp_write
from results import QueryResult, store_call
from time_utils import start_of_today_utc

EVENT_OWNED_FIELDS = {"created_by"}


@store_call("Failed to fetch events")
def list_all_events(db: Session) -> QueryResult[List[Event]]:
    events = db.query(Event).order_by(Event.event_date.desc().nullslast(), Event.created_at.desc()).all()
    return QueryResult.ok(events)


@store_call("Failed to fetch events")
def list_upcoming_events(db: Session) -> QueryResult[List[Event]]:
    events = (
        db.query(Event)
        .filter(Event.is_published.is_(True), Event.event_date >= start_of_today_utc())
        .order_by(Event.event_date.asc())
        .all()
    )
    return QueryResult.ok(events)


@store_call("Failed to fetch events")
def list_past_events(db: Session, limit: int = 6) -> QueryResult[List[Event]]:
    events = (
        db.query(Event)
        .filter(Event.is_published.is_(True), Event.event_date < start_of_today_utc())
        .order_by(Event.event_date.desc())
        .limit(limit)
        .all()
    )
    return QueryResult.ok(events)


@store_call("Failed to fetch event")
def get_event(db: Session, event_id: str) -> QueryResult[Event]:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return QueryResult.not_found("Event")
    return QueryResult.ok(event)


@store_call("Failed to fetch event")
def get_published_event(db: Session, event_id: str) -> QueryResult[Event]:
    event = db.query(Event).filter(Event.id == event_id, Event.is_published.is_(True)).first()
    if not event:
        return QueryResult.not_found("Event")
    return QueryResult.ok(event)


@store_call("Failed to create event")
def create_event(db: Session, user_id: str, values: dict) -> QueryResult[Event]:
    event = Event(created_by=user_id, **stamp_write(values, insert=True, protected=EVENT_OWNED_FIELDS))
    db.add(event)
    db.commit()
    db.refresh(event)
    return QueryResult.ok(event)


def _update_event(db: Session, event_id: str, values: dict) -> QueryResult[Event]:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return QueryResult.not_found("Event")
    apply_updates(event, stamp_write(values, protected=EVENT_OWNED_FIELDS))
    db.commit()
    db.refresh(event)
    return QueryResult.ok(event)


@store_call("Failed to update event")
def update_event(db: Session, event_id: str, values: dict) -> QueryResult[Event]:
    return _update_event(db, event_id, values)


@store_call("Failed to update event status")
def toggle_event_status(db: Session, event_id: str, is_published: bool) -> QueryResult[Event]:
    return _update_event(db, event_id, {"is_published": bool(is_published)})


@store_call("Failed to delete event")
def delete_event(db: Session, event_id: str) -> QueryResult[None]:
    # Competitions and registrations go with it through ON DELETE CASCADE.
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        return QueryResult.not_found("Event")
    db.delete(event)
    db.commit()
    return QueryResult.ok(None)
