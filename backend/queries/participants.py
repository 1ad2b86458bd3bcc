from typing import Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from models import Competition, Event, Participant, Registration, RegistrationStatus
from queries.common import stamp_write
from results import ErrorKind, QueryResult, store_call
from time_utils import as_utc, now_utc

PARTICIPANT_FIELDS = ("name", "institution", "level", "class_level", "id_at_institution", "email", "phone", "note")
PAYMENT_FIELDS = ("transaction_id", "payment_provider")


@store_call("Failed to register for event")
def register_for_event(db: Session, event_id: str, values: dict, competition_ids: List[str]) -> QueryResult[Dict]:
    """Create the participant and one Pending registration per competition in a single transaction."""
    event = db.query(Event).filter(Event.id == event_id, Event.is_published.is_(True)).first()
    if not event:
        return QueryResult.not_found("Event")
    if event.registration_deadline and as_utc(event.registration_deadline) < now_utc():
        return QueryResult.fail("Registration deadline has passed", ErrorKind.VALIDATION)

    selected = list(dict.fromkeys(competition_ids or []))
    if not selected:
        return QueryResult.fail("Select at least one competition", ErrorKind.VALIDATION)
    matched = {
        cid
        for (cid,) in db.query(Competition.id)
        .filter(
            Competition.event_id == event_id,
            Competition.is_published.is_(True),
            Competition.id.in_(selected),
        )
        .all()
    }
    if len(matched) != len(selected):
        return QueryResult.fail("Selected competitions do not belong to this event", ErrorKind.VALIDATION)

    participant_values = {key: values.get(key) for key in PARTICIPANT_FIELDS if key in values}
    participant_values["note"] = participant_values.get("note") or ""
    if participant_values.get("email"):
        participant_values["email"] = participant_values["email"].strip().lower()
    participant = Participant(**stamp_write(participant_values, insert=True))
    db.add(participant)
    db.flush()

    payment = {key: values.get(key) for key in PAYMENT_FIELDS}
    registrations = []
    for competition_id in selected:
        registration = Registration(
            participant_id=participant.id,
            event_id=event_id,
            competition_id=competition_id,
            status=RegistrationStatus.PENDING,
            **stamp_write(payment, insert=True),
        )
        db.add(registration)
        registrations.append(registration)
    db.commit()
    db.refresh(participant)
    for registration in registrations:
        db.refresh(registration)
    return QueryResult.ok({"participant": participant, "registrations": registrations})


@store_call("Failed to check existing participant")
def find_existing_participant(
    db: Session,
    event_id: str,
    email: Optional[str],
    id_at_institution: Optional[str],
    institution: Optional[str],
) -> QueryResult[Optional[Participant]]:
    """At most one participant of ``event_id`` sharing the email or the (institution id, institution) pair."""
    clauses = []
    if email:
        clauses.append(Participant.email == email.strip().lower())
    if id_at_institution and institution:
        clauses.append(and_(Participant.id_at_institution == id_at_institution, Participant.institution == institution))
    if not clauses:
        return QueryResult.ok(None)
    participant = (
        db.query(Participant)
        .join(Registration, Registration.participant_id == Participant.id)
        .filter(Registration.event_id == event_id, or_(*clauses))
        .limit(1)
        .one_or_none()
    )
    return QueryResult.ok(participant)


@store_call("Failed to fetch registration")
def get_registration(db: Session, registration_id: str) -> QueryResult[Registration]:
    registration = (
        db.query(Registration)
        .options(joinedload(Registration.participant), joinedload(Registration.competition))
        .filter(Registration.id == registration_id)
        .first()
    )
    if not registration:
        return QueryResult.not_found("Registration")
    return QueryResult.ok(registration)


@store_call("Failed to update participant status")
def update_registration_status(db: Session, registration_id: str, status: RegistrationStatus) -> QueryResult[Registration]:
    registration = db.query(Registration).filter(Registration.id == registration_id).first()
    if not registration:
        return QueryResult.not_found("Registration")
    registration.status = status
    registration.updated_at = now_utc()
    db.commit()
    db.refresh(registration)
    return QueryResult.ok(registration)


@store_call("Failed to update all participant statuses")
def update_all_registration_statuses(
    db: Session, participant_id: str, event_id: str, status: RegistrationStatus
) -> QueryResult[List[Registration]]:
    # One filtered UPDATE: either every matching registration moves or none does.
    (
        db.query(Registration)
        .filter(Registration.participant_id == participant_id, Registration.event_id == event_id)
        .update({Registration.status: status, Registration.updated_at: now_utc()}, synchronize_session=False)
    )
    db.commit()
    registrations = (
        db.query(Registration)
        .filter(Registration.participant_id == participant_id, Registration.event_id == event_id)
        .order_by(Registration.created_at.asc())
        .all()
    )
    return QueryResult.ok(registrations)


@store_call("Failed to fetch event participants")
def list_event_registrations(db: Session, event_id: str) -> QueryResult[List[Registration]]:
    registrations = (
        db.query(Registration)
        .options(joinedload(Registration.participant), joinedload(Registration.competition))
        .filter(Registration.event_id == event_id)
        .order_by(Registration.created_at.desc())
        .all()
    )
    return QueryResult.ok(registrations)


@store_call("Failed to fetch detailed event participants")
def get_event_participants_detailed(db: Session, event_id: str) -> QueryResult[List[Dict]]:
    """Registrations of an event grouped per participant, newest registration first."""
    result = list_event_registrations(db, event_id)
    if not result.success:
        return result
    grouped: Dict[str, Dict] = {}
    for registration in result.data:
        entry = grouped.setdefault(
            registration.participant_id,
            {"participant": registration.participant, "registrations": []},
        )
        entry["registrations"].append(registration)
    return QueryResult.ok(list(grouped.values()))
