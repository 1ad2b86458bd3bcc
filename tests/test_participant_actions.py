from datetime import timedelta

from actions import participants as participant_actions
from actions import registration as registration_actions
from models import Event, Registration, RegistrationStatus
from queries import participants as participant_queries
from queries import system_config as config_queries
from results import ErrorKind
from schemas import ExportFormatEnum, RegistrationRequest
from time_utils import now_utc


def _request(competitions, email="rafi@example.com", id_at_institution="S-101", institution="City School", **extra):
    data = dict(
        name="Rafi Ahmed",
        institution=institution,
        level="School",
        class_level=9,
        id_at_institution=id_at_institution,
        email=email,
        phone="01700000000",
        competitions=competitions,
    )
    data.update(extra)
    return RegistrationRequest(**data)


def test_registration_always_starts_pending(anon_ctx, make_event, make_competition):
    event = make_event()
    a = make_competition(event, title="A")
    b = make_competition(event, title="B")
    result = registration_actions.register_for_event_action(
        anon_ctx, event.id, _request([a.id, b.id], transaction_id="TX-1", payment_provider="BKash")
    )
    assert result.success
    assert result.message == "Registration successful, organizers will verify and reach out to you shortly"
    assert [r.status.value for r in result.data.registrations] == ["Pending", "Pending"]
    assert {r.transaction_id for r in result.data.registrations} == {"TX-1"}
    assert result.data.participant.email == "rafi@example.com"


def test_registration_invalidates_event_views(anon_ctx, views, make_event, make_competition):
    event = make_event()
    competition = make_competition(event)
    for path in ("/events", f"/events/{event.id}", f"/admin/events/{event.id}/participants"):
        views.set(path, {"cached": True})
    registration_actions.register_for_event_action(anon_ctx, event.id, _request([competition.id]))
    assert views.paths() == []


def test_registration_rejects_foreign_or_hidden_competitions(db, anon_ctx, make_event, make_competition):
    event = make_event(title="Mine")
    other = make_event(title="Other")
    foreign = make_competition(other)
    hidden = make_competition(event, is_published=False)
    for competition_ids in ([foreign.id], [hidden.id]):
        result = registration_actions.register_for_event_action(anon_ctx, event.id, _request(competition_ids))
        assert result.success is False
        assert result.error_kind == ErrorKind.VALIDATION
    assert db.query(Registration).count() == 0


def test_registration_requires_open_published_event(db, anon_ctx, make_event, make_competition):
    draft = make_event(title="Draft", is_published=False)
    draft_comp = make_competition(draft)
    closed = make_event(title="Closed", deadline_days=-1)
    closed_comp = make_competition(closed)

    unpublished = registration_actions.register_for_event_action(anon_ctx, draft.id, _request([draft_comp.id]))
    assert unpublished.error == "Event not found"
    late = registration_actions.register_for_event_action(anon_ctx, closed.id, _request([closed_comp.id]))
    assert late.error == "Registration deadline has passed"


def test_duplicate_check_is_off_by_default(db, anon_ctx, make_event, make_competition):
    event = make_event()
    competition = make_competition(event)
    first = registration_actions.register_for_event_action(anon_ctx, event.id, _request([competition.id]))
    second = registration_actions.register_for_event_action(anon_ctx, event.id, _request([competition.id]))
    assert first.success and second.success


def test_duplicate_check_when_enabled(db, admin_ctx, anon_ctx, make_event, make_competition):
    enabled = registration_actions.set_duplicate_registration_check_action(admin_ctx, True)
    assert enabled.message == "Duplicate registration check enabled"
    event = make_event()
    other_event = make_event(title="Other")
    competition = make_competition(event)
    other_competition = make_competition(other_event)

    assert registration_actions.register_for_event_action(anon_ctx, event.id, _request([competition.id])).success

    same_email = registration_actions.register_for_event_action(
        anon_ctx, event.id, _request([competition.id], id_at_institution="S-999")
    )
    assert same_email.success is False
    assert same_email.error_kind == ErrorKind.CONFLICT
    assert same_email.error == registration_actions.DUPLICATE_PARTICIPANT_MESSAGE

    same_student = registration_actions.register_for_event_action(
        anon_ctx, event.id, _request([competition.id], email="other@example.com")
    )
    assert same_student.success is False

    elsewhere = registration_actions.register_for_event_action(anon_ctx, other_event.id, _request([other_competition.id]))
    assert elsewhere.success


def test_only_elevated_callers_change_the_duplicate_check(db, member_ctx):
    result = registration_actions.set_duplicate_registration_check_action(member_ctx, True)
    assert result.error == "Insufficient permissions to change registration settings"
    flag = config_queries.get_flag(db, config_queries.DUPLICATE_REGISTRATION_CHECK_KEY, False)
    assert flag.data is False


def _register(ctx, event, competitions):
    result = registration_actions.register_for_event_action(ctx, event.id, _request([c.id for c in competitions]))
    assert result.success
    return result.data


def test_single_status_update(db, admin_ctx, anon_ctx, views, make_event, make_competition):
    event = make_event()
    competition = make_competition(event)
    registration = _register(anon_ctx, event, [competition]).registrations[0]
    views.set(f"/admin/events/{event.id}/participants", {"cached": True})

    result = participant_actions.update_participant_status_action(admin_ctx, registration.id, "confirmed")
    assert result.success
    assert result.message == "Participant status updated to Confirmed"
    assert result.data.status.value == "Confirmed"
    assert views.get(f"/admin/events/{event.id}/participants") is None


def test_unknown_status_is_rejected(admin_ctx, anon_ctx, make_event, make_competition, monkeypatch):
    event = make_event()
    competition = make_competition(event)
    registration = _register(anon_ctx, event, [competition]).registrations[0]
    calls = []
    monkeypatch.setattr(participant_queries, "update_registration_status", lambda *a: calls.append(a))
    result = participant_actions.update_participant_status_action(admin_ctx, registration.id, "Waitlisted")
    assert result.error_kind == ErrorKind.VALIDATION
    assert calls == []


def test_bulk_update_moves_one_participant_within_one_event(db, admin_ctx, anon_ctx, make_event, make_competition):
    event = make_event(title="E")
    other = make_event(title="Other")
    c1 = make_competition(event, title="C1")
    c2 = make_competition(event, title="C2")
    other_comp = make_competition(other)
    mine = _register(anon_ctx, event, [c1, c2])
    same_participant_elsewhere = Registration(
        participant_id=mine.participant.id,
        event_id=other.id,
        competition_id=other_comp.id,
        status=RegistrationStatus.PENDING,
    )
    db.add(same_participant_elsewhere)
    db.commit()
    elsewhere_id = same_participant_elsewhere.id

    result = participant_actions.update_all_participant_statuses_action(
        admin_ctx, mine.participant.id, event.id, "Confirmed"
    )
    assert result.success
    assert result.message == "All registrations for participant updated to Confirmed"
    assert len(result.data) == 2

    db.expire_all()
    in_event = db.query(Registration).filter(
        Registration.participant_id == mine.participant.id, Registration.event_id == event.id
    )
    assert {r.status for r in in_event} == {RegistrationStatus.CONFIRMED}
    untouched = db.query(Registration).filter(Registration.id == elsewhere_id).one()
    assert untouched.participant_id == mine.participant.id
    assert untouched.status == RegistrationStatus.PENDING


def test_self_service_status_check_is_read_only(anon_ctx, make_event, make_competition):
    event = make_event()
    competition = make_competition(event, title="Quiz")
    registration = _register(anon_ctx, event, [competition]).registrations[0]
    result = registration_actions.get_registration_status_action(anon_ctx, registration.id)
    assert result.success
    assert result.data.status.value == "Pending"
    assert result.data.competition_title == "Quiz"
    payload = result.to_payload()
    assert "email" not in payload["data"]


def test_participant_listing_filters_and_stats(db, admin_ctx, anon_ctx, make_event, make_competition):
    event = make_event()
    quiz = make_competition(event, title="Quiz")
    essay = make_competition(event, title="Essay")
    first = _register(anon_ctx, event, [quiz, essay])
    second = registration_actions.register_for_event_action(
        anon_ctx, event.id, _request([essay.id], name="Nadia Islam", email="nadia@example.com", id_at_institution="S-7")
    ).data
    participant_actions.update_participant_status_action(admin_ctx, first.registrations[0].id, "Confirmed")
    participant_actions.update_all_participant_statuses_action(admin_ctx, second.participant.id, event.id, "Rejected")

    everyone = participant_actions.list_event_participants_action(admin_ctx, event.id)
    assert everyone.data.stats.total_participants == 2
    assert everyone.data.stats.confirmed == 1
    assert everyone.data.stats.rejected == 1
    assert everyone.data.stats.total_registrations == 3

    by_search = participant_actions.list_event_participants_action(admin_ctx, event.id, search="nadia")
    assert [g.participant.name for g in by_search.data.participants] == ["Nadia Islam"]
    by_competition = participant_actions.list_event_participants_action(admin_ctx, event.id, competition_id=quiz.id)
    assert [g.participant.name for g in by_competition.data.participants] == ["Rafi Ahmed"]
    by_status = participant_actions.list_event_participants_action(admin_ctx, event.id, status="rejected")
    assert [g.participant.name for g in by_status.data.participants] == ["Nadia Islam"]


def test_export_csv_has_one_row_per_registration(admin_ctx, anon_ctx, member_ctx, make_event, make_competition):
    event = make_event()
    quiz = make_competition(event, title="Quiz")
    essay = make_competition(event, title="Essay")
    _register(anon_ctx, event, [quiz, essay])

    denied = participant_actions.export_event_participants_action(member_ctx, event.id, ExportFormatEnum.CSV)
    assert denied.error_kind == ErrorKind.FORBIDDEN

    exported = participant_actions.export_event_participants_action(admin_ctx, event.id, ExportFormatEnum.CSV)
    lines = exported.data.strip().splitlines()
    assert lines[0].startswith("Registration ID,Name,Email")
    assert len(lines) == 3

    workbook = participant_actions.export_event_participants_action(admin_ctx, event.id, ExportFormatEnum.XLSX)
    assert workbook.data[:2] == b"PK"


def test_deadline_is_compared_in_utc(db, anon_ctx, make_event, make_competition):
    event = make_event(deadline_days=None)
    event.registration_deadline = now_utc() + timedelta(hours=2)
    db.commit()
    competition = make_competition(event)
    result = registration_actions.register_for_event_action(anon_ctx, event.id, _request([competition.id]))
    assert result.success
    assert db.query(Event).count() == 1
