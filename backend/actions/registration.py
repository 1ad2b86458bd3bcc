"""Public event registration and its self-service status check."""

from actions.common import ActionContext, run_action
from config import DUPLICATE_REGISTRATION_CHECK
from queries import participants as participant_queries
from queries import system_config as config_queries
from results import ActionResult, ErrorKind, QueryResult
from schemas import (
    DuplicateCheckResponse,
    ParticipantResponse,
    RegistrationRequest,
    RegistrationResponse,
    RegistrationResultResponse,
    RegistrationStatusResponse,
)
from views import registration_paths

DUPLICATE_PARTICIPANT_MESSAGE = "A participant with this email or student ID already exists for this institution"


def duplicate_check_enabled(db) -> QueryResult[bool]:
    return config_queries.get_flag(db, config_queries.DUPLICATE_REGISTRATION_CHECK_KEY, DUPLICATE_REGISTRATION_CHECK)


def _register(db, event_id: str, payload: RegistrationRequest) -> QueryResult:
    check = duplicate_check_enabled(db)
    if not check.success:
        return check
    if check.data:
        existing = participant_queries.find_existing_participant(
            db, event_id, payload.email, payload.id_at_institution, payload.institution
        )
        if not existing.success:
            return existing
        if existing.data is not None:
            return QueryResult.fail(DUPLICATE_PARTICIPANT_MESSAGE, ErrorKind.CONFLICT)

    values = payload.model_dump(exclude={"competitions"})
    return participant_queries.register_for_event(db, event_id, values, payload.competitions)


def _present_registration(result):
    return RegistrationResultResponse(
        participant=ParticipantResponse.model_validate(result["participant"]),
        registrations=[RegistrationResponse.model_validate(row) for row in result["registrations"]],
    )


def register_for_event_action(ctx: ActionContext, event_id: str, payload: RegistrationRequest) -> ActionResult:
    # Public entry point: no identity needed; every registration starts Pending.
    return run_action(
        ctx,
        lambda: _register(ctx.db, event_id, payload),
        require_auth=False,
        message="Registration successful, organizers will verify and reach out to you shortly",
        fallback="Failed to process registration",
        invalidate=registration_paths(event_id),
        present=_present_registration,
    )


def _present_status(registration):
    return RegistrationStatusResponse(
        id=registration.id,
        event_id=registration.event_id,
        competition_title=registration.competition.title if registration.competition else None,
        status=registration.status.value,
        created_at=registration.created_at,
    )


def get_registration_status_action(ctx: ActionContext, registration_id: str) -> ActionResult:
    """Read-only lookup for registrants; it never changes a status."""
    return run_action(
        ctx,
        lambda: participant_queries.get_registration(ctx.db, registration_id),
        require_auth=False,
        message="Registration found",
        fallback="Failed to fetch registration",
        present=_present_status,
    )


def get_duplicate_registration_check_action(ctx: ActionContext) -> ActionResult:
    return run_action(
        ctx,
        lambda: duplicate_check_enabled(ctx.db),
        permission="view registration settings",
        message="Duplicate registration check loaded",
        fallback="Failed to read configuration",
        present=lambda enabled: DuplicateCheckResponse(enabled=enabled),
    )


def set_duplicate_registration_check_action(ctx: ActionContext, enabled: bool) -> ActionResult:
    state = "enabled" if enabled else "disabled"
    return run_action(
        ctx,
        lambda: config_queries.set_flag(ctx.db, config_queries.DUPLICATE_REGISTRATION_CHECK_KEY, enabled),
        permission="change registration settings",
        message=f"Duplicate registration check {state}",
        fallback="Failed to update configuration",
        present=lambda value: DuplicateCheckResponse(enabled=value),
    )
