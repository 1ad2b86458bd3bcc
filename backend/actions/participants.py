from typing import Optional

from actions.common import ActionContext, run_action
from participant_reports import export_rows, filter_participant_groups, render_csv, render_xlsx, summarize_participants
from queries import participants as participant_queries
from registration_state import check_transition, coerce_status
from results import ActionResult, QueryResult
from schemas import (
    ExportFormatEnum,
    ParticipantGroupResponse,
    ParticipantListResponse,
    ParticipantResponse,
    ParticipantStatsResponse,
    RegistrationDetailResponse,
    RegistrationResponse,
)
from views import participant_paths


def _update_one(db, registration_id: str, status) -> QueryResult:
    target = coerce_status(status)
    if not target.success:
        return target
    current = participant_queries.get_registration(db, registration_id)
    if not current.success:
        return current
    allowed = check_transition(current.data.status, target.data)
    if not allowed.success:
        return allowed
    return participant_queries.update_registration_status(db, registration_id, allowed.data)


def update_participant_status_action(ctx: ActionContext, registration_id: str, status: str) -> ActionResult:
    return run_action(
        ctx,
        lambda: _update_one(ctx.db, registration_id, status),
        permission="update participant status",
        message=lambda registration: f"Participant status updated to {registration.status.value}",
        fallback="Failed to update participant status",
        invalidate=lambda registration: participant_paths(registration.event_id),
        present=RegistrationResponse.model_validate,
    )


def _update_all(db, participant_id: str, event_id: str, status) -> QueryResult:
    target = coerce_status(status)
    if not target.success:
        return target
    return participant_queries.update_all_registration_statuses(db, participant_id, event_id, target.data)


def update_all_participant_statuses_action(
    ctx: ActionContext, participant_id: str, event_id: str, status: str
) -> ActionResult:
    """Move every registration of one participant within one event to the same status."""
    label = coerce_status(status)
    return run_action(
        ctx,
        lambda: _update_all(ctx.db, participant_id, event_id, status),
        permission="update participant statuses",
        message=f"All registrations for participant updated to {label.data.value if label.success else status}",
        fallback="Failed to update all participant statuses",
        invalidate=participant_paths(event_id),
        present=lambda rows: [RegistrationResponse.model_validate(row) for row in rows],
    )


def _present_groups(groups):
    return [
        ParticipantGroupResponse(
            participant=ParticipantResponse.model_validate(group["participant"]),
            registrations=[RegistrationDetailResponse.model_validate(r) for r in group["registrations"]],
        )
        for group in groups
    ]


def list_event_participants_action(
    ctx: ActionContext,
    event_id: str,
    search: Optional[str] = None,
    competition_id: Optional[str] = None,
    status: Optional[str] = None,
) -> ActionResult:
    def present(groups):
        filtered = filter_participant_groups(groups, search=search, competition_id=competition_id, status=status)
        return ParticipantListResponse(
            participants=_present_groups(filtered),
            stats=ParticipantStatsResponse(**summarize_participants(groups)),
        )

    return run_action(
        ctx,
        lambda: participant_queries.get_event_participants_detailed(ctx.db, event_id),
        permission="view participants",
        message="Participants loaded",
        fallback="Failed to fetch event participants",
        present=present,
    )


def export_event_participants_action(ctx: ActionContext, event_id: str, export_format: ExportFormatEnum) -> ActionResult:
    """Registrations of one event as CSV text or XLSX bytes in ``data``."""

    def render(registrations):
        rows = export_rows(registrations)
        if export_format == ExportFormatEnum.XLSX:
            return render_xlsx(rows)
        return render_csv(rows)

    return run_action(
        ctx,
        lambda: participant_queries.list_event_registrations(ctx.db, event_id),
        permission="export participants",
        message="Participants exported",
        fallback="Failed to export participants",
        present=render,
    )
