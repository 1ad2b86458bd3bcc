from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from actions.catalog import admin_event_view, admin_events_view
from actions.common import ActionContext
from actions.competitions import (
    create_competition_action,
    delete_competition_action,
    toggle_competition_status_action,
    update_competition_action,
    update_competition_order_action,
)
from actions.events import create_event_action, delete_event_action, toggle_event_status_action, update_event_action
from actions.participants import (
    export_event_participants_action,
    list_event_participants_action,
    update_all_participant_statuses_action,
    update_participant_status_action,
)
from participant_reports import XLSX_MEDIA_TYPE
from routers.shared import action_response, cached_response
from schemas import (
    CompetitionCreate,
    CompetitionOrderUpdate,
    CompetitionUpdate,
    EventCreate,
    EventUpdate,
    ExportFormatEnum,
    PublishUpdate,
    StatusUpdate,
)
from security import get_action_context

router = APIRouter()


# Events
@router.get("/admin/events")
def list_events(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/admin/events", lambda: admin_events_view(ctx), permission="view events")


@router.post("/admin/events")
def create_event(payload: EventCreate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(create_event_action(ctx, payload), status.HTTP_201_CREATED)


@router.get("/admin/events/{event_id}")
def get_event(event_id: str, ctx: ActionContext = Depends(get_action_context)):
    return cached_response(
        ctx, f"/admin/events/{event_id}", lambda: admin_event_view(ctx, event_id), permission="view events"
    )


@router.put("/admin/events/{event_id}")
def update_event(event_id: str, payload: EventUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_event_action(ctx, event_id, payload))


@router.delete("/admin/events/{event_id}")
def delete_event(event_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(delete_event_action(ctx, event_id))


@router.put("/admin/events/{event_id}/publish")
def publish_event(event_id: str, payload: PublishUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(toggle_event_status_action(ctx, event_id, payload.is_published))


# Competitions
@router.post("/admin/events/{event_id}/competitions")
def create_competition(event_id: str, payload: CompetitionCreate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(create_competition_action(ctx, event_id, payload), status.HTTP_201_CREATED)


@router.put("/admin/events/{event_id}/competitions/order")
def reorder_competitions(event_id: str, payload: CompetitionOrderUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_competition_order_action(ctx, event_id, payload.competitions))


@router.put("/admin/competitions/{competition_id}")
def update_competition(competition_id: str, payload: CompetitionUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_competition_action(ctx, competition_id, payload))


@router.delete("/admin/competitions/{competition_id}")
def delete_competition(competition_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(delete_competition_action(ctx, competition_id))


@router.put("/admin/competitions/{competition_id}/publish")
def publish_competition(competition_id: str, payload: PublishUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(toggle_competition_status_action(ctx, competition_id, payload.is_published))


# Participants
@router.get("/admin/events/{event_id}/participants")
def list_participants(
    event_id: str,
    search: Optional[str] = None,
    competition_id: Optional[str] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    ctx: ActionContext = Depends(get_action_context),
):
    def run():
        return list_event_participants_action(ctx, event_id, search, competition_id, status_filter)

    # Filtered views are per-query; only the unfiltered list is cached.
    if search or competition_id or status_filter:
        return action_response(run())
    return cached_response(ctx, f"/admin/events/{event_id}/participants", run, permission="view participants")


@router.get("/admin/events/{event_id}/participants/export")
def export_participants(
    event_id: str,
    format: ExportFormatEnum = ExportFormatEnum.CSV,
    ctx: ActionContext = Depends(get_action_context),
):
    result = export_event_participants_action(ctx, event_id, format)
    if not result.success:
        return action_response(result)
    if format == ExportFormatEnum.XLSX:
        headers = {"Content-Disposition": f"attachment; filename=participants_{event_id}.xlsx"}
        return Response(content=result.data, media_type=XLSX_MEDIA_TYPE, headers=headers)
    headers = {"Content-Disposition": f"attachment; filename=participants_{event_id}.csv"}
    return Response(content=result.data, media_type="text/csv", headers=headers)


@router.put("/admin/registrations/{registration_id}/status")
def update_registration_status(registration_id: str, payload: StatusUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_participant_status_action(ctx, registration_id, payload.status))


@router.put("/admin/events/{event_id}/participants/{participant_id}/status")
def update_participant_statuses(
    event_id: str,
    participant_id: str,
    payload: StatusUpdate,
    ctx: ActionContext = Depends(get_action_context),
):
    return action_response(update_all_participant_statuses_action(ctx, participant_id, event_id, payload.status))
