from typing import Optional

from actions.common import ActionContext, run_action
from models import EventMode
from queries import events as event_queries
from schemas import EventCreate, EventResponse, EventUpdate
from views import event_paths


def _present(event) -> Optional[EventResponse]:
    return EventResponse.model_validate(event) if event is not None else None


def _event_values(payload, exclude_unset: bool = False) -> dict:
    values = payload.model_dump(exclude_unset=exclude_unset)
    mode = values.get("event_mode")
    if mode is not None:
        values["event_mode"] = EventMode(getattr(mode, "value", mode))
    return values


def create_event_action(ctx: ActionContext, payload: EventCreate):
    return run_action(
        ctx,
        lambda: event_queries.create_event(ctx.db, ctx.identity.id, _event_values(payload)),
        permission="create events",
        message="Event created successfully",
        fallback="Failed to create event",
        invalidate=lambda event: event_paths(event.id),
        present=_present,
    )


def update_event_action(ctx: ActionContext, event_id: str, payload: EventUpdate):
    return run_action(
        ctx,
        lambda: event_queries.update_event(ctx.db, event_id, _event_values(payload, exclude_unset=True)),
        permission="update events",
        message="Event updated successfully",
        fallback="Failed to update event",
        invalidate=event_paths(event_id),
        present=_present,
    )


def delete_event_action(ctx: ActionContext, event_id: str):
    return run_action(
        ctx,
        lambda: event_queries.delete_event(ctx.db, event_id),
        permission="delete events",
        message="Event deleted successfully",
        fallback="Failed to delete event",
        invalidate=event_paths(event_id),
    )


def toggle_event_status_action(ctx: ActionContext, event_id: str, is_published: bool):
    state = "published" if is_published else "unpublished"
    return run_action(
        ctx,
        lambda: event_queries.toggle_event_status(ctx.db, event_id, is_published),
        permission="change event status",
        message=f"Event {state} successfully",
        fallback="Failed to update event status",
        invalidate=event_paths(event_id),
        present=_present,
    )
