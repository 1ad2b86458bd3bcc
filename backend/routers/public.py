from fastapi import APIRouter, Depends, status

from actions.catalog import (
    about_view,
    category_resources_view,
    member_sessions_view,
    public_event_view,
    public_events_view,
    public_resources_view,
)
from actions.common import ActionContext
from actions.registration import get_registration_status_action, register_for_event_action
from actions.resources import increment_resource_view_action
from routers.shared import action_response, cached_response
from schemas import RegistrationRequest
from security import get_action_context

router = APIRouter()


@router.get("/")
def root():
    return {"message": "Club portal API is running"}


@router.get("/health")
def health_check():
    return {"status": "healthy"}


@router.get("/events")
def list_events(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/events", lambda: public_events_view(ctx))


@router.get("/events/{event_id}")
def get_event(event_id: str, ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, f"/events/{event_id}", lambda: public_event_view(ctx, event_id))


@router.post("/events/{event_id}/register")
def register_for_event(event_id: str, payload: RegistrationRequest, ctx: ActionContext = Depends(get_action_context)):
    return action_response(register_for_event_action(ctx, event_id, payload), status.HTTP_201_CREATED)


@router.get("/registrations/{registration_id}/status")
def get_registration_status(registration_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(get_registration_status_action(ctx, registration_id))


@router.get("/about")
def about(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/about", lambda: about_view(ctx))


@router.get("/about/sessions")
def about_sessions(ctx: ActionContext = Depends(get_action_context)):
    return action_response(member_sessions_view(ctx))


@router.get("/resources")
def list_resources(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/resources", lambda: public_resources_view(ctx))


@router.get("/resources/featured")
def list_featured_resources(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/resources/featured", lambda: public_resources_view(ctx, featured_only=True))


@router.get("/resources/{category}")
def list_category_resources(category: str, ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, f"/resources/{category}", lambda: category_resources_view(ctx, category))


@router.post("/resources/{resource_id}/view")
def record_resource_view(resource_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(increment_resource_view_action(ctx, resource_id))
