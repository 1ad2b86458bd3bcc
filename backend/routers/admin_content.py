from fastapi import APIRouter, Depends, status

from actions.catalog import admin_members_view, admin_resources_view
from actions.common import ActionContext
from actions.members import create_member_action, delete_member_action, update_member_action
from actions.registration import get_duplicate_registration_check_action, set_duplicate_registration_check_action
from actions.resources import (
    create_resource_action,
    delete_resource_action,
    toggle_resource_featured_action,
    toggle_resource_status_action,
    update_resource_action,
)
from routers.shared import action_response, cached_response
from schemas import (
    FeaturedUpdate,
    FlagUpdate,
    MemberCreate,
    MemberUpdate,
    ResourceCreate,
    ResourceStatusUpdate,
    ResourceUpdate,
)
from security import get_action_context

router = APIRouter()


# Members
@router.get("/admin/members")
def list_members(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/admin/members", lambda: admin_members_view(ctx), permission="view members")


@router.post("/admin/members")
def create_member(payload: MemberCreate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(create_member_action(ctx, payload), status.HTTP_201_CREATED)


@router.put("/admin/members/{member_id}")
def update_member(member_id: str, payload: MemberUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_member_action(ctx, member_id, payload))


@router.delete("/admin/members/{member_id}")
def delete_member(member_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(delete_member_action(ctx, member_id))


# Resources
@router.get("/admin/resources")
def list_resources(ctx: ActionContext = Depends(get_action_context)):
    return cached_response(ctx, "/admin/resources", lambda: admin_resources_view(ctx), permission="view resources")


@router.post("/admin/resources")
def create_resource(payload: ResourceCreate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(create_resource_action(ctx, payload), status.HTTP_201_CREATED)


@router.put("/admin/resources/{resource_id}")
def update_resource(resource_id: str, payload: ResourceUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_resource_action(ctx, resource_id, payload))


@router.delete("/admin/resources/{resource_id}")
def delete_resource(resource_id: str, ctx: ActionContext = Depends(get_action_context)):
    return action_response(delete_resource_action(ctx, resource_id))


@router.put("/admin/resources/{resource_id}/status")
def update_resource_status(resource_id: str, payload: ResourceStatusUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(toggle_resource_status_action(ctx, resource_id, payload.status))


@router.put("/admin/resources/{resource_id}/featured")
def update_resource_featured(resource_id: str, payload: FeaturedUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(toggle_resource_featured_action(ctx, resource_id, payload.is_featured))


# Settings
@router.get("/admin/settings/duplicate-registration-check")
def get_duplicate_registration_check(ctx: ActionContext = Depends(get_action_context)):
    return action_response(get_duplicate_registration_check_action(ctx))


@router.put("/admin/settings/duplicate-registration-check")
def set_duplicate_registration_check(payload: FlagUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(set_duplicate_registration_check_action(ctx, payload.enabled))
