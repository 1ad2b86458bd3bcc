from actions.common import ActionContext, run_action
from models import ResourceStatus
from queries import resources as resource_queries
from schemas import ResourceCreate, ResourceResponse, ResourceStatusEnum, ResourceUpdate
from views import resource_paths


def _present(resource):
    return ResourceResponse.model_validate(resource) if resource is not None else None


def _resource_values(payload, exclude_unset: bool = False) -> dict:
    values = payload.model_dump(exclude_unset=exclude_unset)
    status = values.get("status")
    if status is not None:
        values["status"] = ResourceStatus(getattr(status, "value", status))
    return values


def create_resource_action(ctx: ActionContext, payload: ResourceCreate):
    return run_action(
        ctx,
        lambda: resource_queries.create_resource(ctx.db, ctx.identity.id, _resource_values(payload)),
        permission="create resources",
        message="Resource created successfully",
        fallback="Failed to create resource",
        invalidate=resource_paths(),
        present=_present,
    )


def update_resource_action(ctx: ActionContext, resource_id: str, payload: ResourceUpdate):
    return run_action(
        ctx,
        lambda: resource_queries.update_resource(ctx.db, resource_id, _resource_values(payload, exclude_unset=True)),
        permission="update resources",
        message="Resource updated successfully",
        fallback="Failed to update resource",
        invalidate=resource_paths(),
        present=_present,
    )


def delete_resource_action(ctx: ActionContext, resource_id: str):
    return run_action(
        ctx,
        lambda: resource_queries.archive_resource(ctx.db, resource_id),
        permission="delete resources",
        message="Resource deleted successfully",
        fallback="Failed to delete resource",
        invalidate=resource_paths(),
    )


def toggle_resource_status_action(ctx: ActionContext, resource_id: str, status: ResourceStatusEnum):
    return run_action(
        ctx,
        lambda: resource_queries.set_resource_status(ctx.db, resource_id, ResourceStatus(getattr(status, "value", status))),
        permission="change resource status",
        message=lambda resource: f"Resource {resource.status.value.lower()} successfully",
        fallback="Failed to update resource status",
        invalidate=resource_paths(),
        present=_present,
    )


def toggle_resource_featured_action(ctx: ActionContext, resource_id: str, is_featured: bool):
    state = "featured" if is_featured else "unfeatured"
    return run_action(
        ctx,
        lambda: resource_queries.set_resource_featured(ctx.db, resource_id, is_featured),
        permission="change featured status",
        message=f"Resource {state} successfully",
        fallback="Failed to update featured status",
        invalidate=resource_paths(),
        present=_present,
    )


def increment_resource_view_action(ctx: ActionContext, resource_id: str):
    # Public: anyone opening a resource counts as a view.
    return run_action(
        ctx,
        lambda: resource_queries.increment_view_count(ctx.db, resource_id),
        require_auth=False,
        message="Resource view recorded",
        fallback="Failed to record resource view",
        invalidate=["/admin/resources"],
    )
