from typing import List

from actions.common import ActionContext, check_caller, run_action
from ordering import validate_submission
from queries import competitions as competition_queries
from results import ActionResult
from schemas import CompetitionCreate, CompetitionOrderItem, CompetitionResponse, CompetitionUpdate
from views import competition_paths


def _present(competition):
    return CompetitionResponse.model_validate(competition) if competition is not None else None


def create_competition_action(ctx: ActionContext, event_id: str, payload: CompetitionCreate):
    return run_action(
        ctx,
        lambda: competition_queries.create_competition(ctx.db, event_id, payload.model_dump()),
        permission="create competitions",
        message="Competition created successfully",
        fallback="Failed to create competition",
        invalidate=competition_paths(event_id),
        present=_present,
    )


def update_competition_action(ctx: ActionContext, competition_id: str, payload: CompetitionUpdate):
    return run_action(
        ctx,
        lambda: competition_queries.update_competition(ctx.db, competition_id, payload.model_dump(exclude_unset=True)),
        permission="update competitions",
        message="Competition updated successfully",
        fallback="Failed to update competition",
        invalidate=lambda competition: competition_paths(competition.event_id),
        present=_present,
    )


def delete_competition_action(ctx: ActionContext, competition_id: str):
    return run_action(
        ctx,
        lambda: competition_queries.delete_competition(ctx.db, competition_id),
        permission="delete competitions",
        message="Competition deleted successfully",
        fallback="Failed to delete competition",
        invalidate=lambda deleted: competition_paths(deleted["event_id"]),
    )


def toggle_competition_status_action(ctx: ActionContext, competition_id: str, is_published: bool):
    state = "published" if is_published else "unpublished"
    return run_action(
        ctx,
        lambda: competition_queries.toggle_competition_status(ctx.db, competition_id, is_published),
        permission="change competition status",
        message=f"Competition {state} successfully",
        fallback="Failed to update competition status",
        invalidate=lambda competition: competition_paths(competition.event_id),
        present=_present,
    )


def update_competition_order_action(ctx: ActionContext, event_id: str, competitions: List[CompetitionOrderItem]):
    """Persist a caller-computed order; the submitted orders are stored as given."""
    denied = check_caller(ctx, "reorder competitions")
    if denied is not None:
        return denied
    submission = validate_submission(item.model_dump() if hasattr(item, "model_dump") else dict(item) for item in competitions)
    if not submission.success:
        return ActionResult.fail(submission.error, submission.error_kind)
    return run_action(
        ctx,
        lambda: competition_queries.update_competition_order(ctx.db, event_id, submission.data),
        permission="reorder competitions",
        message="Competition order updated successfully",
        fallback="Failed to update competition order",
        invalidate=competition_paths(event_id),
    )
