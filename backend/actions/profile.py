from actions.common import ActionContext, run_action
from queries import profiles as profile_queries
from results import ActionResult, ErrorKind
from schemas import ProfileResponse, ProfileUpdate
from views import profile_paths


def get_profile_action(ctx: ActionContext) -> ActionResult:
    return run_action(
        ctx,
        lambda: profile_queries.get_profile_by_id(ctx.db, ctx.identity.id),
        message="Profile loaded",
        fallback="Failed to fetch user profile",
        present=ProfileResponse.model_validate,
    )


def update_profile_action(ctx: ActionContext, user_id: str, payload: ProfileUpdate) -> ActionResult:
    # Callers may only edit their own profile; role and email are not editable here.
    if ctx.identity is None:
        return ActionResult.fail("Unauthorized", ErrorKind.AUTH_REQUIRED)
    if ctx.identity.id != user_id:
        return ActionResult.fail("Unauthorized", ErrorKind.FORBIDDEN)
    return run_action(
        ctx,
        lambda: profile_queries.update_profile(ctx.db, user_id, payload.model_dump(exclude_unset=True)),
        require_auth=False,
        message="Profile updated successfully",
        fallback="Failed to update profile",
        invalidate=profile_paths(),
        present=ProfileResponse.model_validate,
    )
