from actions.common import ActionContext, run_action
from queries import members as member_queries
from schemas import MemberCreate, MemberResponse, MemberUpdate
from views import member_paths


def _present(member):
    return MemberResponse.model_validate(member) if member is not None else None


def create_member_action(ctx: ActionContext, payload: MemberCreate):
    return run_action(
        ctx,
        lambda: member_queries.create_member(ctx.db, payload.model_dump()),
        permission="create members",
        message="Member created successfully",
        fallback="Failed to create member",
        invalidate=member_paths(),
        present=_present,
    )


def update_member_action(ctx: ActionContext, member_id: str, payload: MemberUpdate):
    return run_action(
        ctx,
        lambda: member_queries.update_member(ctx.db, member_id, payload.model_dump(exclude_unset=True)),
        permission="update members",
        message="Member updated successfully",
        fallback="Failed to update member",
        invalidate=member_paths(),
        present=_present,
    )


def delete_member_action(ctx: ActionContext, member_id: str):
    return run_action(
        ctx,
        lambda: member_queries.delete_member(ctx.db, member_id),
        permission="delete members",
        message="Member deleted successfully",
        fallback="Failed to delete member",
        invalidate=member_paths(),
    )
