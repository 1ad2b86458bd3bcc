from fastapi import APIRouter, Depends

from actions.common import ActionContext
from actions.profile import get_profile_action, update_profile_action
from routers.shared import action_response
from schemas import ProfileUpdate
from security import get_action_context

router = APIRouter()


@router.get("/profile")
def get_profile(ctx: ActionContext = Depends(get_action_context)):
    return action_response(get_profile_action(ctx))


@router.put("/profile/{user_id}")
def update_profile(user_id: str, payload: ProfileUpdate, ctx: ActionContext = Depends(get_action_context)):
    return action_response(update_profile_action(ctx, user_id, payload))
