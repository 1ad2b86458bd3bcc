from fastapi import APIRouter, Depends, status

from actions.common import ActionContext
from actions.session import login_action, me_action, refresh_action, signup_action
from routers.shared import action_response
from schemas import LoginRequest, RefreshRequest, SignupRequest
from security import get_action_context

router = APIRouter()


@router.post("/auth/signup")
def signup(payload: SignupRequest, ctx: ActionContext = Depends(get_action_context)):
    return action_response(signup_action(ctx, payload), status.HTTP_201_CREATED)


@router.post("/auth/login")
def login(payload: LoginRequest, ctx: ActionContext = Depends(get_action_context)):
    return action_response(login_action(ctx, payload))


@router.post("/auth/refresh")
def refresh(payload: RefreshRequest, ctx: ActionContext = Depends(get_action_context)):
    return action_response(refresh_action(ctx, payload.refresh_token))


@router.get("/auth/me")
def me(ctx: ActionContext = Depends(get_action_context)):
    return action_response(me_action(ctx))
