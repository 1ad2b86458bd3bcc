"""Sign-up, login and token refresh.

Login lazily creates the caller's profile (role ``member``) the first time an
identity signs in; if that fails the login fails and no tokens are issued.
"""

import logging

from actions.common import AUTH_REQUIRED_MESSAGE, ActionContext, run_action
from auth import TokenError, create_access_token, create_token_pair, decode_token, get_password_hash, verify_password
from queries import identities as identity_queries
from queries import profiles as profile_queries
from results import ActionResult, ErrorKind, QueryResult
from schemas import IdentityResponse, LoginRequest, MeResponse, ProfileResponse, SignupRequest, TokenResponse

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


def signup_action(ctx: ActionContext, payload: SignupRequest):
    metadata = {"name": payload.name.strip(), "batch": (payload.batch or "").strip() or None}
    return run_action(
        ctx,
        lambda: identity_queries.create_identity(ctx.db, payload.email, get_password_hash(payload.password), metadata),
        require_auth=False,
        message="Registration successful! You can now log in.",
        fallback="Failed to create account",
        present=IdentityResponse.model_validate,
    )


def _login(db, payload: LoginRequest) -> QueryResult[TokenResponse]:
    found = identity_queries.find_identity_by_email(db, payload.email)
    if not found.success:
        return found
    identity = found.data
    if identity is None or not verify_password(payload.password, identity.hashed_password):
        return QueryResult.fail(INVALID_CREDENTIALS, ErrorKind.AUTH_REQUIRED)

    touched = identity_queries.touch_sign_in(db, identity)
    if not touched.success:
        return touched

    existing = profile_queries.find_profile_by_email(db, identity.email)
    if not existing.success:
        return existing
    profile = existing.data
    if profile is None:
        metadata = identity.user_metadata or {}
        created = profile_queries.create_profile(db, identity.id, identity.email, metadata.get("name") or "", metadata.get("batch"))
        if not created.success:
            logger.warning("Profile creation failed for %s: %s", identity.email, created.error)
            return QueryResult.fail(created.error or "Failed to create user profile", created.error_kind or ErrorKind.INTERNAL)
        profile = created.data

    tokens = create_token_pair(identity.id)
    return QueryResult.ok(TokenResponse(**tokens, profile=ProfileResponse.model_validate(profile)))


def login_action(ctx: ActionContext, payload: LoginRequest):
    return run_action(
        ctx,
        lambda: _login(ctx.db, payload),
        require_auth=False,
        message="Login successful",
        fallback="Login failed",
        present=lambda tokens: tokens,
    )


def _refresh(db, refresh_token: str) -> QueryResult[TokenResponse]:
    try:
        claims = decode_token(refresh_token)
    except TokenError:
        return QueryResult.fail("Invalid refresh token", ErrorKind.AUTH_REQUIRED)
    if claims.get("type") != "refresh" or not claims.get("sub"):
        return QueryResult.fail("Invalid refresh token", ErrorKind.AUTH_REQUIRED)
    found = identity_queries.get_identity_by_id(db, claims["sub"])
    if not found.success:
        return QueryResult.fail("Invalid refresh token", ErrorKind.AUTH_REQUIRED)
    access_token = create_access_token({"sub": found.data.id})
    return QueryResult.ok(TokenResponse(access_token=access_token, refresh_token=refresh_token))


def refresh_action(ctx: ActionContext, refresh_token: str):
    return run_action(
        ctx,
        lambda: _refresh(ctx.db, refresh_token),
        require_auth=False,
        message="Token refreshed",
        fallback="Failed to refresh token",
        present=lambda tokens: tokens,
    )


def me_action(ctx: ActionContext) -> ActionResult:
    # A signed-in identity without a profile is "not onboarded", not anonymous.
    if ctx.identity is None:
        return ActionResult.fail(AUTH_REQUIRED_MESSAGE, ErrorKind.AUTH_REQUIRED)
    profile = ProfileResponse.model_validate(ctx.profile) if ctx.profile is not None else None
    return ActionResult.ok(data=MeResponse(identity=IdentityResponse.model_validate(ctx.identity), profile=profile))
