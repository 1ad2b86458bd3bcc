"""Shared template for mutation actions.

Every action runs the same steps: require an onboarded caller, check the
elevation gate, call one data-access function, pass its error through
untouched, invalidate the read views it affects and wrap the outcome in an
``ActionResult``. Nothing escapes as an exception.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Union

from sqlalchemy.orm import Session

from identity import ResolvedIdentity, is_elevated
from models import Identity, Profile
from results import ActionResult, ErrorKind, QueryResult
from views import ViewCache, invalidate_paths

logger = logging.getLogger(__name__)

AUTH_REQUIRED_MESSAGE = "Authentication required"


@dataclass
class ActionContext:
    db: Session
    identity: Optional[Identity] = None
    profile: Optional[Profile] = None
    views: Optional[ViewCache] = None

    @property
    def resolved(self) -> ResolvedIdentity:
        return ResolvedIdentity(identity=self.identity, profile=self.profile)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None and self.profile is not None

    @property
    def is_elevated(self) -> bool:
        return is_elevated(self.resolved)


def check_caller(ctx: ActionContext, permission: Optional[str]) -> Optional[ActionResult]:
    """Return the failure to send back, or None when the caller may proceed."""
    if not ctx.is_authenticated:
        return ActionResult.fail(AUTH_REQUIRED_MESSAGE, ErrorKind.AUTH_REQUIRED)
    if permission and not ctx.is_elevated:
        return ActionResult.fail(f"Insufficient permissions to {permission}", ErrorKind.FORBIDDEN)
    return None


def failed(result: QueryResult, fallback: str) -> ActionResult:
    return ActionResult.fail(result.error or fallback, result.error_kind or ErrorKind.INTERNAL)


def run_action(
    ctx: ActionContext,
    operation: Callable[[], QueryResult],
    *,
    message: Union[str, Callable[[Any], str]],
    fallback: str,
    permission: Optional[str] = None,
    require_auth: bool = True,
    invalidate: Union[Iterable[str], Callable[[Any], Iterable[str]], None] = None,
    present: Optional[Callable[[Any], Any]] = None,
) -> ActionResult:
    try:
        if require_auth or permission:
            denied = check_caller(ctx, permission)
            if denied is not None:
                return denied

        result = operation()
        if not result.success:
            return failed(result, fallback)

        paths = invalidate(result.data) if callable(invalidate) else (invalidate or ())
        invalidate_paths(ctx.views, paths)

        text = message(result.data) if callable(message) else message
        data = present(result.data) if present else None
        return ActionResult.ok(text, data)
    except Exception as exc:
        logger.exception("%s: %s", fallback, exc)
        return ActionResult.fail(str(exc) or fallback, ErrorKind.INTERNAL)
