from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from actions.common import ActionContext
from database import get_db
from identity import resolve_identity
from views import NullViewCache, ViewCache

optional_bearer = HTTPBearer(auto_error=False)


def get_view_cache(request: Request) -> ViewCache:
    cache = getattr(request.app.state, "view_cache", None)
    return cache if cache is not None else NullViewCache()


def get_action_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
    db: Session = Depends(get_db),
    views: ViewCache = Depends(get_view_cache),
) -> ActionContext:
    """Resolve the caller once per request; anonymous callers get an empty context."""
    token = credentials.credentials if credentials else None
    resolved = resolve_identity(db, token)
    return ActionContext(db=db, identity=resolved.identity, profile=resolved.profile, views=views)
