import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from auth import TokenError, decode_token
from models import Identity, Profile
from queries import identities as identity_queries
from queries import profiles as profile_queries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedIdentity:
    identity: Optional[Identity] = None
    profile: Optional[Profile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_onboarded(self) -> bool:
        return self.identity is not None and self.profile is not None


ANONYMOUS = ResolvedIdentity()


def resolve_identity(db: Session, token: Optional[str]) -> ResolvedIdentity:
    """Map a bearer token to (identity, profile); any fault yields the anonymous result.

    A valid identity without a profile row resolves to ``(identity, None)``.
    """
    if not token:
        return ANONYMOUS
    try:
        payload = decode_token(token)
    except TokenError:
        logger.debug("Rejected bearer token")
        return ANONYMOUS
    if payload.get("type") != "access" or not payload.get("sub"):
        return ANONYMOUS

    try:
        identity_result = identity_queries.get_identity_by_id(db, payload["sub"])
        if not identity_result.success:
            return ANONYMOUS
        identity = identity_result.data
        profile_result = profile_queries.get_profile_by_id(db, identity.id)
        profile = profile_result.data if profile_result.success else None
    except Exception as exc:
        logger.warning("Identity resolution failed: %s", exc)
        return ANONYMOUS
    return ResolvedIdentity(identity=identity, profile=profile)


def is_elevated(resolved: ResolvedIdentity) -> bool:
    profile = resolved.profile
    return bool(resolved.identity is not None and profile is not None and profile.role and profile.role.is_elevated)
