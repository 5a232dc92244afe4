"""Request-scoped context handed to every service call.

Services never look up the session or the caller on their own; routes
build a RequestContext through the dependencies below and pass it in.
"""

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthUser, require_auth
from app.core.provisioning import ensure_profile
from app.db.base import get_db_session
from app.db.models.profile import Profile
from app.domain.tier import ensure_pro


@dataclass
class RequestContext:
    """Owner identity plus the store handle for one request."""

    user_id: str
    session: AsyncSession
    profile: Profile


async def get_request_context(
    user: AuthUser = Depends(require_auth),
    session: AsyncSession = Depends(get_db_session),
) -> RequestContext:
    """Resolve the caller's profile (provisioning it on first use)."""
    profile = await ensure_profile(session, user.user_id, user.claims)
    return RequestContext(user_id=user.user_id, session=session, profile=profile)


def require_pro(feature: str):
    """Build a dependency that denies non-Pro callers of ``feature``.

    The profile is read fresh on every request, so a revoked subscription
    is denied on the very next call.
    """

    async def _dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        ensure_pro(ctx.profile, feature)
        return ctx

    return _dependency
