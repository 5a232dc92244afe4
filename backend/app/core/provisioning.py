"""Profile provisioning on first authenticated request.

Idempotent: repeat calls for the same user are plain reads. A concurrent
first request that inserts the same row is absorbed by re-reading after
the IntegrityError.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.profile import Profile

logger = structlog.get_logger(__name__)


async def ensure_profile(session: AsyncSession, user_id: str, jwt_claims: dict) -> Profile:
    """Return the caller's Profile, creating it from JWT claims if missing.

    Args:
        session: Request-scoped AsyncSession
        user_id: Subject claim from the session JWT
        jwt_claims: JWT claims dict containing email, name, etc.
    """
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is not None:
        return profile

    profile = Profile(
        id=user_id,
        email=jwt_claims.get("email") or "",
        full_name=jwt_claims.get("name") or None,
        is_pro=False,
    )
    session.add(profile)
    try:
        await session.commit()
    except IntegrityError:
        # Concurrent request already created it
        await session.rollback()
        result = await session.execute(select(Profile).where(Profile.id == user_id))
        return result.scalar_one()

    logger.info("profile_provisioned", user_id=user_id)
    return profile
