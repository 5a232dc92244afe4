"""Subscription reconciler: maps verified Stripe events onto profiles.

Each event applies at most one profile mutation, and every mutation is a
plain field assignment, so replays and out-of-order delivery converge on
the last write. Signature verification happens in the webhook route
before anything here runs.
"""

from enum import StrEnum

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.profile import Profile

logger = structlog.get_logger(__name__)

# Metadata key set on checkout sessions and subscriptions at checkout time
USER_ID_METADATA_KEY = "user_id"

STATUS_ACTIVE = "active"
STATUS_CANCELED = "canceled"


class ReconcileOutcome(StrEnum):
    APPLIED = "applied"
    IGNORED = "ignored"


def _metadata_user_id(obj: dict) -> str | None:
    metadata = obj.get("metadata") or {}
    return metadata.get(USER_ID_METADATA_KEY) or None


async def _profile_by_id(session: AsyncSession, user_id: str) -> Profile | None:
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()


async def _profile_by_customer(session: AsyncSession, customer_id: str | None) -> Profile | None:
    if not customer_id:
        return None
    result = await session.execute(select(Profile).where(Profile.stripe_customer_id == customer_id))
    return result.scalar_one_or_none()


async def _handle_checkout_completed(session: AsyncSession, checkout: dict) -> ReconcileOutcome:
    """Upgrade the user named in the checkout metadata."""
    user_id = _metadata_user_id(checkout)
    if not user_id:
        logger.warning("checkout_completed_missing_user_id", checkout_id=checkout.get("id"))
        return ReconcileOutcome.IGNORED

    profile = await _profile_by_id(session, user_id)
    if profile is None:
        logger.warning("checkout_completed_unknown_user", user_id=user_id)
        return ReconcileOutcome.IGNORED

    profile.is_pro = True
    profile.stripe_subscription_id = checkout.get("subscription")
    profile.subscription_status = STATUS_ACTIVE

    customer_id = checkout.get("customer")
    if customer_id and not profile.stripe_customer_id:
        profile.stripe_customer_id = customer_id

    await session.commit()
    logger.info("plan_upgraded_to_pro", user_id=user_id)
    return ReconcileOutcome.APPLIED


async def _handle_subscription_updated(session: AsyncSession, subscription: dict) -> ReconcileOutcome:
    """Sync status (active, past_due, trialing, ...) and derive the pro flag."""
    user_id = _metadata_user_id(subscription)
    customer_id = subscription.get("customer")

    if user_id:
        profile = await _profile_by_id(session, user_id)
    else:
        profile = await _profile_by_customer(session, customer_id)

    if profile is None:
        logger.warning("subscription_updated_unknown_profile", user_id=user_id, customer_id=customer_id)
        return ReconcileOutcome.IGNORED

    status = subscription.get("status")
    profile.is_pro = status == STATUS_ACTIVE
    profile.subscription_status = status

    await session.commit()
    logger.info("subscription_status_updated", user_id=profile.id, status=status, is_pro=profile.is_pro)
    return ReconcileOutcome.APPLIED


async def _handle_subscription_deleted(session: AsyncSession, subscription: dict) -> ReconcileOutcome:
    """Downgrade to free when the subscription is gone."""
    customer_id = subscription.get("customer")
    profile = await _profile_by_customer(session, customer_id)
    if profile is None:
        logger.warning("subscription_deleted_unknown_customer", customer_id=customer_id)
        return ReconcileOutcome.IGNORED

    profile.is_pro = False
    profile.subscription_status = STATUS_CANCELED

    await session.commit()
    logger.info("plan_downgraded_to_free", user_id=profile.id, customer_id=customer_id)
    return ReconcileOutcome.APPLIED


_HANDLERS = {
    "checkout.session.completed": _handle_checkout_completed,
    "customer.subscription.updated": _handle_subscription_updated,
    "customer.subscription.deleted": _handle_subscription_deleted,
}


async def reconcile_event(session: AsyncSession, event: dict) -> ReconcileOutcome:
    """Apply one verified Stripe event to the profile table.

    Unknown event types and events without a ``data.object`` mapping are
    ignored. Store errors propagate so the webhook route can answer 500
    and let Stripe retry.
    """
    event_type = event.get("type")
    handler = _HANDLERS.get(event_type)
    if handler is None:
        logger.info("stripe_event_unhandled", event_type=event_type)
        return ReconcileOutcome.IGNORED

    data = event.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    if not isinstance(obj, dict):
        logger.warning("stripe_event_missing_object", event_type=event_type, event_id=event.get("id"))
        return ReconcileOutcome.IGNORED

    return await handler(session, obj)
