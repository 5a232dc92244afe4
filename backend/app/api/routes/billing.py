"""Billing routes: Stripe Checkout, Customer Portal, webhooks, and status."""

import stripe
import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.context import RequestContext, get_request_context
from app.db.base import get_session_factory
from app.domain.tier import is_pro, prompt_limit_for
from app.services import prompt_service
from app.services.subscription_reconciler import USER_ID_METADATA_KEY, reconcile_event

logger = structlog.get_logger(__name__)

router = APIRouter()


# ── Request / Response schemas ──────────────────────────────────────


class CheckoutResponse(BaseModel):
    checkout_url: str


class PortalResponse(BaseModel):
    portal_url: str


class BillingStatusResponse(BaseModel):
    is_pro: bool
    subscription_status: str | None
    has_subscription: bool
    prompt_count: int
    prompt_limit: int  # -1 = unlimited


# ── Helpers ─────────────────────────────────────────────────────────


def _get_stripe() -> None:
    """Configure the stripe module with the secret key."""
    settings = get_settings()
    stripe.api_key = settings.stripe_secret_key


async def _get_or_create_stripe_customer(ctx: RequestContext) -> str:
    """Return the Stripe customer ID, creating one if needed."""
    profile = ctx.profile
    if profile.stripe_customer_id:
        return profile.stripe_customer_id

    _get_stripe()
    params = {"metadata": {USER_ID_METADATA_KEY: ctx.user_id}}
    if profile.email:
        params["email"] = profile.email
    customer = await stripe.Customer.create_async(**params)

    profile.stripe_customer_id = customer.id
    await ctx.session.commit()
    logger.info("stripe_customer_created", user_id=ctx.user_id, customer_id=customer.id)
    return customer.id


# ── Endpoints ───────────────────────────────────────────────────────


@router.post("/billing/checkout", response_model=CheckoutResponse)
async def create_checkout_session(ctx: RequestContext = Depends(get_request_context)):
    """Create a Stripe Checkout session for the Pro subscription and return the URL."""
    settings = get_settings()
    if not settings.stripe_price_pro:
        raise HTTPException(status_code=503, detail="Billing is not configured")
    if is_pro(ctx.profile):
        raise HTTPException(status_code=400, detail="Already subscribed to Pro")

    customer_id = await _get_or_create_stripe_customer(ctx)
    _get_stripe()

    checkout_session = await stripe.checkout.Session.create_async(
        customer=customer_id,
        mode="subscription",
        line_items=[{"price": settings.stripe_price_pro, "quantity": 1}],
        success_url=f"{settings.frontend_url}/dashboard?success=true",
        cancel_url=f"{settings.frontend_url}/dashboard?canceled=true",
        metadata={USER_ID_METADATA_KEY: ctx.user_id},
        subscription_data={"metadata": {USER_ID_METADATA_KEY: ctx.user_id}},
    )

    return CheckoutResponse(checkout_url=checkout_session.url)


@router.post("/billing/portal", response_model=PortalResponse)
async def create_portal_session(ctx: RequestContext = Depends(get_request_context)):
    """Create a Stripe Customer Portal session and return the URL."""
    if not ctx.profile.stripe_customer_id:
        raise HTTPException(status_code=400, detail="No billing account found. Please subscribe first.")

    settings = get_settings()
    _get_stripe()

    portal_session = await stripe.billing_portal.Session.create_async(
        customer=ctx.profile.stripe_customer_id,
        return_url=f"{settings.frontend_url}/dashboard",
    )

    return PortalResponse(portal_url=portal_session.url)


@router.get("/billing/status", response_model=BillingStatusResponse)
async def get_billing_status(ctx: RequestContext = Depends(get_request_context)):
    """Return the caller's tier, subscription status and prompt usage."""
    settings = get_settings()
    profile = ctx.profile
    return BillingStatusResponse(
        is_pro=is_pro(profile),
        subscription_status=profile.subscription_status,
        has_subscription=profile.stripe_subscription_id is not None,
        prompt_count=await prompt_service.count_prompts(ctx),
        prompt_limit=prompt_limit_for(profile, settings.free_prompt_limit),
    )


@router.post("/webhooks/stripe")
async def stripe_webhook(request: Request):
    """Handle Stripe webhook events with signature verification.

    Verified events always get ``{"received": true}``, including ones that
    change nothing, so Stripe stops retrying them. Only a failure while
    writing the profile answers 500.
    """
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        logger.error("stripe_webhook_secret_missing")
        raise HTTPException(status_code=503, detail="Stripe webhook endpoint is not configured")

    body = await request.body()
    sig_header = request.headers.get("stripe-signature")

    if not sig_header:
        raise HTTPException(status_code=400, detail="Missing stripe-signature header")

    try:
        stripe_event = stripe.Webhook.construct_event(body, sig_header, settings.stripe_webhook_secret)
    except stripe.SignatureVerificationError:
        logger.warning("stripe_webhook_signature_invalid")
        raise HTTPException(status_code=400, detail="Invalid signature")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid payload")
    except (AttributeError, TypeError):
        # Signed, valid JSON, but not an event object. Nothing to apply.
        logger.warning("stripe_webhook_not_an_event")
        return {"received": True}

    event = stripe_event.to_dict()

    event_type = event.get("type")
    logger.info("stripe_webhook_received", event_type=event_type, event_id=event.get("id"))

    factory = get_session_factory()
    try:
        async with factory() as session:
            outcome = await reconcile_event(session, event)
    except Exception:
        logger.exception("stripe_webhook_processing_failed", event_type=event_type, event_id=event.get("id"))
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed"})

    logger.info("stripe_webhook_processed", event_type=event_type, outcome=outcome.value)
    return {"received": True}
