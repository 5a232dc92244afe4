"""Tests for the subscription reconciler against a real database session."""

import pytest
from sqlalchemy import select

from app.db.models.profile import Profile
from app.services.subscription_reconciler import ReconcileOutcome, reconcile_event

pytestmark = pytest.mark.integration


def _event(event_type: str, obj: dict) -> dict:
    return {"id": "evt_test", "type": event_type, "data": {"object": obj}}


async def _reload(db_session, user_id: str) -> Profile:
    db_session.expire_all()
    result = await db_session.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one()


class TestCheckoutCompleted:
    async def test_upgrades_profile_from_metadata(self, db_session, make_profile):
        await make_profile("user_a")

        outcome = await reconcile_event(
            db_session,
            _event(
                "checkout.session.completed",
                {"id": "cs_1", "metadata": {"user_id": "user_a"}, "subscription": "sub_1", "customer": "cus_1"},
            ),
        )

        assert outcome is ReconcileOutcome.APPLIED
        profile = await _reload(db_session, "user_a")
        assert profile.is_pro is True
        assert profile.stripe_subscription_id == "sub_1"
        assert profile.subscription_status == "active"
        assert profile.stripe_customer_id == "cus_1"

    async def test_keeps_existing_customer_id(self, db_session, make_profile):
        await make_profile("user_a", stripe_customer_id="cus_original")

        await reconcile_event(
            db_session,
            _event(
                "checkout.session.completed",
                {"metadata": {"user_id": "user_a"}, "subscription": "sub_1", "customer": "cus_other"},
            ),
        )

        profile = await _reload(db_session, "user_a")
        assert profile.stripe_customer_id == "cus_original"

    async def test_missing_user_id_is_ignored(self, db_session, make_profile):
        await make_profile("user_a")

        outcome = await reconcile_event(
            db_session,
            _event("checkout.session.completed", {"metadata": {}, "subscription": "sub_1"}),
        )

        assert outcome is ReconcileOutcome.IGNORED
        assert (await _reload(db_session, "user_a")).is_pro is False

    async def test_unknown_user_is_ignored(self, db_session):
        outcome = await reconcile_event(
            db_session,
            _event("checkout.session.completed", {"metadata": {"user_id": "ghost"}, "subscription": "sub_1"}),
        )
        assert outcome is ReconcileOutcome.IGNORED


class TestSubscriptionUpdated:
    async def test_resolves_by_metadata_user_id(self, db_session, make_profile):
        await make_profile("user_a", is_pro=True, subscription_status="active")

        outcome = await reconcile_event(
            db_session,
            _event(
                "customer.subscription.updated",
                {"metadata": {"user_id": "user_a"}, "customer": "cus_unrelated", "status": "past_due"},
            ),
        )

        assert outcome is ReconcileOutcome.APPLIED
        profile = await _reload(db_session, "user_a")
        assert profile.is_pro is False
        assert profile.subscription_status == "past_due"

    async def test_falls_back_to_customer_lookup(self, db_session, make_profile):
        await make_profile("user_a", stripe_customer_id="cus_a")

        await reconcile_event(
            db_session,
            _event("customer.subscription.updated", {"customer": "cus_a", "status": "active"}),
        )

        profile = await _reload(db_session, "user_a")
        assert profile.is_pro is True
        assert profile.subscription_status == "active"

    async def test_trialing_is_not_pro(self, db_session, make_profile):
        await make_profile("user_a", stripe_customer_id="cus_a")

        await reconcile_event(
            db_session,
            _event("customer.subscription.updated", {"customer": "cus_a", "status": "trialing"}),
        )

        profile = await _reload(db_session, "user_a")
        assert profile.is_pro is False
        assert profile.subscription_status == "trialing"

    async def test_unresolved_profile_is_ignored(self, db_session):
        outcome = await reconcile_event(
            db_session,
            _event("customer.subscription.updated", {"customer": "cus_missing", "status": "active"}),
        )
        assert outcome is ReconcileOutcome.IGNORED


class TestSubscriptionDeleted:
    async def test_downgrades_and_is_idempotent(self, db_session, make_profile):
        await make_profile("user_a", is_pro=True, stripe_customer_id="cus_a", subscription_status="active")
        event = _event("customer.subscription.deleted", {"customer": "cus_a", "status": "canceled"})

        for _ in range(2):
            outcome = await reconcile_event(db_session, event)
            assert outcome is ReconcileOutcome.APPLIED
            profile = await _reload(db_session, "user_a")
            assert profile.is_pro is False
            assert profile.subscription_status == "canceled"

    async def test_applies_regardless_of_prior_state(self, db_session, make_profile):
        await make_profile("user_a", is_pro=False, stripe_customer_id="cus_a", subscription_status="past_due")

        await reconcile_event(db_session, _event("customer.subscription.deleted", {"customer": "cus_a"}))

        profile = await _reload(db_session, "user_a")
        assert profile.is_pro is False
        assert profile.subscription_status == "canceled"

    async def test_unknown_customer_is_ignored(self, db_session):
        outcome = await reconcile_event(
            db_session, _event("customer.subscription.deleted", {"customer": "cus_missing"})
        )
        assert outcome is ReconcileOutcome.IGNORED


async def test_unknown_event_type_is_ignored(db_session, make_profile):
    await make_profile("user_a", is_pro=True)

    outcome = await reconcile_event(db_session, _event("invoice.paid", {"customer": "cus_a"}))

    assert outcome is ReconcileOutcome.IGNORED
    assert (await _reload(db_session, "user_a")).is_pro is True


@pytest.mark.parametrize("data", [{}, {"object": None}, {"object": "cs_1"}, None])
async def test_event_without_object_is_ignored(db_session, make_profile, data):
    await make_profile("user_a")

    outcome = await reconcile_event(
        db_session, {"id": "evt_bare", "type": "checkout.session.completed", "data": data}
    )

    assert outcome is ReconcileOutcome.IGNORED
    assert (await _reload(db_session, "user_a")).is_pro is False
