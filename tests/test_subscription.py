"""
Tests for trial bookkeeping, provisioning and webhook application
"""
from datetime import datetime, timedelta, timezone

import pytest

from crud.user import UserRepository
from services.subscription_service import (
    SubscriptionService,
    derive_subscription_state,
    describe_subscription,
)

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
EXPIRES = START + timedelta(days=14)


def test_active_subscription_wins_over_expired_trial():
    state = derive_subscription_state(START + timedelta(days=400), "active", EXPIRES)
    assert (state.status, state.days_left) == ("active", 0)
    assert state.has_access


def test_trial_expires_exactly_at_fourteen_days():
    state = derive_subscription_state(EXPIRES, "trial", EXPIRES)
    assert (state.status, state.days_left) == ("expired", 0)
    assert not state.has_access


def test_last_second_of_trial_rounds_up_to_one_day():
    state = derive_subscription_state(EXPIRES - timedelta(seconds=1), "trial", EXPIRES)
    assert (state.status, state.days_left) == ("trial", 1)


def test_first_day_of_trial_reports_fourteen_days():
    assert derive_subscription_state(START, "trial", EXPIRES).days_left == 14
    assert derive_subscription_state(START + timedelta(hours=1), "trial", EXPIRES).days_left == 14


def test_missing_expiry_is_expired():
    assert derive_subscription_state(START, "trial", None).status == "expired"


def test_naive_timestamps_are_treated_as_utc():
    naive_expiry = EXPIRES.replace(tzinfo=None)
    assert derive_subscription_state(START, "trial", naive_expiry).status == "trial"


@pytest.mark.asyncio
async def test_provisioning_is_idempotent(test_db):
    repo = UserRepository(test_db)
    service = SubscriptionService(test_db, repo)

    user = await service.provision_user("user-42", "Plate@Example.com", now=START)
    await test_db.commit()
    assert user.email == "plate@example.com"
    assert user.subscription_status == "trial"

    again = await service.provision_user("user-42", "plate@example.com", now=START + timedelta(days=3))
    await test_db.commit()
    assert again.id == user.id

    stored = await repo.get_user_by_id("user-42")
    assert describe_subscription(stored, now=START)["daysLeft"] == 14
    assert describe_subscription(stored, now=START)["trialExpires"] == "2024-03-15T12:00:00Z"


def _webhook(event_name, status, user_id="user-42", subscription_id=991):
    return {
        "meta": {"event_name": event_name, "custom_data": {"user_id": user_id}},
        "data": {"id": subscription_id, "attributes": {"status": status}},
    }


@pytest.mark.asyncio
async def test_webhook_activates_and_expires_subscription(test_db):
    repo = UserRepository(test_db)
    service = SubscriptionService(test_db, repo)
    await service.provision_user("user-42", "plate@example.com", now=START)

    user = await service.apply_subscription_event(_webhook("subscription_created", "active"))
    assert user.subscription_status == "active"
    assert user.lemonsqueezy_subscription_id == "991"

    user = await service.apply_subscription_event(_webhook("subscription_updated", "cancelled"))
    assert user.subscription_status == "expired"


@pytest.mark.asyncio
async def test_webhook_reads_checkout_custom_data(test_db):
    service = SubscriptionService(test_db, UserRepository(test_db))
    await service.provision_user("user-7", None, now=START)

    payload = {
        "meta": {"event_name": "subscription_created"},
        "data": {
            "id": "sub_1",
            "attributes": {"status": "active", "checkout_data": {"custom": {"user_id": "user-7"}}},
        },
    }
    user = await service.apply_subscription_event(payload)
    assert user.subscription_status == "active"


@pytest.mark.asyncio
async def test_webhook_ignores_other_events_and_unknown_users(test_db):
    service = SubscriptionService(test_db, UserRepository(test_db))
    assert await service.apply_subscription_event(_webhook("order_created", "paid")) is None
    assert await service.apply_subscription_event(_webhook("subscription_created", "active", "nobody")) is None
