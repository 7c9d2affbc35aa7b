"""Unit tests for plan resolution and premium feature gating."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from automation_hub.billing import BillingManager, PlanContext, PlanEntitlementCheck, PlanStatus
from automation_hub.config import reload_config

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeBillingDatabase:
    def __init__(self, profile=None, subscription=None):
        self.profile = profile
        self.subscription = subscription
        self.profile_reads = 0

    def get_user_profile(self, auth_user_id):
        self.profile_reads += 1
        return self.profile

    def get_active_subscription(self, auth_user_id):
        return self.subscription


@pytest.fixture
def billing_enabled(monkeypatch):
    monkeypatch.setenv("BILLING_ENABLED", "true")
    reload_config()
    yield
    monkeypatch.setenv("BILLING_ENABLED", "false")
    reload_config()


def test_plan_context_from_trial_profile() -> None:
    db = FakeBillingDatabase(profile={"subscription_status": "trial", "trial_ends_at": "2024-05-04T00:00:00Z"})

    plan = BillingManager(db).get_plan_context("user-123", now=NOW)

    assert plan.plan_key == "free"
    assert plan.status is PlanStatus.TRIALING
    assert plan.days_remaining(NOW) == 3
    assert plan.can_use_features(NOW) is True
    assert plan.has_active_subscription is False


def test_expired_trial_cannot_use_features() -> None:
    db = FakeBillingDatabase(profile={"subscription_status": "trialing", "trial_ends_at": "2024-04-28T00:00:00Z"})

    plan = BillingManager(db).get_plan_context("user-123", now=NOW)

    assert plan.days_remaining(NOW) == 0
    assert plan.is_trial_expired(NOW)
    assert plan.can_use_features(NOW) is False


def test_active_subscription_overrides_profile_status() -> None:
    db = FakeBillingDatabase(
        profile={"subscription_status": "canceled", "subscription_plan": "pro"},
        subscription={"status": "active", "current_period_end": "2024-06-01T00:00:00+00:00"},
    )

    plan = BillingManager(db).get_plan_context("user-123", now=NOW)

    assert plan.status is PlanStatus.CANCELED
    assert plan.has_active_subscription is True
    assert plan.can_use_features(NOW) is True
    assert plan.to_dict()["current_period_end"] == "2024-06-01T00:00:00+00:00"


def test_lapsed_subscription_period_is_not_active() -> None:
    db = FakeBillingDatabase(
        profile={"subscription_status": "past-due"},
        subscription={"status": "active", "current_period_end": "2024-04-01T00:00:00Z"},
    )

    plan = BillingManager(db).get_plan_context("user-123", now=NOW)

    assert plan.status is PlanStatus.PAST_DUE
    assert plan.has_active_subscription is False
    assert plan.can_use_features(NOW) is False


def test_entitlement_allows_everything_when_billing_is_off(user_context) -> None:
    db = FakeBillingDatabase(profile={"subscription_status": "canceled"})

    assert asyncio.run(PlanEntitlementCheck(BillingManager(db)).can_use_features(user_context)) is True
    assert db.profile_reads == 0


def test_entitlement_resolves_and_caches_plan(billing_enabled, user_context) -> None:
    trial_end = (datetime.now(timezone.utc) + timedelta(days=5)).isoformat()
    db = FakeBillingDatabase(profile={"subscription_status": "trialing", "trial_ends_at": trial_end})
    check = PlanEntitlementCheck(BillingManager(db))

    assert asyncio.run(check.can_use_features(user_context)) is True
    assert asyncio.run(check.can_use_features(user_context)) is True
    assert db.profile_reads == 1
    assert isinstance(user_context.plan_context, PlanContext)


def test_entitlement_blocks_canceled_plan(billing_enabled, user_context) -> None:
    db = FakeBillingDatabase(profile={"subscription_status": "canceled"})

    assert asyncio.run(PlanEntitlementCheck(BillingManager(db)).can_use_features(user_context)) is False
