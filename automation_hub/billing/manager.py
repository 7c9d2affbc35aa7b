"""Billing helpers for resolving a user's plan and gating premium automations."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from ..config import CONFIG
from ..db import DatabaseClient
from ..logger import log
from .plans import PlanContext, PlanStatus

DEFAULT_PLAN_KEY = "free"


class EntitlementCheck(Protocol):
    async def can_use_features(self, identity: Any) -> bool:  # pragma: no cover - protocol
        ...


class BillingManager:
    """Facade that knows how to resolve plans and answer feature-gating questions."""

    def __init__(self, db: DatabaseClient):
        self._db = db

    @property
    def enabled(self) -> bool:
        """Billing is only enforced when the feature flag is on."""

        return bool(getattr(CONFIG, "billing_enabled", False))

    def get_plan_context(self, user_id: str, *, now: Optional[datetime] = None) -> PlanContext:
        """Resolve the user's plan from their profile and any active subscription."""

        profile = self._db.get_user_profile(user_id) or {}
        subscription = self._db.get_active_subscription(user_id)
        current = now or datetime.now(timezone.utc)

        period_end = _parse_timestamp((subscription or {}).get("current_period_end"))
        has_active_subscription = bool(
            subscription
            and str(subscription.get("status", "")).lower() == "active"
            and period_end is not None
            and period_end > current
        )

        plan_key = str(profile.get("subscription_plan") or DEFAULT_PLAN_KEY)
        return PlanContext(
            plan_key=plan_key,
            status=_normalize_status(profile.get("subscription_status")),
            trial_ends_at=_parse_timestamp(profile.get("trial_ends_at")),
            current_period_end=period_end or _parse_timestamp(profile.get("subscription_current_period_end")),
            has_active_subscription=has_active_subscription,
            billing_enabled=self.enabled,
        )


class PlanEntitlementCheck:
    """Entitlement check backed by the billing plan; allows everything when billing is off."""

    def __init__(self, billing: BillingManager):
        self._billing = billing

    async def can_use_features(self, identity: Any) -> bool:
        if not self._billing.enabled:
            return True
        plan = getattr(identity, "plan_context", None)
        if plan is None:
            plan = await asyncio.to_thread(self._billing.get_plan_context, identity.user_id)
            identity.plan_context = plan
        allowed = plan.can_use_features()
        if not allowed:
            log("[billing] Feature use blocked", user_id=identity.user_id, status=plan.status.value)
        return allowed


class AllowAllEntitlements:
    """Used when no billing backend is wired in."""

    async def can_use_features(self, identity: Any) -> bool:
        return True


def _normalize_status(value: Any) -> PlanStatus:
    if not value:
        # Profiles without a status start on the free trial
        return PlanStatus.TRIALING
    normalised = str(value).strip().lower()
    try:
        return PlanStatus(normalised)
    except ValueError:
        mapping = {
            "trial": PlanStatus.TRIALING,
            "past-due": PlanStatus.PAST_DUE,
            "cancelled": PlanStatus.CANCELED,
        }
        return mapping.get(normalised, PlanStatus.UNKNOWN)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, "", 0):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    raw = str(value)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
