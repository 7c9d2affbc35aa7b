"""Data structures describing a user's subscription plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class PlanStatus(str, Enum):
    """Normalized subscription status codes."""

    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


@dataclass
class PlanContext:
    """Resolved plan & subscription details for a user."""

    plan_key: str
    status: PlanStatus
    trial_ends_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    has_active_subscription: bool = False
    billing_enabled: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status in {PlanStatus.ACTIVE, PlanStatus.TRIALING}

    def days_remaining(self, now: Optional[datetime] = None) -> int:
        """Whole calendar days left in the trial, never negative."""

        if self.trial_ends_at is None:
            return 0
        today = (now or datetime.now(timezone.utc)).date()
        delta = (self.trial_ends_at.date() - today).days
        return max(0, delta)

    def is_trial_expired(self, now: Optional[datetime] = None) -> bool:
        return self.status is PlanStatus.TRIALING and self.days_remaining(now) <= 0

    def can_use_features(self, now: Optional[datetime] = None) -> bool:
        if self.has_active_subscription:
            return True
        return self.is_active and not self.is_trial_expired(now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_key": self.plan_key,
            "status": self.status.value,
            "trial_ends_at": _to_iso(self.trial_ends_at),
            "current_period_end": _to_iso(self.current_period_end),
            "has_active_subscription": self.has_active_subscription,
            "billing_enabled": self.billing_enabled,
            "metadata": dict(self.metadata),
        }


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()
