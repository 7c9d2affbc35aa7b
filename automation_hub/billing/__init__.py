"""Billing and feature-entitlement module."""

from .manager import (
    AllowAllEntitlements,
    BillingManager,
    EntitlementCheck,
    PlanEntitlementCheck,
)
from .plans import PlanContext, PlanStatus

__all__ = [
    "AllowAllEntitlements",
    "BillingManager",
    "EntitlementCheck",
    "PlanEntitlementCheck",
    "PlanContext",
    "PlanStatus",
]
