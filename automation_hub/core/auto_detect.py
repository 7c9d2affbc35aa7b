"""Enable/disable switch for the automatic event detector."""

from __future__ import annotations

from typing import Any, Optional

from automation_hub.logger import log
from automation_hub.registry.automations import AutomationDefinition, AutomationStatus, Variant
from automation_hub.services.notifications import Severity, notify

from .errors import EntitlementRequired, Unauthenticated
from .orchestrator import ExecutionOrchestrator, Outcome, OutcomeKind
from .request_builder import build

UPSELL_MESSAGE = "This feature requires a PRO plan. Upgrade to unlock real AI automations!"
DISABLED_MESSAGE = "Automatic event detector disabled."
ALREADY_ENABLED_MESSAGE = "Automatic event detector is already enabled."
ENABLED_MESSAGE = "Automatic event detector enabled. Checking the last {hours} hours now."


class AutoDetectToggle:
    """
    Inactive/active switch layered on the orchestrator.

    Enabling flips the definition to active and immediately runs the
    detector once. Disabling only flips the status. Both are refused when the
    caller's plan does not allow premium features.
    """

    def __init__(
        self,
        orchestrator: ExecutionOrchestrator,
        identity: Any,
        entitlements: Any,
        *,
        automation_id: Optional[str] = None,
        notifications: Any = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._identity = identity
        self._entitlements = entitlements
        self._notifications = notifications
        self._definition = self._resolve_definition(automation_id)

    def _resolve_definition(self, automation_id: Optional[str]) -> AutomationDefinition:
        catalog = self._orchestrator.catalog
        if automation_id is not None:
            return catalog.require(automation_id)
        matches = catalog.by_variant(Variant.AUTO_DETECT)
        if not matches:
            raise LookupError("No auto-detect automation in the catalog")
        return matches[0]

    @property
    def definition(self) -> AutomationDefinition:
        return self._definition

    @property
    def is_enabled(self) -> bool:
        return self._definition.status is AutomationStatus.ACTIVE

    async def _check_entitlement(self) -> None:
        identity = await self._identity.current_user()
        if not await self._entitlements.can_use_features(identity):
            raise EntitlementRequired(UPSELL_MESSAGE)

    async def _guard(self) -> bool:
        try:
            await self._check_entitlement()
        except (EntitlementRequired, Unauthenticated) as exc:
            log("[dispatcher] Auto-detect toggle refused", reason=exc.__class__.__name__)
            self._notify(exc.message, Severity.WARNING if isinstance(exc, EntitlementRequired) else Severity.ERROR)
            return False
        return True

    async def enable(self, *, hours: Optional[int] = None) -> Optional[Outcome]:
        """Activate the detector and run it once. Returns the run outcome, or None if refused.

        An already active detector is left alone and reported as skipped.
        """

        if self.is_enabled:
            self._notify(ALREADY_ENABLED_MESSAGE, Severity.INFO)
            return Outcome(OutcomeKind.SKIPPED, self._definition.id, message=ALREADY_ENABLED_MESSAGE)
        if not await self._guard():
            return None
        self._definition.status = AutomationStatus.ACTIVE
        request = build(Variant.AUTO_DETECT, {"hours": hours} if hours else None)
        self._notify(ENABLED_MESSAGE.format(hours=request.payload["hours"]), Severity.INFO)
        return await self._orchestrator.run_now(self._definition.id, Variant.AUTO_DETECT, request)

    async def disable(self) -> bool:
        """Deactivate the detector. Returns False if the action was refused."""

        if not await self._guard():
            return False
        self._definition.status = AutomationStatus.INACTIVE
        self._notify(DISABLED_MESSAGE, Severity.INFO)
        return True

    async def toggle(self) -> Optional[Outcome] | bool:
        if self.is_enabled:
            return await self.disable()
        return await self.enable()

    def _notify(self, message: str, severity: Severity) -> None:
        notify(self._notifications, message, severity)


__all__ = ["ALREADY_ENABLED_MESSAGE", "AutoDetectToggle", "DISABLED_MESSAGE", "ENABLED_MESSAGE", "UPSELL_MESSAGE"]
