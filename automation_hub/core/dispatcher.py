"""
Dispatcher facade.

Wires the catalog, readiness rules, request builder, orchestrator, toggle and
timeline together behind the handful of calls a UI (or the CLI) needs:
check readiness, run an automation, present its latest result and read the
merged feed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from automation_hub.logger import log
from automation_hub.presentation.normalizer import PresentationModel, present
from automation_hub.presentation.timeline import TimelineAggregator
from automation_hub.registry.automations import AutomationCatalog, Variant
from automation_hub.services.notifications import Severity, notify

from .auto_detect import UPSELL_MESSAGE, AutoDetectToggle
from .errors import (
    IDENTITY_ERROR_CODE,
    EntitlementRequired,
    ExecutionError,
    Unauthenticated,
    ValidationFailed,
)
from .orchestrator import ExecutionOrchestrator, Outcome, OutcomeKind
from .request_builder import build
from .validation import missing_fields

logger = logging.getLogger(__name__)


class AutomationDispatcher:
    """Entry point used by the CLI and by UI adapters."""

    def __init__(
        self,
        catalog: AutomationCatalog,
        identity: Any,
        executor: Any,
        *,
        insights: Any = None,
        workspace: Any = None,
        notifications: Any = None,
        entitlements: Any = None,
        **orchestrator_options: Any,
    ) -> None:
        self.catalog = catalog
        self._identity = identity
        self._workspace = workspace
        self._notifications = notifications
        self._entitlements = entitlements
        self._message_counts: Dict[str, int] = {}

        self.orchestrator = ExecutionOrchestrator(
            catalog,
            identity,
            executor,
            insights=insights,
            notifications=notifications,
            **orchestrator_options,
        )
        self.timeline = TimelineAggregator(self.orchestrator)
        self.auto_detect: Optional[AutoDetectToggle] = None
        if entitlements is not None and catalog.by_variant(Variant.AUTO_DETECT):
            self.auto_detect = AutoDetectToggle(
                self.orchestrator,
                identity,
                entitlements,
                notifications=notifications,
            )

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------
    @property
    def message_counts(self) -> Mapping[str, int]:
        return dict(self._message_counts)

    def set_message_counts(self, counts: Mapping[str, int]) -> None:
        self._message_counts = {str(key): int(value) for key, value in counts.items()}

    async def load_message_counts(self) -> Mapping[str, int]:
        """Refresh per-client message counts from the workspace directory."""

        if self._workspace is None:
            return self.message_counts
        identity = await self._identity.current_user()
        self.set_message_counts(await self._workspace.message_counts(identity.user_id))
        return self.message_counts

    def missing_fields(self, automation_id: str, workflow_input: Optional[Mapping[str, Any]] = None) -> List[str]:
        definition = self.catalog.require(automation_id)
        return missing_fields(definition.variant, workflow_input, message_counts=self._message_counts)

    def is_ready(self, automation_id: str, workflow_input: Optional[Mapping[str, Any]] = None) -> bool:
        return not self.missing_fields(automation_id, workflow_input)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------
    async def _entitled(self, automation_id: str) -> Optional[Outcome]:
        """Return a terminal outcome when the caller may not run premium automations."""

        if self._entitlements is None:
            return None
        try:
            identity = await self._identity.current_user()
        except Unauthenticated as exc:
            self._notify(exc.message, Severity.ERROR)
            return Outcome(OutcomeKind.UNAUTHENTICATED, automation_id, error=exc, message=exc.message)
        except Exception as exc:
            logger.exception("Identity lookup failed before running %s", automation_id)
            error = ExecutionError(f"Could not resolve the current user: {exc}", code=IDENTITY_ERROR_CODE)
            message = f"Error running automation: {error.message}"
            self._notify(message, Severity.ERROR)
            return Outcome(OutcomeKind.FAILED, automation_id, error=error, message=message)
        if await self._entitlements.can_use_features(identity):
            return None
        error = EntitlementRequired(UPSELL_MESSAGE)
        self._notify(error.message, Severity.WARNING)
        return Outcome(OutcomeKind.REJECTED, automation_id, error=error, message=error.message)

    async def run(self, automation_id: str, workflow_input: Optional[Mapping[str, Any]] = None) -> Outcome:
        """
        Validate, build and run ``automation_id`` once.

        Raises ``KeyError`` for an unknown automation id and ``ValidationFailed``
        when the input is not ready; neither reaches the executor. Incomplete
        input is also reported to the notification sink as a warning.
        """

        definition = self.catalog.require(automation_id)
        if definition.is_premium:
            refused = await self._entitled(automation_id)
            if refused is not None:
                return refused

        variant = definition.variant
        if variant is not Variant.AUTO_DETECT:
            missing = missing_fields(variant, workflow_input, message_counts=self._message_counts)
            if missing:
                log("[dispatcher] Input not ready", automation=automation_id, missing=missing)
                error = ValidationFailed(
                    f"Missing required fields for {definition.name}: {', '.join(missing)}",
                    missing=missing,
                )
                self._notify(error.message, Severity.WARNING)
                raise error

        request = build(variant, workflow_input)
        return await self.orchestrator.run(automation_id, variant, request)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    def present(self, automation_id: str) -> Optional[PresentationModel]:
        session_result = self.orchestrator.results.get(automation_id)
        if session_result is None:
            return None
        return present(session_result.variant, session_result.payload)

    def stats(self) -> Dict[str, int]:
        return self.catalog.stats()

    async def aclose(self) -> None:
        await self.orchestrator.aclose()

    def _notify(self, message: str, severity: Severity) -> None:
        notify(self._notifications, message, severity)


__all__ = ["AutomationDispatcher"]
