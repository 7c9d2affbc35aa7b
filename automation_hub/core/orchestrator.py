"""
Single-flight execution of automation requests.

The orchestrator owns the only mutable session state of the dispatcher: the
set of automation ids with a run outstanding, the latest result per
automation id, the last error per automation id, and the execution counters
on the catalog definitions. Nothing raised while running an automation
escapes ``run``; every path ends in an ``Outcome`` and a notification.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from automation_hub.config import CONFIG
from automation_hub.logger import log
from automation_hub.presentation.normalizer import present, summary_message
from automation_hub.registry.automations import AutomationCatalog, Variant
from automation_hub.services.notifications import Severity, notify

from .errors import (
    IDENTITY_ERROR_CODE,
    NO_MESSAGES_CODE,
    AdvisoryCondition,
    AutomationError,
    ExecutionError,
    Unauthenticated,
)
from .request_builder import ExecutionRequest, attach_identity

logger = logging.getLogger(__name__)

AUTO_DETECT_GUIDANCE = (
    "The automatic event detector runs on an hourly schedule. "
    "Use the enable/disable toggle to control it."
)
NO_MESSAGES_GUIDANCE = (
    "There are no messages with this client yet. "
    "Add a few messages in the Clients section so the conversation can be analyzed."
)
ALREADY_RUNNING = "This automation is already running. Wait for it to finish."


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    ADVISORY = "advisory"
    UNAUTHENTICATED = "unauthenticated"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    automation_id: str
    result: Optional[Dict[str, Any]] = None
    error: Optional[AutomationError] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


@dataclass(frozen=True)
class SessionResult:
    """Latest successful result for an automation id in this session."""

    automation_id: str
    variant: Variant
    payload: Dict[str, Any]
    completed_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionOrchestrator:
    """Runs execution requests at most once at a time per automation id."""

    def __init__(
        self,
        catalog: AutomationCatalog,
        identity: Any,
        executor: Any,
        *,
        insights: Any = None,
        notifications: Any = None,
        refresh_delay: Optional[float] = None,
        refresh_settle: Optional[float] = None,
        history_limit: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._catalog = catalog
        self._identity = identity
        self._executor = executor
        self._insights = insights
        self._notifications = notifications
        self._refresh_delay = CONFIG.insights_refresh_delay if refresh_delay is None else refresh_delay
        self._refresh_settle = CONFIG.insights_refresh_settle if refresh_settle is None else refresh_settle
        self._history_limit = history_limit or CONFIG.insights_page_size
        self._clock = clock

        self._in_flight: Set[str] = set()
        self._results: Dict[str, SessionResult] = {}
        self._errors: Dict[str, AutomationError] = {}
        self._history: List[Any] = []
        self._refresh_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # State views
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> AutomationCatalog:
        return self._catalog

    @property
    def in_flight(self) -> frozenset:
        return frozenset(self._in_flight)

    def is_running(self, automation_id: str) -> bool:
        return automation_id in self._in_flight

    @property
    def results(self) -> Mapping[str, SessionResult]:
        return MappingProxyType(self._results)

    @property
    def history(self) -> Tuple[Any, ...]:
        """Last page of persisted insights fetched by ``refresh_history``."""
        return tuple(self._history)

    def last_error(self, automation_id: str) -> Optional[AutomationError]:
        return self._errors.get(automation_id)

    def clear_result(self, automation_id: str) -> None:
        self._results.pop(automation_id, None)
        self._errors.pop(automation_id, None)

    # ------------------------------------------------------------------
    # Running automations
    # ------------------------------------------------------------------
    async def run(self, automation_id: str, variant: Variant | str, request: ExecutionRequest) -> Outcome:
        """Run an automation invoked from the catalog view."""

        if Variant.parse(variant) is Variant.AUTO_DETECT:
            self._notify(AUTO_DETECT_GUIDANCE, Severity.INFO)
            return Outcome(OutcomeKind.SKIPPED, automation_id, message=AUTO_DETECT_GUIDANCE)
        return await self.run_now(automation_id, variant, request)

    async def run_now(self, automation_id: str, variant: Variant | str, request: ExecutionRequest) -> Outcome:
        """Run ``request`` without the catalog-view short-circuits."""

        if automation_id in self._in_flight:
            log("[dispatcher] Run rejected; already in flight", automation=automation_id)
            self._notify(ALREADY_RUNNING, Severity.WARNING)
            return Outcome(OutcomeKind.REJECTED, automation_id, message=ALREADY_RUNNING)

        self._in_flight.add(automation_id)
        try:
            return await self._execute(automation_id, Variant.parse(variant) or request.variant, request)
        finally:
            self._in_flight.discard(automation_id)

    async def _execute(self, automation_id: str, variant: Variant, request: ExecutionRequest) -> Outcome:
        definition = self._catalog.get(automation_id)
        name = definition.name if definition else automation_id

        try:
            identity = await self._identity.current_user()
        except Unauthenticated as exc:
            return self._fail(automation_id, exc, OutcomeKind.UNAUTHENTICATED)
        except Exception as exc:
            logger.exception("Identity lookup failed while running %s", automation_id)
            error = ExecutionError(f"Could not resolve the current user: {exc}", code=IDENTITY_ERROR_CODE)
            return self._fail(automation_id, error, OutcomeKind.FAILED)

        prepared = attach_identity(request, identity)
        log("[dispatcher] Dispatching", automation=automation_id, variant=variant.value, route=prepared.route.value)

        try:
            payload = await self._executor.invoke(prepared, identity)
        except ExecutionError as exc:
            if variant is Variant.CONVERSATION_ANALYSIS and exc.is_no_messages:
                advisory = AdvisoryCondition(NO_MESSAGES_GUIDANCE, code=NO_MESSAGES_CODE)
                self._errors[automation_id] = advisory
                self._notify(advisory.message, Severity.WARNING)
                return Outcome(OutcomeKind.ADVISORY, automation_id, error=advisory, message=advisory.message)
            return self._fail(automation_id, exc, OutcomeKind.FAILED)
        except Exception as exc:
            logger.exception("Unexpected error while running %s", automation_id)
            error = ExecutionError(str(exc) or exc.__class__.__name__, code="unexpected")
            return self._fail(automation_id, error, OutcomeKind.FAILED)

        result = payload if isinstance(payload, dict) else {"data": payload}
        self._results[automation_id] = SessionResult(
            automation_id=automation_id,
            variant=variant,
            payload=result,
            completed_at=self._clock(),
        )
        self._errors.pop(automation_id, None)
        if definition is not None:
            definition.execution_count += 1

        message = summary_message(present(variant, result), name)
        self._notify(message, Severity.SUCCESS)
        log("[dispatcher] Run completed", automation=automation_id, variant=variant.value)
        self._schedule_refresh(getattr(identity, "user_id", None))
        return Outcome(OutcomeKind.SUCCESS, automation_id, result=result, message=message)

    def _fail(self, automation_id: str, error: AutomationError, kind: OutcomeKind) -> Outcome:
        self._errors[automation_id] = error
        if kind is OutcomeKind.UNAUTHENTICATED:
            message = error.message
        else:
            message = f"Error running automation: {error.message}"
        logger.warning("Automation %s ended as %s: %s", automation_id, kind.value, error.message)
        self._notify(message, Severity.ERROR)
        return Outcome(kind, automation_id, error=error, message=message)

    def _notify(self, message: str, severity: Severity) -> None:
        notify(self._notifications, message, severity)

    # ------------------------------------------------------------------
    # Persisted history
    # ------------------------------------------------------------------
    async def refresh_history(self, user_id: Optional[str] = None) -> List[Any]:
        """Fetch the newest persisted insights and keep them as ``history``."""

        if self._insights is None:
            return list(self._history)
        if user_id is None:
            identity = await self._identity.current_user()
            user_id = identity.user_id
        records = await self._insights.list_recent(user_id, self._history_limit)
        self._history = list(records)
        return list(self._history)

    def _schedule_refresh(self, user_id: Optional[str]) -> None:
        if self._insights is None:
            return
        task = asyncio.get_running_loop().create_task(self._delayed_refresh(user_id))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def _delayed_refresh(self, user_id: Optional[str]) -> None:
        # The executor persists insights asynchronously; give it time to land.
        await asyncio.sleep(self._refresh_delay)
        await asyncio.sleep(self._refresh_settle)
        try:
            await self.refresh_history(user_id)
        except Exception as exc:
            logger.warning("Insight history refresh failed: %s", exc)

    @property
    def pending_refreshes(self) -> int:
        return len(self._refresh_tasks)

    async def wait_for_refreshes(self) -> None:
        if self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel refreshes that have not fired yet."""
        tasks = list(self._refresh_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._refresh_tasks.clear()


__all__ = [
    "ALREADY_RUNNING",
    "AUTO_DETECT_GUIDANCE",
    "NO_MESSAGES_GUIDANCE",
    "ExecutionOrchestrator",
    "Outcome",
    "OutcomeKind",
    "SessionResult",
]
