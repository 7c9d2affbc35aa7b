"""Unit tests for the auto-detect enable/disable switch."""

from __future__ import annotations

import asyncio

from automation_hub.core.auto_detect import ALREADY_ENABLED_MESSAGE, UPSELL_MESSAGE, AutoDetectToggle
from automation_hub.core.orchestrator import ExecutionOrchestrator, OutcomeKind
from automation_hub.registry.automations import AutomationStatus
from automation_hub.services.notifications import Severity
from automation_hub.tests.fakes import FakeEntitlements, FakeExecutor, FakeIdentity


def _toggle(catalog, identity, executor, entitlements, sink=None):
    orchestrator = ExecutionOrchestrator(
        catalog,
        identity,
        executor,
        notifications=sink,
        refresh_delay=0,
        refresh_settle=0,
    )
    return AutoDetectToggle(orchestrator, identity, entitlements, notifications=sink)


def test_enable_flips_status_and_runs_once(catalog, identity, sink) -> None:
    executor = FakeExecutor({"success": True, "emailsSent": 2})
    toggle = _toggle(catalog, identity, executor, FakeEntitlements(True), sink)

    outcome = asyncio.run(toggle.enable())

    assert toggle.is_enabled
    assert catalog.require("auto-event-detector").status is AutomationStatus.ACTIVE
    assert outcome.kind is OutcomeKind.SUCCESS
    assert len(executor.calls) == 1
    request = executor.calls[0]
    assert request.endpoint == "/api/ai/send-auto-emails"
    assert request.payload == {"hours": 24, "sendEmails": True, "userId": "user-123"}
    assert catalog.require("auto-event-detector").execution_count == 1


def test_enable_without_entitlement_changes_nothing(catalog, identity, sink) -> None:
    executor = FakeExecutor()
    toggle = _toggle(catalog, identity, executor, FakeEntitlements(False), sink)

    outcome = asyncio.run(toggle.enable())

    assert outcome is None
    assert catalog.require("auto-event-detector").status is AutomationStatus.INACTIVE
    assert executor.calls == []
    assert sink.last.message == UPSELL_MESSAGE
    assert sink.last.severity is Severity.WARNING


def test_disable_flips_status_only(catalog, identity) -> None:
    executor = FakeExecutor()
    catalog.require("auto-event-detector").status = AutomationStatus.ACTIVE
    toggle = _toggle(catalog, identity, executor, FakeEntitlements(True))

    assert asyncio.run(toggle.disable()) is True

    assert catalog.require("auto-event-detector").status is AutomationStatus.INACTIVE
    assert executor.calls == []


def test_disable_without_entitlement_is_refused(catalog, identity) -> None:
    catalog.require("auto-event-detector").status = AutomationStatus.ACTIVE
    toggle = _toggle(catalog, identity, FakeExecutor(), FakeEntitlements(False))

    assert asyncio.run(toggle.disable()) is False
    assert toggle.is_enabled


def test_toggle_without_identity_is_refused(catalog, sink) -> None:
    identity = FakeIdentity(None)
    executor = FakeExecutor()
    toggle = _toggle(catalog, identity, executor, FakeEntitlements(True), sink)

    assert asyncio.run(toggle.toggle()) is None
    assert not toggle.is_enabled
    assert executor.calls == []
    assert sink.last.severity is Severity.ERROR


def test_enable_with_custom_lookback(catalog, identity) -> None:
    executor = FakeExecutor({"success": True})
    toggle = _toggle(catalog, identity, executor, FakeEntitlements(True))

    asyncio.run(toggle.enable(hours=6))

    assert executor.calls[0].payload["hours"] == 6


def test_enable_when_already_active_does_not_rerun(catalog, identity, sink) -> None:
    executor = FakeExecutor()
    entitlements = FakeEntitlements(True)
    catalog.require("auto-event-detector").status = AutomationStatus.ACTIVE
    toggle = _toggle(catalog, identity, executor, entitlements, sink)

    outcome = asyncio.run(toggle.enable())

    assert outcome.kind is OutcomeKind.SKIPPED
    assert executor.calls == []
    assert entitlements.calls == 0
    assert catalog.require("auto-event-detector").execution_count == 0
    assert sink.last.message == ALREADY_ENABLED_MESSAGE


class FailingSink:
    def show(self, message, severity):
        raise RuntimeError("sink offline")


def test_failing_sink_does_not_break_refused_toggle(catalog, identity) -> None:
    toggle = _toggle(catalog, identity, FakeExecutor(), FakeEntitlements(False), FailingSink())

    assert asyncio.run(toggle.disable()) is False
