"""Unit tests for execution request building and routing."""

from __future__ import annotations

import pytest

from automation_hub.core.errors import ValidationFailed
from automation_hub.core.request_builder import (
    GENERIC_ENDPOINT,
    IdentityMode,
    Route,
    attach_identity,
    build,
)
from automation_hub.registry.automations import Variant

DEDICATED = (
    Variant.PROPOSAL_ANALYSIS,
    Variant.CONVERSATION_ANALYSIS,
    Variant.RISK_DETECTION,
    Variant.PRICING_OPTIMIZATION,
    Variant.PERFORMANCE_ANALYSIS,
)

ODD_INPUTS = (
    {},
    None,
    {"type": "sentiment_analysis", "data": {"text": "hi"}},
    {"text": "hello", "originalMessage": "x", "topic": "y", "contentType": "z"},
    {"proposalId": "", "clientId": None, "projectId": 0},
)


@pytest.mark.parametrize("variant", DEDICATED)
@pytest.mark.parametrize("workflow_input", ODD_INPUTS)
def test_dedicated_variants_never_use_generic_route(variant, workflow_input) -> None:
    request = build(variant, workflow_input)

    assert request.route is Route.DEDICATED
    assert request.endpoint != GENERIC_ENDPOINT
    assert "type" not in request.payload


def test_dedicated_payloads_are_narrow() -> None:
    assert build(Variant.PROPOSAL_ANALYSIS, {"proposalId": "p1", "extra": 1}).payload == {"proposalId": "p1"}
    assert build(Variant.CONVERSATION_ANALYSIS, {"clientId": "c1"}).payload == {
        "clientId": "c1",
        "action": "analyze",
    }
    assert build(Variant.RISK_DETECTION, {"projectId": "r1"}).endpoint == "/api/ai/analyze-project-risks"
    assert build(Variant.PRICING_OPTIMIZATION, {"budgetId": "b1"}).endpoint == "/api/ai/optimize-pricing"


def test_performance_defaults_period_and_requests_bearer_token() -> None:
    request = build(Variant.PERFORMANCE_ANALYSIS, {})

    assert request.endpoint == "/api/ai/analyze-performance"
    assert request.payload == {"period": "30_days"}
    assert request.send_bearer_token is True
    assert request.identity_mode is IdentityMode.DURABLE


def test_generic_envelope_for_sentiment() -> None:
    request = build("sentiment_analysis", {"text": "Great work", "clientId": "c9"})

    assert request.route is Route.GENERIC
    assert request.endpoint == GENERIC_ENDPOINT
    assert request.payload == {
        "type": "sentiment_analysis",
        "data": {"text": "Great work", "clientId": "c9", "source": "manual_analysis"},
    }


def test_smart_meeting_copies_participants() -> None:
    participants = ["a@example.com"]
    request = build(Variant.SMART_MEETING, {"purpose": "kickoff", "participants": participants})

    participants.append("b@example.com")

    assert request.payload["data"]["participants"] == ["a@example.com"]


def test_unknown_variant_raises_validation_failed() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        build("teleport", {})

    assert excinfo.value.missing == ["type"]


def test_generic_route_carries_email_handle(user_context) -> None:
    request = attach_identity(build(Variant.CONTENT_GENERATION, {"topic": "a", "contentType": "b"}), user_context)

    assert request.payload["userId"] == "test@example.com"
    assert request.caller_id == "user-123"
    assert "Authorization" not in request.headers


def test_auto_detect_carries_durable_identity(user_context) -> None:
    request = attach_identity(build(Variant.AUTO_DETECT), user_context)

    assert request.endpoint == "/api/ai/send-auto-emails"
    assert request.payload == {"hours": 24, "sendEmails": True, "userId": "user-123"}


def test_performance_sends_bearer_token_and_user_id(user_context) -> None:
    request = attach_identity(build(Variant.PERFORMANCE_ANALYSIS, {"period": "7_days"}), user_context)

    assert request.headers == {"Authorization": "Bearer token-abc"}
    assert request.payload == {"period": "7_days", "userId": "user-123"}


def test_attach_identity_does_not_mutate_original(user_context) -> None:
    original = build(Variant.PROPOSAL_ANALYSIS, {"proposalId": "p1"})
    attach_identity(original, user_context)

    assert original.payload == {"proposalId": "p1"}
    assert original.caller_id is None
