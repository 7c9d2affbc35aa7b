"""
Build execution requests for automation variants.

Most variants travel through one shared execution endpoint inside a
``{type, data}`` envelope. Five analysis variants (proposal, conversation,
risk, pricing and performance) plus the auto-detect workflow call their own
endpoint with a narrower payload. Those are resolved first and return before
any generic envelope is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from automation_hub.config import CONFIG
from automation_hub.registry.automations import Variant

from .errors import ValidationFailed

GENERIC_ENDPOINT = "/api/ai/automations/execute"
DEFAULT_PERFORMANCE_PERIOD = "30_days"


class Route(str, Enum):
    GENERIC = "generic"
    DEDICATED = "dedicated"


class IdentityMode(str, Enum):
    """Which caller attribute an endpoint expects as ``userId``."""

    HANDLE = "handle"
    DURABLE = "durable"
    NONE = "none"


@dataclass(frozen=True)
class ExecutionRequest:
    """A single, consumable call description for the executor."""

    route: Route
    variant: Variant
    endpoint: str
    payload: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    identity_mode: IdentityMode = IdentityMode.HANDLE
    send_bearer_token: bool = False
    caller_id: Optional[str] = None

    @property
    def is_generic(self) -> bool:
        return self.route is Route.GENERIC


def _value(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if isinstance(value, str):
        return value.strip() or None
    return value


# ---------------------------------------------------------------------------
# Dedicated endpoints
# ---------------------------------------------------------------------------

def _proposal(data: Mapping[str, Any]) -> ExecutionRequest:
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.PROPOSAL_ANALYSIS,
        endpoint="/api/ai/analyze-proposal",
        payload={"proposalId": _value(data, "proposalId")},
        identity_mode=IdentityMode.NONE,
    )


def _conversation(data: Mapping[str, Any]) -> ExecutionRequest:
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.CONVERSATION_ANALYSIS,
        endpoint="/api/ai/optimize-message",
        payload={"clientId": _value(data, "clientId"), "action": "analyze"},
        identity_mode=IdentityMode.NONE,
    )


def _risk(data: Mapping[str, Any]) -> ExecutionRequest:
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.RISK_DETECTION,
        endpoint="/api/ai/analyze-project-risks",
        payload={"projectId": _value(data, "projectId")},
        identity_mode=IdentityMode.NONE,
    )


def _pricing(data: Mapping[str, Any]) -> ExecutionRequest:
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.PRICING_OPTIMIZATION,
        endpoint="/api/ai/optimize-pricing",
        payload={"budgetId": _value(data, "budgetId")},
        identity_mode=IdentityMode.NONE,
    )


def _performance(data: Mapping[str, Any]) -> ExecutionRequest:
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.PERFORMANCE_ANALYSIS,
        endpoint="/api/ai/analyze-performance",
        payload={"period": _value(data, "period") or DEFAULT_PERFORMANCE_PERIOD},
        identity_mode=IdentityMode.DURABLE,
        send_bearer_token=True,
    )


def _auto_detect(data: Mapping[str, Any]) -> ExecutionRequest:
    hours = data.get("hours") or getattr(CONFIG, "auto_detect_lookback_hours", 24)
    return ExecutionRequest(
        route=Route.DEDICATED,
        variant=Variant.AUTO_DETECT,
        endpoint="/api/ai/send-auto-emails",
        payload={"hours": int(hours), "sendEmails": True},
        identity_mode=IdentityMode.DURABLE,
    )


DEDICATED_BUILDERS: Dict[Variant, Callable[[Mapping[str, Any]], ExecutionRequest]] = {
    Variant.PROPOSAL_ANALYSIS: _proposal,
    Variant.CONVERSATION_ANALYSIS: _conversation,
    Variant.RISK_DETECTION: _risk,
    Variant.PRICING_OPTIMIZATION: _pricing,
    Variant.PERFORMANCE_ANALYSIS: _performance,
    Variant.AUTO_DETECT: _auto_detect,
}


# ---------------------------------------------------------------------------
# Generic envelope payloads
# ---------------------------------------------------------------------------

def _sentiment_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "text": data.get("text"),
        "clientId": _value(data, "clientId"),
        "source": "manual_analysis",
    }


def _communication_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "originalMessage": data.get("originalMessage"),
        "context": data.get("context"),
        "clientId": _value(data, "clientId"),
        "purpose": "optimization",
    }


def _content_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "contentType": data.get("contentType"),
        "topic": data.get("topic"),
        "targetAudience": data.get("targetAudience"),
        "tone": data.get("tone"),
    }


def _smart_email_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "trigger": data.get("trigger"),
        "context": data.get("context"),
        "clientId": _value(data, "clientId"),
    }


def _dynamic_form_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "purpose": data.get("purpose"),
        "context": data.get("context"),
        "industry": data.get("industry"),
    }


def _smart_meeting_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "purpose": data.get("purpose"),
        "participants": list(data.get("participants") or []),
        "context": data.get("context"),
    }


def _calendar_link_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "event_type": data.get("event_type"),
        "duration": data.get("duration"),
        "context": data.get("context"),
    }


GENERIC_PAYLOADS: Dict[Variant, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
    Variant.SENTIMENT_ANALYSIS: _sentiment_data,
    Variant.COMMUNICATION_OPTIMIZATION: _communication_data,
    Variant.CONTENT_GENERATION: _content_data,
    Variant.SMART_EMAIL: _smart_email_data,
    Variant.DYNAMIC_FORM: _dynamic_form_data,
    Variant.SMART_MEETING: _smart_meeting_data,
    Variant.CALENDAR_LINK: _calendar_link_data,
}


def build(variant: Variant | str, workflow_input: Optional[Mapping[str, Any]] = None) -> ExecutionRequest:
    """
    Shape the request for ``variant``.

    Dedicated variants return before the generic envelope is considered,
    whatever the input looks like. Unknown variants raise ``ValidationFailed``.
    """

    parsed = Variant.parse(variant)
    if parsed is None:
        raise ValidationFailed(f"Unsupported automation type: {variant!r}", missing=["type"])

    data: Mapping[str, Any] = workflow_input or {}

    dedicated = DEDICATED_BUILDERS.get(parsed)
    if dedicated is not None:
        return dedicated(data)

    payload_builder = GENERIC_PAYLOADS[parsed]
    return ExecutionRequest(
        route=Route.GENERIC,
        variant=parsed,
        endpoint=GENERIC_ENDPOINT,
        payload={"type": parsed.value, "data": payload_builder(data)},
        identity_mode=IdentityMode.HANDLE,
    )


def attach_identity(request: ExecutionRequest, identity: Any) -> ExecutionRequest:
    """
    Return a copy of ``request`` carrying the caller identity.

    The generic endpoint resolves the caller by email handle; auto-detect and
    performance analysis need the durable user id.
    """

    user_id = getattr(identity, "user_id", None)
    payload = dict(request.payload)
    headers = dict(request.headers)

    if request.identity_mode is IdentityMode.DURABLE:
        payload["userId"] = user_id
    elif request.identity_mode is IdentityMode.HANDLE:
        payload["userId"] = getattr(identity, "email", None) or user_id

    token = getattr(identity, "access_token", None)
    if request.send_bearer_token and token:
        headers["Authorization"] = f"Bearer {token}"

    return replace(request, payload=payload, headers=headers, caller_id=user_id)


__all__ = [
    "DEDICATED_BUILDERS",
    "GENERIC_ENDPOINT",
    "GENERIC_PAYLOADS",
    "ExecutionRequest",
    "IdentityMode",
    "Route",
    "attach_identity",
    "build",
]
