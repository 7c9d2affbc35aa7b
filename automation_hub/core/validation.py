"""Readiness rules that gate the "run" action for each automation variant."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from automation_hub.registry.automations import Variant

WorkflowInput = Mapping[str, Any]
MessageCounts = Mapping[Any, int]


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _present(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value)
    if isinstance(value, (int, float)):
        return value != 0
    return bool(value)


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


# (field, predicate) pairs; every pair must hold for the input to be ready.
_REQUIRED_FIELDS: Dict[Variant, Tuple[Tuple[str, Callable[[Any], bool]], ...]] = {
    Variant.SENTIMENT_ANALYSIS: (("text", _non_blank),),
    Variant.COMMUNICATION_OPTIMIZATION: (("originalMessage", _non_blank),),
    Variant.CONTENT_GENERATION: (("topic", _non_blank), ("contentType", _non_blank)),
    Variant.CONVERSATION_ANALYSIS: (("clientId", _present),),
    Variant.PROPOSAL_ANALYSIS: (("proposalId", _present),),
    Variant.RISK_DETECTION: (("projectId", _present),),
    Variant.PERFORMANCE_ANALYSIS: (("period", _present),),
    Variant.PRICING_OPTIMIZATION: (("budgetId", _present),),
    Variant.SMART_EMAIL: (("trigger", _non_blank), ("context", _present)),
    Variant.AUTO_DETECT: (),
    Variant.DYNAMIC_FORM: (("purpose", _non_blank), ("context", _present)),
    Variant.SMART_MEETING: (("purpose", _non_blank), ("participants", _non_empty_list)),
    Variant.CALENDAR_LINK: (("event_type", _non_blank), ("duration", _present)),
}

NO_CONVERSATION_HISTORY = "clientId:messages"


def message_count_for(client_id: Any, message_counts: Optional[MessageCounts]) -> int:
    if not message_counts or client_id in (None, ""):
        return 0
    # Counts may be keyed by int or str client ids.
    normalized = {str(key): value for key, value in message_counts.items()}
    try:
        return int(normalized.get(str(client_id), 0) or 0)
    except (TypeError, ValueError):
        return 0


def missing_fields(
    variant: Variant | str,
    workflow_input: Optional[WorkflowInput],
    *,
    message_counts: Optional[MessageCounts] = None,
) -> List[str]:
    """
    Return the required keys that are not satisfied yet.

    Unknown variants report ``["type"]`` so callers can fail closed. A
    conversation analysis against a client without any message history
    reports ``NO_CONVERSATION_HISTORY``.
    """

    parsed = Variant.parse(variant)
    if parsed is None:
        return ["type"]

    data = workflow_input or {}
    missing = [name for name, predicate in _REQUIRED_FIELDS[parsed] if not predicate(data.get(name))]

    if parsed is Variant.CONVERSATION_ANALYSIS and not missing:
        if message_count_for(data.get("clientId"), message_counts) <= 0:
            missing.append(NO_CONVERSATION_HISTORY)

    return missing


def is_ready(
    variant: Variant | str,
    workflow_input: Optional[WorkflowInput],
    *,
    message_counts: Optional[MessageCounts] = None,
) -> bool:
    """Pure readiness check; unknown variants are never ready."""
    return not missing_fields(variant, workflow_input, message_counts=message_counts)


__all__ = [
    "NO_CONVERSATION_HISTORY",
    "WorkflowInput",
    "MessageCounts",
    "is_ready",
    "missing_fields",
    "message_count_for",
]
