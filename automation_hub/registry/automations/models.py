"""Automation definition model for the predefined catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class AutomationCategory(str, Enum):
    """Closed set of catalog categories."""

    CLIENT_MANAGEMENT = "client_management"
    SALES = "sales"
    PRODUCTIVITY = "productivity"
    INSIGHTS = "insights"


class AutomationStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    LEARNING = "learning"


class Variant(str, Enum):
    """Workflow kinds the dispatcher knows how to validate, route and present."""

    SENTIMENT_ANALYSIS = "sentiment_analysis"
    CONVERSATION_ANALYSIS = "conversation_analysis"
    COMMUNICATION_OPTIMIZATION = "communication_optimization"
    PROPOSAL_ANALYSIS = "proposal_analysis"
    PRICING_OPTIMIZATION = "pricing_optimization"
    CONTENT_GENERATION = "content_generation"
    RISK_DETECTION = "risk_detection"
    PERFORMANCE_ANALYSIS = "performance_analysis"
    SMART_EMAIL = "smart_email"
    AUTO_DETECT = "auto_detect"
    DYNAMIC_FORM = "dynamic_form"
    SMART_MEETING = "smart_meeting"
    CALENDAR_LINK = "calendar_link"

    @classmethod
    def parse(cls, value: Any) -> "Variant | None":
        """Return the matching variant, or ``None`` for unknown tags."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class AutomationDefinition:
    """Represents one automation card in the catalog."""

    id: str
    name: str
    description: str
    category: AutomationCategory
    variant: Variant
    status: AutomationStatus = AutomationStatus.ACTIVE
    confidence: int = 0
    success_rate: int = 0
    execution_count: int = 0
    capabilities: List[str] = field(default_factory=list)
    is_premium: bool = True
    is_new: bool = False

    def __post_init__(self) -> None:
        self.confidence = _clamp_percentage(self.confidence)
        self.success_rate = _clamp_percentage(self.success_rate)

    @property
    def is_active(self) -> bool:
        return self.status is AutomationStatus.ACTIVE

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AutomationDefinition":
        variant = Variant.parse(payload.get("type") or payload.get("variant"))
        if variant is None:
            raise ValueError(f"Unknown automation variant: {payload.get('type')!r}")
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or payload["id"]),
            description=str(payload.get("description") or ""),
            category=AutomationCategory(payload.get("category") or AutomationCategory.PRODUCTIVITY.value),
            variant=variant,
            status=AutomationStatus(payload.get("status") or AutomationStatus.ACTIVE.value),
            confidence=int(payload.get("confidence") or 0),
            success_rate=int(payload.get("success_rate") or payload.get("successRate") or 0),
            execution_count=int(payload.get("execution_count") or 0),
            capabilities=list(payload.get("capabilities") or payload.get("aiFeatures") or []),
            is_premium=bool(payload.get("is_premium", True)),
            is_new=bool(payload.get("is_new", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "type": self.variant.value,
            "status": self.status.value,
            "confidence": self.confidence,
            "success_rate": self.success_rate,
            "execution_count": self.execution_count,
            "capabilities": list(self.capabilities),
            "is_premium": self.is_premium,
            "is_new": self.is_new,
        }


def _clamp_percentage(value: Any) -> int:
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, numeric))
