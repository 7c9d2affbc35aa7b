"""Automation catalog - the fixed set of predefined AI automations."""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Optional

from .models import AutomationCategory, AutomationDefinition, AutomationStatus, Variant

ALL_CATEGORIES = "all"

CATEGORY_LABELS: Dict[str, str] = {
    ALL_CATEGORIES: "All",
    AutomationCategory.CLIENT_MANAGEMENT.value: "Client Management",
    AutomationCategory.SALES.value: "Sales",
    AutomationCategory.PRODUCTIVITY.value: "Productivity",
    AutomationCategory.INSIGHTS.value: "Insights",
}

PREDEFINED_AUTOMATIONS: tuple[Dict[str, Any], ...] = (
    {
        "id": "sentiment-analysis-real",
        "name": "Sentiment Analysis",
        "description": "Analyzes client feedback to detect emotions and urgency, and raises automatic alerts.",
        "category": "client_management",
        "type": "sentiment_analysis",
        "status": "active",
        "confidence": 94,
        "success_rate": 91,
        "capabilities": ["Emotion analysis", "Urgency detection", "Automatic task creation"],
        "is_new": True,
    },
    {
        "id": "conversation-analyzer",
        "name": "Conversation Analyzer",
        "description": "Reviews the whole message history with a client and returns tone, satisfaction and next steps.",
        "category": "client_management",
        "type": "conversation_analysis",
        "status": "active",
        "confidence": 91,
        "success_rate": 88,
        "capabilities": ["Conversation review", "Satisfaction scoring", "Tone detection", "Specific recommendations"],
        "is_new": True,
    },
    {
        "id": "communication-optimizer",
        "name": "Communication Optimizer",
        "description": "Rewrites messages and emails for clarity, tone and professionalism.",
        "category": "client_management",
        "type": "communication_optimization",
        "status": "active",
        "confidence": 89,
        "success_rate": 93,
        "capabilities": ["Tone optimization", "Clarity improvements", "Per-client personalization", "Suggestions"],
        "is_new": True,
    },
    {
        "id": "proposal-analyzer",
        "name": "Proposal Analyzer",
        "description": "Scores a sent proposal, estimates its success probability and lists conversion tips.",
        "category": "sales",
        "type": "proposal_analysis",
        "status": "active",
        "confidence": 88,
        "success_rate": 86,
        "capabilities": ["Proposal scoring", "Competitiveness", "Risk factors", "Conversion tips"],
        "is_new": True,
    },
    {
        "id": "pricing-optimizer",
        "name": "Pricing Optimizer",
        "description": "Pick a budget and get market-aware pricing adjustments and strategies.",
        "category": "sales",
        "type": "pricing_optimization",
        "status": "active",
        "confidence": 85,
        "success_rate": 87,
        "capabilities": ["Market analysis", "Historical data", "Smart pricing", "Tailored strategies"],
        "is_new": True,
    },
    {
        "id": "content-generator",
        "name": "Content Generator",
        "description": "Drafts emails, proposals, posts and articles for a given audience and tone.",
        "category": "productivity",
        "type": "content_generation",
        "status": "active",
        "confidence": 92,
        "success_rate": 89,
        "capabilities": ["Multiple content types", "Audience targeting", "SEO aware", "Tone control"],
        "is_new": True,
    },
    {
        "id": "risk-detector",
        "name": "Project Risk Detector",
        "description": "Inspects a project for potential risks and drafts mitigation plans.",
        "category": "insights",
        "type": "risk_detection",
        "status": "active",
        "confidence": 87,
        "success_rate": 84,
        "capabilities": ["Predictive analysis", "Early detection", "Mitigation plans", "Automatic tasks"],
        "is_new": True,
    },
    {
        "id": "performance-analyzer",
        "name": "Performance Analyzer",
        "description": "Evaluates productivity over a period to surface bottlenecks and opportunities.",
        "category": "insights",
        "type": "performance_analysis",
        "status": "active",
        "confidence": 90,
        "success_rate": 88,
        "capabilities": ["Advanced metrics", "Trend detection", "Productivity analysis", "Recommendations"],
        "is_new": True,
    },
    {
        "id": "smart-email-workflow",
        "name": "Smart Email",
        "description": "Generates contextual emails for events such as signed contracts, payments or meetings.",
        "category": "productivity",
        "type": "smart_email",
        "status": "active",
        "confidence": 93,
        "success_rate": 91,
        "capabilities": ["Contextual emails", "Personalization", "Multiple triggers", "Adaptive tone"],
        "is_new": True,
    },
    {
        "id": "auto-event-detector",
        "name": "Automatic Event Detector",
        "description": "Detects recent events in your workspace (contracts, payments, finished projects) and emails follow-ups.",
        "category": "productivity",
        "type": "auto_detect",
        "status": "inactive",
        "confidence": 95,
        "success_rate": 89,
        "capabilities": ["Automatic detection", "Real-time events", "Database triggers", "Automatic workflows"],
        "is_new": True,
    },
    {
        "id": "dynamic-form-generator",
        "name": "Dynamic Form Generator",
        "description": "Builds adaptive forms for lead capture, project briefs or feedback collection.",
        "category": "productivity",
        "type": "dynamic_form",
        "status": "active",
        "confidence": 88,
        "success_rate": 85,
        "capabilities": ["Adaptive forms", "Contextual questions", "Smart validation", "Multiple purposes"],
        "is_new": True,
    },
    {
        "id": "smart-meeting-scheduler",
        "name": "Smart Meeting Scheduler",
        "description": "Schedules meetings with an agenda tailored to the purpose and participants.",
        "category": "client_management",
        "type": "smart_meeting",
        "status": "active",
        "confidence": 90,
        "success_rate": 87,
        "capabilities": ["Tailored agendas", "Invitations", "Automatic preparation", "Multiple purposes"],
        "is_new": True,
    },
    {
        "id": "calendar-link-generator",
        "name": "Personalized Calendar Link",
        "description": "Configures booking links with context for consultations, project meetings or feedback sessions.",
        "category": "client_management",
        "type": "calendar_link",
        "status": "active",
        "confidence": 92,
        "success_rate": 94,
        "capabilities": ["Guided setup", "Specific context", "Automatic preparation", "Multiple types"],
        "is_new": True,
    },
)


class AutomationCatalog:
    """Session-scoped registry of automation definitions.

    Definitions are seeded once and never removed. Only the execution
    counter and the status of a definition change during a session.
    """

    def __init__(self, seed: Optional[Iterable[Dict[str, Any]]] = None) -> None:
        entries = seed if seed is not None else PREDEFINED_AUTOMATIONS
        self._definitions: Dict[str, AutomationDefinition] = {}
        for entry in entries:
            definition = AutomationDefinition.from_dict(copy.deepcopy(dict(entry)))
            if definition.id in self._definitions:
                raise ValueError(f"Duplicate automation id: {definition.id}")
            self._definitions[definition.id] = definition

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions.values())

    def __contains__(self, automation_id: object) -> bool:
        return automation_id in self._definitions

    def get(self, automation_id: str) -> Optional[AutomationDefinition]:
        """Return a single definition if it exists."""
        cleaned = (automation_id or "").strip()
        if not cleaned:
            return None
        return self._definitions.get(cleaned)

    def require(self, automation_id: str) -> AutomationDefinition:
        definition = self.get(automation_id)
        if definition is None:
            raise KeyError(f"Unknown automation: {automation_id}")
        return definition

    def by_variant(self, variant: Variant | str) -> List[AutomationDefinition]:
        parsed = Variant.parse(variant)
        if parsed is None:
            return []
        return [definition for definition in self._definitions.values() if definition.variant is parsed]

    def filter(self, category: str = ALL_CATEGORIES) -> List[AutomationDefinition]:
        """Return definitions for a category, or every definition for ``"all"``."""
        if not category or category == ALL_CATEGORIES:
            return list(self._definitions.values())
        return [
            definition
            for definition in self._definitions.values()
            if definition.category.value == category
        ]

    @staticmethod
    def categories() -> List[Dict[str, str]]:
        return [{"id": key, "name": label} for key, label in CATEGORY_LABELS.items()]

    def stats(self) -> Dict[str, int]:
        """Aggregate counters shown above the catalog."""
        definitions = list(self._definitions.values())
        total = len(definitions)
        mean_success = round(sum(d.success_rate for d in definitions) / total) if total else 0
        return {
            "total": total,
            "active": sum(1 for d in definitions if d.status is AutomationStatus.ACTIVE),
            "average_success_rate": mean_success,
            "total_executions": sum(d.execution_count for d in definitions),
        }


__all__ = [
    "ALL_CATEGORIES",
    "CATEGORY_LABELS",
    "PREDEFINED_AUTOMATIONS",
    "AutomationCatalog",
]
