"""Merge in-session results with persisted insights into one feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from automation_hub.config import CONFIG

SESSION_CONFIDENCE = 0.9
DATABASE_CONFIDENCE = 0.8
SESSION_DESCRIPTION = "Executed in this session"

INSIGHT_ICONS: Dict[str, str] = {
    "sentiment_analysis": "🎭",
    "communication_optimization": "💬",
    "proposal_analysis": "📊",
    "content_generation": "📝",
    "conversation_analysis": "🧠",
    "risk_detection": "⚠️",
    "performance_analysis": "📈",
    "pricing_optimization": "💰",
}
DEFAULT_ICON = "🤖"


class EntrySource(str, Enum):
    SESSION = "session"
    DATABASE = "database"


@dataclass
class TimelineEntry:
    id: str
    title: str
    description: str
    created_at: datetime
    is_recent: bool
    insight_type: str
    source: EntrySource
    confidence: float
    recommendations: List[Any] = field(default_factory=list)
    data_points: Dict[str, Any] = field(default_factory=dict)
    result: Optional[Dict[str, Any]] = None

    @property
    def icon(self) -> str:
        return insight_icon(self.insight_type)


def insight_icon(insight_type: Optional[str]) -> str:
    return INSIGHT_ICONS.get(insight_type or "", DEFAULT_ICON)


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    """Relative label such as ``5 min ago`` or ``2 days ago``."""

    current = now or datetime.now(timezone.utc)
    minutes = int((current - created_at).total_seconds() // 60)
    if minutes < 1:
        return "a few seconds ago"
    if minutes < 60:
        return f"{minutes} min ago"
    if minutes < 1440:
        return f"{minutes // 60} h ago"
    return f"{minutes // 1440} days ago"


def _analysis(payload: Mapping[str, Any]) -> Dict[str, Any]:
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("analysis"), dict):
        return data["analysis"]
    analysis = payload.get("analysis")
    return analysis if isinstance(analysis, dict) else {}


def session_entry(session_result: Any, catalog: Any = None) -> TimelineEntry:
    definition = catalog.get(session_result.automation_id) if catalog is not None else None
    analysis = _analysis(session_result.payload)
    recommendations = analysis.get("recommendations")
    confidence = analysis.get("confidence")
    completed_at = session_result.completed_at
    return TimelineEntry(
        id=f"session_{session_result.automation_id}_{int(completed_at.timestamp() * 1000)}",
        title=definition.name if definition else "Automation",
        description=SESSION_DESCRIPTION,
        created_at=completed_at,
        is_recent=True,
        insight_type=(definition.variant.value if definition else session_result.variant.value),
        source=EntrySource.SESSION,
        confidence=float(confidence) if isinstance(confidence, (int, float)) and confidence else SESSION_CONFIDENCE,
        recommendations=list(recommendations) if isinstance(recommendations, list) else [],
        data_points=analysis,
        result=session_result.payload,
    )


def database_entry(record: Any) -> TimelineEntry:
    return TimelineEntry(
        id=record.id,
        title=record.title,
        description=record.description,
        created_at=record.created_at,
        is_recent=False,
        insight_type=record.insight_type,
        source=EntrySource.DATABASE,
        confidence=record.confidence_score or DATABASE_CONFIDENCE,
        recommendations=list(record.recommendations or []),
        data_points=dict(record.data_points or {}),
    )


def merge(session_entries: Iterable[TimelineEntry], database_entries: Iterable[TimelineEntry]) -> List[TimelineEntry]:
    """Concatenate session then database entries and sort newest first.

    ``sorted`` is stable, so entries sharing a timestamp keep that order.
    Nothing is deduplicated.
    """
    combined = [*session_entries, *database_entries]
    return sorted(combined, key=lambda entry: entry.created_at, reverse=True)


class TimelineAggregator:
    """Recomputes the feed on every call from the orchestrator's state."""

    def __init__(
        self,
        orchestrator: Any,
        *,
        preview_size: Optional[int] = None,
        history: Optional[Callable[[], Iterable[Any]]] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._preview_size = preview_size or CONFIG.timeline_preview_size
        self._history = history or (lambda: orchestrator.history)

    def timeline(self) -> List[TimelineEntry]:
        catalog = getattr(self._orchestrator, "catalog", None)
        sessions = [session_entry(result, catalog) for result in self._orchestrator.results.values()]
        persisted = [database_entry(record) for record in self._history()]
        return merge(sessions, persisted)

    def page(self, show_all: bool = False) -> List[TimelineEntry]:
        entries = self.timeline()
        if show_all:
            return entries
        return entries[: self._preview_size]

    @property
    def hidden_count(self) -> int:
        return max(0, len(self.timeline()) - self._preview_size)

    async def refresh(self) -> List[TimelineEntry]:
        await self._orchestrator.refresh_history()
        return self.timeline()


__all__ = [
    "DEFAULT_ICON",
    "EntrySource",
    "INSIGHT_ICONS",
    "SESSION_CONFIDENCE",
    "TimelineAggregator",
    "TimelineEntry",
    "database_entry",
    "insight_icon",
    "merge",
    "session_entry",
    "time_ago",
]
