"""Read-only access to persisted AI insights."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from automation_hub.config import CONFIG
from automation_hub.db.client import DatabaseClient
from automation_hub.logger import log

# Records without a timestamp sort after everything else.
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass
class InsightRecord:
    id: str
    user_id: Optional[str]
    insight_type: str
    title: str
    description: str
    data_points: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[Any] = field(default_factory=list)
    confidence_score: Optional[float] = None
    created_at: datetime = EPOCH

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "InsightRecord":
        data_points = record.get("data_points")
        recommendations = record.get("recommendations")
        return cls(
            id=str(record.get("id")),
            user_id=record.get("user_id"),
            insight_type=str(record.get("insight_type") or "unknown"),
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            data_points=dict(data_points) if isinstance(data_points, dict) else {},
            recommendations=list(recommendations) if isinstance(recommendations, (list, tuple)) else [],
            confidence_score=_coerce_float(record.get("confidence_score")),
            created_at=_parse_datetime(record.get("created_at")),
        )


class InsightStore(Protocol):
    async def list_recent(self, user_id: str, limit: int) -> List[InsightRecord]:  # pragma: no cover - protocol
        ...


class SupabaseInsightStore:
    """Fetches insight pages newest first from the ``ai_insights`` table."""

    def __init__(self, db: DatabaseClient, *, table: Optional[str] = None):
        self._db = db
        self._table = table

    async def list_recent(self, user_id: str, limit: Optional[int] = None) -> List[InsightRecord]:
        page_size = limit or CONFIG.insights_page_size
        records = await asyncio.to_thread(
            self._db.list_ai_insights,
            user_id,
            page_size,
            table=self._table,
        )
        log("[insights] Loaded insight page", user_id=user_id, count=len(records))
        return [InsightRecord.from_record(record) for record in records]


def _coerce_float(value: Any) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return EPOCH
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return EPOCH


__all__ = ["EPOCH", "InsightRecord", "InsightStore", "SupabaseInsightStore"]
