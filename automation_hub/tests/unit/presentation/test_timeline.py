"""Unit tests for the merged insight feed."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from automation_hub.core.orchestrator import SessionResult
from automation_hub.presentation.timeline import (
    DATABASE_CONFIDENCE,
    DEFAULT_ICON,
    SESSION_CONFIDENCE,
    EntrySource,
    TimelineAggregator,
    database_entry,
    insight_icon,
    session_entry,
    time_ago,
)
from automation_hub.registry.automations import Variant
from automation_hub.services.insights import InsightRecord

T = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _record(record_id, created_at, **extra):
    payload = {
        "id": record_id,
        "user_id": "user-123",
        "insight_type": "proposal_analysis",
        "title": f"Insight {record_id}",
        "description": "Stored",
        "created_at": created_at.isoformat(),
    }
    payload.update(extra)
    return InsightRecord.from_record(payload)


def _session(automation_id, variant, completed_at, payload=None):
    return SessionResult(automation_id, variant, payload or {"success": True, "data": {}}, completed_at)


def _orchestrator(catalog, results=(), history=()):
    return SimpleNamespace(
        catalog=catalog,
        results={result.automation_id: result for result in results},
        history=tuple(history),
    )


def test_entries_sort_newest_first_across_sources(catalog) -> None:
    orchestrator = _orchestrator(
        catalog,
        results=[_session("sentiment-analysis-real", Variant.SENTIMENT_ANALYSIS, T)],
        history=[_record("older", T - timedelta(seconds=60)), _record("newer", T + timedelta(seconds=10))],
    )

    entries = TimelineAggregator(orchestrator).timeline()

    assert [entry.created_at for entry in entries] == [T + timedelta(seconds=10), T, T - timedelta(seconds=60)]
    assert [entry.source for entry in entries] == [EntrySource.DATABASE, EntrySource.SESSION, EntrySource.DATABASE]


def test_equal_timestamps_keep_session_entries_first(catalog) -> None:
    orchestrator = _orchestrator(
        catalog,
        results=[_session("risk-detector", Variant.RISK_DETECTION, T)],
        history=[_record("same", T)],
    )

    entries = TimelineAggregator(orchestrator).timeline()

    assert [entry.source for entry in entries] == [EntrySource.SESSION, EntrySource.DATABASE]


def test_page_shows_preview_and_counts_hidden(catalog) -> None:
    history = [_record(f"r{index}", T - timedelta(minutes=index)) for index in range(9)]
    aggregator = TimelineAggregator(_orchestrator(catalog, history=history))

    assert [entry.id for entry in aggregator.page()] == ["r0", "r1", "r2", "r3", "r4", "r5"]
    assert len(aggregator.page(show_all=True)) == 9
    assert aggregator.hidden_count == 3


def test_session_entry_defaults(catalog) -> None:
    entry = session_entry(_session("sentiment-analysis-real", Variant.SENTIMENT_ANALYSIS, T), catalog)

    assert entry.id == f"session_sentiment-analysis-real_{int(T.timestamp() * 1000)}"
    assert entry.title == "Sentiment Analysis"
    assert entry.description == "Executed in this session"
    assert entry.insight_type == "sentiment_analysis"
    assert entry.is_recent is True
    assert entry.confidence == SESSION_CONFIDENCE
    assert entry.icon == "🎭"


def test_session_entry_reads_analysis_confidence(catalog) -> None:
    payload = {"success": True, "data": {"analysis": {"sentiment": "positive", "confidence": 0.64}}}

    entry = session_entry(_session("sentiment-analysis-real", Variant.SENTIMENT_ANALYSIS, T, payload), catalog)

    assert entry.confidence == 0.64
    assert entry.data_points["sentiment"] == "positive"


def test_database_entry_defaults_confidence() -> None:
    entry = database_entry(_record("db", T))

    assert entry.confidence == DATABASE_CONFIDENCE
    assert entry.is_recent is False
    assert entry.result is None


def test_icons_fall_back_to_default() -> None:
    assert insight_icon("risk_detection") == "⚠️"
    assert insight_icon("something_new") == DEFAULT_ICON
    assert insight_icon(None) == DEFAULT_ICON


def test_time_ago_buckets() -> None:
    assert time_ago(T - timedelta(seconds=30), T) == "a few seconds ago"
    assert time_ago(T - timedelta(minutes=5), T) == "5 min ago"
    assert time_ago(T - timedelta(hours=3, minutes=10), T) == "3 h ago"
    assert time_ago(T - timedelta(days=2, hours=1), T) == "2 days ago"
