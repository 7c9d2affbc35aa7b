"""Unit tests for result shape detection and presentation models."""

from __future__ import annotations

import pytest

from automation_hub.presentation.normalizer import (
    SHAPE_PRECEDENCE,
    GenericModel,
    PerformanceModel,
    PricingModel,
    ProposalModel,
    RiskModel,
    SentimentModel,
    discriminate,
    present,
    risk_tier,
    summary_message,
)
from automation_hub.registry.automations import Variant


def test_shape_precedence_order_is_fixed() -> None:
    assert [name for name, _, _ in SHAPE_PRECEDENCE] == [
        "sentiment",
        "optimization",
        "proposal",
        "risk",
        "pricing",
        "performance",
    ]


def test_sentiment_wins_over_proposal_when_both_match() -> None:
    result = {"success": True, "data": {"analysis": {"sentiment": "neutral", "overall_score": 8}}}

    assert discriminate(result) == "sentiment"
    assert isinstance(present(Variant.PROPOSAL_ANALYSIS, result), SentimentModel)


def test_generic_envelope_sentiment_model() -> None:
    result = {
        "success": True,
        "data": {
            "analysis": {
                "sentiment": "negative",
                "confidence": 0.75,
                "emotions": ["frustration", "anger"],
                "urgency": "high",
                "recommendations": ["Call the client today"],
            }
        },
    }

    model = present(Variant.SENTIMENT_ANALYSIS, result)

    assert isinstance(model, SentimentModel)
    assert model.variant is Variant.SENTIMENT_ANALYSIS
    assert model.emotions == ["frustration", "anger"]
    assert model.automatic_task_created is True
    message = summary_message(model, "Sentiment Analysis")
    assert message.splitlines()[0] == "Sentiment Analysis completed successfully!"
    assert "Confidence: 75%" in message
    assert "A high-priority follow-up task was created automatically" in message
    assert message.splitlines()[-1] == "Insight saved to your dashboard"


def test_dedicated_proposal_result() -> None:
    result = {
        "proposal": {"title": "Brand refresh", "client": "Acme", "value": "4500", "currency": "EUR"},
        "analysis": {"overall_score": 8, "success_probability": 70, "strengths": ["Clear scope"]},
    }

    model = present("proposal_analysis", result)

    assert isinstance(model, ProposalModel)
    assert model.title == "Brand refresh"
    assert model.value == 4500.0
    assert model.score == 8.0
    assert model.strengths == ["Clear scope"]


@pytest.mark.parametrize(
    ("score", "label"),
    [(8, "high"), (7, "high"), (6.9, "medium"), (5, "medium"), (2, "low"), (None, "low")],
)
def test_risk_tiers(score, label) -> None:
    assert risk_tier(score).label == label


def test_risk_model_accepts_either_mitigation_key() -> None:
    result = {
        "project": {"name": "Migration"},
        "analysis": {
            "overall_risk_score": 5,
            "identified_risks": [{"type": "Budget", "details": "Overrun likely"}, "Loose string"],
            "mitigation_plan": ["Weekly budget review"],
        },
    }

    model = present(Variant.RISK_DETECTION, result)

    assert isinstance(model, RiskModel)
    assert model.tier.color == "yellow"
    assert model.identified_risks[0].category == "Budget"
    assert model.identified_risks[1].description == "Loose string"
    assert model.mitigation_plans == ["Weekly budget review"]
    assert 'Risk analysis for "Migration": medium (5/10)' in summary_message(model)


def test_pricing_defaults_fill_missing_values() -> None:
    result = {
        "budget": {"title": "Website", "total_amount": 3000},
        "analysis": {"financial_impact": {"optimized_total": 3450}},
    }

    model = present(Variant.PRICING_OPTIMIZATION, result)

    assert isinstance(model, PricingModel)
    assert model.current_pricing_score == 7
    assert model.acceptance_probability == 75
    assert model.current_total == 3000
    assert model.optimized_total == 3450
    assert model.percentage_improvement == 0.0
    assert model.recommendations == []


def test_performance_reads_top_level_metrics() -> None:
    result = {
        "metrics": {"billablePercentage": 62.5, "revenuePerHour": 48, "totalWorkHours": 120},
        "analysis": {
            "productivity_analysis": {"overall_score": 7},
            "bottlenecks_identified": [{"area": "Meetings", "impact": "high"}],
            "next_period_predictions": {"key_focus_areas": ["Billing"]},
        },
    }

    model = present(Variant.PERFORMANCE_ANALYSIS, result)

    assert isinstance(model, PerformanceModel)
    assert model.billable_percentage == 62.5
    assert model.bottlenecks[0].area == "Meetings"
    assert model.predictions["key_focus_areas"] == ["Billing"]


def test_unmatched_result_falls_back_to_generic() -> None:
    result = {"success": True, "data": {"analysis": {"score": 64, "strengths": ["a", "b"], "weaknesses": ["c"]}}}

    model = present(Variant.CONTENT_GENERATION, result)

    assert discriminate(result) == "generic"
    assert isinstance(model, GenericModel)
    assert model.strengths_count == 2
    assert "Score: 64/100" in summary_message(model)


def test_non_mapping_result_is_empty_generic() -> None:
    model = present(None, None)

    assert isinstance(model, GenericModel)
    assert model.is_empty
    assert model.variant is None
