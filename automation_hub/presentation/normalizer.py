"""
Turn raw automation results into presentation models.

Results arrive in two shapes. The generic execution endpoint wraps its
output as ``{"success": true, "data": {"analysis": ...}}`` while dedicated
endpoints answer with ``{<entity>, "analysis": ...}``. Shapes are told apart
by structural sniffing in the fixed order given by ``SHAPE_PRECEDENCE``:
the first matching shape wins, so a payload carrying both
``analysis.sentiment`` and ``analysis.overall_score`` is a sentiment result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from automation_hub.registry.automations import Variant

Result = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Sniffing helpers
# ---------------------------------------------------------------------------

def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _data(result: Result) -> Dict[str, Any]:
    return _mapping(result.get("data"))


def _analysis(result: Result) -> Dict[str, Any]:
    """``data.analysis`` from the generic envelope, else a top-level ``analysis``."""
    nested = _data(result).get("analysis")
    if isinstance(nested, dict):
        return nested
    return _mapping(result.get("analysis"))


def _optimization(result: Result) -> Dict[str, Any]:
    nested = _data(result).get("optimization")
    if isinstance(nested, dict):
        return nested
    return _mapping(result.get("optimization"))


def _has(mapping: Mapping[str, Any], key: str) -> bool:
    return mapping.get(key) not in (None, "", 0, False)


def _number(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Presentation models
# ---------------------------------------------------------------------------

@dataclass
class RiskTier:
    label: str
    color: str


HIGH_RISK = RiskTier("high", "red")
MEDIUM_RISK = RiskTier("medium", "yellow")
LOW_RISK = RiskTier("low", "green")


def risk_tier(score: Optional[float]) -> RiskTier:
    """Score out of 10: 7 and above is high, 5 and above medium, else low."""
    value = _number(score, 0.0)
    if value >= 7:
        return HIGH_RISK
    if value >= 5:
        return MEDIUM_RISK
    return LOW_RISK


@dataclass
class PresentationModel:
    kind: str = "generic"
    variant: Optional[Variant] = None

    @property
    def is_empty(self) -> bool:
        return False


@dataclass
class SentimentModel(PresentationModel):
    kind: str = "sentiment"
    sentiment: str = ""
    confidence: Optional[float] = None
    emotions: List[str] = field(default_factory=list)
    urgency: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)
    automatic_task_created: bool = False


@dataclass
class OptimizationModel(PresentationModel):
    kind: str = "optimization"
    tone: Optional[str] = None
    improvements: List[str] = field(default_factory=list)
    confidence: Optional[float] = None
    optimized_message: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)


@dataclass
class ProposalModel(PresentationModel):
    kind: str = "proposal"
    title: Optional[str] = None
    client: Optional[str] = None
    status: Optional[str] = None
    value: Optional[float] = None
    currency: Optional[str] = None
    score: Optional[float] = None
    success_probability: Optional[float] = None
    competitiveness: Optional[str] = None
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
    improvement_suggestions: List[str] = field(default_factory=list)
    next_actions: List[str] = field(default_factory=list)
    conversion_tips: List[str] = field(default_factory=list)
    pricing_recommendation: Optional[str] = None


@dataclass
class RiskItem:
    category: str
    description: str
    severity: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "RiskItem":
        if not isinstance(payload, dict):
            return cls(category="", description=str(payload))
        return cls(
            category=str(payload.get("category") or payload.get("type") or payload.get("name") or ""),
            description=str(payload.get("description") or payload.get("details") or payload.get("issue") or ""),
            severity=payload.get("severity") or payload.get("level"),
        )


@dataclass
class RiskModel(PresentationModel):
    kind: str = "risk"
    project_name: Optional[str] = None
    risk_score: float = 0.0
    tier: RiskTier = field(default_factory=lambda: LOW_RISK)
    identified_risks: List[RiskItem] = field(default_factory=list)
    mitigation_plans: List[Any] = field(default_factory=list)
    early_warning_signs: List[Any] = field(default_factory=list)
    next_actions: List[Any] = field(default_factory=list)


@dataclass
class PricingRecommendation:
    item_name: str
    current_price: Optional[float] = None
    suggested_price: Optional[float] = None
    adjustment_percentage: Optional[float] = None
    reasoning: Optional[str] = None


@dataclass
class PricingStrategy:
    strategy: str
    description: Optional[str] = None
    potential_impact: Optional[str] = None


@dataclass
class PricingModel(PresentationModel):
    kind: str = "pricing"
    budget_title: Optional[str] = None
    current_pricing_score: float = 7
    acceptance_probability: float = 75
    current_total: Optional[float] = None
    optimized_total: Optional[float] = None
    percentage_improvement: Optional[float] = None
    market_analysis: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[PricingRecommendation] = field(default_factory=list)
    strategies: List[PricingStrategy] = field(default_factory=list)
    next_steps: List[Any] = field(default_factory=list)


@dataclass
class Bottleneck:
    area: str
    impact: Optional[str] = None
    description: Optional[str] = None
    solution: Optional[str] = None


@dataclass
class Opportunity:
    opportunity: str
    priority: Optional[str] = None
    potential_impact: Optional[str] = None
    implementation: Optional[str] = None


@dataclass
class ActionableRecommendation:
    action: str
    expected_outcome: Optional[str] = None
    timeframe: Optional[str] = None
    difficulty: Optional[str] = None


@dataclass
class PerformanceModel(PresentationModel):
    kind: str = "performance"
    productivity_score: Optional[float] = None
    billable_percentage: float = 0.0
    revenue_per_hour: float = 0.0
    total_work_hours: float = 0.0
    bottlenecks: List[Bottleneck] = field(default_factory=list)
    opportunities: List[Opportunity] = field(default_factory=list)
    recommendations: List[ActionableRecommendation] = field(default_factory=list)
    predictions: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GenericModel(PresentationModel):
    kind: str = "generic"
    score: Optional[float] = None
    overall_score: Optional[float] = None
    suggested_price: Optional[float] = None
    strengths_count: int = 0
    weaknesses_count: int = 0
    client: Optional[str] = None
    messages_count: Optional[int] = None
    tone: Optional[str] = None
    satisfaction: Optional[Any] = None
    confidence: Optional[float] = None
    recommendations: List[Any] = field(default_factory=list)
    automatic_task_created: bool = False

    @property
    def is_empty(self) -> bool:
        return (
            self.score is None
            and self.overall_score is None
            and self.suggested_price is None
            and self.client is None
            and self.tone is None
        )


# ---------------------------------------------------------------------------
# Shape matchers and builders
# ---------------------------------------------------------------------------

def _is_sentiment(result: Result) -> bool:
    return _has(_analysis(result), "sentiment")


def _is_optimization(result: Result) -> bool:
    return bool(_optimization(result))


def _is_proposal(result: Result) -> bool:
    return _analysis(result).get("overall_score") is not None


def _is_risk(result: Result) -> bool:
    return _analysis(result).get("overall_risk_score") is not None


def _is_pricing(result: Result) -> bool:
    analysis = _analysis(result)
    return bool(analysis.get("pricing_assessment") or analysis.get("financial_impact"))


def _is_performance(result: Result) -> bool:
    return bool(_analysis(result).get("productivity_analysis"))


def _automatic_task_created(result: Result, analysis: Mapping[str, Any]) -> bool:
    if _data(result).get("automatic_task_created") or result.get("automatic_task_created"):
        return True
    return analysis.get("sentiment") == "negative" and analysis.get("urgency") == "high"


def _sentiment(result: Result) -> SentimentModel:
    analysis = _analysis(result)
    return SentimentModel(
        sentiment=str(analysis.get("sentiment")),
        confidence=_number(analysis.get("confidence")),
        emotions=[str(item) for item in _list(analysis.get("emotions"))],
        urgency=analysis.get("urgency"),
        recommendations=[str(item) for item in _list(analysis.get("recommendations"))],
        automatic_task_created=_automatic_task_created(result, analysis),
    )


def _optimization_model(result: Result) -> OptimizationModel:
    optimization = _optimization(result)
    return OptimizationModel(
        tone=optimization.get("toneAnalysis"),
        improvements=[str(item) for item in _list(optimization.get("improvements"))],
        confidence=_number(optimization.get("confidence")),
        optimized_message=optimization.get("optimizedMessage"),
        suggestions=[str(item) for item in _list(optimization.get("suggestions"))],
    )


def _proposal(result: Result) -> ProposalModel:
    analysis = _analysis(result)
    proposal = _mapping(result.get("proposal"))
    return ProposalModel(
        title=proposal.get("title"),
        client=proposal.get("client"),
        status=proposal.get("status"),
        value=_number(proposal.get("value")),
        currency=proposal.get("currency"),
        score=_number(analysis.get("overall_score")),
        success_probability=_number(analysis.get("success_probability")),
        competitiveness=analysis.get("competitiveness"),
        strengths=_list(analysis.get("strengths")),
        weaknesses=_list(analysis.get("weaknesses")),
        risk_factors=_list(analysis.get("risk_factors")),
        improvement_suggestions=_list(analysis.get("improvement_suggestions")),
        next_actions=_list(analysis.get("next_actions")),
        conversion_tips=_list(analysis.get("conversion_tips")),
        pricing_recommendation=_mapping(analysis.get("pricing_analysis")).get("recommendation"),
    )


def _risk(result: Result) -> RiskModel:
    analysis = _analysis(result)
    project = _mapping(result.get("project"))
    score = _number(analysis.get("overall_risk_score"), 0.0)
    return RiskModel(
        project_name=project.get("name"),
        risk_score=score,
        tier=risk_tier(score),
        identified_risks=[RiskItem.from_dict(item) for item in _list(analysis.get("identified_risks"))],
        mitigation_plans=_list(analysis.get("mitigation_plan") or analysis.get("mitigation_plans")),
        early_warning_signs=_list(analysis.get("early_warning_signs")),
        next_actions=_list(analysis.get("next_actions")),
    )


def _pricing(result: Result) -> PricingModel:
    analysis = _analysis(result)
    budget = _mapping(result.get("budget"))
    assessment = _mapping(analysis.get("pricing_assessment"))
    impact = _mapping(analysis.get("financial_impact"))
    market = _mapping(analysis.get("market_analysis"))

    recommendations = [
        PricingRecommendation(
            item_name=str(item.get("item_name") or ""),
            current_price=_number(item.get("current_price")),
            suggested_price=_number(item.get("suggested_price")),
            adjustment_percentage=_number(item.get("adjustment_percentage")),
            reasoning=item.get("reasoning"),
        )
        for item in _list(analysis.get("optimization_recommendations"))
        if isinstance(item, dict)
    ]
    strategies = [
        PricingStrategy(
            strategy=str(item.get("strategy") or ""),
            description=item.get("description"),
            potential_impact=item.get("potential_impact"),
        )
        for item in _list(analysis.get("pricing_strategies"))
        if isinstance(item, dict)
    ]

    budget_total = _number(budget.get("total_amount"))
    return PricingModel(
        budget_title=budget.get("title"),
        current_pricing_score=_number(assessment.get("current_pricing_score"), 7),
        acceptance_probability=_number(assessment.get("acceptance_probability"), 75),
        current_total=_number(impact.get("current_total"), budget_total),
        optimized_total=_number(impact.get("optimized_total"), budget_total),
        percentage_improvement=_number(impact.get("percentage_improvement"), 0.0),
        market_analysis={
            "industry_standards": market.get("industry_standards"),
            "competitive_positioning": market.get("competitive_positioning"),
            "market_trends": market.get("market_trends"),
        },
        recommendations=recommendations,
        strategies=strategies,
        next_steps=_list(analysis.get("next_steps")),
    )


def _performance(result: Result) -> PerformanceModel:
    analysis = _analysis(result)
    metrics = _mapping(result.get("metrics")) or _mapping(_data(result).get("metrics"))
    productivity = _mapping(analysis.get("productivity_analysis"))
    predictions = _mapping(analysis.get("next_period_predictions"))

    return PerformanceModel(
        productivity_score=_number(productivity.get("overall_score")),
        billable_percentage=_number(metrics.get("billablePercentage"), 0.0),
        revenue_per_hour=_number(metrics.get("revenuePerHour"), 0.0),
        total_work_hours=_number(metrics.get("totalWorkHours"), 0.0),
        bottlenecks=[
            Bottleneck(
                area=str(item.get("area") or ""),
                impact=item.get("impact"),
                description=item.get("description"),
                solution=item.get("solution"),
            )
            for item in _list(analysis.get("bottlenecks_identified"))
            if isinstance(item, dict)
        ],
        opportunities=[
            Opportunity(
                opportunity=str(item.get("opportunity") or ""),
                priority=item.get("priority"),
                potential_impact=item.get("potential_impact"),
                implementation=item.get("implementation"),
            )
            for item in _list(analysis.get("opportunities"))
            if isinstance(item, dict)
        ],
        recommendations=[
            ActionableRecommendation(
                action=str(item.get("action") or ""),
                expected_outcome=item.get("expected_outcome"),
                timeframe=item.get("timeframe"),
                difficulty=item.get("difficulty"),
            )
            for item in _list(analysis.get("actionable_recommendations"))
            if isinstance(item, dict)
        ],
        predictions={
            "productivity_forecast": predictions.get("productivity_forecast"),
            "revenue_projection": predictions.get("revenue_projection"),
            "key_focus_areas": _list(predictions.get("key_focus_areas")),
        },
    )


def _generic(result: Result) -> GenericModel:
    analysis = _analysis(result)
    messages_count = result.get("messagesCount")
    return GenericModel(
        score=_number(analysis.get("score")),
        overall_score=_number(analysis.get("overallScore")),
        suggested_price=_number(analysis.get("suggestedPrice")),
        strengths_count=len(_list(analysis.get("strengths"))),
        weaknesses_count=len(_list(analysis.get("weaknesses"))),
        client=result.get("client") if isinstance(result.get("client"), str) else None,
        messages_count=int(messages_count) if isinstance(messages_count, (int, float)) else None,
        tone=analysis.get("overallTone"),
        satisfaction=analysis.get("satisfactionLevel") or analysis.get("satisfactionScore"),
        confidence=_number(analysis.get("confidence")),
        recommendations=_list(analysis.get("recommendations")),
        automatic_task_created=_automatic_task_created(result, analysis),
    )


Matcher = Callable[[Result], bool]
Builder = Callable[[Result], PresentationModel]

# First match wins. Reordering changes which model a mixed payload gets.
SHAPE_PRECEDENCE: Tuple[Tuple[str, Matcher, Builder], ...] = (
    ("sentiment", _is_sentiment, _sentiment),
    ("optimization", _is_optimization, _optimization_model),
    ("proposal", _is_proposal, _proposal),
    ("risk", _is_risk, _risk),
    ("pricing", _is_pricing, _pricing),
    ("performance", _is_performance, _performance),
)

_BUILDERS: Dict[str, Builder] = {name: build for name, _, build in SHAPE_PRECEDENCE}


def discriminate(result: Optional[Result]) -> str:
    """Name of the first shape in ``SHAPE_PRECEDENCE`` that ``result`` matches."""
    if not isinstance(result, Mapping):
        return "generic"
    for name, matches, _ in SHAPE_PRECEDENCE:
        if matches(result):
            return name
    return "generic"


def present(variant: Variant | str | None, result: Optional[Result]) -> PresentationModel:
    """Build the presentation model for a raw result."""

    parsed = Variant.parse(variant) if variant is not None else None
    shape = discriminate(result)
    if not isinstance(result, Mapping):
        model: PresentationModel = GenericModel()
    elif shape == "generic":
        model = _generic(result)
    else:
        model = _BUILDERS[shape](result)
    model.variant = parsed
    return model


# ---------------------------------------------------------------------------
# Notification text
# ---------------------------------------------------------------------------

def _percent(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    # Confidence arrives either as a 0-1 ratio or as a percentage.
    return f"{round(value * 100) if value <= 1 else round(value)}%"


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:g}"


def summary_message(model: PresentationModel, automation_name: Optional[str] = None) -> str:
    """One-paragraph summary shown after a run completes."""

    lines: List[str] = [f"{automation_name or 'Automation'} completed successfully!"]

    if isinstance(model, SentimentModel):
        lines.append(f"Sentiment: {model.sentiment.upper()}")
        lines.append(f"Confidence: {_percent(model.confidence)}")
        if model.emotions:
            lines.append(f"Emotions: {', '.join(model.emotions[:3])}")
        if model.urgency:
            lines.append(f"Urgency: {str(model.urgency).upper()}")
        for index, recommendation in enumerate(model.recommendations[:3], start=1):
            lines.append(f"  {index}. {recommendation}")
    elif isinstance(model, OptimizationModel):
        lines.append("Optimized message generated")
        if model.tone:
            lines.append(f"Tone: {model.tone}")
        if model.improvements:
            lines.append(f"Improvements applied: {len(model.improvements)}")
        if model.confidence:
            lines.append(f"Confidence: {_percent(model.confidence)}")
        if model.optimized_message:
            preview = model.optimized_message[:150]
            ellipsis = "..." if len(model.optimized_message) > 150 else ""
            lines.append(f'Optimized message: "{preview}{ellipsis}"')
    elif isinstance(model, ProposalModel):
        title = f' for "{model.title}"' if model.title else ""
        lines.append(f"Proposal analysis{title}: score {_format_number(model.score)}/10")
        if model.success_probability is not None:
            lines.append(f"Success probability: {_format_number(model.success_probability)}%")
    elif isinstance(model, RiskModel):
        name = f' for "{model.project_name}"' if model.project_name else ""
        lines.append(f"Risk analysis{name}: {model.tier.label} ({_format_number(model.risk_score)}/10)")
        lines.append(f"Identified risks: {len(model.identified_risks)}")
        if model.mitigation_plans:
            lines.append(f"Mitigation plans: {len(model.mitigation_plans)}")
    elif isinstance(model, PricingModel):
        lines.append(
            f"Pricing: {_format_number(model.current_total)} -> {_format_number(model.optimized_total)}"
            f" ({_format_number(model.percentage_improvement)}% improvement)"
        )
        if model.recommendations:
            lines.append(f"Recommendations: {len(model.recommendations)}")
    elif isinstance(model, PerformanceModel):
        lines.append(f"Productivity score: {_format_number(model.productivity_score)}/10")
        lines.append(f"Hours worked: {_format_number(model.total_work_hours)}h")
        lines.append(f"Billable: {_format_number(model.billable_percentage)}%")
        lines.append(f"Revenue per hour: {_format_number(model.revenue_per_hour)}")
        if model.bottlenecks:
            lines.append(f"Bottlenecks: {len(model.bottlenecks)}")
        if model.opportunities:
            lines.append(f"Opportunities: {len(model.opportunities)}")
        if model.recommendations:
            lines.append(f"Recommendations: {len(model.recommendations)}")
    elif isinstance(model, GenericModel):
        if model.client is not None:
            lines.append(f"Analysis completed for {model.client}: {model.messages_count or 0} messages analyzed")
        elif model.score is not None:
            lines.append(f"Score: {_format_number(model.score)}/100")
            lines.append(f"Strengths: {model.strengths_count}")
            lines.append(f"Weaknesses: {model.weaknesses_count}")
        elif model.overall_score is not None:
            lines.append(f"Overall score: {_format_number(model.overall_score)}/100")
        elif model.suggested_price is not None:
            lines.append(f"Suggested price: {_format_number(model.suggested_price)}")

    if getattr(model, "automatic_task_created", False):
        lines.append("A high-priority follow-up task was created automatically")

    lines.append("Insight saved to your dashboard")
    return "\n".join(lines)


__all__ = [
    "SHAPE_PRECEDENCE",
    "GenericModel",
    "OptimizationModel",
    "PerformanceModel",
    "PresentationModel",
    "PricingModel",
    "ProposalModel",
    "RiskModel",
    "RiskTier",
    "SentimentModel",
    "discriminate",
    "present",
    "risk_tier",
    "summary_message",
]
