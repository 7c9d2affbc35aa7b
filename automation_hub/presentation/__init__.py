"""
Presentation helpers

Normalizes raw automation results and merges them with persisted insights
into the feed shown on the dashboard.
"""

from .normalizer import SHAPE_PRECEDENCE, PresentationModel, discriminate, present, risk_tier, summary_message
from .timeline import TimelineAggregator, TimelineEntry, time_ago

__all__ = [
    'SHAPE_PRECEDENCE',
    'PresentationModel',
    'TimelineAggregator',
    'TimelineEntry',
    'discriminate',
    'present',
    'risk_tier',
    'summary_message',
    'time_ago',
]
