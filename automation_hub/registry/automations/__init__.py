"""
Automation Registry

Holds the predefined automation catalog and its definition model.
"""

from .catalog import ALL_CATEGORIES, CATEGORY_LABELS, PREDEFINED_AUTOMATIONS, AutomationCatalog
from .models import AutomationCategory, AutomationDefinition, AutomationStatus, Variant

__all__ = [
    'ALL_CATEGORIES',
    'CATEGORY_LABELS',
    'PREDEFINED_AUTOMATIONS',
    'AutomationCatalog',
    'AutomationCategory',
    'AutomationDefinition',
    'AutomationStatus',
    'Variant',
]
