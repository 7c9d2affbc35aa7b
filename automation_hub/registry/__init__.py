"""
Registry System for Automations

This module provides:
- The predefined automation catalog (via registry.automations)
- Variant, category and status enumerations
"""

from .automations import (
    AutomationCatalog,
    AutomationCategory,
    AutomationDefinition,
    AutomationStatus,
    Variant,
)

from . import automations

__all__ = [
    'AutomationCatalog',
    'AutomationCategory',
    'AutomationDefinition',
    'AutomationStatus',
    'Variant',
    'automations',
]
