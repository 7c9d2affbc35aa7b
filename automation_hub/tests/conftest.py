"""Fixtures shared by the dispatcher tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from automation_hub.registry.automations import AutomationCatalog
from automation_hub.services.notifications import CollectingNotificationSink
from automation_hub.tests.fakes import FakeIdentity


@pytest.fixture
def catalog() -> AutomationCatalog:
    return AutomationCatalog()


@pytest.fixture
def sink() -> CollectingNotificationSink:
    return CollectingNotificationSink()


@pytest.fixture
def identity(user_context) -> FakeIdentity:
    return FakeIdentity(user_context)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
