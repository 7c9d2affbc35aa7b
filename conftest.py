"""Repository-wide pytest fixtures."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from automation_hub.auth import UserContext
from automation_hub.config import reload_config


@pytest.fixture(autouse=True)
def _set_default_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Pin configuration so tests never reach real services or sleep."""

    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("AUTOMATIONS_API_BASE_URL", "http://automations.test")
    monkeypatch.setenv("INSIGHTS_REFRESH_DELAY_SECONDS", "0")
    monkeypatch.setenv("INSIGHTS_REFRESH_SETTLE_SECONDS", "0")
    monkeypatch.setenv("BILLING_ENABLED", "false")
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_JWT_SECRET", raising=False)
    reload_config()
    yield


@pytest.fixture
def user_context() -> UserContext:
    """Reusable user context fixture."""

    return UserContext(
        user_id="user-123",
        display_name="Test User",
        email="test@example.com",
        timezone="UTC",
        access_token="token-abc",
    )
