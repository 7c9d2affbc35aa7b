"""Unit tests for token verification and identity providers."""

from __future__ import annotations

import asyncio
import base64
import time
from types import SimpleNamespace

import jwt
import pytest

from automation_hub.auth import (
    StaticIdentityProvider,
    SupabaseAuthManager,
    SupabaseIdentityProvider,
    UserContext,
    load_user_context_from_env,
)
from automation_hub.core.errors import Unauthenticated

SECRET = "local-development-jwt-secret-with-enough-bytes"


def _token(secret=SECRET, **claims):
    payload = {
        "sub": "8a1c2f0e-user",
        "email": "ana@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
        "user_metadata": {"full_name": "Ana Lopez", "timezone": "Europe/Madrid"},
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


class FakeAuthApi:
    def __init__(self, user=None):
        self.user = user
        self.tokens = []

    def get_user(self, token):
        self.tokens.append(token)
        if self.user is None:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=self.user)


def _manager(secret=SECRET, user=None):
    client = SimpleNamespace(auth=FakeAuthApi(user))
    return SupabaseAuthManager(client, jwt_secret=secret)


def test_verify_jwt_token_with_configured_secret() -> None:
    manager = _manager()

    payload = manager.verify_jwt_token(_token())

    assert payload["sub"] == "8a1c2f0e-user"
    assert manager.supabase.auth.tokens == []


def test_base64_encoded_secret_is_also_tried() -> None:
    raw = b"binary-secret-material-that-is-long-enough"
    manager = _manager(secret=base64.b64encode(raw).decode())

    payload = manager.verify_jwt_token(_token(secret=raw))

    assert payload["email"] == "ana@example.com"


def test_falls_back_to_supabase_when_signature_does_not_match() -> None:
    user = SimpleNamespace(id="u-9", email="bo@example.com", user_metadata={"name": "Bo"})
    manager = _manager(user=user)
    token = _token(secret="another-secret-that-does-not-match-at-all")

    context = manager.get_user_context(token)

    assert manager.supabase.auth.tokens == [token]
    assert context.user_id == "u-9"
    assert context.display_name == "Bo"
    assert context.access_token == token


def test_invalid_token_without_fallback_returns_none() -> None:
    manager = _manager()

    assert manager.get_user_context("not-a-jwt") is None
    assert manager.verify_jwt_token("") is None


def test_user_context_from_claims() -> None:
    context = _manager().get_user_context(_token())

    assert context.user_id == "8a1c2f0e-user"
    assert context.display_name == "Ana Lopez"
    assert context.timezone == "Europe/Madrid"
    assert context.handle == "ana@example.com"
    assert "access_token" not in repr(context)


def test_identity_provider_requires_a_token() -> None:
    provider = SupabaseIdentityProvider(_manager(), None)

    with pytest.raises(Unauthenticated) as excinfo:
        asyncio.run(provider.current_user())

    assert excinfo.value.message == "User is not authenticated. Please sign in."


def test_identity_provider_rejects_invalid_session() -> None:
    provider = SupabaseIdentityProvider(_manager(), "expired-token")

    with pytest.raises(Unauthenticated) as excinfo:
        asyncio.run(provider.current_user())

    assert excinfo.value.message == "Session expired or invalid. Please sign in again."


def test_identity_provider_resolves_user() -> None:
    provider = SupabaseIdentityProvider(_manager(), _token())

    context = asyncio.run(provider.current_user())

    assert context.email == "ana@example.com"


def test_static_provider(user_context) -> None:
    assert asyncio.run(StaticIdentityProvider(user_context).current_user()) is user_context
    with pytest.raises(Unauthenticated):
        asyncio.run(StaticIdentityProvider(None).current_user())


def test_load_user_context_from_env(monkeypatch) -> None:
    monkeypatch.setenv("USER_ID", "env-user")
    monkeypatch.setenv("USER_EMAIL", "env@example.com")
    monkeypatch.setenv("USER_METADATA", '{"plan": "pro"}')
    monkeypatch.delenv("USER_ACCESS_TOKEN", raising=False)

    context = load_user_context_from_env()

    assert isinstance(context, UserContext)
    assert context.user_id == "env-user"
    assert context.metadata == {"plan": "pro"}
    assert context.access_token is None


def test_load_user_context_from_env_without_user(monkeypatch) -> None:
    monkeypatch.delenv("USER_ID", raising=False)

    assert load_user_context_from_env() is None
