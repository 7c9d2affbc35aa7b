"""Fake collaborators shared by the dispatcher tests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from automation_hub.core.errors import Unauthenticated


class FakeIdentity:
    def __init__(self, user=None):
        self.user = user
        self.calls = 0

    async def current_user(self):
        self.calls += 1
        if self.user is None:
            raise Unauthenticated("User is not authenticated. Please sign in.")
        return self.user


class FakeExecutor:
    """Returns queued responses; an exception instance is raised instead."""

    def __init__(self, *responses: Any, gate: Optional[asyncio.Event] = None):
        self.responses: List[Any] = list(responses)
        self.calls: List[Any] = []
        self.gate = gate

    async def invoke(self, request, identity):
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0) if self.responses else {"success": True, "data": {}}
        if isinstance(response, BaseException):
            raise response
        return response


class FakeInsightStore:
    def __init__(self, records=None, error: Optional[Exception] = None):
        self.records = list(records or [])
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def list_recent(self, user_id, limit):
        self.calls.append({"user_id": user_id, "limit": limit})
        if self.error is not None:
            raise self.error
        return list(self.records)


class FakeEntitlements:
    def __init__(self, allowed: bool):
        self.allowed = allowed
        self.calls = 0

    async def can_use_features(self, identity):
        self.calls += 1
        return self.allowed


