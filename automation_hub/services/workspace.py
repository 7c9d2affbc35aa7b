"""Workspace lookups used to populate and gate workflow forms."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from automation_hub.db.client import DatabaseClient


@dataclass
class WorkspaceClient:
    id: str
    name: str
    company: Optional[str] = None
    message_count: int = 0

    @classmethod
    def from_record(cls, record: Dict[str, Any], *, message_count: int = 0) -> "WorkspaceClient":
        return cls(
            id=str(record.get("id")),
            name=str(record.get("name") or ""),
            company=record.get("company"),
            message_count=message_count,
        )


class SupabaseWorkspaceDirectory:
    """Lists a user's clients together with their message history size."""

    def __init__(self, db: DatabaseClient):
        self._db = db

    def _load_clients(self, user_id: str) -> List[WorkspaceClient]:
        clients: List[WorkspaceClient] = []
        for record in self._db.list_clients(user_id):
            client_id = str(record.get("id"))
            clients.append(
                WorkspaceClient.from_record(
                    record,
                    message_count=self._db.count_client_messages(client_id),
                )
            )
        return clients

    async def list_clients(self, user_id: str) -> List[WorkspaceClient]:
        return await asyncio.to_thread(self._load_clients, user_id)

    async def message_counts(self, user_id: str) -> Dict[str, int]:
        """Message count per client id, the side table the conversation gate reads."""
        clients = await self.list_clients(user_id)
        return {client.id: client.message_count for client in clients}


__all__ = ["SupabaseWorkspaceDirectory", "WorkspaceClient"]
