"""
Database client for the automation dispatcher.
Reads persisted insights, workspace clients, and subscription state.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from ..config import CONFIG

logger = logging.getLogger(__name__)


class SupabaseDatabaseClient:
    """Database client for Supabase operations."""

    def __init__(self, client: Optional[Client] = None):
        if client is not None:
            self.client = client
            self.using_service_role = False
            return

        self.supabase_url = CONFIG.supabase_url or os.getenv('SUPABASE_URL')

        # Prefer service role key when available to bypass RLS for server-side reads
        service_key = CONFIG.supabase_service_role_key
        anon_key = CONFIG.supabase_anon_key

        if service_key:
            self.supabase_key = service_key
            self.using_service_role = True
        else:
            self.supabase_key = anon_key
            self.using_service_role = False

        if not self.supabase_url or not self.supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY (or SUPABASE_SERVICE_ROLE_KEY) environment variables are required")

        self.client: Client = create_client(self.supabase_url, self.supabase_key)

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------
    def list_ai_insights(self, auth_user_id: str, limit: int, *, table: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return the newest persisted insights for a user.

        Errors propagate so callers can decide whether a failed read matters.
        """
        result = (
            self.client.table(table or CONFIG.insights_table)
            .select("*")
            .eq("user_id", auth_user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return list(result.data or [])

    # ------------------------------------------------------------------
    # Workspace
    # ------------------------------------------------------------------
    def list_clients(self, auth_user_id: str) -> List[Dict[str, Any]]:
        try:
            result = (
                self.client.table("clients")
                .select("id, name, company")
                .eq("user_id", auth_user_id)
                .order("name")
                .execute()
            )
            return list(result.data or [])
        except Exception as exc:
            logger.warning("Error fetching clients for %s: %s", auth_user_id, exc)
            return []

    def count_client_messages(self, client_id: str) -> int:
        try:
            result = (
                self.client.table("client_messages")
                .select("*", count="exact", head=True)
                .eq("client_id", client_id)
                .execute()
            )
            return int(getattr(result, "count", 0) or 0)
        except Exception as exc:
            logger.warning("Error counting messages for client %s: %s", client_id, exc)
            return 0

    # ------------------------------------------------------------------
    # Subscription state
    # ------------------------------------------------------------------
    def get_user_profile(self, auth_user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = (
                self.client.table("profiles")
                .select("subscription_status, subscription_plan, trial_started_at, trial_ends_at, subscription_current_period_end")
                .eq("id", auth_user_id)
                .limit(1)
                .execute()
            )
            return result.data[0] if result.data else None
        except Exception as exc:
            logger.warning("Error fetching profile for %s: %s", auth_user_id, exc)
            return None

    def get_active_subscription(self, auth_user_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = (
                self.client.table("subscriptions")
                .select("*")
                .eq("user_id", auth_user_id)
                .eq("status", "active")
                .limit(1)
                .execute()
            )
            return result.data[0] if result.data else None
        except Exception as exc:
            logger.warning("Error fetching subscription for %s: %s", auth_user_id, exc)
            return None


# Global database client instance
_database_client: Optional[SupabaseDatabaseClient] = None


def get_database_client() -> SupabaseDatabaseClient:
    """Get the global database client instance."""
    global _database_client
    if _database_client is None:
        _database_client = SupabaseDatabaseClient()
    return _database_client


# Simple alias for readability
DatabaseClient = SupabaseDatabaseClient
