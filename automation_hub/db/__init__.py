"""
Database module for the automation dispatcher.

Wraps the Supabase tables the dispatcher reads: persisted AI insights,
workspace clients with their message history, and subscription state.
"""

from .client import DatabaseClient, SupabaseDatabaseClient, get_database_client

__all__ = [
    "DatabaseClient",
    "SupabaseDatabaseClient",
    "get_database_client",
]
