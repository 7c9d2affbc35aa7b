"""Adapters for the collaborators the dispatcher depends on."""

from .executor import Executor, HttpExecutor
from .insights import InsightRecord, InsightStore, SupabaseInsightStore
from .notifications import (
    CollectingNotificationSink,
    LoggingNotificationSink,
    Notification,
    NotificationSink,
    Severity,
    notify,
)
from .workspace import SupabaseWorkspaceDirectory, WorkspaceClient

__all__ = [
    "CollectingNotificationSink",
    "Executor",
    "HttpExecutor",
    "InsightRecord",
    "InsightStore",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "Severity",
    "SupabaseInsightStore",
    "SupabaseWorkspaceDirectory",
    "WorkspaceClient",
    "notify",
]
