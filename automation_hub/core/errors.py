"""Error taxonomy for automation runs."""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

# Error returned by the conversation endpoint when the client has no history.
NO_MESSAGES_CODE = "no_messages"
NO_MESSAGES_ERROR = "No hay mensajes en esta conversación"
TRANSPORT_ERROR_CODE = "transport"
IDENTITY_ERROR_CODE = "identity"


class AutomationError(Exception):
    """Base class for every dispatcher-level failure."""

    severity = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(AutomationError):
    """No caller identity could be resolved; the run is aborted before dispatch."""


class ValidationFailed(AutomationError):
    """Workflow input is incomplete for the variant and was never dispatched."""

    severity = "warning"

    def __init__(self, message: str, *, missing: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class ExecutionError(AutomationError):
    """The executor or a remote endpoint reported a failure."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.details = dict(details or {})

    @property
    def is_no_messages(self) -> bool:
        return self.code == NO_MESSAGES_CODE or NO_MESSAGES_ERROR in (self.message or "")

    def __repr__(self) -> str:
        return f"ExecutionError(code={self.code!r}, message={self.message!r})"


class AdvisoryCondition(AutomationError):
    """A recognised non-error remote outcome reported as guidance."""

    severity = "warning"

    def __init__(self, message: str, *, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class EntitlementRequired(AutomationError):
    """The caller's plan does not include the requested feature."""

    severity = "warning"


__all__ = [
    "NO_MESSAGES_CODE",
    "NO_MESSAGES_ERROR",
    "TRANSPORT_ERROR_CODE",
    "IDENTITY_ERROR_CODE",
    "AutomationError",
    "Unauthenticated",
    "ValidationFailed",
    "ExecutionError",
    "AdvisoryCondition",
    "EntitlementRequired",
]
