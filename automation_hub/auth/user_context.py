"""
User Context for Automation Runs

This module provides the UserContext dataclass that represents the caller of
an automation, plus helpers to load it from environment variables or from
decoded Supabase token claims.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking helper
    from automation_hub.billing.plans import PlanContext


@dataclass
class UserContext:
    """
    Contains the caller information needed to dispatch automations.

    ``user_id`` is the durable identity (auth user id). ``email`` is the
    display handle some endpoints still resolve callers by.
    """
    user_id: str
    display_name: str
    email: Optional[str]
    timezone: str = "UTC"
    access_token: Optional[str] = field(default=None, repr=False)
    metadata: Dict[str, Any] = None
    plan_context: Optional['PlanContext'] = None

    def __post_init__(self):
        """Initialize default values after dataclass creation."""
        if self.metadata is None:
            self.metadata = {}

    @property
    def handle(self) -> str:
        """Human-facing identifier, preferring the email address."""
        return self.email or self.display_name or self.user_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert UserContext to dictionary (for serialization)."""
        data = {
            'user_id': self.user_id,
            'display_name': self.display_name,
            'email': self.email,
            'timezone': self.timezone,
            'metadata': dict(self.metadata),
        }
        if self.plan_context is not None:
            data['plan_context'] = self.plan_context.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UserContext':
        """Create UserContext from dictionary."""
        payload = {key: value for key, value in data.items() if key != 'plan_context'}
        return cls(**payload)

    @classmethod
    def from_claims(cls, claims: Dict[str, Any], *, access_token: Optional[str] = None) -> Optional['UserContext']:
        """Build a context from decoded Supabase token claims."""
        user_id = claims.get('sub') or claims.get('id')
        if not user_id:
            return None
        metadata = claims.get('user_metadata') or claims.get('metadata') or {}
        email = claims.get('email')
        display_name = (
            metadata.get('full_name')
            or metadata.get('display_name')
            or metadata.get('name')
            or (email.split('@')[0] if email else None)
            or str(user_id)
        )
        return cls(
            user_id=str(user_id),
            display_name=display_name,
            email=email,
            timezone=metadata.get('timezone') or 'UTC',
            access_token=access_token,
            metadata=dict(metadata),
        )


def load_user_context_from_env() -> Optional[UserContext]:
    """
    Load user context from environment variables.

    This is used by the CLI runner and by scripts that act on behalf of a
    single configured user.
    """
    user_id = os.getenv('USER_ID')
    if not user_id:
        return None

    raw_metadata = os.getenv('USER_METADATA')
    metadata: Dict[str, Any] = {}
    if raw_metadata:
        try:
            parsed = json.loads(raw_metadata)
            if isinstance(parsed, dict):
                metadata = parsed
        except json.JSONDecodeError:
            metadata = {}

    return UserContext(
        user_id=user_id,
        display_name=os.getenv('USER_DISPLAY_NAME', 'Unknown User'),
        email=os.getenv('USER_EMAIL'),
        timezone=os.getenv('USER_TIMEZONE', 'UTC'),
        access_token=os.getenv('USER_ACCESS_TOKEN') or None,
        metadata=metadata,
    )
