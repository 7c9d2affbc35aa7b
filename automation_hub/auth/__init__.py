"""
Authentication and Caller Identity

This module provides:
- Supabase access token validation
- Identity providers consumed by the execution orchestrator
- The UserContext dataclass describing the caller
"""

from .manager import (
    AuthManager,
    IdentityProvider,
    StaticIdentityProvider,
    SupabaseAuthManager,
    SupabaseIdentityProvider,
    get_auth_manager,
)
from .user_context import UserContext, load_user_context_from_env

__all__ = [
    'AuthManager',
    'IdentityProvider',
    'StaticIdentityProvider',
    'SupabaseAuthManager',
    'SupabaseIdentityProvider',
    'get_auth_manager',
    'UserContext',
    'load_user_context_from_env',
]
