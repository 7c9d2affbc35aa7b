"""
Caller identity for automation runs.

Access tokens issued by Supabase Auth are checked locally against the
project's JWT secret first. When no configured secret accepts the token the
Supabase SDK is asked instead, so rotated or asymmetric keys still resolve.
"""

import asyncio
import base64
import binascii
import logging
import os
from typing import Any, Dict, List, Optional, Protocol, Union

import jwt
from supabase import Client, create_client

from ..core.errors import Unauthenticated
from .user_context import UserContext

logger = logging.getLogger(__name__)

TOKEN_AUDIENCE = "authenticated"
TOKEN_ALGORITHMS = ["HS256"]

SecretKey = Union[str, bytes]


class IdentityProvider(Protocol):
    """Resolves the caller of an automation run."""

    async def current_user(self) -> UserContext:  # pragma: no cover - protocol
        ...


class SupabaseAuthManager:
    """Turns Supabase access tokens into ``UserContext`` objects."""

    def __init__(self, client: Optional[Client] = None, *, jwt_secret: Optional[str] = None):
        if jwt_secret is None:
            jwt_secret = os.getenv("SUPABASE_JWT_SECRET")
        if client is None:
            client = self._create_client()
        self.supabase: Client = client
        self._secrets = self._secret_variants(jwt_secret)

    @staticmethod
    def _create_client() -> Client:
        url = os.getenv("SUPABASE_URL")
        anon_key = os.getenv("SUPABASE_ANON_KEY")
        service_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        if not url or not anon_key:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set to verify access tokens")
        if not service_key:
            logger.warning("No service role key configured; verifying tokens with the anon key")
        return create_client(url, service_key or anon_key)

    @staticmethod
    def _secret_variants(secret: Optional[str]) -> List[SecretKey]:
        """The secret as given and, when it is valid base64, its decoded bytes."""
        cleaned = (secret or "").strip()
        if not cleaned:
            return []
        variants: List[SecretKey] = [cleaned]
        try:
            decoded = base64.b64decode(cleaned, validate=True)
        except (binascii.Error, ValueError):
            return variants
        if decoded:
            variants.append(decoded)
        return variants

    def _decode_locally(self, token: str) -> Optional[Dict[str, Any]]:
        for secret in self._secrets:
            try:
                return jwt.decode(token, secret, algorithms=TOKEN_ALGORITHMS, audience=TOKEN_AUDIENCE)
            except jwt.InvalidTokenError:
                continue
        return None

    def _claims_from_supabase(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.supabase.auth.get_user(token)
        except Exception as exc:
            logger.warning("Supabase rejected access token lookup: %s", exc)
            return None
        account = getattr(response, "user", None) if response else None
        if account is None:
            return None
        return {
            "sub": account.id,
            "email": account.email,
            "user_metadata": account.user_metadata or {},
        }

    def verify_jwt_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Return the claims carried by ``token``, or None when it is not valid.

        Local verification is tried first; the SDK lookup is the fallback.
        """
        if not token:
            return None
        claims = self._decode_locally(token)
        if claims is not None:
            return claims
        logger.debug("Access token not verifiable with local secrets; asking Supabase")
        claims = self._claims_from_supabase(token)
        if claims is None:
            logger.warning("Access token could not be verified")
        return claims

    def get_user_context(self, token: str) -> Optional[UserContext]:
        claims = self.verify_jwt_token(token)
        if not claims:
            return None
        return UserContext.from_claims(claims, access_token=token)


AuthManager = SupabaseAuthManager


class SupabaseIdentityProvider:
    """Resolves the caller from the current session's access token."""

    def __init__(self, auth_manager: SupabaseAuthManager, access_token: Optional[str]) -> None:
        self._auth_manager = auth_manager
        self._access_token = access_token

    def set_access_token(self, access_token: Optional[str]) -> None:
        self._access_token = access_token

    async def current_user(self) -> UserContext:
        if not self._access_token:
            raise Unauthenticated("User is not authenticated. Please sign in.")
        context = await asyncio.to_thread(self._auth_manager.get_user_context, self._access_token)
        if context is None:
            raise Unauthenticated("Session expired or invalid. Please sign in again.")
        return context


class StaticIdentityProvider:
    """Returns a fixed context; used by the CLI runner and in tests."""

    def __init__(self, user_context: Optional[UserContext]) -> None:
        self._user_context = user_context

    async def current_user(self) -> UserContext:
        if self._user_context is None:
            raise Unauthenticated("User is not authenticated. Please sign in.")
        return self._user_context


_auth_manager: Optional[AuthManager] = None


def get_auth_manager() -> AuthManager:
    """Process-wide auth manager, created on first use."""
    global _auth_manager
    if _auth_manager is None:
        _auth_manager = AuthManager()
    return _auth_manager
