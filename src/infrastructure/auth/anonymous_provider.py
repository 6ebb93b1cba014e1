"""Supabase anonymous sign-in provider.

Every accepted webhook mints a fresh anonymous user through Supabase Auth
instead of holding a long-lived session per Telegram user. The response of
``POST /auth/v1/signup`` with an empty body looks like:

    {
        "access_token": "<jwt>",
        "token_type": "bearer",
        "expires_in": 3600,
        "refresh_token": "...",
        "user": { "id": "user-uuid", "is_anonymous": true, ... }
    }

The JWT claims are needed verbatim for row-level security, so they are read
from the token here. The token was issued to us by the auth service in this
same request, hence the unverified read.
"""

from typing import Any, Optional
from uuid import UUID

import httpx
import structlog
from jose import JWTError, jwt

from core.config import settings
from core.exceptions import IdentityProvisioningError
from infrastructure.auth.provider import AnonymousSession

logger = structlog.get_logger()


class SupabaseAnonymousAuthProvider:
    """Mints anonymous Supabase Auth sessions."""

    def __init__(
        self,
        signup_url: str = settings.signup_url,
        anon_key: str = settings.supabase_anon_key,
        timeout: float = settings.http_timeout_seconds,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._signup_url = signup_url
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    async def sign_in_anonymously(self) -> AnonymousSession:
        """Create a new anonymous user and return its session."""
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._anon_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self._signup_url,
                    json={"data": {}},
                    headers=headers,
                    timeout=self._timeout,
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("anonymous_sign_in_failed", error=str(e), error_type=type(e).__name__)
            raise IdentityProvisioningError() from e

        return self._to_session(payload)

    def _to_session(self, payload: Any) -> AnonymousSession:
        """Validate the sign-up response and read the token claims."""
        if not isinstance(payload, dict):
            logger.error("anonymous_sign_in_failed", error="unexpected response body")
            raise IdentityProvisioningError()

        access_token = payload.get("access_token")
        user = payload.get("user") or {}
        user_id = user.get("id") if isinstance(user, dict) else None

        if not access_token or not user_id:
            logger.error(
                "anonymous_sign_in_failed",
                error="session missing",
                has_token=bool(access_token),
                has_user=bool(user_id),
            )
            raise IdentityProvisioningError()

        try:
            claims = jwt.get_unverified_claims(access_token)
            return AnonymousSession(
                user_id=UUID(str(user_id)),
                access_token=access_token,
                claims=claims,
            )
        except (JWTError, ValueError) as e:
            logger.error("anonymous_sign_in_failed", error=str(e), error_type=type(e).__name__)
            raise IdentityProvisioningError() from e
