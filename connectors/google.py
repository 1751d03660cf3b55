"""
GoogleIdentityProvider — Google sign-in verification.

Supports both shapes the web client sends:
  • ``credential`` — a Google ID token, checked against ``tokeninfo``
  • ``access_token`` + ``email`` — checked against ``userinfo``
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from auth.errors import AuthenticationError, DependencyError
from connectors.base import IdentityProvider

logger = logging.getLogger(__name__)

# Google OAuth2 endpoints
_GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
_GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleIdentityProvider(IdentityProvider):
    """Verifies Google ID tokens and OAuth access tokens."""

    def __init__(
        self,
        *,
        client_id: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client_id = client_id
        self._timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        return "google"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _get_json(self, url: str, **kwargs: Any) -> Optional[Dict[str, Any]]:
        """GET ``url``; ``None`` on a non-2xx answer."""
        try:
            async with self._client() as client:
                resp = await client.get(url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Google request to %s failed: %s", url, exc)
            raise DependencyError("identity provider unreachable") from exc

        if not resp.is_success:
            logger.warning("Google rejected verification (%s %s)", resp.status_code, url)
            return None
        try:
            data = resp.json()
        except ValueError as exc:
            raise DependencyError("identity provider returned malformed data") from exc
        if not isinstance(data, dict):
            raise DependencyError("identity provider returned malformed data")
        return data

    async def verify_id_token(self, credential: str) -> str:
        info = await self._get_json(_GOOGLE_TOKENINFO_URL, params={"id_token": credential})
        if info is None:
            raise AuthenticationError("Invalid Google token")

        if self._client_id and info.get("aud") != self._client_id:
            logger.warning("Google ID token issued for a different client")
            raise AuthenticationError("Invalid Google token")

        email = info.get("email")
        if not email:
            raise AuthenticationError("Email not found in Google token")
        return email

    async def verify_access_token(self, access_token: str, claimed_email: str) -> str:
        headers = {"Authorization": f"Bearer {access_token}"}
        profile = await self._get_json(_GOOGLE_USERINFO_URL, headers=headers)
        if profile is None:
            raise AuthenticationError("Invalid Google access token")

        if profile.get("email") != claimed_email:
            logger.warning("Google profile email does not match the claimed email")
            raise AuthenticationError("Email mismatch")
        return claimed_email
