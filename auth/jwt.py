"""
JWT-style token creation and verification.

Tokens use the standard three-segment JWT layout
``base64url(header).base64url(payload).base64url(signature)`` signed with
HMAC-SHA256. The payload carries ``sub``, ``email`` and ``iat``; there is
no expiry, so a token stays valid until the client discards it.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional

from auth.models import UserRecord
from config.settings import Settings

_HEADER = {"alg": "HS256", "typ": "JWT"}


def b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _compact_json(data: Dict[str, Any]) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode()


class TokenCodec:
    """Issues and verifies signed identity tokens for one secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._key = secret.encode()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(settings.resolve_jwt_secret())

    def _sign(self, signing_input: str) -> str:
        digest = hmac.new(self._key, signing_input.encode("ascii"), hashlib.sha256).digest()
        return b64url_encode(digest)

    def issue(self, user: UserRecord, *, issued_at: Optional[int] = None) -> str:
        """Create a signed token for ``user``."""
        payload = {
            "sub": user.id,
            "email": user.email,
            "iat": int(time.time()) if issued_at is None else issued_at,
        }
        signing_input = b64url_encode(_compact_json(_HEADER)) + "." + b64url_encode(_compact_json(payload))
        return signing_input + "." + self._sign(signing_input)

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Return the decoded payload, or ``None`` if the token is malformed
        or its signature does not match.
        """
        if not isinstance(token, str):
            return None
        parts = token.split(".")
        if len(parts) != 3 or not all(parts):
            return None
        header, payload, signature = parts
        try:
            expected = self._sign(f"{header}.{payload}")
        except UnicodeEncodeError:
            return None
        if not hmac.compare_digest(signature.encode("utf-8", "replace"), expected.encode()):
            return None
        try:
            claims = json.loads(b64url_decode(payload))
        except (binascii.Error, ValueError):
            return None
        if not isinstance(claims, dict):
            return None
        return claims
