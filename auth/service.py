"""
Auth façade — signup, login, federated login and bearer-token checks.

Composes the credential store, password hashing, the token codec and the
identity reconciler. All failures surface as ``AuthError`` subclasses.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from auth.errors import AuthenticationError, ConflictError, DependencyError, ValidationError
from auth.jwt import TokenCodec
from auth.models import UserRecord
from auth.password import hash_password, random_password, verify_password
from auth.reconciler import IdentityReconciler, new_user_id
from auth.store import CredentialStore
from config.settings import Settings
from connectors.base import IdentityProvider

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: UserRecord

    def as_response(self) -> Dict[str, Any]:
        return {"token": self.token, "user": self.user.public()}


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        codec: TokenCodec,
        provider: IdentityProvider,
        settings: Settings,
    ) -> None:
        self._store = store
        self._codec = codec
        self._provider = provider
        self._kdf_params = {"n": settings.scrypt_n, "r": settings.scrypt_r, "p": settings.scrypt_p}
        self._reconciler = IdentityReconciler(store, **self._kdf_params)
        self._unknown_user_hash: Optional[str] = None

    async def _dummy_hash(self) -> str:
        if self._unknown_user_hash is None:
            self._unknown_user_hash = await asyncio.to_thread(
                hash_password, random_password(), **self._kdf_params
            )
        return self._unknown_user_hash

    def _issue(self, user: UserRecord) -> AuthResult:
        return AuthResult(token=self._codec.issue(user), user=user)

    async def signup(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        if not email or not password:
            raise ValidationError("email and password required")

        try:
            password_hash = await asyncio.to_thread(hash_password, password, **self._kdf_params)
        except UnicodeEncodeError:
            raise ValidationError("invalid password")
        try:
            user = await self._store.insert_user(new_user_id(), email, password_hash)
        except ConflictError:
            logger.warning("Signup rejected: %s already registered", email)
            raise
        except DependencyError:
            raise
        except Exception as exc:
            logger.error("Signup failed for %s: %s", email, exc, exc_info=True)
            raise DependencyError("signup failed") from exc

        logger.info("Registered user %s (%s)", user.id, email)
        return self._issue(user)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        if not email or not password:
            raise ValidationError("email and password required")

        user = await self._store.find_by_email(email)
        # Unknown emails still pay for one scrypt run.
        stored = user.password_hash if user is not None else await self._dummy_hash()
        ok = await asyncio.to_thread(verify_password, password, stored, **self._kdf_params)
        if user is None or not ok:
            logger.warning("Login failed for %s", email)
            raise AuthenticationError("invalid credentials")

        logger.info("Login: %s (%s)", user.email, user.id)
        return self._issue(user)

    async def federated_login(
        self,
        *,
        credential: Optional[str] = None,
        access_token: Optional[str] = None,
        email: Optional[str] = None,
    ) -> AuthResult:
        """
        Sign in with a provider assertion (``credential``) or with a
        provider access token plus the email it should belong to.
        """
        if credential:
            verified_email = await self._provider.verify_id_token(credential)
        elif access_token and email:
            verified_email = await self._provider.verify_access_token(access_token, email)
        else:
            raise ValidationError("credential or access_token with email required")

        user = await self._reconciler.resolve(verified_email)
        logger.info("%s login: %s (%s)", self._provider.provider_name, user.email, user.id)
        return self._issue(user)

    def authenticate(self, authorization: Optional[str]) -> Dict[str, Any]:
        """Validate an ``Authorization`` header value and return the token payload."""
        if not authorization or not authorization.startswith(_BEARER_PREFIX):
            raise AuthenticationError("unauthorized")
        payload = self._codec.verify(authorization[len(_BEARER_PREFIX):])
        if payload is None:
            raise AuthenticationError("unauthorized")
        return payload
