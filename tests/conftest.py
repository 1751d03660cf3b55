"""
Shared fixtures for the auth test-suite.
"""

from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from auth.errors import AuthenticationError
from auth.jwt import TokenCodec
from auth.store import InMemoryCredentialStore
from config.settings import Settings
from connectors.base import IdentityProvider
from main import create_app

# Small scrypt cost keeps the suite fast; the format is unchanged.
FAST_KDF = {"n": 1024, "r": 8, "p": 1}


class FakeIdentityProvider(IdentityProvider):
    """Maps known credentials / access tokens to emails."""

    def __init__(
        self,
        id_tokens: Optional[Dict[str, str]] = None,
        access_tokens: Optional[Dict[str, str]] = None,
    ) -> None:
        self.id_tokens = id_tokens or {}
        self.access_tokens = access_tokens or {}

    @property
    def provider_name(self) -> str:
        return "fake"

    async def verify_id_token(self, credential: str) -> str:
        try:
            return self.id_tokens[credential]
        except KeyError:
            raise AuthenticationError("Invalid Google token")

    async def verify_access_token(self, access_token: str, claimed_email: str) -> str:
        email = self.access_tokens.get(access_token)
        if email is None:
            raise AuthenticationError("Invalid Google access token")
        if email != claimed_email:
            raise AuthenticationError("Email mismatch")
        return email


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret="test-secret",
        storage_backend="memory",
        scrypt_n=FAST_KDF["n"],
        scrypt_r=FAST_KDF["r"],
        scrypt_p=FAST_KDF["p"],
    )


@pytest.fixture
def codec(settings) -> TokenCodec:
    return TokenCodec.from_settings(settings)


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider(
        id_tokens={"good-id-token": "g@x.com"},
        access_tokens={"good-access-token": "g@x.com"},
    )


@pytest.fixture
def client(settings, store, provider) -> TestClient:
    app = create_app(settings=settings, store=store, provider=provider)
    return TestClient(app)
