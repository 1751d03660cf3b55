"""
Application settings loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev_secret_change_me"


class Settings(BaseSettings):
    app_name: str = "Health Assistant Auth"

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: Optional[str] = None          # HMAC secret for auth tokens

    # ── Password hashing (scrypt cost) ───────────────────────────────────
    scrypt_n: int = 16384
    scrypt_r: int = 8
    scrypt_p: int = 1

    # ── Google sign-in ───────────────────────────────────────────────────
    google_client_id: Optional[str] = None     # expected ``aud`` of ID tokens
    google_timeout_seconds: float = 10.0

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./data.db"
    storage_backend: str = "sqlite"            # "sqlite" | "memory"

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 4000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def resolve_jwt_secret(self) -> str:
        """
        Return the token signing secret.

        Falls back to the development default when ``JWT_SECRET`` is unset,
        always with a warning.
        """
        if self.jwt_secret:
            return self.jwt_secret
        logger.warning(
            "JWT_SECRET is not set — signing tokens with the insecure development "
            "default. Set JWT_SECRET before deploying."
        )
        return DEV_JWT_SECRET


config = Settings()
