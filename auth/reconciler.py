"""
Identity reconciliation for federated logins.

Resolves a provider-verified email to exactly one stored user, creating
it on first sight. Two near-simultaneous first logins for the same email
race on ``insert_user``; the loser re-reads the winner's row.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from auth.errors import AuthError, ConflictError, DependencyError
from auth.models import UserRecord
from auth.password import hash_password, random_password
from auth.store import CredentialStore

logger = logging.getLogger(__name__)


def new_user_id() -> str:
    return f"usr_{uuid.uuid4().hex}"


class IdentityReconciler:
    def __init__(self, store: CredentialStore, **kdf_params: Any) -> None:
        self._store = store
        self._kdf_params: Dict[str, Any] = kdf_params

    async def _find(self, email: str) -> Optional[UserRecord]:
        try:
            return await self._store.find_by_email(email)
        except AuthError:
            raise
        except Exception as exc:
            logger.error("User lookup failed for %s: %s", email, exc, exc_info=True)
            raise DependencyError("user lookup failed") from exc

    async def resolve(self, email: str) -> UserRecord:
        """Find-or-create the user for a verified ``email``."""
        user = await self._find(email)
        if user is not None:
            return user

        # The random password is never handed out; it only fills the column.
        password_hash = await asyncio.to_thread(
            hash_password, random_password(), **self._kdf_params
        )
        try:
            user = await self._store.insert_user(new_user_id(), email, password_hash)
        except ConflictError:
            logger.info("Concurrent first login for %s — reusing existing user", email)
            user = await self._find(email)
            if user is None:
                raise DependencyError(
                    "user vanished after conflicting insert", retriable=True
                )
            return user
        except AuthError:
            raise
        except Exception as exc:
            logger.error("Federated user creation failed for %s: %s", email, exc, exc_info=True)
            raise DependencyError("federated login failed") from exc

        logger.info("Created federated user %s (%s)", user.id, email)
        return user
