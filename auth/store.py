"""
Credential stores — the two storage operations the auth core needs.

``find_by_email`` and ``insert_user`` are the whole contract. ``insert_user``
raises ``ConflictError`` when the email is already taken, and must be atomic
with respect to concurrent inserts of the same email.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from auth.errors import ConflictError, DependencyError
from auth.models import UserRecord
from config.settings import Settings
from database.models import User
from database.session import build_engine, build_session_factory, create_schema

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Email-keyed user storage."""

    async def init(self) -> None:
        """Prepare the backing storage (create tables, …)."""

    async def close(self) -> None:
        """Release any held resources."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def insert_user(self, user_id: str, email: str, password_hash: str) -> UserRecord:
        ...


class InMemoryCredentialStore(CredentialStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email)

    async def insert_user(self, user_id: str, email: str, password_hash: str) -> UserRecord:
        with self._lock:
            if email in self._users:
                raise ConflictError("email already exists")
            record = UserRecord(
                id=user_id,
                email=email,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
            )
            self._users[email] = record
        return record

    def __len__(self) -> int:
        return len(self._users)


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
    )


class SqlCredentialStore(CredentialStore):
    """``users`` table behind an async SQLAlchemy engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)

    async def init(self) -> None:
        await create_schema(self._engine)

    async def close(self) -> None:
        await self._engine.dispose()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(User).where(User.email == email))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("User lookup failed: %s", exc)
            raise DependencyError("user lookup failed") from exc
        return _to_record(row) if row is not None else None

    async def insert_user(self, user_id: str, email: str, password_hash: str) -> UserRecord:
        row = User(
            id=user_id,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        async with self._session_factory() as session:
            try:
                session.add(row)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError("email already exists") from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("User insert failed: %s", exc)
                raise DependencyError("user insert failed") from exc
        return _to_record(row)


async def build_credential_store(settings: Settings) -> CredentialStore:
    """
    Build the configured store.

    The SQL store is preferred; when the database cannot be opened the
    service keeps running on the in-memory store.
    """
    if settings.storage_backend == "memory":
        logger.info("Using in-memory credential store")
        return InMemoryCredentialStore()

    try:
        store = SqlCredentialStore(build_engine(settings.database_url, echo=settings.debug))
        await store.init()
    except (SQLAlchemyError, OSError) as exc:
        logger.warning(
            "Database %s unavailable (%s) — falling back to in-memory credential store",
            settings.database_url,
            exc,
        )
        return InMemoryCredentialStore()

    logger.info("Credential store initialised (%s)", settings.database_url)
    return store
