"""
Tests for the credential stores (in-memory and SQLite).
"""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from auth.errors import ConflictError
from auth.reconciler import IdentityReconciler
from auth.store import InMemoryCredentialStore, SqlCredentialStore, build_credential_store
from config.settings import Settings
from database.models import User
from database.session import build_engine

FAST_KDF = {"n": 1024, "r": 8, "p": 1}


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    store = SqlCredentialStore(build_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}"))
    await store.init()
    yield store
    await store.close()


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_insert_and_find(self):
        store = InMemoryCredentialStore()
        created = await store.insert_user("usr_1", "a@x.com", "salt:key")
        found = await store.find_by_email("a@x.com")
        assert found == created
        assert found.id == "usr_1"
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_unknown_email(self):
        assert await InMemoryCredentialStore().find_by_email("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self):
        store = InMemoryCredentialStore()
        await store.insert_user("usr_1", "a@x.com", "h1")
        with pytest.raises(ConflictError):
            await store.insert_user("usr_2", "a@x.com", "h2")
        assert (await store.find_by_email("a@x.com")).id == "usr_1"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_email_is_case_sensitive(self):
        store = InMemoryCredentialStore()
        await store.insert_user("usr_1", "a@x.com", "h1")
        await store.insert_user("usr_2", "A@x.com", "h2")
        assert len(store) == 2


class TestSqlStore:
    @pytest.mark.asyncio
    async def test_insert_and_find(self, sql_store):
        await sql_store.insert_user("usr_1", "a@x.com", "salt:key")
        found = await sql_store.find_by_email("a@x.com")
        assert found is not None
        assert found.id == "usr_1"
        assert found.password_hash == "salt:key"
        assert found.created_at is not None

    @pytest.mark.asyncio
    async def test_unknown_email(self, sql_store):
        assert await sql_store.find_by_email("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, sql_store):
        await sql_store.insert_user("usr_1", "a@x.com", "h1")
        with pytest.raises(ConflictError):
            await sql_store.insert_user("usr_2", "a@x.com", "h2")
        assert (await sql_store.find_by_email("a@x.com")).id == "usr_1"

    @pytest.mark.asyncio
    async def test_concurrent_first_logins_create_one_row(self, sql_store):
        reconciler = IdentityReconciler(sql_store, **FAST_KDF)

        users = await asyncio.gather(*(reconciler.resolve("race@x.com") for _ in range(16)))

        assert len({u.id for u in users}) == 1
        async with sql_store._session_factory() as session:
            count = await session.scalar(
                select(func.count()).select_from(User).where(User.email == "race@x.com")
            )
        assert count == 1

    @pytest.mark.asyncio
    async def test_rows_survive_a_new_store(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'persist.db'}"
        first = SqlCredentialStore(build_engine(url))
        await first.init()
        await first.insert_user("usr_1", "a@x.com", "h1")
        await first.close()

        second = SqlCredentialStore(build_engine(url))
        await second.init()
        try:
            assert (await second.find_by_email("a@x.com")).id == "usr_1"
        finally:
            await second.close()


class TestBuildCredentialStore:
    @pytest.mark.asyncio
    async def test_memory_backend(self):
        store = await build_credential_store(Settings(storage_backend="memory"))
        assert isinstance(store, InMemoryCredentialStore)

    @pytest.mark.asyncio
    async def test_sqlite_backend(self, tmp_path):
        settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
        store = await build_credential_store(settings)
        try:
            assert isinstance(store, SqlCredentialStore)
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_unopenable_database_falls_back_to_memory(self, tmp_path):
        missing_dir = tmp_path / "does" / "not" / "exist" / "app.db"
        settings = Settings(database_url=f"sqlite+aiosqlite:///{missing_dir}")
        store = await build_credential_store(settings)
        assert isinstance(store, InMemoryCredentialStore)
