"""
Tests for the SQLAlchemy user store, on an in-memory SQLite database.
"""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from auth.errors import IdentifierTaken
from auth.store import SqlUserStore
from database.models import Base, User
from database.session import get_db_session


@pytest_asyncio.fixture
async def session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as s:
        yield s
    await engine.dispose()


def _user(email="ada@example.com"):
    return User(
        user_id=uuid.uuid4(),
        first_name="Ada",
        last_name="Lovelace",
        email=email,
        password_hash="$2b$04$" + "x" * 53,
    )


class TestSqlUserStore:
    @pytest.mark.asyncio
    async def test_create_and_find(self, session):
        store = SqlUserStore(session)
        user = await store.create(_user())

        assert await store.find_by_identifier("ada@example.com") is user
        assert await store.find_by_id(str(user.user_id)) is user
        assert user.friends == []
        assert user.viewed_profile == 0

    @pytest.mark.asyncio
    async def test_missing(self, session):
        store = SqlUserStore(session)
        assert await store.find_by_identifier("nobody@example.com") is None
        assert await store.find_by_id(str(uuid.uuid4())) is None
        assert await store.find_by_id("not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session):
        store = SqlUserStore(session)
        await store.create(_user())
        with pytest.raises(IdentifierTaken):
            await store.create(_user())

    @pytest.mark.asyncio
    async def test_update_password_hash(self, session):
        store = SqlUserStore(session)
        user = await store.create(_user())
        await store.update_password_hash(str(user.user_id), "$2b$05$" + "y" * 53)
        await session.refresh(user)

        assert user.password_hash == "$2b$05$" + "y" * 53


def _fake_factory(session):
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


class TestGetDbSession:
    @pytest.mark.asyncio
    async def test_commits_and_closes(self):
        fake = AsyncMock()
        with patch("database.session.async_session_factory", _fake_factory(fake)):
            gen = get_db_session()
            assert await gen.__anext__() is fake
            with pytest.raises(StopAsyncIteration):
                await gen.__anext__()

        fake.commit.assert_awaited_once()
        fake.rollback.assert_not_awaited()
        fake.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rolls_back_and_closes_on_error(self):
        fake = AsyncMock()
        with patch("database.session.async_session_factory", _fake_factory(fake)):
            gen = get_db_session()
            await gen.__anext__()
            with pytest.raises(RuntimeError):
                await gen.athrow(RuntimeError("handler failed"))

        fake.commit.assert_not_awaited()
        fake.rollback.assert_awaited_once()
        fake.close.assert_awaited_once()
