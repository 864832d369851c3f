"""
User store, the only place the auth flow touches persistence.

``AuthService`` talks to the ``UserStore`` protocol; ``SqlUserStore`` is
the SQLAlchemy-backed implementation used by the HTTP routes.
"""

from __future__ import annotations

import uuid
from typing import Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import IdentifierTaken
from database.models import User


class UserStore(Protocol):
    async def find_by_identifier(self, email: str) -> Optional[User]: ...

    async def find_by_id(self, user_id: str) -> Optional[User]: ...

    async def create(self, user: User) -> User: ...

    async def update_password_hash(self, user_id: str, password_hash: str) -> None: ...


def _parse_id(user_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        return None


class SqlUserStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_identifier(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        uid = _parse_id(user_id)
        if uid is None:
            return None
        return await self._session.get(User, uid)

    async def create(self, user: User) -> User:
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise IdentifierTaken(user.email) from exc
        return user

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        uid = _parse_id(user_id)
        if uid is None:
            return
        await self._session.execute(
            update(User).where(User.user_id == uid).values(password_hash=password_hash)
        )
