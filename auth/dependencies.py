"""
FastAPI dependencies for authentication.

Provides ``get_user_store``, ``get_auth_service`` and ``get_current_user_id``
dependencies that are used across all protected routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import TokenMalformed
from auth.service import AuthService
from auth.store import SqlUserStore, UserStore
from database.session import get_db_session

_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


async def get_user_store(session: AsyncSession = Depends(db_session)) -> UserStore:
    return SqlUserStore(session)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    service: AuthService = Depends(get_auth_service),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    ``user_id`` (UUID string).  The id is also stored on
    ``request.state.user_id`` for the rest of the request.
    """
    if credentials is None:
        raise TokenMalformed("missing bearer token")
    user_id = service.authenticate(credentials.credentials)
    request.state.user_id = user_id
    return user_id
