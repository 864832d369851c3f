"""
Auth API routes — register, login, me.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_auth_service, get_current_user_id, get_user_store
from auth.schemas import LoginRequest, LoginResponse, PublicUser, RegisterRequest
from auth.service import AuthService
from auth.store import UserStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=PublicUser, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    store: UserStore = Depends(get_user_store),
    service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """Register a new user."""
    profile = req.model_dump(exclude={"password"})
    user = await service.register(store, req.password, profile)
    return PublicUser.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    store: UserStore = Depends(get_user_store),
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Login with email + password."""
    token, user = await service.login(store, req.email, req.password)
    return LoginResponse(token=token, user=PublicUser.model_validate(user))


@router.get("/me", response_model=PublicUser)
async def me(
    user_id: str = Depends(get_current_user_id),
    store: UserStore = Depends(get_user_store),
    service: AuthService = Depends(get_auth_service),
) -> PublicUser:
    """Return the authenticated user."""
    user = await service.current_user(store, user_id)
    return PublicUser.model_validate(user)
