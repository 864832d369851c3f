"""
Auth service: register, login and token authentication.

Ties the ``CredentialManager`` and ``SessionIssuer`` to a ``UserStore``.
bcrypt runs on a dedicated thread pool sized to the CPU count so hashing
never blocks the event loop and at most one hash per core runs at a time.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import os
import random
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

from auth.errors import CredentialMismatch, IdentifierTaken, TokenInvalid
from auth.jwt import TTL, Clock, SessionIssuer
from auth.password import CredentialManager
from auth.store import UserStore
from config.settings import AuthConfig
from database.models import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AuthService:
    def __init__(
        self,
        auth_config: AuthConfig,
        *,
        clock: Optional[Clock] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.credentials = CredentialManager(auth_config)
        self.sessions = SessionIssuer(auth_config, clock=clock or time.time)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or os.cpu_count() or 1,
            thread_name_prefix="bcrypt",
        )

    async def _offload(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ── Register ───────────────────────────────────────────────────────

    async def register(self, store: UserStore, password: str, profile: Dict[str, Any]) -> User:
        """Create a user from ``profile`` fields and a plaintext password."""
        email = profile["email"]
        if await store.find_by_identifier(email) is not None:
            raise IdentifierTaken(email)

        credential = await self._offload(self.credentials.derive, password)
        user = User(
            user_id=uuid.uuid4(),
            first_name=profile["first_name"],
            last_name=profile["last_name"],
            email=email,
            password_hash=credential.hash,
            picture_path=profile.get("picture_path") or "",
            friends=list(profile.get("friends") or []),
            location=profile.get("location"),
            occupation=profile.get("occupation"),
            viewed_profile=random.randint(0, 9999),
            impressions=random.randint(0, 9999),
            created_at=datetime.now(timezone.utc),
        )
        user = await store.create(user)
        logger.info("Registered user %s", user.user_id)
        return user

    # ── Login ──────────────────────────────────────────────────────────

    async def login(
        self, store: UserStore, email: str, password: str, ttl: Optional[TTL] = None
    ) -> Tuple[str, User]:
        """
        Verify ``email`` / ``password`` and mint a session token.

        Raises ``CredentialMismatch`` for an unknown email and for a wrong
        password alike.
        """
        user = await store.find_by_identifier(email)
        if user is None:
            await self._offload(self.credentials.verify_dummy, password)
            logger.info("Login failed: unknown identifier")
            raise CredentialMismatch()

        ok = await self._offload(self.credentials.verify, password, user.password_hash)
        if not ok:
            logger.info("Login failed for user %s", user.user_id)
            raise CredentialMismatch()

        if self.credentials.needs_rehash(user.password_hash):
            credential = await self._offload(self.credentials.derive, password)
            await store.update_password_hash(str(user.user_id), credential.hash)
            user.password_hash = credential.hash
            logger.info("Upgraded password hash cost for user %s", user.user_id)

        token = self.sessions.issue(str(user.user_id), ttl)
        logger.info("Login: %s", user.user_id)
        return token, user

    # ── Token authentication ───────────────────────────────────────────

    def authenticate(self, token: str) -> str:
        """Return the user id carried by a valid token."""
        return self.sessions.verify(token)

    async def current_user(self, store: UserStore, user_id: str) -> User:
        user = await store.find_by_id(user_id)
        if user is None:
            raise TokenInvalid("subject no longer exists")
        return user
