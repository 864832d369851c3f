"""
Shared fixtures: fast bcrypt config, a controllable clock and an in-memory
user store standing in for the database.
"""

from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from auth.dependencies import get_user_store
from auth.errors import IdentifierTaken
from auth.service import AuthService
from config.settings import Settings
from database.models import User

TEST_SECRET = "test-signing-secret-0123456789abcdef"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryUserStore:
    def __init__(self) -> None:
        self.users: Dict[str, User] = {}

    async def find_by_identifier(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(str(user_id))

    async def create(self, user: User) -> User:
        if await self.find_by_identifier(user.email) is not None:
            raise IdentifierTaken(user.email)
        self.users[str(user.user_id)] = user
        return user

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        self.users[str(user_id)].password_hash = password_hash


@pytest.fixture
def settings():
    return Settings(
        jwt_secret=TEST_SECRET,
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
        _env_file=None,
    )


@pytest.fixture
def auth_config(settings):
    return settings.auth_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def service(auth_config, clock):
    svc = AuthService(auth_config, clock=clock, max_workers=2)
    yield svc
    svc.close()


@pytest.fixture
def client(settings, service, store):
    from main import create_app

    app = create_app(settings, auth_service=service, init_db=False)
    app.dependency_overrides[get_user_store] = lambda: store
    return TestClient(app)
