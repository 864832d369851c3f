"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and a configurable, pinned work factor.  The work factor and salt
are embedded in every hash, so hashes created under an older cost keep
verifying after ``BCRYPT_ROUNDS`` is raised.
"""

from __future__ import annotations

import hashlib
import logging
from base64 import b64encode
from typing import NamedTuple

import bcrypt

from auth.errors import CredentialDerivationFailure
from config.settings import AuthConfig

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the first 72 bytes of input.
_BCRYPT_MAX_INPUT = 72
# "$2b$" + 2-digit cost + "$" + 22 chars of encoded salt
_SALT_PREFIX_LEN = 29


class Credential(NamedTuple):
    salt: str
    hash: str


def _prepare(password: str) -> bytes:
    raw = password.encode("utf-8", "surrogatepass")
    if len(raw) > _BCRYPT_MAX_INPUT:
        return b64encode(hashlib.sha256(raw).digest())
    return raw


def _cost_of(stored_hash: str) -> int:
    """Return the cost factor embedded in a ``$2x$NN$...`` hash."""
    parts = stored_hash.split("$")
    if len(parts) != 4 or parts[0] or not parts[1].startswith("2"):
        raise ValueError("not a bcrypt hash")
    return int(parts[2])


class CredentialManager:
    """Derives and verifies salted bcrypt hashes."""

    def __init__(self, auth_config: AuthConfig) -> None:
        self._rounds = auth_config.bcrypt_rounds
        # Verified against when the user does not exist, so a miss costs the
        # same as a wrong password.
        self._dummy_hash = self.derive("dummy-password").hash

    @property
    def rounds(self) -> int:
        return self._rounds

    def derive(self, password: str) -> Credential:
        """Hash ``password`` with a fresh random salt."""
        if not isinstance(password, str) or not password:
            raise ValueError("password must be a non-empty string")
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
        except (OSError, NotImplementedError) as exc:
            logger.exception("Password salt generation failed")
            raise CredentialDerivationFailure(str(exc)) from exc
        hashed = bcrypt.hashpw(_prepare(password), salt).decode("ascii")
        return Credential(salt=hashed[:_SALT_PREFIX_LEN], hash=hashed)

    def verify(self, password: str, stored_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash. Never raises."""
        if not isinstance(password, str) or not password:
            return False
        if not isinstance(stored_hash, str) or not stored_hash:
            return False
        try:
            return bcrypt.checkpw(_prepare(password), stored_hash.encode("ascii"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Burn one verification's worth of CPU. Always ``False``."""
        self.verify(password or "x", self._dummy_hash)
        return False

    def needs_rehash(self, stored_hash: str) -> bool:
        """True when ``stored_hash`` was not made with the configured cost."""
        try:
            return _cost_of(stored_hash) != self._rounds
        except (ValueError, AttributeError):
            return True
