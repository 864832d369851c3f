"""
Error taxonomy for the auth core.

None of these carry user-facing text; ``api.middleware`` maps them onto a
small fixed set of HTTP responses.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every auth failure."""


class ConfigurationError(AuthError):
    """Missing or weak security configuration. Fatal at startup."""


class CredentialDerivationFailure(AuthError):
    """The hashing backend or entropy source is unavailable."""


class CredentialMismatch(AuthError):
    """Unknown identifier or wrong password. Deliberately indistinguishable."""


class IdentifierTaken(AuthError):
    """A user with this identifier already exists."""


class TokenInvalid(AuthError):
    """A bearer token failed verification."""

    reason = "invalid"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.reason)
        self.detail = detail


class TokenMalformed(TokenInvalid):
    reason = "malformed"


class TokenSignatureMismatch(TokenInvalid):
    reason = "bad signature"


class TokenExpired(TokenInvalid):
    reason = "expired"
