"""
JWT-style token creation and verification.

Tokens are a base64url-encoded JSON claim set followed by an HMAC-SHA256
signature in hex::

    eyJleHAiOjE3...fQ.5ce05506...

The signature covers the *encoded* claim segment, so changing any character
of the token breaks it.  Issuance is stateless: nothing is recorded
server-side and a token stays valid until ``exp`` or until the secret is
rotated.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import b64decode, urlsafe_b64encode
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Union

from auth.errors import TokenExpired, TokenMalformed, TokenSignatureMismatch
from config.settings import AuthConfig

Clock = Callable[[], float]
TTL = Union[timedelta, int, float]


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return b64decode(padded, altchars=b"-_", validate=True)


def _ttl_seconds(ttl: TTL) -> int:
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
    try:
        seconds = int(seconds)
    except (OverflowError, ValueError) as exc:
        raise ValueError(f"token ttl must be a finite number of seconds, got {ttl!r}") from exc
    if seconds <= 0:
        raise ValueError("token ttl must be at least one second")
    return seconds


class SessionIssuer:
    """Mints and verifies signed, time-bound bearer tokens."""

    def __init__(self, auth_config: AuthConfig, clock: Clock = time.time) -> None:
        self._secret = auth_config.signing_secret
        self._default_ttl = auth_config.token_ttl_seconds
        self._clock = clock

    def _sign(self, segment: str) -> str:
        return hmac.new(self._secret, segment.encode("ascii"), hashlib.sha256).hexdigest()

    def issue(self, subject: str, ttl: Optional[TTL] = None) -> str:
        """Create a signed token for ``subject`` valid for ``ttl``."""
        subject = str(subject)
        if not subject:
            raise ValueError("subject must not be empty")
        issued_at = int(self._clock())
        claims = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + _ttl_seconds(self._default_ttl if ttl is None else ttl),
        }
        raw = json.dumps(claims, separators=(",", ":"), sort_keys=True).encode()
        segment = _b64encode(raw)
        return segment + "." + self._sign(segment)

    def verify(self, token: str) -> str:
        """
        Verify token and return the subject.

        Raises ``TokenMalformed``, ``TokenSignatureMismatch`` or
        ``TokenExpired``; all three are ``TokenInvalid``.
        """
        if not isinstance(token, str) or token.count(".") != 1:
            raise TokenMalformed("bad format")
        segment, signature = token.split(".")
        if not segment or not signature:
            raise TokenMalformed("empty segment")
        try:
            segment.encode("ascii")
            signature.encode("ascii")
        except UnicodeEncodeError:
            raise TokenMalformed("non-ascii token")

        expected_sig = self._sign(segment)
        if not hmac.compare_digest(signature.encode("ascii"), expected_sig.encode("ascii")):
            raise TokenSignatureMismatch()

        claims = self._decode_claims(segment)
        now = self._clock()
        if now < claims["iat"]:
            raise TokenExpired("not yet valid")
        if now >= claims["exp"]:
            raise TokenExpired("token expired")
        return claims["sub"]

    @staticmethod
    def _decode_claims(segment: str) -> Dict[str, Any]:
        try:
            claims = json.loads(_b64decode(segment))
        except (binascii.Error, ValueError) as exc:
            raise TokenMalformed(f"undecodable claims: {exc}") from exc
        if not isinstance(claims, dict):
            raise TokenMalformed("claims are not an object")
        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise TokenMalformed("missing subject")
        for key in ("iat", "exp"):
            value = claims.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TokenMalformed(f"missing {key}")
        return claims
