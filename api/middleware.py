"""
Global middleware and error mapping.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from auth.errors import (
    CredentialDerivationFailure,
    CredentialMismatch,
    IdentifierTaken,
    TokenInvalid,
)

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Map auth errors onto a fixed set of coarse responses."""

    @app.exception_handler(CredentialMismatch)
    async def credential_mismatch(request: Request, exc: CredentialMismatch):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid credentials"},
        )

    @app.exception_handler(TokenInvalid)
    async def token_invalid(request: Request, exc: TokenInvalid):
        logger.info(
            "Rejected token on %s %s: %s (%s)",
            request.method, request.url.path, exc.reason, exc.detail,
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(IdentifierTaken)
    async def identifier_taken(request: Request, exc: IdentifierTaken):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Email already registered"},
        )

    @app.exception_handler(CredentialDerivationFailure)
    async def derivation_failure(request: Request, exc: CredentialDerivationFailure):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
