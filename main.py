"""
Social network auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_exception_handlers, register_middleware
from auth.routes import router as auth_router
from auth.service import AuthService
from config.settings import Settings, config

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio", "urllib3"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    auth_service: Optional[AuthService] = None,
    init_db: bool = True,
) -> FastAPI:
    """
    Build the application.

    Raises ``ConfigurationError`` when the signing secret or cost factor is
    unusable, so the server never starts serving with a weak secret.
    """
    settings = settings or config
    if auth_service is None:
        auth_service = AuthService(settings.auth_config())

    app = FastAPI(
        title="Social Auth Service",
        version="1.0.0",
        description="Registration, login and bearer-token sessions.",
    )
    app.state.auth_service = auth_service

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        if init_db:
            from database.session import create_tables

            logger.info("Ensuring database tables exist…")
            await create_tables()
        logger.info(
            "Application ready to accept requests (bcrypt cost %d).",
            auth_service.credentials.rounds,
        )

    @app.on_event("shutdown")
    async def on_shutdown():
        auth_service.close()

    return app


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
