"""
DevConnector accounts API — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import router as auth_router
from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.users import router as users_router
from auth.jwt import TokenIssuer
from auth.middleware import AuthGate
from config.settings import Settings, get_settings
from database.session import build_engine, build_session_factory, create_tables

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio", "urllib3"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Without an explicit ``settings`` the environment is read; a missing
    ``JWT_SECRET`` or ``DATABASE_URL`` raises here, before anything serves.
    """
    settings = settings or get_settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title="DevConnector Accounts API",
        version="1.0.0",
        description="Account registration, login and token-gated access.",
    )

    app.state.settings = settings
    app.state.token_issuer = TokenIssuer(settings.jwt_secret, settings.token_ttl_seconds)
    app.state.auth_gate = AuthGate(app.state.token_issuer, settings.auth_header)
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)

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
    app.include_router(users_router, prefix="/api/users")
    app.include_router(auth_router, prefix="/api/auth")

    @app.get("/")
    async def health_check() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        logger.info("Creating tables…")
        await create_tables(app.state.engine)
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.engine.dispose()

    return app


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        create_app(_settings),
        host=_settings.host,
        port=_settings.port,
        log_level="debug" if _settings.debug else "info",
    )
