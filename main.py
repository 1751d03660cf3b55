"""
Health assistant auth service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_error_handlers, register_middleware
from api.routes import router as api_router
from auth.jwt import TokenCodec
from auth.routes import router as auth_router
from auth.service import AuthService
from auth.store import CredentialStore, build_credential_store
from config.settings import Settings, config
from connectors.base import IdentityProvider
from connectors.google import GoogleIdentityProvider

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[CredentialStore] = None,
    provider: Optional[IdentityProvider] = None,
) -> FastAPI:
    if settings is None:
        settings = config
    codec = TokenCodec.from_settings(settings)
    provider = provider or GoogleIdentityProvider(
        client_id=settings.google_client_id,
        timeout=settings.google_timeout_seconds,
    )

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Signup, login and Google sign-in for the health assistant.",
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_error_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(api_router, prefix="/api")

    def _install(credential_store: CredentialStore) -> None:
        app.state.store = credential_store
        app.state.auth_service = AuthService(credential_store, codec, provider, settings)

    if store is not None:
        _install(store)

    @app.on_event("startup")
    async def on_startup():
        if store is None:
            _install(await build_credential_store(settings))
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        credential_store = getattr(app.state, "store", None)
        if credential_store is not None:
            await credential_store.close()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
