# src/eventbook/api/app.py
"""
FastAPI application wiring.

`create_app(settings)` builds the app around an explicit `Settings` object and a
`DocumentStore`; both live on `app.state`. Business logic lives in
`eventbook.services`; the routers only translate HTTP to service calls.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from eventbook.config.settings import Settings, get_settings
from eventbook.core.env import resolve_project_path
from eventbook.core.logging import configure_logging
from eventbook.storage.documents import DocumentStore

from .bookings import router as bookings_router
from .errors import register_error_handlers
from .routes import router as events_router
from .users import router as users_router


def build_store(settings: Settings) -> DocumentStore:
    if not settings.storage.enabled:
        return DocumentStore(None)
    return DocumentStore(resolve_project_path(settings.storage.dir))


def create_app(settings: Settings | None = None, *, store: DocumentStore | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title=f"{settings.app.name} API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)

    # Configure via env: EVENTBOOK_CORS_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
    cors_origins = [s.strip() for s in os.getenv("EVENTBOOK_CORS_ORIGINS", "").split(",") if s.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)
    app.include_router(users_router)
    app.include_router(events_router)
    app.include_router(bookings_router)
    return app


def build_default_app() -> FastAPI:
    """Entry point for `uvicorn --factory eventbook.api.app:build_default_app`."""
    settings = get_settings()
    configure_logging(settings)
    return create_app(settings)
