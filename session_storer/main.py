"""FastAPI application exposing a session store over HTTP.

Installs the session request filter and runs the expiration sweep for the
lifetime of the application.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import get_settings
from .routes import health, values
from .session import SessionMiddleware, SessionStore

logger = logging.getLogger(__name__)


def create_app(*, store: SessionStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Session store to serve (default: built from settings with an
            in-memory backend). The caller owns any delegate installed on it.
    """
    session_store = store if store is not None else SessionStore.from_settings(get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run the expiration sweep while the app is up."""
        async with session_store:
            yield

    app = FastAPI(title="Session Storer", lifespan=lifespan)
    app.state.session_store = session_store

    app.add_middleware(SessionMiddleware, store=session_store)

    app.include_router(values.router)
    app.include_router(health.router)

    return app
