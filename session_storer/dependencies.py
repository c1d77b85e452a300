"""FastAPI dependency injection: session store access."""

from __future__ import annotations

from fastapi import Request

from .session import SessionStore


def get_store(request: Request) -> SessionStore:
    """Get the application's session store."""
    return request.app.state.session_store
