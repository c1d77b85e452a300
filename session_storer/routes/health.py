"""GET /health: liveness check."""

from fastapi import APIRouter, Depends

from ..dependencies import get_store
from ..session import SessionStore

router = APIRouter()


@router.get("/health")
async def health(store: SessionStore = Depends(get_store)):
    return {
        "status": "ok",
        "sweeper": "running" if store.running else "stopped",
    }
