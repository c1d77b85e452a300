"""/session: read and write values in the caller's session."""

from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..dependencies import get_store
from ..session import SessionStore

router = APIRouter(prefix="/session")


class ValueBody(BaseModel):
    value: Any


@router.get("")
async def read_session(request: Request, store: SessionStore = Depends(get_store)):
    return await store.items(request)


@router.get("/{key}")
async def read_value(key: str, request: Request, store: SessionStore = Depends(get_store)):
    value = await store.get(key, request)
    if value is None:
        return JSONResponse({"error": "Not found", "key": key}, status_code=404)
    return {"key": key, "value": value}


@router.put("/{key}")
async def write_value(
    key: str,
    body: ValueBody,
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_store),
):
    await store.set(key, body.value, request, response)
    return {"success": True}


@router.delete("/{key}")
async def delete_value(
    key: str,
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_store),
):
    await store.set(key, None, request, response)
    return {"success": True}
