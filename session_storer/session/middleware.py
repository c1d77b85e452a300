"""ASGI request filter for the session store.

Runs once per request, before the application. A request without a valid
session cookie gets a new token: the signed value is set on the response
and also injected into the request's Cookie header, so the store can read
and write the new session within the same request.
"""

from __future__ import annotations

import logging

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .. import audit
from .store import SessionStore
from .tokens import fingerprint

logger = logging.getLogger(__name__)


class SessionMiddleware:
    """Ensures every HTTP/WebSocket request carries a session token."""

    def __init__(self, app: ASGIApp, store: SessionStore) -> None:
        self.app = app
        self.store = store

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        if self.store.existing_token(HTTPConnection(scope)) is not None:
            await self.app(scope, receive, send)
            return

        token = self.store.issue_token()
        cookie_value = self.store.issuer.encode(token)
        scope = self._with_request_cookie(scope, cookie_value)
        logger.debug("Issued session %s", fingerprint(token))
        audit.session_event(
            activity_id=audit.Activity.ISSUE,
            activity_name="Issue",
            token=token,
            message="New session token issued",
        )

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append("set-cookie", self._make_cookie(cookie_value))
            await send(message)

        await self.app(scope, receive, send_wrapper)

    def _with_request_cookie(self, scope: Scope, cookie_value: str) -> Scope:
        """Copy of ``scope`` whose single Cookie header ends with the new token.

        Starlette reads only the first Cookie header and the last occurrence
        of a name wins, so existing cookies are merged ahead of ours.
        """
        cookies: list[str] = []
        headers: list[tuple[bytes, bytes]] = []
        for name, value in scope.get("headers", []):
            if name.lower() == b"cookie":
                cookies.append(value.decode("latin-1"))
            else:
                headers.append((name, value))
        cookies.append(f"{self.store.cookie_name}={cookie_value}")
        headers.append((b"cookie", "; ".join(cookies).encode("latin-1")))
        return {**scope, "headers": headers}

    def _make_cookie(self, cookie_value: str) -> str:
        parts = [
            f"{self.store.cookie_name}={cookie_value}",
            f"Max-Age={int(self.store.expiration)}",
            "Path=/",
            "HttpOnly",
            f"SameSite={self.store.same_site}",
        ]
        if self.store.https_only:
            parts.append("Secure")
        return "; ".join(parts)
