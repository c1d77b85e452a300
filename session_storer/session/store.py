"""Server-side session store.

Maps the session token carried in a request cookie to a bag of values kept
in a ``SessionBackend``. Bags expire ``expiration`` seconds after their last
write; a background sweep evicts them and tells the delegate.

Usage::

    store = SessionStore(secret="...")
    app.add_middleware(SessionMiddleware, store=store)

    async with store:  # runs the expiration sweep
        ...
        await store.set("cart", cart, request)
        cart = await store.get("cart", request)
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
import weakref
from typing import Any, Callable, Generic, TypeVar

from starlette.requests import HTTPConnection
from starlette.responses import Response

from ..config import Settings
from .backend import Bag, InMemoryBackend, SessionBackend
from .delegate import PassThroughDelegate, SessionDelegate
from .errors import MissingTokenError
from .expire import Expire
from .tokens import DEFAULT_TOKEN_BYTES, TokenIssuer, fingerprint

logger = logging.getLogger(__name__)

T = TypeVar("T")

COOKIE_NAME = "perfect-session"
EXPIRATION = 365 * 24 * 3600  # 1 year
SWEEP_INTERVAL = 60

_PASS_THROUGH = PassThroughDelegate()


class SessionStore(Generic[T]):
    """Per-client value bags keyed by a cookie token.

    ``get``/``set`` require a request that went through ``SessionMiddleware``;
    without a token they raise ``MissingTokenError``.
    """

    def __init__(
        self,
        *,
        secret: str,
        backend: SessionBackend | None = None,
        delegate: SessionDelegate | None = None,
        cookie_name: str = COOKIE_NAME,
        expiration: float = EXPIRATION,
        sweep_interval: float = SWEEP_INTERVAL,
        https_only: bool = False,
        same_site: str = "lax",
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backend = backend if backend is not None else InMemoryBackend()
        self.issuer = TokenIssuer(secret, max_age=expiration, nbytes=token_bytes)
        self.cookie_name = cookie_name
        self.sweep_interval = sweep_interval
        self.https_only = https_only
        self.same_site = same_site
        self.clock = clock
        self.delegate = delegate

        self._write_lock = asyncio.Lock()
        self._sweeper: asyncio.Task | None = None
        self._stopping: asyncio.Event | None = None

    @classmethod
    def from_settings(
        cls,
        s: Settings,
        *,
        backend: SessionBackend | None = None,
        delegate: SessionDelegate | None = None,
        clock: Callable[[], float] = time.time,
    ) -> SessionStore:
        return cls(
            secret=s.session_secret,
            backend=backend,
            delegate=delegate,
            cookie_name=s.session_cookie_name,
            expiration=s.session_expiration,
            sweep_interval=s.sweep_interval,
            https_only=s.session_https_only,
            same_site=s.session_same_site,
            token_bytes=s.session_token_bytes,
            clock=clock,
        )

    @property
    def expiration(self) -> float:
        """Seconds a session lives after its last write. Also the cookie signature age."""
        return self.issuer.max_age

    # ── Delegate (borrowed, weakly referenced) ────────────────────────────

    @property
    def delegate(self) -> SessionDelegate | None:
        """The installed delegate, or None if unset or garbage collected."""
        return self._delegate_ref() if self._delegate_ref is not None else None

    @delegate.setter
    def delegate(self, delegate: SessionDelegate | None) -> None:
        self._delegate_ref = weakref.ref(delegate) if delegate is not None else None

    def _hooks(self) -> SessionDelegate:
        delegate = self.delegate
        return delegate if delegate is not None else _PASS_THROUGH

    # ── Tokens ────────────────────────────────────────────────────────────

    def issue_token(self) -> str:
        return self.issuer.issue()

    def existing_token(self, request: HTTPConnection) -> str | None:
        """Decode the session token from the request cookie, if any."""
        raw = request.cookies.get(self.cookie_name)
        if not raw:
            return None
        return self.issuer.decode(raw)

    def token_for(self, request: HTTPConnection) -> str:
        token = self.existing_token(request)
        if token is None:
            raise MissingTokenError(
                "No session token present in request. "
                "SessionMiddleware must run before the session store is used."
            )
        return token

    # ── Reads & writes ────────────────────────────────────────────────────

    async def _current(self, token: str) -> Expire[Bag] | None:
        """Live container for a token. Expired-but-unswept counts as absent."""
        container = await self.backend.get(token)
        if container is None or container.is_expired(self.clock()):
            return None
        return container

    async def set(
        self,
        key: str,
        value: T | None,
        request: HTTPConnection,
        response: Response | None = None,
    ) -> None:
        """Store ``value`` under ``key`` for the request's session.

        Storing None removes the key. Every write restarts the session's
        expiry window.
        """
        token = self.token_for(request)
        value = self._hooks().will_store(value, key, token, response, self)

        async with self._write_lock:
            container = await self._current(token)
            bag: Bag = dict(container.value) if container is not None else {}
            if value is None:
                bag.pop(key, None)
            else:
                bag[key] = copy.deepcopy(value)
            await self.backend.set(
                token, Expire(bag, ttl=self.expiration, created_at=self.clock())
            )

    async def get(self, key: str, request: HTTPConnection) -> T | None:
        """Return the value under ``key`` for the request's session, or None."""
        token = self.token_for(request)
        container = await self._current(token)
        value = copy.deepcopy(container.value.get(key)) if container is not None else None

        hooks = self._hooks()
        if not hooks.should_return(value, key, token, request, self):
            return None

        substitute = hooks.will_return(value, key, token, request, self)
        returned = substitute if substitute is not None else value

        hooks.did_return(returned, key, token, request, self)
        return returned

    async def items(self, request: HTTPConnection) -> dict[str, T]:
        """Copy of the whole bag. Bypasses the per-key delegate hooks."""
        token = self.token_for(request)
        container = await self._current(token)
        return copy.deepcopy(container.value) if container is not None else {}

    # ── Expiration sweep ──────────────────────────────────────────────────

    async def sweep(self) -> int:
        """Evict every expired session once. Returns the number evicted."""
        now = self.clock()
        evicted = 0
        for token, _ in await self.backend.expired_entries(now):
            container = await self.backend.pop_expired(token, now)
            if container is None:
                logger.debug(
                    "Session %s rewritten since sweep snapshot, kept", fingerprint(token)
                )
                continue
            evicted += 1
            try:
                self._hooks().deleted(copy.deepcopy(container.value), token, self)
            except Exception:
                logger.exception(
                    "Session delegate failed on eviction of %s", fingerprint(token)
                )

        if evicted:
            logger.info("Evicted %d expired session(s)", evicted)
        return evicted

    async def _run_sweeper(self, stopping: asyncio.Event) -> None:
        while not stopping.is_set():
            try:
                await self.sweep()
            except Exception:
                logger.exception("Session sweep failed")
            try:
                await asyncio.wait_for(stopping.wait(), timeout=self.sweep_interval)
            except asyncio.TimeoutError:
                pass

    @property
    def running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def start(self) -> None:
        """Start the background sweep on the running event loop."""
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._sweeper = asyncio.get_running_loop().create_task(
            self._run_sweeper(self._stopping), name="session-sweeper"
        )
        logger.info("Session sweeper started (every %ss)", self.sweep_interval)

    async def stop(self) -> None:
        """Stop the background sweep and wait for it to finish."""
        if self._sweeper is None:
            return
        self._stopping.set()
        sweeper, self._sweeper = self._sweeper, None
        await sweeper
        logger.info("Session sweeper stopped")

    async def __aenter__(self) -> SessionStore:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
