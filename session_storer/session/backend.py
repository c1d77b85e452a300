"""Session storage backends."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol, runtime_checkable

from .expire import Expire

Bag = dict[str, Any]


@runtime_checkable
class SessionBackend(Protocol):
    """Protocol for server-side session storage.

    Keys are session tokens; values are expiring containers wrapping the
    session's value bag. Implementations are shared between request handlers
    and the expiration sweep, so every operation must be safe to call
    concurrently.
    """

    async def get(self, token: str) -> Expire[Bag] | None:
        """Return the container for a token. Returns None if absent."""
        ...

    async def set(self, token: str, container: Expire[Bag] | None) -> None:
        """Insert or replace a container. ``None`` removes the entry."""
        ...

    async def expired_entries(self, now: float) -> list[tuple[str, Expire[Bag]]]:
        """Snapshot of every entry expired at ``now``."""
        ...

    async def pop_expired(self, token: str, now: float) -> Expire[Bag] | None:
        """Remove and return the entry only if it is still expired at ``now``."""
        ...


class InMemoryBackend:
    """In-memory session backend.

    Sessions are lost on restart and not shared across processes.
    """

    def __init__(self) -> None:
        self._store: dict[str, Expire[Bag]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, token: str) -> Expire[Bag] | None:
        async with self._lock:
            return self._store.get(token)

    async def set(self, token: str, container: Expire[Bag] | None) -> None:
        async with self._lock:
            if container is None:
                self._store.pop(token, None)
            else:
                self._store[token] = container

    async def expired_entries(self, now: float) -> list[tuple[str, Expire[Bag]]]:
        async with self._lock:
            return [
                (token, container)
                for token, container in self._store.items()
                if container.is_expired(now)
            ]

    async def pop_expired(self, token: str, now: float) -> Expire[Bag] | None:
        async with self._lock:
            container = self._store.get(token)
            if container is None or not container.is_expired(now):
                return None
            del self._store[token]
            return container
