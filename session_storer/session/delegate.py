"""Delegate hooks around session reads, writes and evictions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from starlette.requests import HTTPConnection
from starlette.responses import Response

if TYPE_CHECKING:
    from .store import SessionStore


@runtime_checkable
class SessionDelegate(Protocol):
    """Observer/transformer for a ``SessionStore``.

    Hooks run synchronously on the request's task and must not block. The
    store does not own its delegate: it keeps a weak reference, and the
    caller keeps the delegate alive for as long as it should be consulted.
    """

    def will_store(
        self,
        value: Any,
        key: str,
        token: str,
        response: Response | None,
        store: SessionStore,
    ) -> Any:
        """Return the value to store in place of ``value``. ``None`` deletes the key."""
        ...

    def should_return(
        self, value: Any, key: str, token: str, request: HTTPConnection, store: SessionStore
    ) -> bool:
        """Return False to make ``get`` answer None without further hooks."""
        ...

    def will_return(
        self, value: Any, key: str, token: str, request: HTTPConnection, store: SessionStore
    ) -> Any:
        """Return a substitute for ``value``, or None to keep it."""
        ...

    def did_return(
        self, value: Any, key: str, token: str, request: HTTPConnection, store: SessionStore
    ) -> None:
        """Observe the value ``get`` actually returned."""
        ...

    def deleted(self, values: dict[str, Any], token: str, store: SessionStore) -> None:
        """Observe a bag evicted by the expiration sweep."""
        ...


class PassThroughDelegate:
    """Hooks that change nothing. Used when no delegate is installed.

    Subclass it to override only the hooks you need.
    """

    def will_store(self, value, key, token, response, store):
        return value

    def should_return(self, value, key, token, request, store):
        return True

    def will_return(self, value, key, token, request, store):
        return None

    def did_return(self, value, key, token, request, store):
        pass

    def deleted(self, values, token, store):
        pass
