"""Structured session audit events.

Events are logged to the ``session.audit`` logger as JSON, one document per
event. Consumers attach their own handlers (JSON formatter, log shipper,
etc.). Tokens never appear in events, only their fingerprint.

Install ``AuditDelegate`` on a store to record every write, read, denied
read and eviction::

    auditor = AuditDelegate(denied_keys={"admin_notes"})
    store = SessionStore(secret=..., delegate=auditor)  # keep ``auditor`` alive
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Iterable

from .session.delegate import PassThroughDelegate
from .session.tokens import fingerprint

logger = logging.getLogger("session.audit")


class Activity:
    STORE = 1
    READ = 2
    DENY = 3
    EXPIRE = 4
    ISSUE = 5


class Severity:
    INFORMATIONAL = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4


_SEVERITY_NAMES = {
    Severity.INFORMATIONAL: "Informational",
    Severity.LOW: "Low",
    Severity.MEDIUM: "Medium",
    Severity.HIGH: "High",
}

_PRODUCT = {
    "name": "session-storer",
    "version": "0.1.0",
}


def emit(event: dict[str, Any]) -> None:
    """Log an audit event as JSON."""
    logger.info(json.dumps(event, default=str))


def session_event(
    *,
    activity_id: int,
    activity_name: str,
    token: str,
    key: str | None = None,
    severity_id: int = Severity.INFORMATIONAL,
    message: str = "",
    extra_metadata: dict[str, Any] | None = None,
) -> None:
    """Emit a session audit event."""
    event: dict[str, Any] = {
        "activity_id": activity_id,
        "activity_name": activity_name,
        "severity_id": severity_id,
        "severity": _SEVERITY_NAMES.get(severity_id, "Unknown"),
        "time": int(time.time() * 1000),
        "session": fingerprint(token),
        "metadata": {
            "product": _PRODUCT,
            **(extra_metadata or {}),
        },
        "message": message,
    }
    if key is not None:
        event["key"] = key
    emit(event)


class AuditDelegate(PassThroughDelegate):
    """Delegate that audits session traffic and denies reads of given keys.

    Values themselves are never logged.
    """

    def __init__(self, denied_keys: Iterable[str] = ()) -> None:
        self.denied_keys = frozenset(denied_keys)

    def will_store(self, value, key, token, response, store):
        session_event(
            activity_id=Activity.STORE,
            activity_name="Store",
            token=token,
            key=key,
            message="Session value removed" if value is None else "Session value stored",
        )
        return value

    def should_return(self, value, key, token, request, store):
        if key not in self.denied_keys:
            return True
        session_event(
            activity_id=Activity.DENY,
            activity_name="Deny",
            token=token,
            key=key,
            severity_id=Severity.MEDIUM,
            message="Read of protected session key denied",
        )
        return False

    def did_return(self, value, key, token, request, store):
        session_event(
            activity_id=Activity.READ,
            activity_name="Read",
            token=token,
            key=key,
            message="Session value read" if value is not None else "Session key absent",
        )

    def deleted(self, values, token, store):
        session_event(
            activity_id=Activity.EXPIRE,
            activity_name="Expire",
            token=token,
            message="Expired session evicted",
            extra_metadata={"keys": len(values)},
        )
