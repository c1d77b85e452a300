"""Expiring container: a value stamped with its creation time and TTL."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Generic, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class Expire(Generic[V]):
    """A value that expires ``ttl`` seconds after ``created_at``.

    Containers are never mutated. Writing to a session builds a new one,
    which restarts the expiry window.
    """

    value: V
    ttl: float
    created_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
