"""Tests for the expiring container."""

from dataclasses import FrozenInstanceError

import pytest

from session_storer.session import Expire


def test_not_expired_at_creation():
    c = Expire({"k": "v"}, ttl=2, created_at=100.0)
    assert not c.is_expired(100.0)


def test_not_expired_at_exact_deadline():
    c = Expire({}, ttl=2, created_at=100.0)
    assert not c.is_expired(102.0)


def test_expired_after_deadline():
    c = Expire({}, ttl=2, created_at=100.0)
    assert c.is_expired(102.001)


def test_expires_at():
    assert Expire(None, ttl=5, created_at=10.0).expires_at == 15.0


def test_created_at_defaults_to_now():
    import time

    before = time.time()
    c = Expire("x", ttl=1)
    assert before <= c.created_at <= time.time()


def test_container_is_immutable():
    c = Expire("x", ttl=1, created_at=0.0)
    with pytest.raises(FrozenInstanceError):
        c.created_at = 5.0
