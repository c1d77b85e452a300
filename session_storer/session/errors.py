"""Session store errors.

Only two conditions are failures: a store used on a request that never
passed through ``SessionMiddleware``, and an unusable random source.
Everything else (missing bag, key, delegate or entry) reads as ``None``.
"""


class SessionError(Exception):
    """Base class for session store errors."""


class MissingTokenError(SessionError, RuntimeError):
    """The request carries no session token.

    Raised by ``SessionStore.get``/``set`` when the request filter did not
    run first. This is a wiring bug, not a client error.
    """


class TokenSourceError(SessionError):
    """The operating system's secure random source is unavailable."""
