from .backend import InMemoryBackend, SessionBackend
from .delegate import PassThroughDelegate, SessionDelegate
from .errors import MissingTokenError, SessionError, TokenSourceError
from .expire import Expire
from .middleware import SessionMiddleware
from .store import SessionStore
from .tokens import TokenIssuer, fingerprint

__all__ = [
    "Expire",
    "InMemoryBackend",
    "MissingTokenError",
    "PassThroughDelegate",
    "SessionBackend",
    "SessionDelegate",
    "SessionError",
    "SessionMiddleware",
    "SessionStore",
    "TokenIssuer",
    "TokenSourceError",
    "fingerprint",
]
