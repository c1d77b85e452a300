"""Session token issuance and the cookie codec.

Tokens are random and URL-safe. The cookie carries the token signed with
itsdangerous, so a client cannot present a token the server never issued.
The same signed value goes into the Set-Cookie header and into the
synthetic request cookie; it is decoded exactly once, by ``decode``.
"""

from __future__ import annotations

import hashlib
import secrets

from itsdangerous import BadSignature, URLSafeTimedSerializer

from .errors import TokenSourceError

MIN_TOKEN_BYTES = 16
DEFAULT_TOKEN_BYTES = 32
SALT = "session-token"


def fingerprint(token: str) -> str:
    """Short, non-reversible identifier for logs. Never log raw tokens."""
    return hashlib.sha256(token.encode()).hexdigest()[:12]


class TokenIssuer:
    def __init__(
        self,
        secret: str,
        *,
        max_age: float | None = None,
        nbytes: int = DEFAULT_TOKEN_BYTES,
    ) -> None:
        if nbytes < MIN_TOKEN_BYTES:
            raise ValueError(
                f"Session tokens need at least {MIN_TOKEN_BYTES} random bytes, got {nbytes}"
            )
        self.signer = URLSafeTimedSerializer(secret, salt=SALT)
        self.max_age = max_age
        self.nbytes = nbytes

    def issue(self) -> str:
        """Generate a new token from the OS secure random source."""
        try:
            return secrets.token_urlsafe(self.nbytes)
        except (OSError, NotImplementedError) as e:
            raise TokenSourceError("Secure random source unavailable") from e

    def encode(self, token: str) -> str:
        return self.signer.dumps(token)

    def decode(self, value: str) -> str | None:
        """Return the token inside a cookie value, or None if it is not ours."""
        try:
            token = self.signer.loads(value, max_age=self.max_age)
        except BadSignature:
            return None
        if not isinstance(token, str) or not token:
            return None
        return token
