"""
Exceptions raised by the auth layer.

``TokenError`` subclasses distinguish *why* a token was rejected for the
server logs; clients only ever see ``InvalidToken``.
"""

from __future__ import annotations


class HashError(ValueError):
    """A stored password hash could not be parsed."""


# ── Token errors ───────────────────────────────────────────────────────


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedToken(TokenError):
    """Token could not be decoded into a payload."""


class BadSignature(TokenError):
    """Token signature does not match the payload under this secret."""


class TokenExpired(TokenError):
    """Token signature is valid but its expiry has passed."""


# ── Request-level auth errors ──────────────────────────────────────────


class AuthError(Exception):
    """Terminal, request-level rejection. Always answered with a 401."""

    status_code = 401
    msg = "Unauthorised"

    def __init__(self, msg: str | None = None) -> None:
        if msg is not None:
            self.msg = msg
        super().__init__(self.msg)


class MissingToken(AuthError):
    msg = "No token, authorisation denied"


class InvalidToken(AuthError):
    msg = "Invalid token"
