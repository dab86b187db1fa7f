"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url({"sub": ..., "iat": ..., "exp": ...})>.<hex hmac>

They are stateless bearer credentials: there is no server-side session
store and no revocation, a token stays valid until ``exp``.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import b64decode, urlsafe_b64encode
from typing import Any, Dict, Optional

from auth.errors import BadSignature, MalformedToken, TokenExpired

DEFAULT_TTL_SECONDS = 100 * 3600


def _sign(secret: str, raw: bytes) -> str:
    return hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(segment: str) -> bytes:
    raw = b64decode(segment + "=" * (-len(segment) % 4), altchars=b"-_", validate=True)
    # exactly one encoding per payload: no padding, no standard-alphabet chars
    if _b64encode(raw) != segment:
        raise ValueError("non-canonical base64 segment")
    return raw


def issue_token(
    account_id: str,
    secret: str,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    now: Optional[float] = None,
) -> str:
    """Create a signed token containing ``account_id`` and expiry."""
    issued_at = int(time.time() if now is None else now)
    payload = {
        "sub": str(account_id),
        "iat": issued_at,
        "exp": issued_at + int(ttl_seconds),
    }
    raw = json.dumps(payload, separators=(",", ":")).encode()
    return _b64encode(raw) + "." + _sign(secret, raw)


def decode_token(token: str, secret: str, now: Optional[float] = None) -> Dict[str, Any]:
    """
    Verify ``token`` and return its payload.

    Raises ``MalformedToken``, ``BadSignature`` or ``TokenExpired``.
    The signature is checked before the payload is trusted.
    """
    if not isinstance(token, str):
        raise MalformedToken("token is not a string")
    parts = token.split(".")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedToken("bad format")
    try:
        raw = _b64decode(parts[0])
    except (binascii.Error, ValueError) as exc:
        raise MalformedToken("bad payload encoding") from exc

    expected_sig = _sign(secret, raw)
    if not hmac.compare_digest(parts[1].encode(), expected_sig.encode()):
        raise BadSignature("bad signature")

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedToken("payload is not JSON") from exc
    if (
        not isinstance(payload, dict)
        or not isinstance(payload.get("sub"), str)
        or not isinstance(payload.get("exp"), int)
    ):
        raise MalformedToken("missing claims")

    current = time.time() if now is None else now
    if current >= payload["exp"]:
        raise TokenExpired("token expired")
    return payload


def verify_token(token: str, secret: str, now: Optional[float] = None) -> str:
    """Verify token and return the embedded account id."""
    return decode_token(token, secret, now=now)["sub"]


class TokenIssuer:
    """
    Issues and verifies tokens with one secret bound at construction.

    One instance is built at startup from ``Settings`` and shared read-only
    across requests.
    """

    def __init__(self, secret: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        if ttl_seconds < 0:
            raise ValueError("token ttl must not be negative")
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def issue(self, account_id: str) -> str:
        return issue_token(account_id, self._secret, self.ttl_seconds)

    def verify(self, token: str) -> str:
        return verify_token(token, self._secret)
