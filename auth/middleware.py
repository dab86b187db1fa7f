"""
Request gate for protected routes.

``AuthGate`` reads the token header, verifies it and yields a
``RequestIdentity``.  It has two outcomes only: an identity, or an
``AuthError`` that the API layer turns into a 401.  It never looks the
account up in the database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from auth.errors import InvalidToken, MissingToken, TokenError
from auth.jwt import TokenIssuer

logger = logging.getLogger(__name__)

DEFAULT_AUTH_HEADER = "x-auth-token"


@dataclass(frozen=True)
class RequestIdentity:
    account_id: str


class AuthGate:
    def __init__(self, issuer: TokenIssuer, header_name: str = DEFAULT_AUTH_HEADER) -> None:
        self.issuer = issuer
        self.header_name = header_name

    def authenticate(self, headers: Mapping[str, str]) -> RequestIdentity:
        """Resolve the identity carried by ``headers`` or raise ``AuthError``."""
        token = (headers.get(self.header_name) or "").strip()
        if not token:
            raise MissingToken()

        try:
            account_id = self.issuer.verify(token)
        except TokenError as exc:
            logger.debug(
                "Rejected token %s… (%s: %s)", token[:8], type(exc).__name__, exc,
            )
            raise InvalidToken() from exc
        return RequestIdentity(account_id=account_id)
