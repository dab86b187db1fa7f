"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``account_store``, ``token_issuer`` and
``get_current_account_id`` dependencies that are used across all routes.
"""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenIssuer
from auth.middleware import AuthGate, RequestIdentity
from database.accounts import AccountStore
from database.session import get_db_session


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


async def account_store(session: AsyncSession = Depends(db_session)) -> AccountStore:
    return AccountStore(session)


def token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


async def get_current_account_id(request: Request) -> str:
    """
    Verify the token header and return the authenticated ``account_id``.

    The resolved ``RequestIdentity`` is also left on ``request.state.identity``
    for downstream code.  On failure an ``AuthError`` propagates and the
    route body never runs.
    """
    gate: AuthGate = request.app.state.auth_gate
    identity: RequestIdentity = gate.authenticate(request.headers)
    request.state.identity = identity
    return identity.account_id
