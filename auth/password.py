"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  The encoded hash carries the
salt and cost, so nothing else needs to be stored next to it.

Raising the work factor (``BCRYPT_ROUNDS`` env var, read into
``Settings.bcrypt_rounds``) is the supported way to make brute force more
expensive.
"""

from __future__ import annotations

import asyncio
import logging
import re

import bcrypt

from auth.errors import HashError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12

_BCRYPT_HASH_RE = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password with bcrypt (fresh salt on every call)."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def _check_hash(password_hash: str) -> bytes:
    if not isinstance(password_hash, str) or not _BCRYPT_HASH_RE.match(password_hash):
        raise HashError("not a bcrypt hash")
    return password_hash.encode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash.

    A malformed stored hash fails closed: it is logged and reported as a
    mismatch.
    """
    try:
        encoded = _check_hash(password_hash)
        return bcrypt.checkpw(password.encode(), encoded)
    except HashError as exc:
        logger.warning("Rejecting malformed password hash: %s", exc)
        return False
    except (ValueError, TypeError) as exc:
        logger.warning("Password verification failed: %s", exc)
        return False


# ── Event-loop friendly wrappers ───────────────────────────────────────


async def hash_password_async(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Run :func:`hash_password` in a worker thread."""
    return await asyncio.to_thread(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    """Run :func:`verify_password` in a worker thread."""
    return await asyncio.to_thread(verify_password, password, password_hash)
