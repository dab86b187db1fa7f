"""
Credential store — account lookup and persistence.

Every method issues at most one statement; the database's own
per-row guarantees are the only concurrency control.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Account

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        return None


class AccountStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_email(self, email: str) -> Optional[Account]:
        result = await self.session.execute(
            select(Account).where(Account.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, account_id: str | uuid.UUID) -> Optional[Account]:
        uid = _to_uuid(account_id)
        if uid is None:
            return None
        return await self.session.get(Account, uid)

    async def save(self, account: Account) -> Account:
        """Insert or update ``account`` and flush so defaults are populated."""
        if not account.password_hash:
            raise ValueError("account password hash must not be empty")
        account.email = normalize_email(account.email)
        self.session.add(account)
        await self.session.flush()
        return account

    async def delete(self, account_id: str | uuid.UUID) -> bool:
        """Delete an account. Returns ``False`` if nothing was removed."""
        uid = _to_uuid(account_id)
        if uid is None:
            return False
        result = await self.session.execute(
            delete(Account).where(Account.account_id == uid)
        )
        await self.session.flush()
        removed = bool(result.rowcount)
        if removed:
            logger.info("Deleted account %s", uid)
        return removed
