"""
Account API routes — register, delete own account.

Route prefix: /api/users
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from auth.dependencies import account_store, get_current_account_id, token_issuer
from auth.jwt import TokenIssuer
from auth.password import hash_password_async
from api.schemas import MessageResponse, RegisterRequest, TokenResponse
from database.accounts import AccountStore
from database.models import Account

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _already_exists() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [{"msg": "User already exists"}]},
    )


@router.post("", response_model=TokenResponse)
async def register(
    req: RegisterRequest,
    request: Request,
    store: AccountStore = Depends(account_store),
    issuer: TokenIssuer = Depends(token_issuer),
) -> Any:
    """Register a new account and return a token for it."""
    if await store.find_by_email(req.email) is not None:
        return _already_exists()

    rounds = request.app.state.settings.bcrypt_rounds
    account = Account(
        email=req.email,
        name=req.name,
        avatar=req.avatar,
        password_hash=await hash_password_async(req.password, rounds),
    )
    try:
        await store.save(account)
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        await store.session.rollback()
        return _already_exists()

    token = issuer.issue(str(account.account_id))
    logger.info("Registered account %s (%s)", account.account_id, account.email)
    return {"token": token}


@router.delete("", response_model=MessageResponse)
async def delete_account(
    account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(account_store),
) -> Dict[str, str]:
    """
    Delete the authenticated account.

    Tokens already issued for it stay cryptographically valid until they
    expire; routes that load the account will answer 404.
    """
    if not await store.delete(account_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"msg": "User removed"}
