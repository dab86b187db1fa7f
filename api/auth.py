"""
Authentication routes — current account, login.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from auth.dependencies import account_store, get_current_account_id, token_issuer
from auth.jwt import TokenIssuer
from auth.password import verify_password_async
from api.schemas import AccountResponse, LoginRequest, TokenResponse
from database.accounts import AccountStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("", response_model=AccountResponse)
async def current_account(
    account_id: str = Depends(get_current_account_id),
    store: AccountStore = Depends(account_store),
) -> Dict[str, Any]:
    """Return the account the token belongs to."""
    account = await store.find_by_id(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return account.to_public_dict()


@router.post("", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    store: AccountStore = Depends(account_store),
    issuer: TokenIssuer = Depends(token_issuer),
) -> Any:
    """Login with email + password."""
    account = await store.find_by_email(req.email)

    if account is None or not await verify_password_async(req.password, account.password_hash):
        logger.info("Failed login for %s", req.email)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": [{"msg": "Invalid credentials"}]},
        )

    token = issuer.issue(str(account.account_id))
    logger.info("Login: %s (%s)", account.name, account.account_id)
    return {"token": token}
