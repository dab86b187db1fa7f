"""
Pydantic request / response schemas for the accounts API.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# Accounts are keyed by the lower-cased address.
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]


class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=128)
    email: NormalizedEmail
    password: str
    avatar: Optional[str] = Field(None, max_length=512)

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must contain at least {MIN_PASSWORD_LENGTH} symbols"
            )
        # bcrypt refuses anything past 72 bytes
        if len(v.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str

    @field_validator("password")
    @classmethod
    def _password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class TokenResponse(BaseModel):
    token: str


class AccountResponse(BaseModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: Optional[str] = None


class MessageResponse(BaseModel):
    msg: str
