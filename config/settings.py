"""
Application settings loaded from environment variables.

``JWT_SECRET`` and ``DATABASE_URL`` have no defaults: if either is missing
``get_settings()`` raises and the server refuses to start.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = Field(..., min_length=1)      # HMAC secret for auth tokens
    token_ttl_seconds: int = 360000                  # 100 hours
    auth_header: str = "x-auth-token"                # header carrying the raw token
    bcrypt_rounds: int = Field(12, ge=4, le=31)      # password hash work factor

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = Field(..., min_length=1)

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": (".env", "config/.env"),
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
