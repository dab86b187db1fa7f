"""
Access log middleware.

One line per request with the account the auth gate resolved, or
``anonymous``.  The token header itself is never logged.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

ANONYMOUS = "anonymous"


def _account_label(request: Request) -> str:
    identity = getattr(request.state, "identity", None)
    return identity.account_id if identity is not None else ANONYMOUS


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d account=%s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            _account_label(request),
            elapsed_ms,
        )
        return response
