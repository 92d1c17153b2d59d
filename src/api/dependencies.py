"""
Request guards for the onboarding API.

Clients send one of the comma-separated keys from API_KEYS in the X-API-KEY
header. Health and documentation routes stay open.
"""

import hmac
import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import Header, HTTPException, Request, status

load_dotenv()

logger = logging.getLogger(__name__)

OPEN_PATHS = frozenset({"/", "/health", "/docs", "/docs/oauth2-redirect", "/openapi.json", "/redoc"})


def get_api_keys() -> List[str]:
    return [k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()]


def is_valid_api_key(candidate: Optional[str]) -> bool:
    candidate = (candidate or "").strip()
    if not candidate:
        return False
    return any(hmac.compare_digest(candidate, key) for key in get_api_keys())


async def api_key_protection(
    request: Request = None,  # Request is injected by FastAPI; None when called directly in tests
    x_api_key: str = Header(default=None, alias="X-API-KEY"),
):
    if request is not None and request.url.path in OPEN_PATHS:
        return

    if not is_valid_api_key(x_api_key):
        path = request.url.path if request is not None else "<no-request>"
        logger.warning("Rejected request without a valid API key: path=%s", path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key",
        )
