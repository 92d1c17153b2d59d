"""
Real account-creation HTTP client.

POST {AUTH_API_URL}/create-student-user with {"datas": <applicant + password>}.
Every outcome, including network errors, is returned as a SubmissionOutcome.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.accounts import SubmissionOutcome, SubmissionStatus, classify_status_code
from src.integrations.contracts.interfaces import AccountRegistry

logger = logging.getLogger(__name__)


class RealAccountsClient(AccountRegistry):
    def __init__(
        self,
        base_url: Optional[str] = None,
        create_path: str = "/create-student-user",
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("AUTH_API_URL", "")).rstrip("/")
        self.create_path = create_path
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def commit(self, payload: Dict[str, Any]) -> SubmissionOutcome:
        if not self.base_url:
            logger.error("AUTH_API_URL is not configured; cannot create student account")
            return SubmissionOutcome(SubmissionStatus.TRANSPORT_FAILURE, message="AUTH_API_URL is not configured.")

        url = f"{self.base_url}{self.create_path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json={"datas": payload})
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Account creation request failed: %s", exc)
            return SubmissionOutcome(SubmissionStatus.TRANSPORT_FAILURE, message=str(exc))

        status = classify_status_code(response.status_code)
        if status is SubmissionStatus.ACCEPTED:
            logger.info("Student account created (HTTP %s)", response.status_code)
        else:
            logger.warning("Account creation rejected: HTTP %s (%s)", response.status_code, status.value)
        return SubmissionOutcome(status, status_code=response.status_code, message=_error_message(response))


def _error_message(response: httpx.Response) -> str:
    if response.is_success:
        return ""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or "")
    return ""
