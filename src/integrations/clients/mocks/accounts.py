"""
Mock account-creation client.

Keeps created accounts in memory keyed by lower-cased email, so registering the
same email twice yields DUPLICATE_EMAIL like the real backend's HTTP 409.
`outcomes` can queue scripted results that are returned before the in-memory
behaviour applies.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from src.integrations.contracts.accounts import SubmissionOutcome, SubmissionStatus
from src.integrations.contracts.interfaces import AccountRegistry

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    SubmissionStatus.ACCEPTED: 201,
    SubmissionStatus.DUPLICATE_EMAIL: 409,
    SubmissionStatus.TRANSPORT_FAILURE: 502,
}


class MockAccountsClient(AccountRegistry):
    def __init__(self, outcomes: Optional[Iterable[SubmissionStatus]] = None) -> None:
        self._scripted: List[SubmissionStatus] = list(outcomes or [])
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.payloads: List[Dict[str, Any]] = []

    async def commit(self, payload: Dict[str, Any]) -> SubmissionOutcome:
        self.payloads.append(dict(payload))
        email = str(payload.get("email", "")).strip().lower()

        if self._scripted:
            status = self._scripted.pop(0)
        elif email in self.accounts:
            status = SubmissionStatus.DUPLICATE_EMAIL
        else:
            status = SubmissionStatus.ACCEPTED

        if status is SubmissionStatus.ACCEPTED:
            self.accounts[email] = dict(payload)
        logger.info("[MOCK] create-student-user for %s -> %s", email or "<no email>", status.value)
        return SubmissionOutcome(status, status_code=_STATUS_CODES[status])
