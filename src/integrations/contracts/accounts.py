"""
Account-creation contracts.

Defines the typed outcome of the student account-creation call. Both
clients/mocks/accounts.py and clients/real_http/accounts.py return these, so
the orchestrator never has to inspect raw HTTP responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubmissionStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"


@dataclass(frozen=True)
class SubmissionOutcome:
    status: SubmissionStatus
    status_code: Optional[int] = None
    message: str = ""

    @property
    def accepted(self) -> bool:
        return self.status is SubmissionStatus.ACCEPTED


def classify_status_code(status_code: Optional[int]) -> SubmissionStatus:
    """Map an HTTP status (None for no response) to a submission status."""
    if status_code is not None and 200 <= status_code < 300:
        return SubmissionStatus.ACCEPTED
    if status_code == 409:
        return SubmissionStatus.DUPLICATE_EMAIL
    return SubmissionStatus.TRANSPORT_FAILURE
