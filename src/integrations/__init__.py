"""
Integrations layer.
This package contains all code used to communicate with external systems such as:
- The payments backend in front of the Razorpay gateway (key, order, verification)
- The hosted checkout widget
- The account-creation backend (student users)

Key rule:
- The onboarding orchestrator MUST NOT call external APIs directly.
- It calls integration clients (under src/integrations/clients) through the
  interfaces in src/integrations/contracts/interfaces.py.
- We use MOCK clients during development and swap to REAL_HTTP clients when APIs are available.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.accounts import SubmissionOutcome, SubmissionStatus, classify_status_code
from .contracts.interfaces import AccountRegistry, CheckoutWidget, PaymentGateway
from .contracts.payments import (
    CheckoutOptions,
    CheckoutResult,
    CustomerInfo,
    PaymentIntent,
    PaymentReceipt,
    VerificationResult,
)
from .policy.response_wrappers import IntegrationResponseError, TransportFailure

__all__ = [
    # interfaces
    "AccountRegistry", "CheckoutWidget", "PaymentGateway",
    # payments
    "CheckoutOptions", "CheckoutResult", "CustomerInfo", "PaymentIntent",
    "PaymentReceipt", "VerificationResult",
    # accounts
    "SubmissionOutcome", "SubmissionStatus", "classify_status_code",
    # errors
    "IntegrationResponseError", "TransportFailure",
]
