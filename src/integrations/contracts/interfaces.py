from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .accounts import SubmissionOutcome
from .payments import (
    CheckoutOptions,
    CheckoutResult,
    CustomerInfo,
    PaymentIntent,
    PaymentReceipt,
    VerificationResult,
)


# ---------------------------------------------------------------------------
# Abstract integration interfaces
# ---------------------------------------------------------------------------

class PaymentGateway(ABC):
    """Every payment gateway client (mock or real) must implement this interface.

    `fetch_public_key`, `create_order` and `verify_payment` raise
    `TransportFailure` on failure; `load_checkout_widget` reports failure by
    returning False.
    """

    @abstractmethod
    async def fetch_public_key(self) -> str:
        """Return the publishable key the checkout widget is opened with."""

    @abstractmethod
    async def load_checkout_widget(self) -> bool:
        """Make the hosted checkout widget available. Idempotent."""

    @abstractmethod
    async def create_order(
        self,
        amount: float,
        currency: str,
        *,
        public_key: str,
        customer: Optional[CustomerInfo] = None,
    ) -> PaymentIntent:
        """Create a server-side order for one checkout attempt."""

    @abstractmethod
    async def verify_payment(self, receipt: PaymentReceipt) -> VerificationResult:
        """Validate the receipt signature server-side."""


class CheckoutWidget(ABC):
    """The hosted checkout overlay.

    `open` suspends until the applicant either completes the payment (result
    carries a receipt) or closes the widget (result is cancelled). Only one of
    the two outcomes is ever delivered.
    """

    @abstractmethod
    async def open(self, options: CheckoutOptions) -> CheckoutResult:
        """Show the widget and wait for completion or dismissal."""


class AccountRegistry(ABC):
    """Account-creation backend. `commit` never raises."""

    @abstractmethod
    async def commit(self, payload: Dict[str, Any]) -> SubmissionOutcome:
        """Create the student account and classify the result."""
