from dataclasses import dataclass
from typing import Any, Dict, Optional

"""
Payment contracts.

Defines the request/response structures for the hosted-checkout payment flow:
- creating an order for one checkout attempt
- the receipt the checkout widget hands back
- the server-side verification result

These contracts must be used by both:
- clients/mocks/payments.py (fake responses for development/testing)
- clients/real_http/payments.py (real API calls)
"""


# ---------------------------------------------------------------------------
# Payment models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    email: str
    contact: str = ""


@dataclass(frozen=True)
class PaymentIntent:
    """One checkout attempt; discarded once the attempt resolves."""
    gateway_public_key: str
    order_id: str
    amount: float
    currency: str
    receipt: Optional[str] = None


@dataclass(frozen=True)
class PaymentReceipt:
    """Returned by the checkout widget when the applicant completes a payment."""
    order_id: str
    payment_id: str
    signature: str

    def to_verification_payload(self) -> Dict[str, str]:
        return {
            "razorpay_order_id": self.order_id,
            "razorpay_payment_id": self.payment_id,
            "razorpay_signature": self.signature,
        }


@dataclass(frozen=True)
class VerificationResult:
    success: bool
    message: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None


@dataclass(frozen=True)
class CheckoutOptions:
    """Everything the checkout widget is constructed with, except the callbacks."""
    key: str
    amount: float
    currency: str
    name: str
    description: str
    order_id: str
    prefill: CustomerInfo
    theme_color: str = "#3b82f6"

    @classmethod
    def from_intent(
        cls,
        intent: PaymentIntent,
        *,
        name: str,
        description: str,
        prefill: CustomerInfo,
        theme_color: str = "#3b82f6",
    ) -> "CheckoutOptions":
        return cls(
            key=intent.gateway_public_key,
            amount=intent.amount,
            currency=intent.currency,
            name=name,
            description=description,
            order_id=intent.order_id,
            prefill=prefill,
            theme_color=theme_color,
        )

    def to_widget_config(self) -> Dict[str, Any]:
        """Browser-side widget configuration; `handler` and `modal.ondismiss`
        are wired by the page to the checkout completion/dismissal endpoints."""
        return {
            "key": self.key,
            "amount": self.amount,
            "currency": self.currency,
            "name": self.name,
            "description": self.description,
            "order_id": self.order_id,
            "prefill": {
                "name": self.prefill.name,
                "email": self.prefill.email,
                "contact": self.prefill.contact,
            },
            "theme": {"color": self.theme_color},
        }


@dataclass(frozen=True)
class CheckoutResult:
    """Completion (receipt set) or dismissal (receipt is None)."""
    receipt: Optional[PaymentReceipt] = None

    @property
    def cancelled(self) -> bool:
        return self.receipt is None

    @classmethod
    def completed(cls, receipt: PaymentReceipt) -> "CheckoutResult":
        return cls(receipt=receipt)

    @classmethod
    def dismissed(cls) -> "CheckoutResult":
        return cls(receipt=None)
