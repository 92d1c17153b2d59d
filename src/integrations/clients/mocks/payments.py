"""
Mock Payments Client.

Purpose:
- Provides a fake payment gateway used for development/testing
- Does NOT make any network calls
- Returns deterministic responses and records every call it receives

Behavior:
- fetch_public_key() returns `public_key`, or raises TransportFailure when `key_available` is False
- load_checkout_widget() returns `widget_available`
- create_order(...) returns sequential order ids (order_1, order_2, ...) unless `order_success` is False
- verify_payment(...) succeeds when `verification_success` is True

Swap:
Replace this mock client with clients/real_http/payments.py when the payments
backend is reachable (INTEGRATIONS_MODE=real).
"""

import logging
from collections import Counter
from typing import List, Optional

from src.integrations.contracts.interfaces import PaymentGateway
from src.integrations.contracts.payments import CustomerInfo, PaymentIntent, PaymentReceipt, VerificationResult
from src.integrations.policy.response_wrappers import TransportFailure

logger = logging.getLogger(__name__)


class MockPaymentsClient(PaymentGateway):
    def __init__(
        self,
        public_key: str = "rzp_test_mock",
        key_available: bool = True,
        widget_available: bool = True,
        order_success: bool = True,
        verification_success: bool = True,
    ) -> None:
        self.public_key = public_key
        self.key_available = key_available
        self.widget_available = widget_available
        self.order_success = order_success
        self.verification_success = verification_success
        self.calls: Counter = Counter()
        self.orders: List[PaymentIntent] = []
        self.verified_receipts: List[PaymentReceipt] = []

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def fetch_public_key(self) -> str:
        self.calls["fetch_public_key"] += 1
        if not self.key_available:
            raise TransportFailure("Mock gateway key endpoint unavailable")
        return self.public_key

    async def load_checkout_widget(self) -> bool:
        self.calls["load_checkout_widget"] += 1
        return self.widget_available

    async def create_order(
        self,
        amount: float,
        currency: str,
        *,
        public_key: str,
        customer: Optional[CustomerInfo] = None,
    ) -> PaymentIntent:
        self.calls["create_order"] += 1
        if not self.order_success:
            raise TransportFailure("Failed to create order")
        intent = PaymentIntent(
            gateway_public_key=public_key,
            order_id=f"order_{len(self.orders) + 1}",
            amount=amount,
            currency=currency,
            receipt=f"receipt_mock_{len(self.orders) + 1}",
        )
        self.orders.append(intent)
        logger.info("[MOCK] created order %s for %s %s", intent.order_id, amount, currency)
        return intent

    async def verify_payment(self, receipt: PaymentReceipt) -> VerificationResult:
        self.calls["verify_payment"] += 1
        self.verified_receipts.append(receipt)
        if not self.verification_success:
            return VerificationResult(success=False, message="Invalid payment signature")
        return VerificationResult(
            success=True,
            message="Payment verified successfully",
            order_id=receipt.order_id,
            payment_id=receipt.payment_id,
        )
