"""
Mock checkout widget.

Resolves immediately instead of waiting for a person: with a receipt when
`receipt` is set, as a dismissal otherwise. Every opened configuration is kept
in `opened` for assertions.
"""

from typing import List, Optional

from src.integrations.contracts.interfaces import CheckoutWidget
from src.integrations.contracts.payments import CheckoutOptions, CheckoutResult, PaymentReceipt


class MockCheckoutWidget(CheckoutWidget):
    def __init__(self, receipt: Optional[PaymentReceipt] = None) -> None:
        self.receipt = receipt
        self.opened: List[CheckoutOptions] = []

    async def open(self, options: CheckoutOptions) -> CheckoutResult:
        self.opened.append(options)
        if self.receipt is None:
            return CheckoutResult.dismissed()
        return CheckoutResult.completed(self.receipt)
