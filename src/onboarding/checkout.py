"""
Bridge between the browser-hosted checkout widget and the orchestrator.

The widget reports back through two callbacks (`handler(receipt)` and
`modal.ondismiss()`). Here both resolve the same future, so the orchestrator
awaits a single result and whichever callback arrives first wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from src.integrations.contracts.interfaces import CheckoutWidget
from src.integrations.contracts.payments import CheckoutOptions, CheckoutResult, PaymentReceipt

logger = logging.getLogger(__name__)


class CheckoutHandle:
    """One open checkout widget."""

    def __init__(self, options: CheckoutOptions) -> None:
        self.options = options
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def pending(self) -> bool:
        return not self._future.done()

    def complete(self, receipt: PaymentReceipt) -> bool:
        if not self.pending:
            logger.warning("Ignoring completion for order %s: checkout already resolved", self.options.order_id)
            return False
        self._future.set_result(CheckoutResult.completed(receipt))
        return True

    def dismiss(self) -> bool:
        if not self.pending:
            return False
        self._future.set_result(CheckoutResult.dismissed())
        return True

    async def wait(self) -> CheckoutResult:
        return await self._future


class DeferredCheckoutWidget(CheckoutWidget):
    """Parks `open()` until the page calls back with completion or dismissal."""

    def __init__(self) -> None:
        self.active: Optional[CheckoutHandle] = None

    async def open(self, options: CheckoutOptions) -> CheckoutResult:
        handle = CheckoutHandle(options)
        self.active = handle
        logger.info("Checkout widget opened for order %s", options.order_id)
        try:
            return await handle.wait()
        finally:
            self.active = None
