"""
Real Payments HTTP Client.

Talks to the payments backend that fronts the Razorpay gateway:
- GET  /get-razorpay-key   -> {"key": "..."}
- POST /make-payment       -> {"success": bool, "order": {...}, "message"?: str}
- POST /verify-payments    -> {"success": bool, "message": str, ...}
and checks that the hosted checkout script can be fetched.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.interfaces import PaymentGateway
from src.integrations.contracts.payments import CustomerInfo, PaymentIntent, PaymentReceipt, VerificationResult
from src.integrations.policy.response_wrappers import (
    TransportFailure,
    normalize_key_response,
    normalize_order_response,
    normalize_verification_response,
)

logger = logging.getLogger(__name__)

DEFAULT_CHECKOUT_SCRIPT_URL = "https://checkout.razorpay.com/v1/checkout.js"


class RealPaymentsClient(PaymentGateway):
    def __init__(
        self,
        base_url: Optional[str] = None,
        checkout_script_url: Optional[str] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or os.getenv("PAYMENTS_API_URL", "")).rstrip("/")
        self.checkout_script_url = checkout_script_url or os.getenv("RAZORPAY_CHECKOUT_SCRIPT_URL", DEFAULT_CHECKOUT_SCRIPT_URL)
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._widget_load: Optional[asyncio.Future] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport)

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise TransportFailure("PAYMENTS_API_URL is not configured.")
        return f"{self.base_url}{path}"

    async def _request_json(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path)
        try:
            async with self._client() as client:
                response = await client.request(method, url, json=payload)
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as exc:
            raise TransportFailure(
                f"{method} {path} returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportFailure(f"{method} {path} returned a non-JSON body") from exc

    async def fetch_public_key(self) -> str:
        data = await self._request_json("GET", "/get-razorpay-key")
        return normalize_key_response(data)

    async def load_checkout_widget(self) -> bool:
        # Concurrent callers share one in-flight fetch; only a successful load is cached.
        if self._widget_load is None:
            self._widget_load = asyncio.ensure_future(self._fetch_checkout_script())
        loaded = await asyncio.shield(self._widget_load)
        if not loaded:
            self._widget_load = None
        return loaded

    async def _fetch_checkout_script(self) -> bool:
        try:
            async with self._client() as client:
                response = await client.get(self.checkout_script_url)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Checkout script could not be loaded from %s: %s", self.checkout_script_url, exc)
            return False
        if not response.content:
            logger.warning("Checkout script at %s is empty", self.checkout_script_url)
            return False
        logger.info("Checkout script loaded from %s", self.checkout_script_url)
        return True

    async def create_order(
        self,
        amount: float,
        currency: str,
        *,
        public_key: str,
        customer: Optional[CustomerInfo] = None,
    ) -> PaymentIntent:
        payload: Dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "receipt": f"receipt_{int(time.time() * 1000)}",
            "notes": {
                "customer_name": customer.name if customer else "",
                "customer_email": customer.email if customer else "",
            },
        }
        data = await self._request_json("POST", "/make-payment", payload)
        intent = normalize_order_response(data, public_key=public_key)
        logger.info("Created order %s for %s %s", intent.order_id, intent.amount, intent.currency)
        return intent

    async def verify_payment(self, receipt: PaymentReceipt) -> VerificationResult:
        data = await self._request_json("POST", "/verify-payments", receipt.to_verification_payload())
        result = normalize_verification_response(data)
        logger.info("Verification for order %s: success=%s", receipt.order_id, result.success)
        return result
