from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.payments import PaymentIntent, VerificationResult


class TransportFailure(RuntimeError):
    """A gateway round trip failed: network error, non-2xx, or `success: false`."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class IntegrationResponseError(TransportFailure):
    """The gateway answered, but not in the documented shape."""


class GatewayKeyResponseModel(BaseModel):
    key: str = Field(min_length=1)


class OrderModel(BaseModel):
    id: str = Field(min_length=1)
    amount: float
    currency: str
    receipt: Optional[str] = None


class OrderResponseModel(BaseModel):
    success: bool
    order: Optional[OrderModel] = None
    message: Optional[str] = None


class VerificationResponseModel(BaseModel):
    success: bool
    message: str = ""
    orderId: Optional[str] = None
    paymentId: Optional[str] = None


def normalize_key_response(raw: Any) -> str:
    model = _build_model(GatewayKeyResponseModel, raw)
    key = model.key.strip()
    if not key:
        raise IntegrationResponseError("Gateway returned a blank public key.", payload=_as_payload(raw))
    return key


def normalize_order_response(raw: Any, *, public_key: str) -> PaymentIntent:
    model = _build_model(OrderResponseModel, raw)
    if not model.success:
        raise TransportFailure(model.message or "Failed to create order", payload=_as_payload(raw))
    if model.order is None:
        raise IntegrationResponseError("Order response is missing 'order'.", payload=_as_payload(raw))
    return PaymentIntent(
        gateway_public_key=public_key,
        order_id=model.order.id,
        amount=model.order.amount,
        currency=model.order.currency.upper(),
        receipt=model.order.receipt,
    )


def normalize_verification_response(raw: Any) -> VerificationResult:
    model = _build_model(VerificationResponseModel, raw)
    return VerificationResult(
        success=model.success,
        message=model.message or ("Payment verified" if model.success else "Payment verification failed"),
        order_id=model.orderId,
        payment_id=model.paymentId,
    )


def _as_payload(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {"body": raw}


def _build_model(model_type, raw: Any):
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Expected a JSON object, got {type(raw).__name__}.", payload=_as_payload(raw))
    try:
        return model_type(**raw)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
