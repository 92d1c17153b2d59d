"""
Onboarding wizard endpoints.

The page renders `state` from every response. While `state.phase` is
`awaiting_user_payment`, `checkout` carries the widget configuration; the
widget's `handler` posts to /checkout/complete and `modal.ondismiss` posts to
/checkout/dismiss.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from src.integrations.contracts.payments import PaymentReceipt
from src.onboarding.orchestrator import InvalidTransition
from src.onboarding.state_manager import OnboardingSession, OnboardingSessionManager, SessionNotFound
from src.onboarding.validation import FormValidationError, raise_if_errors
from src.utils.config_loader import OnboardingConfig

logger = logging.getLogger(__name__)

router = APIRouter()

# Will be set by main.py after import
session_manager: OnboardingSessionManager = None
config: Optional[OnboardingConfig] = None


class FieldUpdateRequest(BaseModel):
    field: str
    value: Any = None


class FieldRequest(BaseModel):
    field: str


class SubjectToggleRequest(BaseModel):
    subject: str = Field(..., min_length=1)


class CheckoutCompletionRequest(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


def _get_session(session_id: str) -> OnboardingSession:
    try:
        return session_manager.get_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding session not found")


def _conflict(exc: InvalidTransition) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def _validation_failed(exc: FormValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error": "validation_error",
            "message": exc.message,
            "field_errors": exc.field_errors,
        },
    )


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session() -> Dict[str, Any]:
    return session_manager.create_session().to_dict()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    return _get_session(session_id).to_dict()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session_id: str) -> None:
    _get_session(session_id)
    session_manager.end_session(session_id)


@router.patch("/sessions/{session_id}/fields")
async def update_field(session_id: str, body: FieldUpdateRequest) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        session.orchestrator.update_field(body.field, body.value)
    except KeyError:
        raise _validation_failed(FormValidationError({body.field: "Unknown field"}, message="Unknown field"))
    except InvalidTransition as exc:
        raise _conflict(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/blur")
async def blur_field(session_id: str, body: FieldRequest) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        session.orchestrator.blur(body.field)
    except InvalidTransition as exc:
        raise _conflict(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/subjects/toggle")
async def toggle_subject(session_id: str, body: SubjectToggleRequest) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        session.orchestrator.toggle_subject(body.subject)
    except InvalidTransition as exc:
        raise _conflict(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/next")
async def next_step(session_id: str) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        advanced = session.orchestrator.next()
        raise_if_errors(session.orchestrator.state.errors)
    except InvalidTransition as exc:
        raise _conflict(exc)
    except FormValidationError as exc:
        raise _validation_failed(exc)
    return {"advanced": advanced, **session.to_dict()}


@router.post("/sessions/{session_id}/previous")
async def previous_step(session_id: str) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        session.orchestrator.previous()
    except InvalidTransition as exc:
        raise _conflict(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/submit", status_code=status.HTTP_202_ACCEPTED)
async def submit(session_id: str) -> Dict[str, Any]:
    session = _get_session(session_id)
    try:
        await session_manager.start_submission(session_id)
    except InvalidTransition as exc:
        raise _conflict(exc)
    return session.to_dict()


@router.post("/sessions/{session_id}/checkout/complete")
async def complete_checkout(session_id: str, body: CheckoutCompletionRequest) -> Dict[str, Any]:
    _get_session(session_id)
    receipt = PaymentReceipt(
        order_id=body.razorpay_order_id,
        payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
    )
    try:
        accepted = session_manager.complete_checkout(session_id, receipt)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if not accepted:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No checkout is awaiting payment")
    submitted = await session_manager.wait_for_submission(session_id)
    logger.info("Checkout completed for session %s -> %s", session_id, submitted.phase.value)
    return _get_session(session_id).to_dict()


@router.post("/sessions/{session_id}/checkout/dismiss")
async def dismiss_checkout(session_id: str) -> Dict[str, Any]:
    _get_session(session_id)
    if not session_manager.dismiss_checkout(session_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No checkout is awaiting payment")
    await session_manager.wait_for_submission(session_id)
    return _get_session(session_id).to_dict()


@router.post("/sessions/{session_id}/success/dismiss")
async def dismiss_success(session_id: str) -> Dict[str, Any]:
    session = _get_session(session_id)
    session.orchestrator.dismiss_success()
    return session.to_dict()


@router.get("/plans")
async def list_plans() -> Dict[str, Any]:
    plans = config.plans if config else []
    return {
        "default_plan": config.default_plan if config else None,
        "plans": [plan.model_dump() for plan in plans],
    }
