"""
Onboarding orchestrator - step gating, payment and account commit.

Submission runs:
    final validation -> public key -> checkout script -> order
    -> applicant pays in the widget -> server-side verification -> account commit

A verified payment sets `payment_completed`; until the commit is accepted,
later submissions go straight to the commit so the applicant is charged at
most once per session.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from src.integrations.contracts.accounts import SubmissionStatus
from src.integrations.contracts.interfaces import AccountRegistry, CheckoutWidget, PaymentGateway
from src.integrations.contracts.payments import CheckoutOptions, CustomerInfo
from src.integrations.policy.response_wrappers import TransportFailure
from src.onboarding.credentials import generate_password
from src.onboarding.state import EDITABLE_PHASES, FailureKind, Phase, WizardState
from src.onboarding.steps import CONTACT_STEP, LAST_STEP, TOTAL_STEPS, first_invalid_step, validate_step
from src.utils.config_loader import OnboardingConfig

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already registered"
PAYMENT_CANCELLED_MESSAGE = "Payment cancelled by user"


class InvalidTransition(RuntimeError):
    """The requested action is not legal in the current phase."""


class SubmissionInProgress(InvalidTransition):
    """A submission is already in flight for this wizard."""


StateListener = Callable[[WizardState], None]


class OnboardingOrchestrator:
    def __init__(
        self,
        gateway: PaymentGateway,
        widget: CheckoutWidget,
        accounts: AccountRegistry,
        config: OnboardingConfig,
        *,
        password_factory: Optional[Callable[[], str]] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.gateway = gateway
        self.widget = widget
        self.accounts = accounts
        self.config = config
        self._password_factory = password_factory or (
            lambda: generate_password(config.credentials.length, config.credentials.alphabet)
        )
        self._today = today or date.today
        self._state = WizardState()
        self._listeners: List[StateListener] = []

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    @property
    def progress(self) -> float:
        return (self._state.step + 1) / TOTAL_STEPS * 100

    def visible_errors(self) -> Dict[str, str]:
        return self._state.visible_errors

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener for every new state; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, **changes: Any) -> WizardState:
        previous = self._state
        self._state = replace(previous, **changes)
        if self._state.phase is not previous.phase:
            logger.debug("Wizard phase %s -> %s (step %s)", previous.phase.value, self._state.phase.value, self._state.step)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _ensure_editable(self, action: str) -> None:
        if self._state.busy or self._state.phase not in EDITABLE_PHASES:
            raise InvalidTransition(f"Cannot {action} while the wizard is {self._state.phase.value}")

    def _validate(self, step: int):
        eligibility = self.config.eligibility
        return validate_step(step, self._state.record, self._today(), min_age=eligibility.min_age, max_age=eligibility.max_age)

    # ------------------------------------------------------------------
    # Editing actions
    # ------------------------------------------------------------------

    def update_field(self, field: str, value: Any) -> WizardState:
        self._ensure_editable("edit fields")
        record = self._state.record.with_value(field, value)
        errors = {k: v for k, v in self._state.errors.items() if k != field}
        return self._transition(record=record, errors=errors, phase=Phase.EDITING, failure=None)

    def toggle_subject(self, subject: str) -> WizardState:
        self._ensure_editable("edit fields")
        return self._transition(record=self._state.record.with_subject_toggled(subject), phase=Phase.EDITING, failure=None)

    def blur(self, field: str) -> WizardState:
        self._ensure_editable("validate fields")
        return self._transition(touched=self._state.touched | {field}, errors=self._validate(self._state.step))

    def next(self) -> bool:
        """Advance one step if the current step validates; returns whether it advanced."""
        if self._state.busy or self._state.phase is not Phase.EDITING:
            raise InvalidTransition(f"Cannot advance while the wizard is {self._state.phase.value}")

        step = self._state.step
        self._transition(phase=Phase.VALIDATING_STEP)
        errors = self._validate(step)
        if errors or step >= LAST_STEP:
            self._transition(phase=Phase.EDITING, errors=errors)
            return not errors and step < LAST_STEP
        self._transition(phase=Phase.EDITING, errors={}, step=step + 1)
        return True

    def previous(self) -> WizardState:
        self._ensure_editable("go back")
        if self._state.step > 0:
            return self._transition(step=self._state.step - 1, phase=Phase.EDITING)
        return self._state

    def dismiss_success(self) -> WizardState:
        return self._transition(show_success=False)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def ensure_can_submit(self) -> None:
        if self._state.busy:
            raise SubmissionInProgress("A submission is already in progress")
        self._ensure_editable("submit")
        if self._state.step != LAST_STEP:
            raise InvalidTransition("Submit is only available on the final step")

    async def submit(self) -> WizardState:
        self.ensure_can_submit()
        self._transition(phase=Phase.FINAL_VALIDATING, busy=True, failure=None, message=None)
        try:
            eligibility = self.config.eligibility
            invalid = first_invalid_step(
                self._state.record, self._today(), min_age=eligibility.min_age, max_age=eligibility.max_age
            )
            if invalid is not None:
                step, errors = invalid
                logger.info("Submission blocked: step %s has %s invalid field(s)", step, len(errors))
                return self._transition(phase=Phase.EDITING, step=step, errors=errors, busy=False)

            password = self._password_factory()
            self._transition(errors={}, generated_password=password, show_success=False)

            if self._state.payment_completed:
                logger.info("Payment already verified for this session; retrying account commit only")
            elif not await self._collect_payment():
                return self._state

            return await self._commit(password)
        finally:
            if self._state.busy:
                logger.error("Submission ended unexpectedly in phase %s", self._state.phase.value)
                self._transition(phase=Phase.FAILED, failure=FailureKind.TRANSPORT_FAILURE, busy=False)

    async def _collect_payment(self) -> bool:
        """Run the checkout; True only once the payment has been verified server-side."""
        self._transition(phase=Phase.REQUESTING_PAYMENT_KEY)
        try:
            public_key = await self.gateway.fetch_public_key()
        except TransportFailure as exc:
            logger.warning("Payment gateway key unavailable: %s", exc)
            self._fail(FailureKind.GATEWAY_UNAVAILABLE, "Payment gateway is unavailable. Please try again later.")
            return False

        self._transition(phase=Phase.LOADING_WIDGET)
        if not await self.gateway.load_checkout_widget():
            self._fail(FailureKind.GATEWAY_UNAVAILABLE, "Error loading the payment checkout. Please try again later.")
            return False

        record = self._state.record
        plan = self.config.plan_for(record.course)
        customer = CustomerInfo(name=record.full_name, email=record.email, contact=record.phone)

        self._transition(phase=Phase.CREATING_ORDER)
        try:
            intent = await self.gateway.create_order(plan.amount, plan.currency, public_key=public_key, customer=customer)
        except TransportFailure as exc:
            logger.warning("Order creation failed: %s", exc)
            self._fail(FailureKind.TRANSPORT_FAILURE, str(exc) or "Failed to create order")
            return False

        options = CheckoutOptions.from_intent(
            intent,
            name=self.config.checkout.merchant_name,
            description=plan.description or plan.label,
            prefill=customer,
            theme_color=self.config.checkout.theme_color,
        )
        self._transition(phase=Phase.AWAITING_USER_PAYMENT)
        result = await self.widget.open(options)

        if result.cancelled:
            logger.info("Checkout dismissed for order %s", intent.order_id)
            self._transition(phase=Phase.EDITING, busy=False, message=PAYMENT_CANCELLED_MESSAGE)
            return False

        self._transition(phase=Phase.VERIFYING_PAYMENT)
        try:
            verification = await self.gateway.verify_payment(result.receipt)
        except TransportFailure as exc:
            logger.warning("Payment verification failed for order %s: %s", intent.order_id, exc)
            self._fail(FailureKind.TRANSPORT_FAILURE, "We could not verify your payment. Please try again.")
            return False

        if not verification.success:
            logger.warning("Payment verification rejected for order %s: %s", intent.order_id, verification.message)
            self._fail(FailureKind.TRANSPORT_FAILURE, verification.message or "Payment verification failed")
            return False

        logger.info("Payment verified for order %s", intent.order_id)
        self._transition(payment_completed=True)
        return True

    async def _commit(self, password: str) -> WizardState:
        self._transition(phase=Phase.COMMITTING)
        outcome = await self.accounts.commit(self._state.record.to_payload(password))

        if outcome.status is SubmissionStatus.ACCEPTED:
            return self._transition(
                phase=Phase.SUCCEEDED,
                busy=False,
                payment_completed=False,
                show_success=True,
            )

        if outcome.status is SubmissionStatus.DUPLICATE_EMAIL:
            errors = dict(self._state.errors)
            errors["email"] = DUPLICATE_EMAIL_MESSAGE
            return self._transition(
                phase=Phase.EDITING,
                step=CONTACT_STEP,
                errors=errors,
                touched=self._state.touched | {"email"},
                busy=False,
            )

        return self._fail(
            FailureKind.TRANSPORT_FAILURE,
            outcome.message or "We could not create your account. Please try again.",
        )

    def _fail(self, kind: FailureKind, message: str) -> WizardState:
        return self._transition(phase=Phase.FAILED, failure=kind, message=message, busy=False)
