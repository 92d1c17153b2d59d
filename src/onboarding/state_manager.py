"""
Session management for onboarding wizards
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from src.integrations.contracts.payments import PaymentReceipt
from src.onboarding.checkout import DeferredCheckoutWidget
from src.onboarding.orchestrator import OnboardingOrchestrator, SubmissionInProgress

logger = logging.getLogger(__name__)

OrchestratorFactory = Callable[[DeferredCheckoutWidget], OnboardingOrchestrator]


class SessionNotFound(KeyError):
    pass


class OnboardingSession:
    def __init__(self, session_id: str, orchestrator: OnboardingOrchestrator, widget: DeferredCheckoutWidget):
        self.session_id = session_id
        self.orchestrator = orchestrator
        self.widget = widget
        self.created_at = datetime.now(timezone.utc)
        self.last_active = time.monotonic()
        self.submission: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        """A submission is running or the checkout widget is open."""
        if self.submission is not None and not self.submission.done():
            return True
        handle = self.widget.active
        return handle is not None and handle.pending

    def to_dict(self) -> Dict[str, Any]:
        state = self.orchestrator.state
        data = {
            "session_id": self.session_id,
            "created_at": self.created_at.isoformat(),
            "state": state.to_dict(self.orchestrator.total_steps),
            "checkout": None,
        }
        handle = self.widget.active
        if handle is not None and handle.pending:
            data["checkout"] = handle.options.to_widget_config()
        return data


class OnboardingSessionManager:
    """In-memory registry: one orchestrator (and checkout bridge) per browser session.

    Sessions idle for longer than `ttl` seconds are evicted on the next
    create, unless a submission or checkout is still open for them.
    """

    def __init__(
        self,
        orchestrator_factory: OrchestratorFactory,
        ttl: int = 1800,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = orchestrator_factory
        self._sessions: Dict[str, OnboardingSession] = {}
        self.ttl = ttl
        self._clock = clock

    def create_session(self) -> OnboardingSession:
        """Create new session"""
        self.evict_expired()
        session_id = str(uuid.uuid4())
        widget = DeferredCheckoutWidget()
        session = OnboardingSession(session_id, self._factory(widget), widget)
        session.last_active = self._clock()
        self._sessions[session_id] = session
        logger.info("Created onboarding session %s", session_id)
        return session

    def get_session(self, session_id: str) -> OnboardingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        session.last_active = self._clock()
        return session

    def evict_expired(self) -> int:
        """Drop idle sessions; returns how many were removed."""
        cutoff = self._clock() - self.ttl
        expired = [
            sid for sid, session in self._sessions.items()
            if session.last_active < cutoff and not session.in_flight
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted %s idle onboarding session(s)", len(expired))
        return len(expired)

    async def start_submission(self, session_id: str) -> OnboardingSession:
        """Run `submit()` in the background; the page polls state and drives the checkout callbacks.

        Returns once the submission has reached its first suspension point, so the
        caller sees it busy (or already finished when validation blocked it).
        """
        session = self.get_session(session_id)
        if session.submission and not session.submission.done():
            raise SubmissionInProgress("A submission is already in progress")
        session.orchestrator.ensure_can_submit()
        session.submission = asyncio.ensure_future(session.orchestrator.submit())
        session.submission.add_done_callback(lambda task: _log_submission_result(session_id, task))
        await asyncio.sleep(0)
        return session

    async def wait_for_submission(self, session_id: str):
        session = self.get_session(session_id)
        if session.submission is None:
            return session.orchestrator.state
        return await session.submission

    def complete_checkout(self, session_id: str, receipt: PaymentReceipt) -> bool:
        handle = self.get_session(session_id).widget.active
        if handle is None:
            return False
        if receipt.order_id != handle.options.order_id:
            raise ValueError(f"Receipt is for order {receipt.order_id}, but checkout is open for {handle.options.order_id}")
        return handle.complete(receipt)

    def dismiss_checkout(self, session_id: str) -> bool:
        handle = self.get_session(session_id).widget.active
        return bool(handle and handle.dismiss())

    def end_session(self, session_id: str) -> None:
        """End session and clean up"""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        if session.submission and not session.submission.done():
            session.submission.cancel()
        logger.info("Ended onboarding session %s", session_id)

    def __len__(self) -> int:
        return len(self._sessions)


def _log_submission_result(session_id: str, task: asyncio.Task) -> None:
    if task.cancelled():
        logger.info("Submission for session %s was cancelled", session_id)
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Submission for session %s failed", session_id, exc_info=exc)
        return
    logger.info("Submission for session %s finished in phase %s", session_id, task.result().phase.value)
