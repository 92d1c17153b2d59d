from datetime import date

import pytest

from src.integrations.clients.mocks.accounts import MockAccountsClient
from src.integrations.clients.mocks.payments import MockPaymentsClient
from src.onboarding.orchestrator import OnboardingOrchestrator
from src.onboarding.state import Phase
from src.onboarding.state_manager import OnboardingSessionManager, SessionNotFound

TODAY = date(2026, 10, 16)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(config, clock):
    gateway = MockPaymentsClient()
    accounts = MockAccountsClient()

    def factory(widget):
        return OnboardingOrchestrator(gateway, widget, accounts, config, today=lambda: TODAY)

    return OnboardingSessionManager(factory, ttl=60, clock=clock)


def test_idle_sessions_are_evicted(manager, clock):
    old = manager.create_session()
    clock.now += 61
    fresh = manager.create_session()

    assert len(manager) == 1
    with pytest.raises(SessionNotFound):
        manager.get_session(old.session_id)
    assert manager.get_session(fresh.session_id) is fresh


def test_access_keeps_session_alive(manager, clock):
    session = manager.create_session()
    clock.now += 50
    manager.get_session(session.session_id)
    clock.now += 50

    assert manager.evict_expired() == 0
    assert len(manager) == 1


@pytest.mark.asyncio
async def test_session_with_open_checkout_is_not_evicted(manager, clock, applicant):
    session = manager.create_session()
    for field, value in applicant.items():
        session.orchestrator.update_field(field, value)
    while session.orchestrator.next():
        pass
    await manager.start_submission(session.session_id)
    assert session.orchestrator.state.phase is Phase.AWAITING_USER_PAYMENT

    clock.now += 3600
    assert manager.evict_expired() == 0

    assert manager.dismiss_checkout(session.session_id) is True
    await manager.wait_for_submission(session.session_id)
    clock.now += 61
    assert manager.evict_expired() == 1
