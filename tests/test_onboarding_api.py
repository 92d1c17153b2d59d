from datetime import date

import httpx
import pytest

import src.api.endpoints.onboarding as onboarding_module
from src.api.main import app
from src.integrations.clients.mocks.accounts import MockAccountsClient
from src.integrations.clients.mocks.payments import MockPaymentsClient
from src.onboarding.orchestrator import OnboardingOrchestrator
from src.onboarding.state_manager import OnboardingSessionManager

TODAY = date(2026, 10, 16)
API_KEY = "test-key"
PREFIX = "/api/v1/onboarding"


@pytest.fixture
def gateway():
    return MockPaymentsClient()


@pytest.fixture
def manager(config, gateway, monkeypatch):
    monkeypatch.setenv("API_KEYS", API_KEY)
    accounts = MockAccountsClient()

    def factory(widget):
        return OnboardingOrchestrator(gateway, widget, accounts, config, today=lambda: TODAY)

    manager = OnboardingSessionManager(factory)
    monkeypatch.setattr(onboarding_module, "session_manager", manager)
    monkeypatch.setattr(onboarding_module, "config", config)
    return manager


def api_client(api_key=API_KEY):
    headers = {"X-API-KEY": api_key} if api_key else {}
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test", headers=headers)


async def start_session(client):
    response = await client.post(f"{PREFIX}/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


async def fill_to_payment_step(client, session_id, applicant):
    for field, value in applicant.items():
        response = await client.patch(f"{PREFIX}/sessions/{session_id}/fields", json={"field": field, "value": value})
        assert response.status_code == 200
    for _ in range(5):
        response = await client.post(f"{PREFIX}/sessions/{session_id}/next")
        assert response.status_code == 200
        assert response.json()["advanced"] is True
    return response.json()


@pytest.mark.asyncio
async def test_full_onboarding_through_checkout(manager, gateway, applicant):
    async with api_client() as client:
        session_id = await start_session(client)
        data = await fill_to_payment_step(client, session_id, applicant)
        assert data["state"]["step"] == 5
        assert data["state"]["progress"] == 100

        response = await client.post(f"{PREFIX}/sessions/{session_id}/submit")
        assert response.status_code == 202
        data = response.json()
        assert data["state"]["phase"] == "awaiting_user_payment"
        assert data["state"]["busy"] is True
        assert data["checkout"]["order_id"] == "order_1"
        assert data["checkout"]["amount"] == 1499
        assert data["checkout"]["prefill"]["email"] == applicant["email"]

        response = await client.post(f"{PREFIX}/sessions/{session_id}/submit")
        assert response.status_code == 409

        response = await client.post(
            f"{PREFIX}/sessions/{session_id}/checkout/complete",
            json={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "sig_1"},
        )
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] == "succeeded"
        assert state["show_success"] is True
        assert len(state["generated_password"]) == 12
        assert response.json()["checkout"] is None
        assert gateway.calls["create_order"] == 1

        response = await client.post(f"{PREFIX}/sessions/{session_id}/success/dismiss")
        state = response.json()["state"]
        assert state["show_success"] is False
        assert state["generated_password"] is None


@pytest.mark.asyncio
async def test_dismissed_checkout_returns_to_editing(manager, applicant):
    async with api_client() as client:
        session_id = await start_session(client)
        await fill_to_payment_step(client, session_id, applicant)
        await client.post(f"{PREFIX}/sessions/{session_id}/submit")

        response = await client.post(f"{PREFIX}/sessions/{session_id}/checkout/dismiss")

        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] == "editing"
        assert state["message"] == "Payment cancelled by user"
        assert state["busy"] is False

        response = await client.post(f"{PREFIX}/sessions/{session_id}/checkout/dismiss")
        assert response.status_code == 409


@pytest.mark.asyncio
async def test_receipt_for_another_order_is_rejected(manager, applicant):
    async with api_client() as client:
        session_id = await start_session(client)
        await fill_to_payment_step(client, session_id, applicant)
        await client.post(f"{PREFIX}/sessions/{session_id}/submit")

        response = await client.post(
            f"{PREFIX}/sessions/{session_id}/checkout/complete",
            json={"razorpay_order_id": "order_99", "razorpay_payment_id": "pay_1", "razorpay_signature": "sig_1"},
        )
        assert response.status_code == 422

        response = await client.get(f"{PREFIX}/sessions/{session_id}")
        assert response.json()["state"]["phase"] == "awaiting_user_payment"

        await client.post(f"{PREFIX}/sessions/{session_id}/checkout/dismiss")


@pytest.mark.asyncio
async def test_next_with_errors_returns_field_errors(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.post(f"{PREFIX}/sessions/{session_id}/next")

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["field_errors"]["first_name"] == "First name is required"


@pytest.mark.asyncio
async def test_blur_exposes_visible_errors(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.post(f"{PREFIX}/sessions/{session_id}/blur", json={"field": "last_name"})

    state = response.json()["state"]
    assert state["visible_errors"] == {"last_name": "Last name is required"}
    assert state["touched"] == ["last_name"]


@pytest.mark.asyncio
async def test_submit_before_last_step_conflicts(manager, gateway):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.post(f"{PREFIX}/sessions/{session_id}/submit")

    assert response.status_code == 409
    assert gateway.total_calls == 0


@pytest.mark.asyncio
async def test_checkout_completion_without_open_checkout_conflicts(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.post(
            f"{PREFIX}/sessions/{session_id}/checkout/complete",
            json={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "sig_1"},
        )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_field_is_unprocessable(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.patch(f"{PREFIX}/sessions/{session_id}/fields", json={"field": "nickname", "value": "A"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_string_subjects_value_is_one_subject(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.patch(
            f"{PREFIX}/sessions/{session_id}/fields", json={"field": "subjects", "value": "Physics"}
        )

    assert response.status_code == 200
    assert response.json()["state"]["record"]["subjects"] == ["Physics"]


@pytest.mark.asyncio
async def test_subject_toggle_and_previous(manager):
    async with api_client() as client:
        session_id = await start_session(client)
        response = await client.post(f"{PREFIX}/sessions/{session_id}/subjects/toggle", json={"subject": "Physics"})
        assert response.json()["state"]["record"]["subjects"] == ["Physics"]

        response = await client.post(f"{PREFIX}/sessions/{session_id}/previous")
        assert response.json()["state"]["step"] == 0


@pytest.mark.asyncio
async def test_unknown_and_ended_sessions_are_not_found(manager):
    async with api_client() as client:
        response = await client.get(f"{PREFIX}/sessions/does-not-exist")
        assert response.status_code == 404

        session_id = await start_session(client)
        response = await client.delete(f"{PREFIX}/sessions/{session_id}")
        assert response.status_code == 204
        assert len(manager) == 0

        response = await client.get(f"{PREFIX}/sessions/{session_id}")
        assert response.status_code == 404


@pytest.mark.asyncio
async def test_requests_without_api_key_are_rejected(manager):
    async with api_client(api_key=None) as client:
        response = await client.post(f"{PREFIX}/sessions")
        assert response.status_code == 401

        response = await client.get("/health")
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_plans_listing(manager):
    async with api_client() as client:
        response = await client.get(f"{PREFIX}/plans")

    body = response.json()
    assert body["default_plan"] == "moral-ethics"
    assert body["plans"][2]["id"] == "neet-jee"
    assert body["plans"][2]["amount"] == 1999
    assert body["plans"][2]["currency"] == "INR"
