import json

import httpx
import pytest

from src.integrations.clients.mocks.accounts import MockAccountsClient
from src.integrations.clients.real_http.accounts import RealAccountsClient
from src.integrations.contracts.accounts import SubmissionStatus, classify_status_code

BASE_URL = "http://auth.test/auth"


def client_returning(response, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if isinstance(response, Exception):
            raise response
        return response

    return RealAccountsClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "code,expected",
    [
        (200, SubmissionStatus.ACCEPTED),
        (201, SubmissionStatus.ACCEPTED),
        (204, SubmissionStatus.ACCEPTED),
        (409, SubmissionStatus.DUPLICATE_EMAIL),
        (400, SubmissionStatus.TRANSPORT_FAILURE),
        (500, SubmissionStatus.TRANSPORT_FAILURE),
    ],
)
def test_classify_status_code(code, expected):
    assert classify_status_code(code) is expected


@pytest.mark.asyncio
async def test_commit_wraps_payload_in_datas():
    seen = []
    client = client_returning(httpx.Response(201, json={"id": "stu_1"}), seen)

    outcome = await client.commit({"firstName": "Asha", "password": "x"})

    assert outcome.accepted
    assert outcome.status_code == 201
    assert seen[0].url.path == "/auth/create-student-user"
    assert json.loads(seen[0].content) == {"datas": {"firstName": "Asha", "password": "x"}}


@pytest.mark.asyncio
async def test_conflict_is_duplicate_email():
    client = client_returning(httpx.Response(409, json={"message": "User already exists"}))
    outcome = await client.commit({})
    assert outcome.status is SubmissionStatus.DUPLICATE_EMAIL
    assert outcome.message == "User already exists"


@pytest.mark.asyncio
async def test_server_error_is_transport_failure():
    client = client_returning(httpx.Response(500, text="boom"))
    outcome = await client.commit({})
    assert outcome.status is SubmissionStatus.TRANSPORT_FAILURE
    assert outcome.status_code == 500
    assert outcome.message == "boom"


@pytest.mark.asyncio
async def test_network_error_is_transport_failure():
    client = client_returning(httpx.ConnectError("connection refused"))
    outcome = await client.commit({})
    assert outcome.status is SubmissionStatus.TRANSPORT_FAILURE
    assert outcome.status_code is None


@pytest.mark.asyncio
async def test_missing_base_url_is_transport_failure(monkeypatch):
    monkeypatch.delenv("AUTH_API_URL", raising=False)
    outcome = await RealAccountsClient().commit({})
    assert outcome.status is SubmissionStatus.TRANSPORT_FAILURE


@pytest.mark.asyncio
async def test_mock_registry_detects_duplicate_emails():
    registry = MockAccountsClient()
    first = await registry.commit({"email": "Asha@Example.com"})
    second = await registry.commit({"email": "asha@example.com"})
    assert first.status is SubmissionStatus.ACCEPTED
    assert second.status is SubmissionStatus.DUPLICATE_EMAIL
    assert len(registry.payloads) == 2


@pytest.mark.asyncio
async def test_mock_registry_plays_scripted_outcomes_first():
    registry = MockAccountsClient(outcomes=[SubmissionStatus.TRANSPORT_FAILURE])
    failed = await registry.commit({"email": "a@b.co"})
    accepted = await registry.commit({"email": "a@b.co"})
    assert failed.status is SubmissionStatus.TRANSPORT_FAILURE
    assert accepted.status is SubmissionStatus.ACCEPTED
