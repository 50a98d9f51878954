# ussdkit/projects/demo_bank/tests/test_api.py
"""POST /v1/ussd 요청·응답 스키마 검증."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ussdkit.core.api.schemas import UssdResponse
from ussdkit.main import app, engine


@pytest.fixture
def client():
    return TestClient(app)


def _post(client, session_id, raw_input="", new=False):
    return client.post(
        "/v1/ussd",
        json={
            "session_id": session_id,
            "caller_id": "233200000042",
            "raw_input": raw_input,
            "is_new_session": new,
        },
    )


def test_ussd_accepts_request_schema(client: TestClient):
    with patch.object(engine, "handle", return_value=UssdResponse(message="ok", continue_session=True)):
        resp = _post(client, "api-schema", "*713#", new=True)
    assert resp.status_code == 200
    assert resp.json() == {"message": "ok", "continue_session": True}


def test_ussd_session_over_http(client: TestClient):
    first = _post(client, "api-flow", "*713#", new=True).json()
    assert first["continue_session"] is True
    assert first["message"].startswith("Welcome to Demo Bank")

    second = _post(client, "api-flow", "2").json()
    assert second == {"message": "Enter recipient phone number:", "continue_session": True}


def test_missing_session_id_is_rejected(client: TestClient):
    resp = client.post("/v1/ussd", json={"raw_input": "1"})
    assert resp.status_code == 422


def test_debug_endpoint_returns_state(client: TestClient):
    _post(client, "api-debug", "*713#", new=True)
    _post(client, "api-debug", "4")

    resp = client.get("/v1/ussd/debug/api-debug")
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"]["current_node_id"] == "Products"
    assert data["state"]["nav_stack"] == ["Main"]
    assert data["menu"] == {"id": "demo_bank_menu", "root": "Main"}


def test_debug_endpoint_unknown_session(client: TestClient):
    assert client.get("/v1/ussd/debug/nope").status_code == 404
