from __future__ import annotations

from typing import Callable

from fastapi.testclient import TestClient

from esstforms.proxy.config import ProxyConfig
from esstforms.schemas import ListType

from .fakes import URLS, FakeSession, echo_json


def test_health(api: TestClient) -> None:
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "service": "esstforms proxy"}


def test_post_damaged_alias_end_to_end(api: TestClient, upstream: FakeSession) -> None:
    response = api.post("/forms?type=damaged", json={"damagedReason": "drop"})

    assert response.status_code == 200
    assert response.json() == {"status": "success"}
    assert upstream.calls[0]["json"]["reason"] == "drop"


def test_get_control_non_json_end_to_end(make_client: Callable[..., TestClient]) -> None:
    session = FakeSession(("NOT JSON AT ALL", 200))
    api = make_client(session)

    response = api.get("/forms?type=control")

    assert response.status_code == 500
    assert response.json() == {
        "status": "error",
        "message": "Apps Script GET 응답이 JSON 형식이 아닙니다. (Apps Script GET response is not in JSON format.)",
        "raw": "NOT JSON AT ALL",
    }


def test_get_unknown_type_is_400_without_network(api: TestClient, upstream: FakeSession) -> None:
    response = api.get("/forms?type=unknown")

    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": 'Unknown or unset sheet type: "unknown"'}
    assert upstream.calls == []


def test_post_unknown_type_is_400_without_network(api: TestClient, upstream: FakeSession) -> None:
    response = api.post("/forms?type=inventory", json={"a": 1})

    assert response.status_code == 400
    assert upstream.calls == []


def test_missing_type_defaults_to_control(make_client: Callable[..., TestClient]) -> None:
    session = FakeSession(echo_json({"status": "success", "rows": []}))
    api = make_client(session)

    response = api.get("/forms")

    assert response.status_code == 200
    assert response.json() == {"status": "success", "rows": []}
    assert session.calls[0]["url"] == URLS[ListType.CONTROL]


def test_unset_url_for_known_type_is_400(make_client: Callable[..., TestClient]) -> None:
    session = FakeSession()
    config = ProxyConfig(urls={ListType.CONTROL: URLS[ListType.CONTROL]})
    api = make_client(session, config)

    response = api.get("/forms?type=alarm")

    assert response.status_code == 400
    assert response.json()["message"] == 'Unknown or unset sheet type: "alarm"'
    assert session.calls == []


def test_get_rows_are_returned_verbatim(make_client: Callable[..., TestClient]) -> None:
    rows = [
        {"no": 1, "timestamp": "2025-01-05T14:03:00.000Z", "symptom": "Gripper 알람"},
        {"no": 2, "timestamp": "2025-01-06T09:10:00.000Z", "symptom": "Vacuum"},
    ]
    session = FakeSession(echo_json({"status": "success", "rows": rows}))
    api = make_client(session)

    response = api.get("/forms?type=alarm")

    assert response.status_code == 200
    assert response.json()["rows"] == rows


def test_post_other_types_forward_unchanged(api: TestClient, upstream: FakeSession) -> None:
    body = {"targetLine": "1-1호기", "machine": "TW", "alarmCode": "A-301", "damagedReason": "n/a"}

    response = api.post("/forms?type=alarm", json=body)

    assert response.status_code == 200
    assert upstream.calls[0]["json"] == body


def test_post_upstream_application_error_passes_through(make_client: Callable[..., TestClient]) -> None:
    session = FakeSession(echo_json({"status": "error", "message": "Sheet is protected"}))
    api = make_client(session)

    response = api.post("/forms?type=param", json={"machine": "TW"})

    assert response.status_code == 200
    assert response.json() == {"status": "error", "message": "Sheet is protected"}


def test_post_invalid_json_body_is_400(api: TestClient, upstream: FakeSession) -> None:
    response = api.post(
        "/forms?type=control",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert upstream.calls == []


def test_post_non_object_body_is_400(api: TestClient, upstream: FakeSession) -> None:
    response = api.post("/forms?type=control", json=["a", "b"])

    assert response.status_code == 400
    assert "JSON object" in response.json()["message"]
    assert upstream.calls == []
