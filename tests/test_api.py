from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from user_api.app.api.deps import get_user_service
from user_api.app.api.endpoints.users import MAX_PAGE, resolve_pagination
from user_api.app.core.config import Settings
from user_api.app.core.errors import StorageError
from user_api.app.main import create_app

ADA = {"name": "Ada", "email": "ada@example.com", "age": 30}


def _create(client: TestClient, **overrides) -> dict:
    payload = {**ADA, **overrides}
    response = client.post("/api/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_get_delete_roundtrip(client: TestClient) -> None:
    created = _create(client)
    assert isinstance(created["id"], int) and created["id"] > 0
    assert created["name"] == "Ada"

    fetched = client.get(f"/api/users/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created

    deleted = client.delete(f"/api/users/{created['id']}")
    assert deleted.status_code == 204
    assert deleted.content == b""

    missing = client.get(f"/api/users/{created['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "user not found"}


def test_create_rejects_minor(client: TestClient) -> None:
    response = client.post("/api/users", json={**ADA, "age": 17})

    assert response.status_code == 400
    assert response.json() == {"error": "age must be at least 18"}


def test_create_rejects_duplicate_email(client: TestClient) -> None:
    _create(client)

    response = client.post("/api/users", json={**ADA, "name": "Other"})

    assert response.status_code == 400
    assert response.json() == {"error": "email already exists"}


def test_create_rejects_invalid_json(client: TestClient) -> None:
    response = client.post(
        "/api/users",
        content=b'{"name": "Ada", ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "invalid JSON"}


def test_create_rejects_missing_body(client: TestClient) -> None:
    response = client.post("/api/users")

    assert response.status_code == 400
    assert response.json() == {"error": "invalid JSON"}


def test_create_reports_field_errors_as_bad_request(client: TestClient) -> None:
    response = client.post("/api/users", json={**ADA, "email": "not-an-email"})

    assert response.status_code == 400
    assert response.json()["error"].startswith("email: ")


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_non_numeric_id_is_bad_request(client: TestClient, method: str) -> None:
    kwargs = {"json": {"age": 40}} if method == "put" else {}

    response = getattr(client, method)("/api/users/abc", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "invalid user id"}


@pytest.mark.parametrize("method", ["get", "put", "delete"])
@pytest.mark.parametrize("user_id", ["0", "-1", "2147483648", "99999999999999999999"])
def test_out_of_range_id_is_bad_request(client: TestClient, method: str, user_id: str) -> None:
    kwargs = {"json": {"age": 40}} if method == "put" else {}

    response = getattr(client, method)(f"/api/users/{user_id}", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "invalid user id"}


def test_largest_id_is_looked_up(client: TestClient) -> None:
    response = client.get("/api/users/2147483647")

    assert response.status_code == 404
    assert response.json() == {"error": "user not found"}


def test_update_merges_supplied_fields(client: TestClient) -> None:
    created = _create(client)

    response = client.put(f"/api/users/{created['id']}", json={"age": 40})

    assert response.status_code == 200
    body = response.json()
    assert body["age"] == 40
    assert body["name"] == created["name"]
    assert body["email"] == created["email"]
    assert body["updated_at"] >= created["updated_at"]


def test_update_rejects_null_field(client: TestClient) -> None:
    created = _create(client)

    response = client.put(f"/api/users/{created['id']}", json={"name": None})

    assert response.status_code == 400
    assert response.json() == {"error": "name: must not be null"}


def test_update_rejects_email_of_another_user(client: TestClient) -> None:
    _create(client)
    grace = _create(client, name="Grace", email="grace@example.com")

    response = client.put(f"/api/users/{grace['id']}", json={"email": "ada@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "email already exists"}


def test_update_and_delete_missing_user(client: TestClient) -> None:
    assert client.put("/api/users/999", json={"age": 40}).status_code == 404
    response = client.delete("/api/users/999")
    assert response.status_code == 404
    assert response.json() == {"error": "user not found"}


def test_list_users_paginates(client: TestClient) -> None:
    for i in range(25):
        _create(client, name=f"User {i}", email=f"user{i}@example.com")

    first = client.get("/api/users", params={"page": 1, "page_size": 10}).json()
    last = client.get("/api/users", params={"page": 3, "page_size": 10}).json()

    assert len(first["data"]) == 10
    assert first["total"] == 25
    assert first["total_pages"] == 3
    assert (first["page"], first["page_size"]) == (1, 10)
    assert len(last["data"]) == 5
    assert [user["id"] for user in first["data"]] == sorted(user["id"] for user in first["data"])


def test_list_users_on_empty_table(client: TestClient) -> None:
    body = client.get("/api/users").json()

    assert body == {"data": [], "total": 0, "page": 1, "page_size": 10, "total_pages": 0}


def test_list_users_clamps_page_size(client: TestClient) -> None:
    body = client.get("/api/users", params={"page_size": 9999}).json()

    assert body["page_size"] == 100


def test_list_users_far_past_the_end_is_empty(client: TestClient) -> None:
    _create(client)

    response = client.get("/api/users", params={"page": "99999999999999999999"})

    assert response.status_code == 200
    body = response.json()
    assert body["data"] == []
    assert body["total"] == 1
    assert body["page"] == MAX_PAGE


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (None, None, (1, 10)),
        ("2", "25", (2, 25)),
        ("0", "0", (1, 1)),
        ("-3", "500", (1, 100)),
        ("abc", "xyz", (1, 10)),
        ("99999999999999999999", None, (MAX_PAGE, 10)),
    ],
)
def test_resolve_pagination(page, page_size, expected) -> None:
    assert resolve_pagination(page, page_size) == expected


def test_storage_errors_become_internal_server_error(client: TestClient) -> None:
    failing = MagicMock()
    failing.list_users.side_effect = StorageError("failed to list users")
    client.app.dependency_overrides[get_user_service] = lambda: failing
    try:
        response = client.get("/api/users")
    finally:
        client.app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "failed to list users"}


def test_cors_headers_on_every_response(client: TestClient) -> None:
    for response in (client.get("/health"), client.get("/api/users/999")):
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"


def test_options_short_circuits(client: TestClient) -> None:
    response = client.options("/api/users/1")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"


def test_unsupported_method(client: TestClient) -> None:
    response = client.patch("/api/users/1", json={"age": 40})

    assert response.status_code == 405
    assert "error" in response.json()


def test_requests_are_logged_with_duration(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="user_api.app.core.middleware")

    client.get("/health")

    messages = [record.getMessage() for record in caplog.records]
    assert "-> GET /health" in messages
    assert any(message.startswith("<- GET /health 200 completed in ") for message in messages)


def test_failed_requests_are_still_logged(settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="user_api.app.core.middleware")
    app = create_app(settings)

    @app.get("/boom")
    def boom() -> None:
        raise RuntimeError("boom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    messages = [record.getMessage() for record in caplog.records]
    assert "-> GET /boom" in messages
    assert any(message.startswith("<- GET /boom 500 completed in ") for message in messages)
