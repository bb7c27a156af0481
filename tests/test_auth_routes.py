from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from lumina.core.config import settings
from lumina.main import app
from lumina.services.verification_codes import get_code_service

client = TestClient(app)

AUTH = "lumina.services.auth_services.auth"


def make_user(**overrides):
    fields = {
        "id": "665f1c2e8a1b2c3d4e5f6a7b",
        "name": "Test User",
        "email": "user@example.com",
        "phone": None,
        "password": None,
        "avatar": "https://api.dicebear.com/7.x/avataaars/svg?seed=Test%20User",
        "bio": "New visual creator.",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture(autouse=True)
def override_code_service(service):
    app.dependency_overrides[get_code_service] = lambda: service
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def expose_codes(monkeypatch):
    monkeypatch.setattr(settings, "EXPOSE_VERIFICATION_CODE", True)


def send_code(identifier, purpose):
    return client.post("/api/auth/code/send", json={"identifier": identifier, "purpose": purpose})


def test_send_code_for_registration(expose_codes, email_sender):
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None):
        response = send_code("user@example.com", "register")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["cooldown_seconds"] == 60
    # Delivery ran as a background task after the response
    assert email_sender.sent == [("user@example.com", body["data"]["code"], "register")]


def test_send_code_hides_code_by_default():
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None):
        response = send_code("user@example.com", "register")

    assert response.status_code == 200
    assert "code" not in response.json()["data"]


def test_send_login_code_for_unknown_user_is_404():
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None):
        response = send_code("nobody@example.com", "login")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_send_register_code_for_existing_user_is_409():
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=make_user()):
        response = send_code("user@example.com", "register")

    assert response.status_code == 409


def test_send_code_rejects_malformed_identifier(store):
    response = send_code("not-a-phone", "login")

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert len(store) == 0


def test_send_code_rejects_unknown_purpose():
    response = send_code("user@example.com", "delete-account")

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid purpose")


def test_register_then_replay_fails(expose_codes):
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None):
        code = send_code("user@example.com", "register").json()["data"]["code"]

    created = make_user()
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None), \
         patch(f"{AUTH}.create_user", new_callable=AsyncMock, return_value=created) as create_user:
        payload = {"name": "Test User", "identifier": "user@example.com", "code": code}
        first = client.post("/api/auth/register", json=payload)
        second = client.post("/api/auth/register", json=payload)

    assert first.status_code == 200
    data = first.json()["data"]
    assert data["user"]["email"] == "user@example.com"
    assert "password" not in data["user"]
    assert data["access_token"]
    create_user.assert_awaited_once()

    assert second.status_code == 401
    assert second.json()["message"] == "Invalid or expired verification code"


def test_register_existing_user_keeps_code(expose_codes, store):
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=None):
        code = send_code("user@example.com", "register").json()["data"]["code"]

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=make_user()):
        response = client.post("/api/auth/register", json={
            "name": "Test User", "identifier": "user@example.com", "code": code,
        })

    assert response.status_code == 409
    assert len(store) == 1


def test_register_rejects_short_code():
    response = client.post("/api/auth/register", json={
        "name": "Test User", "identifier": "user@example.com", "code": "123",
    })

    assert response.status_code == 400


def test_login_with_code(expose_codes):
    user = make_user(phone="13800138000", email=None)

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=user):
        code = send_code("13800138000", "login").json()["data"]["code"]
        response = client.post("/api/auth/login", json={"identifier": "138 0013 8000", "code": code})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["phone"] == "13800138000"


def test_login_code_for_other_purpose_is_rejected(expose_codes):
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=make_user()):
        code = send_code("user@example.com", "reset").json()["data"]["code"]
        response = client.post("/api/auth/login", json={"identifier": "user@example.com", "code": code})

    assert response.status_code == 401


def test_login_with_wrong_code_is_401():
    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=make_user()):
        response = client.post("/api/auth/login", json={"identifier": "user@example.com", "code": "000000"})

    assert response.status_code == 401


def test_login_with_password():
    user = make_user(password="hashed")

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=user), \
         patch(f"{AUTH}.verify_password", return_value=True):
        response = client.post("/api/auth/login", json={
            "method": "password", "identifier": "user@example.com", "password": "secret123",
        })

    assert response.status_code == 200
    assert response.json()["data"]["token_type"] == "bearer"


def test_login_with_bad_password_is_401():
    user = make_user(password="hashed")

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=user), \
         patch(f"{AUTH}.verify_password", return_value=False):
        response = client.post("/api/auth/login", json={
            "method": "password", "identifier": "user@example.com", "password": "secret123",
        })

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_reset_password(expose_codes):
    user = make_user(password="old-hash")

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, return_value=user), \
         patch(f"{AUTH}.get_password_hash", return_value="new-hash"), \
         patch(f"{AUTH}.set_password", new_callable=AsyncMock) as set_password:
        code = send_code("user@example.com", "reset").json()["data"]["code"]
        response = client.post("/api/auth/reset-password", json={
            "identifier": "user@example.com", "code": code, "new_password": "newpass1",
        })

    assert response.status_code == 200
    set_password.assert_awaited_once_with(user, "new-hash")


def test_logout():
    response = client.post("/api/auth/logout")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_database_outage_is_503_without_details(store):
    outage = ServerSelectionTimeoutError("localhost:27017: connection refused")

    with patch(f"{AUTH}.get_user_by_identifier", new_callable=AsyncMock, side_effect=outage):
        response = send_code("user@example.com", "login")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Service temporarily unavailable"
    assert "connection refused" not in body["message"]
    assert len(store) == 0
