"""Tests for /auth routes."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from helpers import bearer
from reconstruct.core.errors import NotificationFailure
from reconstruct.core.security import create_access_token, user_id_from_token
from reconstruct.models import User


def test_register_creates_user_and_token(client, welcome_mail, fetch_rows):
    response = client.post(
        "/auth/register",
        json={"username": "Ann", "email": " Ann@Example.com ", "password": "correct-horse"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "ann@example.com"
    assert user_id_from_token(body["token"]) == body["user"]["id"]
    assert "password_hash" not in body["user"]

    welcome_mail.assert_awaited_once_with("ann@example.com", "Ann")
    user, = fetch_rows(User)
    assert user.welcome_email_sent is True
    assert user.password_hash != "correct-horse"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ann@example.com", "password": "correct-horse"},
        {"username": "Ann", "password": "correct-horse"},
        {"username": "Ann", "email": "ann@example.com", "password": ""},
    ],
)
def test_register_missing_fields(client, payload):
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["message"] == "Missing required fields"
    assert response.json()["required"] == ["username", "email", "password"]


def test_register_duplicate_email(client, register):
    register()
    response = client.post(
        "/auth/register",
        json={"username": "Other Ann", "email": "ANN@example.com", "password": "another-horse"},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Email already in use"}


@pytest.mark.parametrize("password", ["short", "x" * 73])
def test_register_rejects_bad_password_length(client, password):
    response = client.post(
        "/auth/register", json={"username": "Ann", "email": "ann@example.com", "password": password}
    )
    assert response.status_code == 400
    assert response.json()["message"].startswith("Password must be")


def test_register_rejects_bad_email(client):
    response = client.post(
        "/auth/register", json={"username": "Ann", "email": "not-an-email", "password": "correct-horse"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid email address"


def test_welcome_email_failure_does_not_fail_registration(client, welcome_mail, fetch_rows):
    welcome_mail.side_effect = NotificationFailure("Failed to send welcome email", "connection refused")

    response = client.post(
        "/auth/register", json={"username": "Ann", "email": "ann@example.com", "password": "correct-horse"}
    )

    assert response.status_code == 201
    user, = fetch_rows(User)
    assert user.welcome_email_sent is False


def test_login_retries_unsent_welcome_email(client, welcome_mail, fetch_rows):
    welcome_mail.side_effect = NotificationFailure("Failed to send welcome email")
    client.post(
        "/auth/register", json={"username": "Ann", "email": "ann@example.com", "password": "correct-horse"}
    )
    welcome_mail.side_effect = None

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "correct-horse"})
    assert response.status_code == 200
    assert fetch_rows(User)[0].welcome_email_sent is True

    client.post("/auth/login", json={"email": "ann@example.com", "password": "correct-horse"})
    assert welcome_mail.await_count == 2


def test_login_returns_token(client, register):
    _, user = register()
    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "correct-horse"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user["id"]
    assert user_id_from_token(body["token"]) == user["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "ann@example.com", "password": "wrong-horse"},
        {"email": "nobody@example.com", "password": "correct-horse"},
        {"email": "ann@example.com"},
    ],
)
def test_login_rejects_bad_credentials(client, register, payload):
    register()
    response = client.post("/auth/login", json=payload)
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid email or password"}


def test_profile(client, register):
    token, user = register()
    response = client.get("/auth/profile", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["user"]["id"] == user["id"]
    assert response.json()["user"]["email"] == "ann@example.com"


def test_profile_requires_valid_token(client):
    assert client.get("/auth/profile").status_code == 401
    response = client.get("/auth/profile", headers=bearer("garbage"))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_profile_unknown_user(client):
    response = client.get("/auth/profile", headers=bearer(create_access_token(999)))
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_google_sign_in_creates_user_without_password(client, fetch_rows):
    response = client.post(
        "/auth/google",
        json={"email": "ann@example.com", "displayName": "Ann G", "firebaseUid": "fb-1", "isGoogleSignIn": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["passwordStored"] is False
    assert body["user"]["name"] == "Ann G"
    user, = fetch_rows(User)
    assert user.firebase_uid == "fb-1"
    assert user.password_hash is None

    login = client.post("/auth/login", json={"email": "ann@example.com", "password": "anything-at-all"})
    assert login.status_code == 401


def test_google_sign_in_stores_password_on_request(client):
    response = client.post(
        "/auth/google",
        json={"email": "ann@example.com", "password": "correct-horse", "storePassword": "true"},
    )
    assert response.json()["passwordStored"] is True
    assert response.json()["user"]["name"] == "ann"

    login = client.post("/auth/login", json={"email": "ann@example.com", "password": "correct-horse"})
    assert login.status_code == 200


def test_google_sign_in_updates_existing_user(client, register, fetch_rows, welcome_mail):
    _, user = register()
    response = client.post(
        "/auth/google", json={"email": "ann@example.com", "displayName": "Ann New", "firebaseUid": "fb-2"}
    )

    assert response.json()["user"]["id"] == user["id"]
    row, = fetch_rows(User)
    assert row.name == "Ann New"
    assert row.password_hash is not None
    welcome_mail.assert_awaited_once()


@pytest.fixture
def failing_flag_commit(monkeypatch):
    """Make every AsyncSession.commit after the first n raise, as a locked or lost database would."""
    real_commit = AsyncSession.commit
    calls = []

    def install(succeed=1):
        async def commit(self):
            calls.append(self)
            if len(calls) > succeed:
                raise OperationalError("UPDATE users", {}, Exception("database is locked"))
            return await real_commit(self)

        monkeypatch.setattr(AsyncSession, "commit", commit)
        return calls

    return install


def test_welcome_flag_write_failure_does_not_fail_registration(client, welcome_mail, failing_flag_commit, fetch_rows):
    failing_flag_commit(succeed=1)

    response = client.post(
        "/auth/register", json={"username": "Ann", "email": "ann@example.com", "password": "correct-horse"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "ann@example.com"
    assert user_id_from_token(body["token"]) == body["user"]["id"]
    welcome_mail.assert_awaited_once()
    user, = fetch_rows(User)
    assert user.welcome_email_sent is False


def test_welcome_flag_write_failure_does_not_fail_google_sign_in(client, failing_flag_commit):
    failing_flag_commit(succeed=1)
    response = client.post("/auth/google", json={"email": "ann@example.com", "displayName": "Ann"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Ann"


def test_welcome_flag_write_failure_does_not_fail_login(client, register, welcome_mail, failing_flag_commit):
    welcome_mail.side_effect = NotificationFailure("Failed to send welcome email")
    register()
    welcome_mail.side_effect = None
    failing_flag_commit(succeed=0)

    response = client.post("/auth/login", json={"email": "ann@example.com", "password": "correct-horse"})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "ann@example.com"
