"""
Integration tests for the registration and authentication flow.

Runs the full application against in-memory storage; verification
codes are read back from the console email log.
"""

import logging
import re

import pytest
from fastapi.testclient import TestClient

from storefront.adapters.repository.memory import InMemoryStorage

from tests.helpers import ADMIN_EMAIL

CODE_PATTERN = re.compile(r"\[VERIFICATION\] Email: (\S+) Code: ([0-9A-F]{6})")


def last_code(caplog: pytest.LogCaptureFixture, email: str) -> str:
    codes = [m.group(2) for m in CODE_PATTERN.finditer(caplog.text) if m.group(1) == email]
    assert codes, f"No verification code logged for {email}"
    return codes[-1]


def register(client: TestClient, caplog: pytest.LogCaptureFixture, email: str) -> None:
    with caplog.at_level(logging.INFO):
        assert client.post("/api/auth/register/init", json={"email": email}).status_code == 200
    code = last_code(caplog, email)
    assert (
        client.post("/api/auth/register/verify", json={"email": email, "token": code}).status_code
        == 200
    )
    response = client.post(
        "/api/auth/register/complete",
        json={"email": email, "password": "secret123", "confirmPassword": "secret123"},
    )
    assert response.status_code == 200


class TestRegisterFlow:
    def test_full_registration_flow(
        self, client: TestClient, app_storage: InMemoryStorage, caplog: pytest.LogCaptureFixture
    ) -> None:
        """init, verify and complete create a verified, logged-in user."""
        with caplog.at_level(logging.INFO):
            response = client.post(
                "/api/auth/register/init", json={"email": "New.User@Example.com"}
            )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Verification code sent to your email",
            "email": "new.user@example.com",
        }
        code = last_code(caplog, "new.user@example.com")
        assert app_storage.get_pending_registration("new.user@example.com").code == code

        response = client.post(
            "/api/auth/register/verify",
            json={"email": "new.user@example.com", "token": code},
        )
        assert response.status_code == 200

        response = client.post(
            "/api/auth/register/complete",
            json={
                "email": "new.user@example.com",
                "password": "secret123",
                "confirmPassword": "secret123",
            },
        )
        assert response.status_code == 200
        assert response.json() == {"user": {"email": "new.user@example.com", "isAdmin": False}}

        user = app_storage.get_user_by_email("new.user@example.com")
        assert user.is_verified
        assert app_storage.get_pending_registration("new.user@example.com") is None

        check = client.get("/api/auth/check").json()
        assert check["user"]["email"] == "new.user@example.com"
        assert check["user"]["id"] == user.id

    def test_wrong_code_rejected(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO):
            client.post("/api/auth/register/init", json={"email": "user@example.com"})
        code = last_code(caplog, "user@example.com")
        wrong = "000000" if code != "000000" else "111111"

        response = client.post(
            "/api/auth/register/verify", json={"email": "user@example.com", "token": wrong}
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid or expired verification code"}

    def test_registered_email_cannot_init_again(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        register(client, caplog, "user@example.com")

        response = client.post("/api/auth/register/init", json={"email": "user@example.com"})

        assert response.status_code == 400
        assert response.json() == {"message": "Email already registered"}

    def test_admin_email_is_taken(self, client: TestClient) -> None:
        response = client.post("/api/auth/register/init", json={"email": ADMIN_EMAIL})
        assert response.status_code == 400

    def test_complete_without_init(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/register/complete",
            json={
                "email": "ghost@example.com",
                "password": "secret123",
                "confirmPassword": "secret123",
            },
        )

        assert response.status_code == 400
        assert response.json() == {"message": "No pending registration found for this email"}

    def test_invalid_form_data(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/register/complete",
            json={"email": "user@example.com", "password": "123", "confirmPassword": "123"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Invalid form data"
        assert any(error["path"] == "password" for error in body["errors"])


class TestSession:
    def test_check_without_session(self, client: TestClient) -> None:
        assert client.get("/api/auth/check").json() == {"user": None}

    def test_login_and_logout(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        register(client, caplog, "user@example.com")
        client.post("/api/auth/logout")
        assert client.get("/api/auth/check").json() == {"user": None}

        response = client.post(
            "/api/auth/login", json={"email": "user@example.com", "password": "secret123"}
        )
        assert response.status_code == 200
        assert client.get("/api/users/profile").json()["email"] == "user@example.com"

        assert client.post("/api/auth/logout").json() == {"message": "Logged out successfully"}
        assert client.get("/api/users/profile").status_code == 401

    def test_wrong_password(self, client: TestClient) -> None:
        response = client.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid email or password"}


class TestPasswordReset:
    def test_forgot_and_reset(
        self, client: TestClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        register(client, caplog, "user@example.com")
        caplog.clear()

        with caplog.at_level(logging.INFO):
            response = client.post(
                "/api/auth/forgot-password", json={"email": "user@example.com"}
            )
        assert response.status_code == 200
        assert "Purpose: password-reset" in caplog.text
        code = last_code(caplog, "user@example.com")

        response = client.post(
            "/api/auth/reset-password",
            json={
                "email": "user@example.com",
                "token": code,
                "newPassword": "newpass1",
                "confirmPassword": "newpass1",
            },
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Password reset successful"}

        login = client.post(
            "/api/auth/login", json={"email": "user@example.com", "password": "newpass1"}
        )
        assert login.status_code == 200

    def test_forgot_for_unknown_user(self, client: TestClient) -> None:
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}
