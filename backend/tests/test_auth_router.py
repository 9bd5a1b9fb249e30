"""Integration tests for authentication endpoints."""

import pytest
from fastapi.testclient import TestClient

from models.user import User
from tests.conftest import assert_error_response, create_jwt_token


@pytest.mark.integration
class TestRegister:
    def test_register_returns_tokens(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "username": "new_user", "password": "NewPass123"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["username"] == "new_user"

    def test_duplicate_email(self, client: TestClient, test_user: User):
        response = client.post(
            "/api/auth/register",
            json={"email": test_user.email, "username": "someone_else", "password": "NewPass123"},
        )

        assert_error_response(response, 409, "EMAIL_EXISTS")

    def test_duplicate_username(self, client: TestClient, test_user: User):
        response = client.post(
            "/api/auth/register",
            json={"email": "fresh@example.com", "username": test_user.username, "password": "NewPass123"},
        )

        assert_error_response(response, 409, "USERNAME_EXISTS")

    def test_weak_password(self, client: TestClient):
        response = client.post(
            "/api/auth/register",
            json={"email": "weak@example.com", "username": "weak_user", "password": "short"},
        )

        assert response.status_code == 422


@pytest.mark.integration
class TestLogin:
    @pytest.mark.parametrize("login", ["test_user", "test@example.com"])
    def test_login_with_username_or_email(self, client: TestClient, test_user: User, login: str):
        response = client.post("/api/auth/login", data={"username": login, "password": "TestPass123"})

        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_wrong_password(self, client: TestClient, test_user: User):
        response = client.post(
            "/api/auth/login", data={"username": "test_user", "password": "WrongPass123"}
        )

        assert response.status_code == 401

    def test_unknown_user(self, client: TestClient):
        response = client.post("/api/auth/login", data={"username": "ghost", "password": "TestPass123"})

        assert response.status_code == 401


@pytest.mark.integration
class TestTokens:
    def test_refresh(self, client: TestClient, test_user: User):
        token = create_jwt_token(test_user.id, token_type="refresh")

        response = client.post("/api/auth/refresh", json={"refresh_token": token})

        assert response.status_code == 200
        assert response.json()["refresh_token"]

    def test_refresh_rejects_access_token(self, client: TestClient, test_user: User):
        token = create_jwt_token(test_user.id)

        response = client.post("/api/auth/refresh", json={"refresh_token": token})

        assert response.status_code == 401

    def test_me_requires_token(self, client: TestClient):
        assert client.get("/api/auth/me").status_code == 401

    def test_expired_token(self, client: TestClient, test_user: User):
        from datetime import timedelta

        token = create_jwt_token(test_user.id, expires_in=timedelta(hours=-1))

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_stale_token_version(self, client: TestClient, test_user: User):
        token = create_jwt_token(test_user.id, token_ver=0)

        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert "Session invalidated" in response.json()["detail"]

    def test_health(self, client: TestClient):
        assert client.get("/api/health").json() == {
            "status": "healthy",
            "service": "appshare-api",
            "storage": "local",
        }


@pytest.mark.integration
class TestChangePassword:
    def test_change_password(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "TestPass123", "new_password": "BrandNew456"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert "Password changed" in response.json()["message"]

        old_login = client.post(
            "/api/auth/login", data={"username": "test_user", "password": "TestPass123"}
        )
        new_login = client.post(
            "/api/auth/login", data={"username": "test_user", "password": "BrandNew456"}
        )
        assert old_login.status_code == 401
        assert new_login.status_code == 200

    def test_existing_tokens_are_invalidated(self, client: TestClient, auth_headers):
        client.post(
            "/api/auth/change-password",
            json={"current_password": "TestPass123", "new_password": "BrandNew456"},
            headers=auth_headers,
        )

        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 401
        assert "Session invalidated" in response.json()["detail"]

    def test_wrong_current_password(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "WrongPass123", "new_password": "BrandNew456"},
            headers=auth_headers,
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Current password is incorrect"
        # Nothing changed, so the token still works
        assert client.get("/api/auth/me", headers=auth_headers).status_code == 200

    def test_weak_new_password(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "TestPass123", "new_password": "weakpass"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    def test_requires_authentication(self, client: TestClient):
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "TestPass123", "new_password": "BrandNew456"},
        )

        assert response.status_code == 401
