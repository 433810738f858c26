"""
Tests for the authentication and user account endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from cvbuilder.auth import ALGORITHM, create_access_token, decode_access_token
from cvbuilder.config import get_settings

REGISTRATION = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane.doe@example.com",
    "password": "Secret123",
}


class TestRegister:
    @pytest.mark.asyncio
    async def test_register(self, client):
        response = await client.post("/api/auth/register", json={**REGISTRATION, "email": " Jane.Doe@Example.com "})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        assert body["data"]["token"]

        user = body["data"]["user"]
        assert user["email"] == "jane.doe@example.com"
        assert user["fullName"] == "Jane Doe"
        assert user["preferences"] == {"language": "en", "emailNotifications": True, "dataRetention": "1year"}
        assert "passwordHash" not in user

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client):
        await client.post("/api/auth/register", json=REGISTRATION)

        response = await client.post("/api/auth/register", json=REGISTRATION)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "User already exists with this email"}

    @pytest.mark.asyncio
    async def test_weak_password(self, client):
        response = await client.post("/api/auth/register", json={**REGISTRATION, "password": "secret123"})

        assert response.status_code == 400
        assert "one uppercase letter" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        response = await client.post("/api/auth/register", json={**REGISTRATION, "email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Validation failed: email")


class TestLogin:
    @pytest.mark.asyncio
    async def test_login(self, client):
        await client.post("/api/auth/register", json=REGISTRATION)

        response = await client.post(
            "/api/auth/login", json={"email": "jane.doe@example.com", "password": "Secret123"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["token"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await client.post("/api/auth/register", json=REGISTRATION)

        response = await client.post(
            "/api/auth/login", json={"email": "jane.doe@example.com", "password": "Wrong123"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        response = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": "Secret123"}
        )

        assert response.status_code == 401


class TestTokens:
    @pytest.mark.asyncio
    async def test_verify(self, client, auth_headers):
        response = await client.get("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "jane.doe@example.com"

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/auth/verify")

        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/auth/verify", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 403
        assert response.json()["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_refresh(self, client, auth_headers):
        response = await client.post("/api/auth/refresh", headers=auth_headers)

        assert response.status_code == 200
        token = response.json()["data"]["token"]
        verify = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert verify.status_code == 200


class TestUsers:
    @pytest.mark.asyncio
    async def test_get_profile(self, client, auth_headers):
        response = await client.get("/api/users/profile", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["firstName"] == "Jane"

    @pytest.mark.asyncio
    async def test_update_profile_merges_preferences(self, client, auth_headers):
        response = await client.patch(
            "/api/users/profile",
            headers=auth_headers,
            json={"location": " Lyon ", "preferences": {"language": "fr"}},
        )

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["location"] == "Lyon"
        assert user["preferences"]["language"] == "fr"
        assert user["preferences"]["dataRetention"] == "1year"

    @pytest.mark.asyncio
    async def test_change_password(self, client, auth_headers):
        response = await client.patch(
            "/api/users/password",
            headers=auth_headers,
            json={"currentPassword": "Secret123", "newPassword": "Better456"},
        )
        assert response.status_code == 200

        login = await client.post(
            "/api/auth/login", json={"email": "jane.doe@example.com", "password": "Better456"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, client, auth_headers):
        response = await client.patch(
            "/api/users/password",
            headers=auth_headers,
            json={"currentPassword": "Nope1234", "newPassword": "Better456"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

    @pytest.mark.asyncio
    async def test_delete_account(self, client, auth_headers, storage_cv):
        await client.post("/api/cvs/full", headers=auth_headers, json=storage_cv)

        response = await client.delete("/api/users/account", headers=auth_headers)
        assert response.status_code == 200

        verify = await client.get("/api/auth/verify", headers=auth_headers)
        assert verify.status_code == 403
        listing = await client.get("/api/cvs")
        assert listing.json()["data"]["total"] == 0


class TestAccessToken:
    def test_expires_after_configured_days(self):
        settings = get_settings()
        token = create_access_token("user-1")

        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        expected = datetime.now(timezone.utc) + timedelta(days=settings.token_expire_days)
        assert abs(payload["exp"] - expected.timestamp()) < 60
        assert decode_access_token(token) == "user-1"

    def test_expired_token_rejected(self):
        settings = get_settings()
        expired = datetime.now(timezone.utc) - timedelta(minutes=1)
        token = jwt.encode({"exp": expired, "userId": "user-1"}, settings.secret_key, algorithm=ALGORITHM)

        assert decode_access_token(token) is None
