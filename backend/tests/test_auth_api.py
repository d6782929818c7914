"""Tests for /api/auth endpoints and caller resolution."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.config import Settings
from core.security import create_access_token, get_signing_key

PASSWORD = "TestPassword123!"


@pytest.mark.integration
class TestRegister:

    async def test_register_assigns_default_role(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"username": "newcomer", "email": "newcomer@example.com", "password": PASSWORD},
        )
        assert resp.status_code == 201
        user = resp.json()["user"]
        assert user["username"] == "newcomer"
        assert user["role"] == "viewer"
        assert "password" not in user and "password_hash" not in user

    async def test_register_duplicate_username(self, client, make_user):
        await make_user("viewer", username="taken")
        resp = await client.post(
            "/api/auth/register",
            json={"username": "taken", "password": PASSWORD},
        )
        assert resp.status_code == 409
        assert resp.json()["error_code"] == "conflict"

    async def test_register_short_password(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"username": "shorty", "password": "short"},
        )
        assert resp.status_code == 422

    async def test_register_invalid_email(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"username": "mailer", "email": "not-an-email", "password": PASSWORD},
        )
        assert resp.status_code == 422


@pytest.mark.integration
class TestLogin:

    async def test_login_returns_token_and_user(self, client, make_user):
        await make_user("editor", username="erin")
        resp = await client.post("/api/auth/login", json={"username": "erin", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["username"] == "erin"
        assert body["user"]["role"] == "editor"
        assert body["user"]["created_at"] is not None
        assert set(body["user"]) >= {"id", "username", "email", "role", "created_at"}

    async def test_login_token_is_usable(self, client, make_user):
        await make_user("admin", username="ada")
        login = await client.post("/api/auth/login", json={"username": "ada", "password": PASSWORD})
        token = login.json()["token"]
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"

    async def test_login_wrong_password(self, client, make_user):
        await make_user("viewer", username="vic")
        resp = await client.post("/api/auth/login", json={"username": "vic", "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "invalid_credentials"
        assert resp.headers["www-authenticate"] == "Bearer"

    async def test_login_unknown_user(self, client):
        resp = await client.post("/api/auth/login", json={"username": "ghost", "password": PASSWORD})
        assert resp.status_code == 401

    async def test_login_disabled_account(self, client, make_user):
        await make_user("viewer", username="sleepy", is_active=False)
        resp = await client.post("/api/auth/login", json={"username": "sleepy", "password": PASSWORD})
        assert resp.status_code == 401


@pytest.mark.integration
class TestVerify:

    async def test_verify_reports_claims(self, client, make_user):
        user, headers = await make_user("operator")
        resp = await client.get("/api/auth/verify", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["valid"] is True
        assert body["user"]["id"] == user.id
        assert body["user"]["role"] == "operator"
        assert body["token_role"] == "operator"
        assert body["role_changed"] is False
        assert body["expires_at"]

    async def test_missing_header(self, client):
        resp = await client.get("/api/auth/verify")
        assert resp.status_code == 401
        body = resp.json()
        assert body["error_code"] == "missing_credential"
        assert body["request_id"]

    async def test_non_bearer_scheme(self, client):
        resp = await client.get("/api/auth/verify", headers={"Authorization": "Basic abc"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "missing_credential"

    async def test_expired_token(self, client, make_user):
        user, _ = await make_user("admin")
        token = create_access_token(user_id=user.id, username=user.username, role=user.role, expires_in=-10)
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "token_expired"

    async def test_tampered_token(self, client, make_user):
        _, headers = await make_user("admin")
        token = headers["Authorization"].split(" ", 1)[1]
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {tampered}"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "token_invalid"

    async def test_deleted_user(self, client):
        token = create_access_token(user_id="no-such-user", username="ghost", role="admin")
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "user_not_found"

    async def test_disabled_account(self, client, make_user):
        _, headers = await make_user("admin", is_active=False)
        resp = await client.get("/api/auth/verify", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["error_code"] == "account_disabled"


@pytest.mark.integration
class TestRoleSource:
    """Role read from the database row vs. trusted from the token."""

    async def test_database_source_sees_role_change(self, client, make_user):
        _, admin_headers = await make_user("admin")
        user, headers = await make_user("editor")

        resp = await client.patch(f"/api/users/{user.id}/role", json={"role": "viewer"}, headers=admin_headers)
        assert resp.status_code == 200

        resp = await client.get("/api/auth/verify", headers=headers)
        body = resp.json()
        assert body["user"]["role"] == "viewer"
        assert body["token_role"] == "editor"
        assert body["role_changed"] is True

    async def test_token_source_trusts_claims(self, client, make_user, monkeypatch):
        import app.dependencies as deps

        monkeypatch.setattr(deps, "get_settings", lambda: Settings(AUTH_ROLE_SOURCE="token"))
        # the user row does not need to exist
        token = create_access_token(user_id="detached", username="tokenonly", role="editor")
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["role"] == "editor"
        assert body["role_changed"] is False


def _signed(**claims):
    """A correctly signed token carrying arbitrary claim values."""
    now = datetime.now(timezone.utc)
    payload = {"iat": now, "exp": now + timedelta(minutes=5), **claims}
    return jwt.encode(payload, get_signing_key(), algorithm="HS256")


@pytest.mark.integration
class TestMalformedClaims:
    """Signed tokens whose claims have the wrong types."""

    @pytest.mark.parametrize("role", [5, ["admin"], {}, {"r": 1}])
    async def test_non_string_role_database_source(self, client, make_user, role):
        user, _ = await make_user("admin")
        headers = {"Authorization": f"Bearer {_signed(sub=user.id, id=user.id, username=user.username, role=role)}"}

        resp = await client.get("/api/auth/verify", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"
        assert resp.json()["token_role"] is None

        resp = await client.post(
            "/api/devices", json={"device_id": "d-1", "name": "Pump", "type": "relay"}, headers=headers
        )
        assert resp.status_code == 201

    @pytest.mark.parametrize("role", [5, ["admin"], {}, {"r": 1}])
    async def test_non_string_role_token_source(self, client, monkeypatch, role):
        import app.dependencies as deps

        monkeypatch.setattr(deps, "get_settings", lambda: Settings(AUTH_ROLE_SOURCE="token"))
        headers = {"Authorization": f"Bearer {_signed(sub='detached', username='tokenonly', role=role)}"}

        resp = await client.post(
            "/api/devices", json={"device_id": "d-1", "name": "Pump", "type": "relay"}, headers=headers
        )
        assert resp.status_code == 401
        body = resp.json()
        assert body["error_code"] == "missing_credential"
        assert "validation error" not in body["detail"]

        resp = await client.get("/api/auth/verify", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] is None

    @pytest.mark.parametrize("username", [5, ["alice"], {"n": "alice"}])
    async def test_non_string_username(self, client, make_user, username):
        user, _ = await make_user("admin")
        token = _signed(sub=user.id, username=username, role="admin")
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "token_invalid"

    async def test_unusable_issued_at(self, client, make_user):
        user, _ = await make_user("admin")
        token = _signed(sub=user.id, username=user.username, role="admin", iat="yesterday")
        resp = await client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error_code"] == "token_invalid"
