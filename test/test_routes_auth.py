"""
Tests for the tenant-user auth routes (/api/auth)

Requests carry a tenant Host header so TenantMiddleware binds the tenant;
the tenant session is supplied through dependency_overrides.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from hireflow.auth import create_access_token, decode_access_token
from hireflow.config import Settings
from hireflow.database import get_db
from hireflow.exceptions import AccountLockedError, InvalidCredentialsError
from hireflow.main import create_app
from utils.fakes import make_async_mock_db, make_registry_mock

PREFIX = "/api/auth"
TENANT_HOST = {"host": "acme.lvh.me:8000"}
APEX_HOST = {"host": "localhost:8000"}

# ── helpers ────────────────────────────────────────────────────────────────


def _user(**overrides):
    values = {
        "id": 3,
        "name": "Alice Admin",
        "email": "admin@acme.com",
        "role": "company_admin",
        "department": None,
        "permissions": {"can_create_requirements": True},
        "is_active": True,
        "last_login": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _token(user_id=3, tenant="acme"):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id), 'role': 'company_admin', 'tenant': tenant})}"}


@pytest.fixture
def tenant_db():
    return make_async_mock_db(first=_user())


@pytest.fixture
def client(tenant_record, tenant_db):
    async def _lookup(subdomain, master_engine):
        return tenant_record if subdomain == tenant_record.subdomain else None

    app = create_app(settings=Settings(), registry=make_registry_mock(), tenant_lookup=AsyncMock(side_effect=_lookup))

    async def _tenant_db():
        yield tenant_db

    app.dependency_overrides[get_db] = _tenant_db
    return TestClient(app)


# ══════════════════════════════════════════════════════════════════════════════
# Login
# ══════════════════════════════════════════════════════════════════════════════


class TestLogin:
    def test_login_on_tenant_host(self, client, tenant_record):
        with patch("hireflow.services.auth_service.authenticate_tenant_user", AsyncMock(return_value=_user())) as auth:
            response = client.post(f"{PREFIX}/login", json={"login": "acme_admin", "password": "pw"}, headers=TENANT_HOST)

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["email"] == "admin@acme.com"
        assert body["tenant"]["subdomain"] == "acme"
        assert decode_access_token(body["token"])["tenant"] == "acme"
        assert auth.await_args.args[:3] == ("acme_admin", "pw", tenant_record)

    def test_login_requires_tenant_host(self, client):
        response = client.post(f"{PREFIX}/login", json={"login": "admin@acme.com", "password": "pw"}, headers=APEX_HOST)

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "TENANT_REQUIRED"

    def test_login_unknown_tenant(self, client):
        response = client.post(f"{PREFIX}/login", json={"login": "a@b.com", "password": "pw"}, headers={"host": "ghost.localhost"})

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "TENANT_NOT_FOUND"

    def test_invalid_credentials(self, client):
        failing = AsyncMock(side_effect=InvalidCredentialsError())
        with patch("hireflow.services.auth_service.authenticate_tenant_user", failing):
            response = client.post(f"{PREFIX}/login", json={"login": "admin@acme.com", "password": "pw"}, headers=TENANT_HOST)

        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_INVALID_CREDENTIALS"

    def test_locked_account(self, client):
        failing = AsyncMock(side_effect=AccountLockedError())
        with patch("hireflow.services.auth_service.authenticate_tenant_user", failing):
            response = client.post(f"{PREFIX}/login", json={"login": "admin@acme.com", "password": "pw"}, headers=TENANT_HOST)

        assert response.status_code == 423
        assert response.json()["error"]["error_code"] == "AUTH_ACCOUNT_LOCKED"


# ══════════════════════════════════════════════════════════════════════════════
# Current user
# ══════════════════════════════════════════════════════════════════════════════


class TestMe:
    def test_me(self, client):
        response = client.get(f"{PREFIX}/me", headers={**TENANT_HOST, **_token()})

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == 3
        assert body["tenant"]["company_name"] == "Acme Corp"

    def test_requires_token(self, client):
        response = client.get(f"{PREFIX}/me", headers=TENANT_HOST)

        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_FAILED"

    def test_token_from_other_tenant(self, client):
        response = client.get(f"{PREFIX}/me", headers={**TENANT_HOST, **_token(tenant="globex")})

        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_TOKEN_INVALID"


class TestUpdatePassword:
    def test_update_password_returns_new_token(self, client, tenant_db):
        with patch("hireflow.services.auth_service.change_password", AsyncMock(return_value=_user())) as change:
            response = client.put(
                f"{PREFIX}/update-password",
                json={"current_password": "old-password", "new_password": "new-password"},
                headers={**TENANT_HOST, **_token()},
            )

        assert response.status_code == 200
        assert response.json()["token"]
        assert change.await_args.args[1:] == ("old-password", "new-password", tenant_db)

    def test_short_new_password(self, client):
        response = client.put(
            f"{PREFIX}/update-password",
            json={"current_password": "old-password", "new_password": "short"},
            headers={**TENANT_HOST, **_token()},
        )

        assert response.status_code == 422
