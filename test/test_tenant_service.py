"""
Tests for hireflow.services.tenant_service

All tests avoid a live database: master sessions are AsyncMock objects and
tenant-database sessions are swapped in by patching session_scope.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError

from hireflow.exceptions import DatabaseConnectionError, DuplicateResourceError
from hireflow.models.tenant import Tenant
from hireflow.models.user import User, UserRole
from hireflow.services import tenant_service
from utils.fakes import FakeEngine, make_async_mock_db, make_registry_mock

# ── helpers ────────────────────────────────────────────────────────────────


def _patch_session_scope(session):
    @asynccontextmanager
    async def _scope(engine):
        yield session

    return patch("hireflow.services.tenant_service.session_scope", _scope)


def _fake_hash(password: str) -> str:
    return f"hashed:{password}"


def _assign_id(obj):
    obj.id = 1


def _existing_tenant(**overrides):
    values = {
        "id": 1,
        "company_name": "Acme Corp",
        "subdomain": "acme-corp",
        "is_active": True,
        "branding": {"primary_color": "#007bff", "theme": "light"},
        "settings": {"allow_candidate_registration": True},
        "max_users": 10,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


# ══════════════════════════════════════════════════════════════════════════════
# Lookup
# ══════════════════════════════════════════════════════════════════════════════


class TestLookup:
    def test_active_lookup_returns_none_when_missing(self):
        db = make_async_mock_db()
        assert asyncio.run(tenant_service.get_active_tenant_by_subdomain("ghost", db)) is None

    def test_active_lookup_filters_on_is_active(self):
        db = make_async_mock_db()
        asyncio.run(tenant_service.get_active_tenant_by_subdomain("acme", db))

        statement = str(db.execute.call_args[0][0])
        assert "tenants.subdomain" in statement
        assert "tenants.is_active" in statement

    def test_active_lookup_returns_tenant(self):
        tenant = _existing_tenant()
        db = make_async_mock_db(first=tenant)
        assert asyncio.run(tenant_service.get_active_tenant_by_subdomain("acme-corp", db)) is tenant

    def test_find_active_tenant_opens_own_session(self):
        tenant = _existing_tenant()
        session = make_async_mock_db(first=tenant)
        with _patch_session_scope(session):
            result = asyncio.run(tenant_service.find_active_tenant("acme-corp", FakeEngine()))
        assert result is tenant
        session.execute.assert_awaited_once()

    def test_get_tenant_by_id(self):
        db = make_async_mock_db()
        assert asyncio.run(tenant_service.get_tenant_by_id(999, db)) is None

    def test_get_tenant_by_email_lowercases(self):
        db = make_async_mock_db()
        asyncio.run(tenant_service.get_tenant_by_email("Admin@Acme.COM", db))
        statement = db.execute.call_args[0][0]
        assert "admin@acme.com" in statement.compile().params.values()

    def test_list_tenants(self):
        tenants = [_existing_tenant(), _existing_tenant(id=2, subdomain="globex")]
        db = make_async_mock_db(all_=tenants)
        assert asyncio.run(tenant_service.list_tenants(db, search="acme", is_active=True)) == tenants

    def test_count_tenants(self):
        db = make_async_mock_db(scalar_one=7)
        assert asyncio.run(tenant_service.count_tenants(db)) == 7


# ══════════════════════════════════════════════════════════════════════════════
# Provisioning
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def master_db():
    db = make_async_mock_db()
    db.refresh.side_effect = _assign_id
    return db


@pytest.fixture
def tenant_session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


class TestProvisionTenant:
    def _provision(self, master_db, registry, tenant_session, **kwargs):
        params = {"company_name": "Acme Corp", "email": "Admin@Acme.com", "created_by_id": 3}
        params.update(kwargs)
        with _patch_session_scope(tenant_session), patch.object(tenant_service, "hash_password", _fake_hash):
            return asyncio.run(tenant_service.provision_tenant(db=master_db, registry=registry, **params))

    def test_creates_tenant_record(self, master_db, tenant_session):
        registry = make_registry_mock()
        result = self._provision(master_db, registry, tenant_session)

        tenant = result.tenant
        assert isinstance(tenant, Tenant)
        assert tenant.subdomain == "acme-corp"
        assert tenant.email == "admin@acme.com"
        assert tenant.is_active is True
        assert tenant.created_by_id == 3
        master_db.add.assert_called_once_with(tenant)

    def test_returns_one_time_credentials(self, master_db, tenant_session):
        result = self._provision(master_db, make_registry_mock(), tenant_session)

        assert result.admin_username == "acme-corp_admin"
        assert len(result.temp_password) == 12
        # Only the hash is persisted
        assert result.tenant.admin_temp_password == f"hashed:{result.temp_password}"

    def test_provisions_database_and_admin_user(self, master_db, tenant_session):
        registry = make_registry_mock()
        self._provision(master_db, registry, tenant_session)

        registry.create_tenant_database.assert_awaited_once_with("acme-corp")
        admin = tenant_session.add.call_args[0][0]
        assert isinstance(admin, User)
        assert admin.role == UserRole.company_admin.value
        assert admin.email == "admin@acme.com"
        assert admin.permissions["can_create_requirements"] is True
        tenant_session.commit.assert_awaited_once()

    def test_subscription_options(self, master_db, tenant_session):
        result = self._provision(
            master_db,
            make_registry_mock(),
            tenant_session,
            plan="premium",
            max_users=50,
            max_recruiters=20,
            address={"city": "Pune"},
        )
        assert result.tenant.plan == "premium"
        assert result.tenant.max_users == 50
        assert result.tenant.max_recruiters == 20
        assert result.tenant.address == {"city": "Pune"}

    def test_subdomain_collision_gets_suffix(self, master_db, tenant_session):
        taken = {"acme-corp", "acme-corp-1"}

        async def _by_subdomain(subdomain, db):
            return _existing_tenant(subdomain=subdomain) if subdomain in taken else None

        with patch.object(tenant_service, "get_tenant_by_subdomain", AsyncMock(side_effect=_by_subdomain)):
            result = self._provision(master_db, make_registry_mock(), tenant_session)

        assert result.tenant.subdomain == "acme-corp-2"
        assert result.admin_username == "acme-corp-2_admin"

    def test_duplicate_email_rejected(self, master_db, tenant_session):
        master_db.execute.return_value.scalars.return_value.first.return_value = _existing_tenant()
        registry = make_registry_mock()

        with pytest.raises(DuplicateResourceError):
            self._provision(master_db, registry, tenant_session)

        master_db.add.assert_not_called()
        registry.create_tenant_database.assert_not_awaited()

    def test_failed_database_removes_master_record(self, master_db, tenant_session):
        registry = make_registry_mock()
        registry.create_tenant_database.side_effect = DatabaseConnectionError("tenant_acme-corp", "refused")

        with pytest.raises(DatabaseConnectionError):
            self._provision(master_db, registry, tenant_session)

        tenant = master_db.add.call_args[0][0]
        master_db.delete.assert_awaited_once_with(tenant)
        assert master_db.commit.await_count == 2

    def test_concurrent_insert_conflict_is_a_duplicate(self, master_db, tenant_session):
        master_db.commit.side_effect = IntegrityError("INSERT INTO tenants", {}, Exception("unique violation"))
        registry = make_registry_mock()

        with pytest.raises(DuplicateResourceError):
            self._provision(master_db, registry, tenant_session)

        master_db.rollback.assert_awaited_once()
        registry.create_tenant_database.assert_not_awaited()


# ══════════════════════════════════════════════════════════════════════════════
# Administration
# ══════════════════════════════════════════════════════════════════════════════


class TestUpdateTenant:
    def test_missing_tenant(self):
        db = make_async_mock_db()
        assert asyncio.run(tenant_service.update_tenant(42, {"company_name": "X"}, db)) is None
        db.commit.assert_not_awaited()

    def test_subdomain_is_immutable(self):
        tenant = _existing_tenant()
        db = make_async_mock_db(first=tenant)

        asyncio.run(tenant_service.update_tenant(1, {"subdomain": "renamed", "company_name": "Acme Ltd"}, db))

        assert tenant.subdomain == "acme-corp"
        assert tenant.company_name == "Acme Ltd"
        db.commit.assert_awaited_once()

    def test_branding_is_merged(self):
        tenant = _existing_tenant()
        db = make_async_mock_db(first=tenant)

        asyncio.run(tenant_service.update_tenant(1, {"branding": {"theme": "dark"}}, db))

        assert tenant.branding == {"primary_color": "#007bff", "theme": "dark"}

    def test_plain_fields_are_replaced(self):
        tenant = _existing_tenant()
        db = make_async_mock_db(first=tenant)

        asyncio.run(tenant_service.update_tenant(1, {"max_users": 25, "plan": "enterprise"}, db))

        assert tenant.max_users == 25
        assert tenant.plan == "enterprise"


class TestDeactivateTenant:
    def test_deactivates_and_closes_handle(self):
        tenant = _existing_tenant()
        db = make_async_mock_db(first=tenant)
        registry = make_registry_mock()

        result = asyncio.run(tenant_service.deactivate_tenant(1, db, registry))

        assert result is tenant
        assert tenant.is_active is False
        db.commit.assert_awaited_once()
        registry.close_tenant_handle.assert_awaited_once_with("acme-corp")

    def test_missing_tenant(self):
        registry = make_registry_mock()
        result = asyncio.run(tenant_service.deactivate_tenant(9, make_async_mock_db(), registry))

        assert result is None
        registry.close_tenant_handle.assert_not_awaited()


# ══════════════════════════════════════════════════════════════════════════════
# Statistics
# ══════════════════════════════════════════════════════════════════════════════


class TestStats:
    def test_tenant_stats_read_tenant_database(self):
        registry = make_registry_mock()
        session = make_async_mock_db(scalar_one=4)

        with _patch_session_scope(session):
            stats = asyncio.run(tenant_service.get_tenant_stats(_existing_tenant(), registry))

        registry.get_tenant_handle.assert_awaited_once_with("acme-corp")
        assert stats == {
            "users": {"total": 4, "recruiters": 4},
            "requirements": {"total": 4},
            "jobs": {"total": 4, "active": 4},
            "applications": {"total": 4},
        }

    def test_deactivated_tenant_uses_uncached_handle(self):
        registry = make_registry_mock()
        session = make_async_mock_db(scalar_one=1)

        with _patch_session_scope(session):
            stats = asyncio.run(tenant_service.get_tenant_stats(_existing_tenant(is_active=False), registry))

        registry.temporary_handle.assert_called_once_with("acme-corp")
        registry.get_tenant_handle.assert_not_awaited()
        assert stats["users"]["total"] == 1

    def test_dashboard_stats(self):
        recent = [_existing_tenant()]
        db = make_async_mock_db(all_=recent)
        db.execute.return_value.scalar_one.side_effect = [5, 3]
        db.execute.return_value.all.return_value = [("basic", 3), ("premium", 2)]

        stats = asyncio.run(tenant_service.get_dashboard_stats(db))

        assert stats["tenants"] == {"total": 5, "active": 3, "inactive": 2}
        assert stats["plan_distribution"] == {"basic": 3, "premium": 2}
        assert stats["recent_tenants"] == recent
