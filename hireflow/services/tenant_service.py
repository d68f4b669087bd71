"""
Tenant Service

Lookup and administration of Tenant records in the master database, plus
provisioning of each tenant's own database. Functions take an injected
AsyncSession on the master database; those touching tenant databases also
take the DatabaseRegistry.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from hireflow.auth import hash_password
from hireflow.config import settings
from hireflow.database import DatabaseRegistry, session_scope
from hireflow.exceptions import DuplicateResourceError
from hireflow.models.application import Application
from hireflow.models.job_description import JobDescription
from hireflow.models.requirement import Requirement
from hireflow.models.tenant import SubscriptionPlan, SubscriptionStatus, Tenant
from hireflow.models.user import ROLE_PERMISSIONS, User, UserRole
from hireflow.utils.helpers import generate_password
from hireflow.utils.slugify import generate_unique_subdomain

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "company_name",
    "phone",
    "address",
    "branding",
    "plan",
    "subscription_status",
    "subscription_end",
    "max_users",
    "max_recruiters",
    "settings",
}
# JSON columns merged key-by-key instead of replaced
MERGED_FIELDS = {"branding", "settings"}


@dataclass
class ProvisionedTenant:
    """A freshly created tenant and the one-time admin credentials."""

    tenant: Tenant
    admin_username: str
    temp_password: str
    login_url: str


# ── Lookup ─────────────────────────────────────────────────────────────────


async def get_active_tenant_by_subdomain(subdomain: str, db: AsyncSession) -> Tenant | None:
    """
    Return the active Tenant for ``subdomain``, or None.

    Missing and deactivated tenants both return None so callers cannot tell
    the two apart.
    """
    result = await db.execute(
        select(Tenant).where(Tenant.subdomain == subdomain, Tenant.is_active.is_(True))
    )
    return result.scalars().first()


async def find_active_tenant(subdomain: str, master: AsyncEngine) -> Tenant | None:
    """Run get_active_tenant_by_subdomain on its own master-database session."""
    async with session_scope(master) as db:
        return await get_active_tenant_by_subdomain(subdomain, db)


async def get_tenant_by_id(tenant_id: int, db: AsyncSession) -> Tenant | None:
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalars().first()


async def get_tenant_by_subdomain(subdomain: str, db: AsyncSession) -> Tenant | None:
    """Return a Tenant by subdomain regardless of its active flag."""
    result = await db.execute(select(Tenant).where(Tenant.subdomain == subdomain))
    return result.scalars().first()


async def get_tenant_by_email(email: str, db: AsyncSession) -> Tenant | None:
    result = await db.execute(select(Tenant).where(Tenant.email == email.lower()))
    return result.scalars().first()


def _list_filters(search: str | None, is_active: bool | None) -> list:
    filters = []
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Tenant.company_name.ilike(pattern),
                Tenant.email.ilike(pattern),
                Tenant.subdomain.ilike(pattern),
            )
        )
    if is_active is not None:
        filters.append(Tenant.is_active.is_(is_active))
    return filters


async def list_tenants(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 20,
    search: str | None = None,
    is_active: bool | None = None,
) -> list[Tenant]:
    """Return tenants, newest first, optionally filtered."""
    query = (
        select(Tenant)
        .where(*_list_filters(search, is_active))
        .order_by(Tenant.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def count_tenants(db: AsyncSession, search: str | None = None, is_active: bool | None = None) -> int:
    result = await db.execute(
        select(func.count()).select_from(Tenant).where(*_list_filters(search, is_active))
    )
    return result.scalar_one()


# ── Administration ─────────────────────────────────────────────────────────


async def provision_tenant(
    *,
    company_name: str,
    email: str,
    db: AsyncSession,
    registry: DatabaseRegistry,
    created_by_id: int | None,
    phone: str | None = None,
    address: dict | None = None,
    plan: str = SubscriptionPlan.basic.value,
    max_users: int = 10,
    max_recruiters: int = 5,
) -> ProvisionedTenant:
    """
    Create a tenant, its database and its company-admin user.

    The subdomain is derived from the company name and made unique. The
    generated temporary password is stored hashed and returned in clear
    exactly once. If the tenant database cannot be provisioned the master
    record is removed again.
    """
    email = email.lower()
    if await get_tenant_by_email(email, db) is not None:
        raise DuplicateResourceError("Tenant", "email", email)

    async def _taken(candidate: str) -> bool:
        return await get_tenant_by_subdomain(candidate, db) is not None

    subdomain = await generate_unique_subdomain(company_name, _taken)
    admin_username = f"{subdomain}_admin"
    temp_password = generate_password()

    tenant = Tenant(
        company_name=company_name,
        subdomain=subdomain,
        email=email,
        phone=phone,
        address=address,
        plan=plan,
        subscription_status=SubscriptionStatus.active.value,
        max_users=max_users,
        max_recruiters=max_recruiters,
        admin_username=admin_username,
        admin_temp_password=hash_password(temp_password),
        is_active=True,
        created_by_id=created_by_id,
    )
    db.add(tenant)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent provision claimed the same subdomain, email or admin username
        await db.rollback()
        logger.warning("Tenant insert conflicted for subdomain %s", subdomain)
        raise DuplicateResourceError("Tenant", "subdomain", subdomain)
    await db.refresh(tenant)

    try:
        engine = await registry.create_tenant_database(subdomain)
        async with session_scope(engine) as tenant_db:
            tenant_db.add(
                User(
                    name=f"{company_name} Admin",
                    email=email,
                    hashed_password=hash_password(temp_password),
                    role=UserRole.company_admin.value,
                    permissions=dict(ROLE_PERMISSIONS[UserRole.company_admin]),
                    is_email_verified=True,
                )
            )
            await tenant_db.commit()
    except Exception:
        logger.exception("Provisioning failed for tenant %s; removing master record", subdomain)
        await db.delete(tenant)
        await db.commit()
        raise

    logger.info("Tenant created: id=%d subdomain=%s", tenant.id, tenant.subdomain)
    return ProvisionedTenant(
        tenant=tenant,
        admin_username=admin_username,
        temp_password=temp_password,
        login_url=settings.frontend_url,
    )


async def update_tenant(tenant_id: int, updates: dict[str, Any], db: AsyncSession) -> Tenant | None:
    """
    Apply a partial update to a Tenant.

    The subdomain is never changed: it names the tenant database.
    Returns None if the tenant does not exist.
    """
    tenant = await get_tenant_by_id(tenant_id, db)
    if tenant is None:
        return None
    for field, value in updates.items():
        if field not in UPDATABLE_FIELDS:
            continue
        if field in MERGED_FIELDS and isinstance(value, dict):
            value = {**(getattr(tenant, field) or {}), **value}
        setattr(tenant, field, value)
    await db.commit()
    await db.refresh(tenant)
    return tenant


async def deactivate_tenant(tenant_id: int, db: AsyncSession, registry: DatabaseRegistry) -> Tenant | None:
    """
    Mark a tenant inactive and release its cached database handle.

    Subsequent requests to its subdomain get TENANT_NOT_FOUND.
    Returns None if the tenant does not exist.
    """
    tenant = await get_tenant_by_id(tenant_id, db)
    if tenant is None:
        return None
    tenant.is_active = False
    await db.commit()
    await db.refresh(tenant)
    await registry.close_tenant_handle(tenant.subdomain)
    logger.info("Tenant deactivated: id=%d subdomain=%s", tenant.id, tenant.subdomain)
    return tenant


# ── Statistics ─────────────────────────────────────────────────────────────


async def _count(db: AsyncSession, model, *criteria) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


@asynccontextmanager
async def _stats_engine(tenant: Tenant, registry: DatabaseRegistry):
    # Deactivated tenants are read through a throwaway engine so their handle stays closed
    if tenant.is_active:
        yield await registry.get_tenant_handle(tenant.subdomain)
    else:
        async with registry.temporary_handle(tenant.subdomain) as engine:
            yield engine


async def get_tenant_stats(tenant: Tenant, registry: DatabaseRegistry) -> dict[str, Any]:
    """Headline counts read from the tenant's own database."""
    async with _stats_engine(tenant, registry) as engine, session_scope(engine) as db:
        return {
            "users": {
                "total": await _count(db, User, User.is_active.is_(True)),
                "recruiters": await _count(
                    db, User, User.role == UserRole.recruiter.value, User.is_active.is_(True)
                ),
            },
            "requirements": {"total": await _count(db, Requirement)},
            "jobs": {
                "total": await _count(db, JobDescription),
                "active": await _count(
                    db, JobDescription, JobDescription.is_active.is_(True), JobDescription.status == "published"
                ),
            },
            "applications": {"total": await _count(db, Application)},
        }


async def get_dashboard_stats(db: AsyncSession) -> dict[str, Any]:
    """Platform-wide tenant counts for the super-admin dashboard."""
    healthy = (Tenant.is_active.is_(True), Tenant.subscription_status == SubscriptionStatus.active.value)
    total = await _count(db, Tenant)
    active = await _count(db, Tenant, *healthy)

    plan_rows = await db.execute(select(Tenant.plan, func.count()).group_by(Tenant.plan))
    recent = await db.execute(select(Tenant).order_by(Tenant.created_at.desc()).limit(5))

    return {
        "tenants": {"total": total, "active": active, "inactive": total - active},
        "plan_distribution": {plan: count for plan, count in plan_rows.all()},
        "recent_tenants": list(recent.scalars().all()),
    }
