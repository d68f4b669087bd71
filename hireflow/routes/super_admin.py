"""
Super-admin Routes, mounted under settings.super_admin_path_prefix

These always run against the master database, whatever the host.

POST   /register                    → create super admin account
POST   /login                       → obtain bearer token
POST   /tenants                     → provision tenant (+ database + admin user)
GET    /tenants                     → list tenants
GET    /tenants/{tenant_id}         → get tenant
PUT    /tenants/{tenant_id}         → update tenant (subdomain is immutable)
PATCH  /tenants/{tenant_id}/deactivate → deactivate tenant
GET    /tenants/{tenant_id}/stats   → counts from the tenant database
GET    /dashboard/stats             → platform-wide tenant counts
"""

import enum
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.auth import SUPER_ADMIN_ROLE, create_access_token, require_super_admin
from hireflow.database import DatabaseRegistry, get_master_db, get_registry
from hireflow.exceptions import AuthorizationError, ResourceNotFoundError
from hireflow.models.super_admin import SuperAdmin
from hireflow.models.tenant import Tenant
from hireflow.schemas.super_admin import SuperAdminLogin, SuperAdminRegister, SuperAdminResponse, SuperAdminToken
from hireflow.schemas.tenant import (
    DashboardStats,
    TenantCreate,
    TenantCreatedResponse,
    TenantCredentials,
    TenantListResponse,
    TenantResponse,
    TenantUpdate,
)
from hireflow.services import auth_service, tenant_service

router = APIRouter(tags=["Super Admin"])
logger = logging.getLogger(__name__)


def _token_for(admin: SuperAdmin) -> SuperAdminToken:
    token = create_access_token({"sub": str(admin.id), "role": SUPER_ADMIN_ROLE})
    return SuperAdminToken(super_admin=SuperAdminResponse.model_validate(admin), token=token)


async def _get_tenant_or_404(tenant_id: int, db: AsyncSession) -> Tenant:
    tenant = await tenant_service.get_tenant_by_id(tenant_id, db)
    if tenant is None:
        raise ResourceNotFoundError("Tenant", tenant_id)
    return tenant


# ── Authentication ─────────────────────────────────────────────────────────


@router.post("/register", response_model=SuperAdminToken, status_code=status.HTTP_201_CREATED)
async def register_route(
    payload: SuperAdminRegister,
    request: Request,
    db: AsyncSession = Depends(get_master_db),
) -> SuperAdminToken:
    """Register a super admin (disable via ALLOW_SUPER_ADMIN_REGISTRATION=false)."""
    if not request.app.state.settings.allow_super_admin_registration:
        raise AuthorizationError("Super admin registration is disabled")
    admin = await auth_service.register_super_admin(payload.name, payload.email, payload.password, db)
    return _token_for(admin)


@router.post("/login", response_model=SuperAdminToken)
async def login_route(payload: SuperAdminLogin, db: AsyncSession = Depends(get_master_db)) -> SuperAdminToken:
    admin = await auth_service.authenticate_super_admin(payload.email, payload.password, db)
    return _token_for(admin)


# ── Tenant management ──────────────────────────────────────────────────────


@router.post("/tenants", response_model=TenantCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant_route(
    payload: TenantCreate,
    db: AsyncSession = Depends(get_master_db),
    registry: DatabaseRegistry = Depends(get_registry),
    current_admin: SuperAdmin = Depends(require_super_admin),
) -> TenantCreatedResponse:
    """Provision a tenant; the temporary admin password is only returned here."""
    provisioned = await tenant_service.provision_tenant(
        company_name=payload.company_name,
        email=payload.email,
        db=db,
        registry=registry,
        created_by_id=current_admin.id,
        phone=payload.phone,
        address=payload.address.model_dump() if payload.address else None,
        plan=payload.subscription.plan.value,
        max_users=payload.subscription.max_users,
        max_recruiters=payload.subscription.max_recruiters,
    )
    return TenantCreatedResponse(
        tenant=TenantResponse.model_validate(provisioned.tenant),
        credentials=TenantCredentials(
            username=provisioned.admin_username,
            temp_password=provisioned.temp_password,
            login_url=provisioned.login_url,
        ),
    )


@router.get("/tenants", response_model=TenantListResponse)
async def list_tenants_route(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    is_active: Optional[bool] = None,
    db: AsyncSession = Depends(get_master_db),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> TenantListResponse:
    tenants = await tenant_service.list_tenants(db, skip=skip, limit=limit, search=search, is_active=is_active)
    total = await tenant_service.count_tenants(db, search=search, is_active=is_active)
    return TenantListResponse(
        tenants=[TenantResponse.model_validate(t) for t in tenants],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/tenants/{tenant_id}", response_model=TenantResponse)
async def get_tenant_route(
    tenant_id: int,
    db: AsyncSession = Depends(get_master_db),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> TenantResponse:
    return TenantResponse.model_validate(await _get_tenant_or_404(tenant_id, db))


@router.put("/tenants/{tenant_id}", response_model=TenantResponse)
async def update_tenant_route(
    tenant_id: int,
    payload: TenantUpdate,
    db: AsyncSession = Depends(get_master_db),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> TenantResponse:
    updates = {
        key: value.value if isinstance(value, enum.Enum) else value
        for key, value in payload.model_dump(exclude_none=True).items()
    }
    tenant = await tenant_service.update_tenant(tenant_id, updates, db)
    if tenant is None:
        raise ResourceNotFoundError("Tenant", tenant_id)
    return TenantResponse.model_validate(tenant)


@router.patch("/tenants/{tenant_id}/deactivate", response_model=TenantResponse)
async def deactivate_tenant_route(
    tenant_id: int,
    db: AsyncSession = Depends(get_master_db),
    registry: DatabaseRegistry = Depends(get_registry),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> TenantResponse:
    """Deactivate a tenant; its subdomain answers TENANT_NOT_FOUND from now on."""
    tenant = await tenant_service.deactivate_tenant(tenant_id, db, registry)
    if tenant is None:
        raise ResourceNotFoundError("Tenant", tenant_id)
    return TenantResponse.model_validate(tenant)


@router.get("/tenants/{tenant_id}/stats")
async def tenant_stats_route(
    tenant_id: int,
    db: AsyncSession = Depends(get_master_db),
    registry: DatabaseRegistry = Depends(get_registry),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> dict:
    tenant = await _get_tenant_or_404(tenant_id, db)
    return await tenant_service.get_tenant_stats(tenant, registry)


@router.get("/dashboard/stats", response_model=DashboardStats)
async def dashboard_stats_route(
    db: AsyncSession = Depends(get_master_db),
    _current_admin: SuperAdmin = Depends(require_super_admin),
) -> DashboardStats:
    stats = await tenant_service.get_dashboard_stats(db)
    return DashboardStats.model_validate(stats, from_attributes=True)
