"""
Tenant User Authentication Routes, mounted under /api/auth

Only served on a tenant subdomain; every call runs on the tenant database
bound by TenantMiddleware.

POST   /login            → obtain bearer token (email or admin username)
GET    /me               → current user and tenant branding
PUT    /update-password  → change password, returns a fresh token
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hireflow.auth import create_access_token, require_tenant_user
from hireflow.database import get_db
from hireflow.models.tenant import Tenant
from hireflow.models.user import User
from hireflow.routes.tenant import require_tenant
from hireflow.schemas.tenant import TenantPublicInfo
from hireflow.schemas.user import CurrentUser, PasswordUpdate, TenantUserLogin, TenantUserToken, UserResponse
from hireflow.services import auth_service

router = APIRouter(tags=["Auth"])


def _token_for(user: User, tenant: Tenant) -> TenantUserToken:
    token = create_access_token({"sub": str(user.id), "role": user.role, "tenant": tenant.subdomain})
    return TenantUserToken(
        user=UserResponse.model_validate(user),
        tenant=TenantPublicInfo.model_validate(tenant),
        token=token,
    )


@router.post("/login", response_model=TenantUserToken)
async def login_route(
    payload: TenantUserLogin,
    tenant: Tenant = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
) -> TenantUserToken:
    user = await auth_service.authenticate_tenant_user(payload.login, payload.password, tenant, db)
    return _token_for(user, tenant)


@router.get("/me", response_model=CurrentUser)
async def me_route(
    user: User = Depends(require_tenant_user),
    tenant: Tenant = Depends(require_tenant),
) -> CurrentUser:
    return CurrentUser(user=UserResponse.model_validate(user), tenant=TenantPublicInfo.model_validate(tenant))


@router.put("/update-password", response_model=TenantUserToken)
async def update_password_route(
    payload: PasswordUpdate,
    user: User = Depends(require_tenant_user),
    tenant: Tenant = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
) -> TenantUserToken:
    user = await auth_service.change_password(user, payload.current_password, payload.new_password, db)
    return _token_for(user, tenant)
