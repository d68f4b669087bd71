"""
Tenant-facing routes.

Also exposes the ``require_tenant`` dependency for routes that only make
sense on a tenant subdomain.
"""

from fastapi import APIRouter, Depends, Request

from hireflow.exceptions import TenantRequiredError
from hireflow.models.tenant import Tenant
from hireflow.schemas.tenant import TenantPublicInfo

router = APIRouter(tags=["Tenant"])


def require_tenant(request: Request) -> Tenant:
    """Return the tenant bound by TenantMiddleware, or fail with TENANT_REQUIRED."""
    tenant = getattr(request.state, "tenant", None)
    if tenant is None:
        raise TenantRequiredError()
    return tenant


@router.get("", response_model=TenantPublicInfo)
async def current_tenant_route(tenant: Tenant = Depends(require_tenant)) -> TenantPublicInfo:
    """Company name and branding of the tenant serving this subdomain."""
    return TenantPublicInfo.model_validate(tenant)
