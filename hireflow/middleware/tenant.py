"""
Tenant Resolution Middleware

Maps the request host to a tenant and binds a database handle:

  acme.localhost / acme.lvh.me / acme.<primary_domain>  → tenant "acme"
  apex host, bare IP, www.*, or the super-admin prefix → master database

Attributes set on request.state for downstream handlers:
    tenant             (Tenant | None)  : active tenant record
    tenant_id          (str | None)     : tenant subdomain
    db                 (AsyncEngine)    : tenant or master engine
    tenant_resolution  (TenantResolution)

Unknown or deactivated subdomains are answered here with TENANT_NOT_FOUND;
infrastructure failures with TENANT_RESOLUTION_ERROR. Errors raised by the
downstream app are not translated by this middleware.
"""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from hireflow.exception_handlers import create_error_response
from hireflow.exceptions import TenantNotFoundError, TenantResolutionError
from hireflow.services.tenant_service import find_active_tenant

if TYPE_CHECKING:
    from fastapi import Request
    from sqlalchemy.ext.asyncio import AsyncEngine
    from starlette.responses import Response
    from starlette.types import ASGIApp

    from hireflow.database import DatabaseRegistry
    from hireflow.models.tenant import Tenant

logger = logging.getLogger(__name__)

# Loopback domains usable for local development without DNS setup
DEV_HOST_PATTERNS = (
    re.compile(r"^([^.]+)\.localhost$"),
    re.compile(r"^([^.]+)\.lvh\.me$"),
)
RESERVED_LABEL = "www"


class TenantResolution(str, enum.Enum):
    unresolved = "unresolved"
    master_bound = "master_bound"
    tenant_bound = "tenant_bound"
    rejected = "rejected"
    failed = "failed"


def _host_patterns(primary_domain: str) -> tuple[re.Pattern, ...]:
    production = re.compile(rf"^([^.]+)\.{re.escape(primary_domain)}$")
    return (*DEV_HOST_PATTERNS, production)


def extract_tenant_from_host(host: str | None, primary_domain: str) -> str | None:
    """
    Extract the tenant subdomain from a Host header.

    Examples (primary_domain="myapp.com"):
        "acme.localhost:3000" → "acme"
        "acme.myapp.com"      → "acme"
        "www.myapp.com"       → None
        "myapp.com"           → None
        "127.0.0.1:8000"      → None
    """
    if not host or not isinstance(host, str):
        return None

    # Strip port if present
    host = host.split(":")[0]
    for pattern in _host_patterns(primary_domain):
        match = pattern.match(host)
        if match and match.group(1) != RESERVED_LABEL:
            return match.group(1)
    return None


TenantLookup = Callable[[str, "AsyncEngine"], Awaitable["Tenant | None"]]


class TenantMiddleware(BaseHTTPMiddleware):
    """Resolve the current tenant and attach it, with its database, to request.state."""

    def __init__(
        self,
        app: ASGIApp,
        registry: DatabaseRegistry,
        primary_domain: str,
        admin_path_prefix: str = "/api/super-admin",
        lookup: TenantLookup | None = None,
    ):
        super().__init__(app)
        self.registry = registry
        self.primary_domain = primary_domain
        self.admin_path_prefix = admin_path_prefix
        self.lookup = lookup or find_active_tenant

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Always initialise state so downstream code can read it safely
        request.state.tenant = None
        request.state.tenant_id = None
        request.state.db = None
        request.state.tenant_resolution = TenantResolution.unresolved

        try:
            if not self.registry.master_initialized:
                await self.registry.initialize_master()

            subdomain = extract_tenant_from_host(request.headers.get("host"), self.primary_domain)

            if not subdomain or request.url.path.startswith(self.admin_path_prefix):
                request.state.db = self.registry.get_master_handle()
                request.state.tenant_resolution = TenantResolution.master_bound
            else:
                tenant = await self.lookup(subdomain, self.registry.get_master_handle())
                if tenant is None:
                    request.state.tenant_resolution = TenantResolution.rejected
                    logger.info("TenantMiddleware: no active tenant for subdomain=%s", subdomain)
                    return self._error(request, TenantNotFoundError())

                # The stored subdomain is authoritative for the database name
                request.state.db = await self.registry.get_tenant_handle(tenant.subdomain)
                request.state.tenant = tenant
                request.state.tenant_id = tenant.subdomain
                request.state.tenant_resolution = TenantResolution.tenant_bound
                logger.debug("TenantMiddleware: resolved tenant subdomain=%s", tenant.subdomain)
        except Exception:
            request.state.tenant_resolution = TenantResolution.failed
            logger.exception("Tenant middleware error (path=%s)", request.url.path)
            return self._error(request, TenantResolutionError())

        return await call_next(request)

    @staticmethod
    def _error(request: Request, exc: TenantNotFoundError | TenantResolutionError) -> Response:
        return create_error_response(
            status_code=exc.status_code,
            message=exc.message,
            error_code=exc.error_code,
            path=request.url.path,
        )
