import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hireflow.config import Settings, get_settings
from hireflow.database import DatabaseRegistry
from hireflow.exception_handlers import register_exception_handlers
from hireflow.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from hireflow.middleware.tenant import TenantLookup, TenantMiddleware
from hireflow.routes import auth, monitoring, super_admin, tenant

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Optionally open the master database at startup; always release every handle at shutdown."""
    registry: DatabaseRegistry = app.state.db_registry
    if app.state.settings.master_init_on_startup:
        await registry.initialize_master()
    logger.info("Starting up the application...")

    yield

    logger.info("Shutting down the application...")
    failures = await registry.close_all()
    if failures:
        logger.error("Failed to close database handles: %s", ", ".join(failures))


def create_app(
    settings: Settings | None = None,
    registry: DatabaseRegistry | None = None,
    tenant_lookup: TenantLookup | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    ``registry`` and ``tenant_lookup`` default to a fresh DatabaseRegistry and
    the active-tenant query on the master database.
    """
    settings = settings or get_settings()
    registry = registry or DatabaseRegistry(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant applicant tracking API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db_registry = registry

    register_exception_handlers(app)

    # Starlette middleware is LIFO: the last one added runs first.
    app.add_middleware(
        TenantMiddleware,
        registry=registry,
        primary_domain=settings.primary_domain,
        admin_path_prefix=settings.super_admin_path_prefix,
        lookup=tenant_lookup,
    )
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"https?://([a-z0-9-]+\.)?(localhost|lvh\.me)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(monitoring.router)
    app.include_router(super_admin.router, prefix=settings.super_admin_path_prefix)
    app.include_router(tenant.router, prefix="/api/tenant")
    app.include_router(auth.router, prefix="/api/auth")

    if settings.debug:
        logger.info("Running in %s mode", settings.environment)
        logging.getLogger("sqlalchemy.pool").setLevel(logging.INFO)

    return app


def build_app() -> FastAPI:
    settings = get_settings()
    setup_structured_logging(settings.log_level, json_format=settings.log_json)
    return create_app(settings)
