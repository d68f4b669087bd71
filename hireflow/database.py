"""
Database handles for the master database and every tenant database.

DatabaseRegistry is the only object that opens or disposes an AsyncEngine.
One registry is created per application (see hireflow.main.create_app) and
stored on ``app.state.db_registry``; request handlers borrow the engine bound
to ``request.state.db`` and never dispose it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base

from hireflow.config import Settings, get_settings
from hireflow.exceptions import DatabaseConnectionError, NotInitializedError, ValidationError
from hireflow.utils.slugify import is_valid_subdomain

logger = logging.getLogger(__name__)

# Tables living in the master database (tenants, super admins)
MasterBase = declarative_base()
# Tables provisioned inside every tenant database
TenantBase = declarative_base()

is_valid_tenant_identifier = is_valid_subdomain


class DatabaseRegistry:
    """
    Owns the master engine and a cache of tenant engines keyed by subdomain.

    Tenant engines are created lazily on first use and live until
    close_tenant_handle() or close_all(); there is no idle eviction.
    Creation is single-flight per identifier: concurrent callers for an
    uncached identifier wait on one lock and share the engine it produces.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._master: AsyncEngine | None = None
        self._master_lock = asyncio.Lock()
        self._tenants: dict[str, AsyncEngine] = {}
        self._creation_locks: dict[str, asyncio.Lock] = {}

    # ── naming ─────────────────────────────────────────────────────────────

    @property
    def master_database_name(self) -> str:
        return self._settings.master_database_name

    def tenant_database_name(self, identifier: str) -> str:
        return f"{self._settings.tenant_database_prefix}{identifier}"

    def build_url(self, database_name: str) -> URL:
        """Compose the connection URL for ``database_name`` from the configured base URI."""
        url = make_url(self._settings.database_base_url).set(database=database_name)
        if self._settings.database_options:
            url = url.update_query_string(self._settings.database_options)
        return url

    # ── connection lifecycle ───────────────────────────────────────────────

    async def _connect(self, database_name: str) -> AsyncEngine:
        url = self.build_url(database_name)
        connect_args = {}
        if url.get_driver_name() == "asyncpg":
            connect_args["timeout"] = self._settings.db_connect_timeout

        engine = create_async_engine(
            url,
            echo=self._settings.debug,
            pool_size=self._settings.db_pool_size,
            max_overflow=self._settings.db_max_overflow,
            pool_recycle=self._settings.db_pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        try:
            await asyncio.wait_for(self._ping(engine), timeout=self._settings.db_connect_timeout)
        except Exception as exc:
            logger.error("Database connection failed: %s (%s)", database_name, exc)
            await engine.dispose()
            reason = "connection timed out" if isinstance(exc, asyncio.TimeoutError) else str(exc)
            raise DatabaseConnectionError(database_name, reason) from exc

        logger.info("Database connected: %s", database_name)
        return engine

    @staticmethod
    async def _ping(engine: AsyncEngine) -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    @property
    def master_initialized(self) -> bool:
        return self._master is not None

    async def initialize_master(self) -> AsyncEngine:
        """Create the master engine once; later calls return the cached engine."""
        async with self._master_lock:
            if self._master is None:
                self._master = await self._connect(self.master_database_name)
        return self._master

    def get_master_handle(self) -> AsyncEngine:
        if self._master is None:
            raise NotInitializedError()
        return self._master

    async def get_tenant_handle(self, identifier: str) -> AsyncEngine:
        """Return the cached engine for ``identifier``, creating it on first use."""
        if not identifier:
            raise ValueError("Tenant identifier is required")

        engine = self._tenants.get(identifier)
        if engine is not None:
            return engine

        lock = self._creation_locks.setdefault(identifier, asyncio.Lock())
        async with lock:
            engine = self._tenants.get(identifier)
            if engine is None:
                engine = await self._connect(self.tenant_database_name(identifier))
                cached = self._tenants.setdefault(identifier, engine)
                if cached is not engine:
                    # Another creator won (its lock was replaced by close_all)
                    await engine.dispose()
                    engine = cached
        return engine

    @asynccontextmanager
    async def temporary_handle(self, identifier: str) -> AsyncIterator[AsyncEngine]:
        """Engine for ``identifier`` that is disposed on exit and never cached."""
        engine = await self._connect(self.tenant_database_name(identifier))
        try:
            yield engine
        finally:
            await engine.dispose()

    async def create_tenant_database(self, identifier: str) -> AsyncEngine:
        """
        Provision the database for a new tenant and return its engine.

        Creates the physical database when missing, then the fixed set of
        tenant tables and indexes. Safe to re-run on an initialised tenant.
        """
        if not is_valid_tenant_identifier(identifier):
            raise ValidationError(
                "Subdomain must be 3-30 characters of lowercase letters, numbers and hyphens",
                field="subdomain",
            )

        # Deferred import registers every tenant table on TenantBase.metadata
        import hireflow.models  # noqa: F401

        await self._ensure_database_exists(self.tenant_database_name(identifier))
        engine = await self.get_tenant_handle(identifier)
        async with engine.begin() as conn:
            await conn.run_sync(TenantBase.metadata.create_all)

        logger.info("Tenant database initialised: %s", self.tenant_database_name(identifier))
        return engine

    async def _ensure_database_exists(self, database_name: str) -> None:
        master = self.get_master_handle()
        async with master.connect() as conn:
            conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
            exists = await conn.scalar(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": database_name},
            )
            if not exists:
                quoted = database_name.replace('"', '""')
                await conn.execute(text(f'CREATE DATABASE "{quoted}"'))
                logger.info("Created database %s", database_name)

    async def close_tenant_handle(self, identifier: str) -> None:
        """Dispose and evict one tenant engine, waiting for an in-flight creation first."""
        lock = self._creation_locks.get(identifier)
        if lock is None:
            engine = self._tenants.pop(identifier, None)
        else:
            async with lock:
                engine = self._tenants.pop(identifier, None)
        if engine is None:
            return
        await engine.dispose()
        logger.info("Tenant connection closed: %s", identifier)

    async def close_all(self) -> list[str]:
        """
        Dispose every tenant engine, then the master engine.

        A failure on one engine does not stop the others; the names of the
        databases that failed to close are logged and returned.
        """
        failures: list[str] = []
        for identifier, engine in list(self._tenants.items()):
            try:
                await engine.dispose()
                logger.info("Closed tenant connection: %s", identifier)
            except Exception:
                logger.exception("Error closing tenant connection: %s", identifier)
                failures.append(self.tenant_database_name(identifier))
        self._tenants.clear()
        self._creation_locks.clear()

        if self._master is not None:
            master, self._master = self._master, None
            try:
                await master.dispose()
                logger.info("Master connection closed")
            except Exception:
                logger.exception("Error closing master connection")
                failures.append(self.master_database_name)

        return failures

    def cached_identifiers(self) -> list[str]:
        return list(self._tenants)

    def master_session(self):
        return session_scope(self.get_master_handle())


@asynccontextmanager
async def session_scope(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Open an AsyncSession on ``engine``; objects stay usable after commit."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


# ── FastAPI dependencies ───────────────────────────────────────────────────


def get_registry(request: Request) -> DatabaseRegistry:
    return request.app.state.db_registry


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Session on the database bound to this request (tenant or master)."""
    engine = getattr(request.state, "db", None)
    if engine is None:
        raise NotInitializedError("No database bound to this request")
    async with session_scope(engine) as db:
        try:
            yield db
        except Exception as e:
            logger.error("Database session error: %s", e)
            raise


async def get_master_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Session on the master database regardless of the request's tenant."""
    async with get_registry(request).master_session() as db:
        try:
            yield db
        except Exception as e:
            logger.error("Master database session error: %s", e)
            raise
