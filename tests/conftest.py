"""
Pytest configuration and shared fixtures.
"""

import os
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.base import Base
from app.db.session import build_engine
from app.errors import TenantNotFoundError
from app.models.tenant import Tenant  # noqa: F401
from app.schemas.tenant import TenantCreate
from app.services.tenant_lifecycle_service import TenantLifecycleService
from app.services.tenant_registry import TenantRegistry
from app.tenancy.provisioner import SchemaProvisioner
from app.tenancy.router import TenantConnectionRouter


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)


def unique_tenant_id(label: str = "t") -> str:
    """A tenant id that does not collide with earlier test runs."""
    return f"{label}-{uuid.uuid4().hex[:10]}"


def tenant_payload(tenant_id: str) -> TenantCreate:
    return TenantCreate(
        id=tenant_id,
        name=f"Tenant {tenant_id}",
        subdomain=tenant_id.replace("_", "-").lower(),
        company_name="Test Transport SRL",
        contact_email="ops@example.com",
    )


# ---------------------------------------------------------------------------
# Database fixtures (only used by tests marked `db`)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine():
    url = os.environ.get("TEST_DATABASE_URL") or settings.DATABASE_URL
    engine = build_engine(url, pool_size=5, max_overflow=5)
    async with engine.begin() as conn:
        await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{settings.CONTROL_SCHEMA}"'))
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def registry(db_engine):
    return TenantRegistry(async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False))


@pytest_asyncio.fixture
async def provisioner(db_engine, registry):
    return SchemaProvisioner(db_engine, registry)


@pytest_asyncio.fixture
async def tenant_router(db_engine, registry, provisioner):
    router = TenantConnectionRouter(db_engine, registry, provisioner)
    yield router
    await router.release_all()


@pytest_asyncio.fixture
async def lifecycle(registry, provisioner, tenant_router):
    return TenantLifecycleService(registry, provisioner, tenant_router)


@pytest_asyncio.fixture
async def make_tenant(registry, lifecycle):
    """
    Register tenants for a test and delete them (namespace included) afterwards.

    Tenants are registered only; resolving them through the router
    provisions them.
    """
    created = []

    async def _discard(tenant_id: str):
        try:
            await lifecycle.delete_tenant(tenant_id)
        except TenantNotFoundError:
            pass

    async def _make(label: str = "t", tenant_id: str = None):
        if tenant_id is None:
            tenant_id = unique_tenant_id(label)
        else:
            # Fixed ids may survive an interrupted earlier run
            await _discard(tenant_id)
        await registry.create_tenant(tenant_payload(tenant_id))
        created.append(tenant_id)
        return tenant_id

    yield _make

    for tenant_id in created:
        await _discard(tenant_id)
