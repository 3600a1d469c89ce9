"""
FastAPI dependencies for the application.
"""

from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import AsyncSessionLocal
from app.services.tenant_lifecycle_service import TenantLifecycleService
from app.services.tenant_registry import TenantRegistry
from app.tenancy.router import TenantConnectionRouter
from app.tenancy.store import TenantScopedStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_tenant_id(x_tenant_id: str = Header(None)) -> str:
    """
    Extract and validate tenant_id from header.

    Raises 400 if X-Tenant-ID header is missing.
    """
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header is required"
        )
    return x_tenant_id.strip()


def get_tenant_router(request: Request) -> TenantConnectionRouter:
    """The application-wide router built in the lifespan handler."""
    return request.app.state.tenant_router


def get_registry(request: Request) -> TenantRegistry:
    return request.app.state.tenant_registry


def get_lifecycle(request: Request) -> TenantLifecycleService:
    return request.app.state.tenant_lifecycle


async def get_tenant_store(
    tenant_id: str = Depends(get_tenant_id),
    router: TenantConnectionRouter = Depends(get_tenant_router),
) -> TenantScopedStore:
    """
    Resolve the requesting tenant and return its namespace-bound store.

    Tenancy errors (unknown, suspended, trial expired...) propagate to the
    application's exception handler.
    """
    handle = await router.resolve(tenant_id)
    return handle.store
