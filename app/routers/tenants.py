"""
Tenant admin router - registry endpoints.

Creating a tenant also provisions its namespace; deleting one drops it.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_lifecycle, get_registry
from app.schemas.tenant import TenantCreate, TenantRead, TenantStatusUpdate, TenantUpdate
from app.services.tenant_lifecycle_service import TenantLifecycleService
from app.services.tenant_registry import TenantRegistry

router = APIRouter(prefix="/admin/tenants", tags=["tenants"])


@router.post("", response_model=TenantRead, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    lifecycle: TenantLifecycleService = Depends(get_lifecycle),
):
    """Register a tenant and provision its namespace."""
    return await lifecycle.create_tenant(data)


@router.get("", response_model=List[TenantRead])
async def list_tenants(
    registry: TenantRegistry = Depends(get_registry),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    status: Optional[str] = None,
):
    """List tenants with pagination, optionally filtered by status."""
    return await registry.list_tenants(limit=limit, offset=offset, status=status)


@router.get("/by-subdomain/{subdomain}", response_model=TenantRead)
async def get_tenant_by_subdomain(
    subdomain: str,
    registry: TenantRegistry = Depends(get_registry),
):
    return await registry.get_by_subdomain(subdomain)


@router.get("/{tenant_id}", response_model=TenantRead)
async def get_tenant(
    tenant_id: str,
    registry: TenantRegistry = Depends(get_registry),
):
    """Get a tenant by ID."""
    return await registry.get_tenant(tenant_id)


@router.patch("/{tenant_id}", response_model=TenantRead)
async def update_tenant(
    tenant_id: str,
    data: TenantUpdate,
    registry: TenantRegistry = Depends(get_registry),
):
    """Update tenant metadata (contact, subscription fields)."""
    return await registry.update_tenant(tenant_id, data)


@router.patch("/{tenant_id}/status", response_model=TenantRead)
async def update_tenant_status(
    tenant_id: str,
    data: TenantStatusUpdate,
    lifecycle: TenantLifecycleService = Depends(get_lifecycle),
):
    """Change a tenant's status. Suspending a tenant stops serving it at once."""
    return await lifecycle.update_status(tenant_id, data.status)


@router.post("/{tenant_id}/reprovision", response_model=TenantRead)
async def reprovision_tenant(
    tenant_id: str,
    lifecycle: TenantLifecycleService = Depends(get_lifecycle),
):
    """
    Drop and rebuild the tenant's namespace.

    Destroys all of the tenant's data. Also the retry path after a failed
    creation.
    """
    return await lifecycle.reprovision(tenant_id)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    lifecycle: TenantLifecycleService = Depends(get_lifecycle),
):
    """Delete a tenant together with its namespace."""
    await lifecycle.delete_tenant(tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
