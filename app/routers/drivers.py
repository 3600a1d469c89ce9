"""
Driver router - API endpoints for a tenant's drivers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_tenant_store
from app.schemas.driver import DriverCreate, DriverRead, DriverUpdate
from app.tenancy.store import TenantScopedStore

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.get("", response_model=List[DriverRead])
async def list_drivers(
    store: TenantScopedStore = Depends(get_tenant_store),
    company_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """
    List drivers with pagination.

    Filter by company_id to get one company's drivers.
    """
    if company_id is not None:
        return await store.drivers.list_by_company(company_id, limit=limit, offset=offset)
    return await store.drivers.list(limit=limit, offset=offset)


@router.get("/{driver_id}", response_model=DriverRead)
async def get_driver(
    driver_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Get a driver by ID."""
    return await store.drivers.get_by_id(driver_id)


@router.post("", response_model=DriverRead, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Create a new driver."""
    return await store.drivers.create(data)


@router.put("/{driver_id}", response_model=DriverRead)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Update a driver."""
    return await store.drivers.update(driver_id, data)


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_driver(
    driver_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    await store.drivers.delete(driver_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
