"""
Company router - API endpoints for a tenant's companies.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_tenant_store
from app.schemas.company import CompanyCreate, CompanyRead, CompanyUpdate
from app.tenancy.store import TenantScopedStore

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=List[CompanyRead])
async def list_companies(
    store: TenantScopedStore = Depends(get_tenant_store),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """List companies with pagination."""
    return await store.companies.list(limit=limit, offset=offset)


@router.get("/by-name/{name}", response_model=CompanyRead)
async def get_company_by_name(
    name: str,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    return await store.companies.get_by_name(name)


@router.get("/{company_id}", response_model=CompanyRead)
async def get_company(
    company_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Get a company by ID."""
    return await store.companies.get_by_id(company_id)


@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
async def create_company(
    data: CompanyCreate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Create a new company."""
    return await store.companies.create(data)


@router.put("/{company_id}", response_model=CompanyRead)
async def update_company(
    company_id: int,
    data: CompanyUpdate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Update a company."""
    return await store.companies.update(company_id, data)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    await store.companies.delete(company_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
