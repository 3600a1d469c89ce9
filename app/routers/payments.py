"""
Payment router - API endpoints for a tenant's payments.

Every write also records a payment history entry.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.dependencies import get_tenant_store
from app.schemas.payment import PaymentCreate, PaymentHistoryRead, PaymentRead, PaymentUpdate
from app.tenancy.store import TenantScopedStore

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentRead])
async def list_payments(
    store: TenantScopedStore = Depends(get_tenant_store),
    week_label: Optional[str] = None,
    company_name: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """
    List payments with pagination.

    Filters: week_label, company_name.
    """
    filters = {}
    if week_label is not None:
        filters["week_label"] = week_label
    if company_name is not None:
        filters["company_name"] = company_name
    if filters:
        return await store.payments.list_by(limit=limit, offset=offset, **filters)
    return await store.payments.list(limit=limit, offset=offset)


@router.get("/history", response_model=List[PaymentHistoryRead])
async def list_payment_history(
    store: TenantScopedStore = Depends(get_tenant_store),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """Payment history, newest first."""
    return await store.payment_history.list(limit=limit, offset=offset)


@router.get("/{payment_id}", response_model=PaymentRead)
async def get_payment(
    payment_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Get a payment by ID."""
    return await store.payments.get_by_id(payment_id)


@router.get("/{payment_id}/history", response_model=List[PaymentHistoryRead])
async def get_payment_history(
    payment_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    return await store.payment_history.list_for_payment(payment_id)


@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Record a payment."""
    return await store.record_payment(data)


@router.put("/{payment_id}", response_model=PaymentRead)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    """Update a payment."""
    return await store.update_payment(payment_id, data)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: int,
    store: TenantScopedStore = Depends(get_tenant_store),
):
    await store.delete_payment(payment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
