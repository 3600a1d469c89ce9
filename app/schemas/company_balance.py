"""
Company balance Pydantic schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class CompanyBalanceCreate(BaseModel):
    company_name: str = Field(min_length=1, max_length=100)
    week_label: str = Field(min_length=1, max_length=100)
    total_invoiced: Decimal
    total_paid: Decimal = Decimal("0")
    outstanding_balance: Decimal
    payment_status: str = "pending"


class CompanyBalanceUpdate(BaseModel):
    total_invoiced: Optional[Decimal] = None
    total_paid: Optional[Decimal] = None
    outstanding_balance: Optional[Decimal] = None
    payment_status: Optional[str] = None


class CompanyBalanceRead(NamespaceRecordRead):
    company_name: str
    week_label: str
    total_invoiced: Decimal
    total_paid: Optional[Decimal] = None
    outstanding_balance: Decimal
    payment_status: Optional[str] = None
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None
