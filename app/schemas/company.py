"""
Company Pydantic schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class CompanyCreate(BaseModel):
    """Schema for creating a new company."""

    name: str = Field(min_length=1, max_length=100)
    commission_rate: Decimal = Field(default=Decimal("0.0400"), ge=0, lt=1)
    cif: Optional[str] = None
    trade_register_number: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = "Romania"
    contact: Optional[str] = None
    is_main_company: bool = False


class CompanyUpdate(BaseModel):
    """Schema for updating a company. All fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    commission_rate: Optional[Decimal] = Field(default=None, ge=0, lt=1)
    cif: Optional[str] = None
    trade_register_number: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None
    contact: Optional[str] = None
    is_main_company: Optional[bool] = None


class CompanyRead(NamespaceRecordRead):
    """Schema for reading company data (API response)."""

    name: str
    commission_rate: Decimal
    cif: Optional[str] = None
    trade_register_number: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None
    contact: Optional[str] = None
    is_main_company: bool = False
    created_at: Optional[datetime] = None
