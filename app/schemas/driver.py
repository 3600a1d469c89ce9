"""
Driver Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class DriverCreate(BaseModel):
    """Schema for creating a new driver."""

    name: str = Field(min_length=1, max_length=200)
    company_id: Optional[int] = None
    name_variants: Optional[List[str]] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class DriverUpdate(BaseModel):
    """Schema for updating a driver. All fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    company_id: Optional[int] = None
    name_variants: Optional[List[str]] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class DriverRead(NamespaceRecordRead):
    """Schema for reading driver data (API response)."""

    name: str
    company_id: Optional[int] = None
    name_variants: Optional[List[str]] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
