"""
Payment and payment history Pydantic schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead

PaymentType = Literal["partial", "full"]
PaymentHistoryAction = Literal["created", "updated", "deleted"]


class PaymentCreate(BaseModel):
    """Schema for recording a payment received from a company."""

    company_name: str = Field(min_length=1, max_length=100)
    amount: Decimal = Field(gt=0)
    description: Optional[str] = None
    week_label: str = Field(min_length=1, max_length=100)
    payment_type: PaymentType = "partial"
    payment_date: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    """Schema for updating a payment. All fields optional."""

    company_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    week_label: Optional[str] = None
    payment_type: Optional[PaymentType] = None
    payment_date: Optional[datetime] = None


class PaymentRead(NamespaceRecordRead):
    company_name: str
    amount: Decimal
    description: Optional[str] = None
    payment_date: Optional[datetime] = None
    week_label: str
    payment_type: Optional[str] = None


class PaymentHistoryCreate(BaseModel):
    payment_id: Optional[int] = None
    action: PaymentHistoryAction
    previous_data: Optional[Any] = None


class PaymentHistoryRead(NamespaceRecordRead):
    payment_id: Optional[int] = None
    action: str
    previous_data: Optional[Any] = None
    created_at: Optional[datetime] = None
