"""
Transport order Pydantic schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead

OrderStatus = Literal["draft", "sent", "confirmed"]


class TransportOrderCreate(BaseModel):
    order_number: str = Field(min_length=1, max_length=100)
    company_name: str = Field(min_length=1, max_length=100)
    order_date: datetime
    week_label: str = Field(min_length=1, max_length=100)
    vrids: Optional[List[str]] = None
    total_amount: Decimal
    route: Optional[str] = "DE-BE-NL"
    status: OrderStatus = "draft"


class TransportOrderUpdate(BaseModel):
    company_name: Optional[str] = None
    order_date: Optional[datetime] = None
    week_label: Optional[str] = None
    vrids: Optional[List[str]] = None
    total_amount: Optional[Decimal] = None
    route: Optional[str] = None
    status: Optional[OrderStatus] = None


class TransportOrderRead(NamespaceRecordRead):
    order_number: str
    company_name: str
    order_date: datetime
    week_label: str
    vrids: Optional[List[str]] = None
    total_amount: Decimal
    route: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
