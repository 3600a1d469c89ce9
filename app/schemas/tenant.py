"""
Tenant Pydantic schemas.

These define the data structure for tenant registry requests and responses.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

TenantStatusValue = Literal["inactive", "trial", "active", "suspended"]


class TenantCreate(BaseModel):
    """Schema for registering a new tenant."""

    # Namespace is "tenant_" + id, limited to 63 bytes
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1, max_length=56)
    name: str = Field(min_length=1, max_length=255)
    subdomain: str = Field(min_length=1, max_length=63, pattern=r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
    company_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    subscription_plan: Optional[str] = None


class TenantUpdate(BaseModel):
    """Schema for updating tenant metadata. All fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    company_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    subscription_plan: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    subscription_ends_at: Optional[datetime] = None


class TenantStatusUpdate(BaseModel):
    """Schema for a control-plane status transition."""

    status: TenantStatusValue


class TenantRead(BaseModel):
    """Schema for reading tenant data (API response). The namespace is not exposed."""

    id: str
    name: str
    subdomain: str
    status: str
    company_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    subscription_plan: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    subscription_ends_at: Optional[datetime] = None
    provisioned_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
