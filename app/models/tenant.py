"""
Tenant model.

A Tenant represents a customer organization using the invoicing system.
Each tenant's operational data lives in its own schema; this table lives in
the shared control-plane schema and only holds metadata about tenants.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.config import settings
from app.db.base import Base


class TenantStatus:
    """Lifecycle states of a tenant."""
    INACTIVE = "inactive"
    TRIAL = "trial"
    ACTIVE = "active"
    SUSPENDED = "suspended"

    ALL = [INACTIVE, TRIAL, ACTIVE, SUSPENDED]

    # Only these may be served by the connection router
    SERVING = (TRIAL, ACTIVE)


class Tenant(Base):
    """
    Tenant registry table - represents a customer organization.

    `provisioned_at` is the explicit record that the tenant's namespace was
    fully created. Code that needs to know whether a namespace is usable reads
    this column; it never infers it from caches or from the schema existing.

    `provisioning_started_at` is a claim: it is set while a namespace build or
    drop is running, and no other caller may build, drop or serve the tenant
    until it is cleared or older than PROVISIONING_CLAIM_TIMEOUT_SECONDS.
    """

    __tablename__ = "tenants"
    __table_args__ = {"schema": settings.CONTROL_SCHEMA}

    # Tenant identifier, also the input of the namespace name
    id: Mapped[str] = mapped_column(String(100), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(63), nullable=False, unique=True, index=True)
    company_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TenantStatus.INACTIVE,
        server_default=TenantStatus.INACTIVE,
    )

    # Contact info
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Subscription metadata (billing itself is handled elsewhere)
    subscription_plan: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    trial_ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    subscription_ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Namespace
    schema_name: Mapped[str] = mapped_column(String(63), nullable=False, unique=True)
    provisioned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    provisioning_started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def is_provisioned(self) -> bool:
        return self.provisioned_at is not None

    def provisioning_in_progress(self, now: datetime) -> bool:
        if self.provisioning_started_at is None:
            return False
        timeout = timedelta(seconds=settings.PROVISIONING_CLAIM_TIMEOUT_SECONDS)
        return self.provisioning_started_at > now - timeout

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, status={self.status}, schema={self.schema_name})>"
