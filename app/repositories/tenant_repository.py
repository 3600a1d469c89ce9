"""
Tenant repository - database operations for the tenant registry.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from app.models.tenant import Tenant
from app.schemas.tenant import TenantCreate, TenantUpdate


class TenantRepository:
    """Repository for Tenant database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> List[Tenant]:
        """List tenants, newest first."""
        query = select(Tenant)

        if status is not None:
            query = query.where(Tenant.status == status)

        query = query.order_by(Tenant.created_at.desc()).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        result = await self.db.execute(select(Tenant).where(Tenant.id == tenant_id))
        return result.scalar_one_or_none()

    async def get_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        result = await self.db.execute(select(Tenant).where(Tenant.subdomain == subdomain))
        return result.scalar_one_or_none()

    async def find_conflict(self, tenant_id: str, subdomain: str, schema_name: str) -> Optional[Tenant]:
        """Return any tenant that already owns this id, subdomain or namespace."""
        result = await self.db.execute(
            select(Tenant).where(
                or_(
                    Tenant.id == tenant_id,
                    Tenant.subdomain == subdomain,
                    Tenant.schema_name == schema_name,
                )
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, data: TenantCreate, schema_name: str, status: str) -> Tenant:
        """Create a new tenant record."""
        tenant = Tenant(
            schema_name=schema_name,
            status=status,
            **data.model_dump(),
        )
        self.db.add(tenant)
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def update(self, tenant_id: str, data: TenantUpdate) -> Optional[Tenant]:
        """Update tenant metadata."""
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(tenant, field, value)

        tenant.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def set_status(self, tenant_id: str, status: str) -> Optional[Tenant]:
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return None

        tenant.status = status
        tenant.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def set_provisioning(
        self,
        tenant_id: str,
        provisioned_at: Optional[datetime],
        status: Optional[str] = None,
        trial_ends_at: Optional[datetime] = None,
    ) -> Optional[Tenant]:
        """
        Record (or clear) the provisioning marker and drop the claim,
        optionally moving the status.
        """
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return None

        tenant.provisioned_at = provisioned_at
        tenant.provisioning_started_at = None
        if status is not None:
            tenant.status = status
        if trial_ends_at is not None:
            tenant.trial_ends_at = trial_ends_at
        tenant.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def claim_provisioning(
        self,
        tenant_id: str,
        now: datetime,
        stale_before: datetime,
        allow_provisioned: bool,
    ) -> Optional[Tenant]:
        """
        Take the provisioning claim in one conditional UPDATE.

        Returns None when the tenant is missing, already claimed (by a claim
        newer than `stale_before`), or provisioned while `allow_provisioned`
        is false.
        """
        stmt = (
            update(Tenant)
            .where(
                Tenant.id == tenant_id,
                or_(
                    Tenant.provisioning_started_at.is_(None),
                    Tenant.provisioning_started_at < stale_before,
                ),
            )
            .values(provisioning_started_at=now, updated_at=func.now())
            .returning(Tenant)
        )
        if not allow_provisioned:
            stmt = stmt.where(Tenant.provisioned_at.is_(None))

        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def release_claim(self, tenant_id: str) -> Optional[Tenant]:
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            return None

        tenant.provisioning_started_at = None
        tenant.updated_at = func.now()
        await self.db.flush()
        await self.db.refresh(tenant)
        return tenant

    async def delete(self, tenant_id: str) -> int:
        """Delete a tenant record. Returns the number of rows removed."""
        result = await self.db.execute(delete(Tenant).where(Tenant.id == tenant_id))
        await self.db.flush()
        return result.rowcount
