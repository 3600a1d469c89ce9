"""
Tenant registry - control-plane store of tenant metadata.

Unlike request-scoped services, the registry outlives any single request:
the connection router and the provisioner call it from background paths, so
it opens its own short sessions from a session factory and commits each
operation on its own.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.errors import (
    NamespaceStillProvisionedError,
    ProvisioningInProgressError,
    TenantAlreadyExistsError,
    TenantAlreadyProvisionedError,
    TenantNotFoundError,
)
from app.models.tenant import Tenant, TenantStatus
from app.repositories.tenant_repository import TenantRepository
from app.schemas.tenant import TenantCreate, TenantUpdate
from app.tenancy.naming import derive_namespace
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class TenantRegistry:
    """Service for tenant registry operations."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create_tenant(self, data: TenantCreate) -> Tenant:
        """
        Register a tenant. It starts inactive and unprovisioned.

        Raises TenantAlreadyExistsError when the id, the subdomain or the
        derived namespace is taken. Two ids that sanitize to the same
        namespace ("acme-1" and "acme_1") conflict.
        """
        schema_name = derive_namespace(data.id)

        async with self.session_factory() as session:
            repo = TenantRepository(session)
            conflict = await repo.find_conflict(data.id, data.subdomain, schema_name)
            if conflict is not None:
                raise TenantAlreadyExistsError(
                    f"Tenant {data.id!r} conflicts with existing tenant {conflict.id!r}"
                )
            try:
                tenant = await repo.create(data, schema_name=schema_name, status=TenantStatus.INACTIVE)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise TenantAlreadyExistsError(f"Tenant {data.id!r} already exists") from exc

        logger.info("Registered tenant %s (namespace %s)", tenant.id, schema_name)
        return tenant

    async def get_tenant(self, tenant_id: str) -> Tenant:
        async with self.session_factory() as session:
            tenant = await TenantRepository(session).get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundError(tenant_id)
        return tenant

    async def get_by_subdomain(self, subdomain: str) -> Tenant:
        async with self.session_factory() as session:
            tenant = await TenantRepository(session).get_by_subdomain(subdomain)
        if tenant is None:
            raise TenantNotFoundError(subdomain)
        return tenant

    async def list_tenants(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> List[Tenant]:
        async with self.session_factory() as session:
            return await TenantRepository(session).list(limit=limit, offset=offset, status=status)

    async def update_tenant(self, tenant_id: str, data: TenantUpdate) -> Tenant:
        async with self.session_factory() as session:
            tenant = await TenantRepository(session).update(tenant_id, data)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            await session.commit()
        return tenant

    async def update_status(self, tenant_id: str, status: str) -> Tenant:
        """Control-plane status transition. Never touches the namespace."""
        if status not in TenantStatus.ALL:
            raise ValueError(f"Unknown tenant status {status!r}")

        async with self.session_factory() as session:
            tenant = await TenantRepository(session).set_status(tenant_id, status)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            await session.commit()

        logger.info("Tenant %s status -> %s", tenant_id, status)
        return tenant

    async def claim(self, tenant_id: str, *, force: bool = False) -> Tenant:
        """
        Take the tenant for a namespace build or drop.

        The claim is one conditional UPDATE, so of two concurrent callers
        (in this process or another) only one gets it. Without `force` a
        provisioned tenant cannot be claimed.

        Raises TenantNotFoundError, TenantAlreadyProvisionedError, or
        ProvisioningInProgressError when someone else holds the claim.
        """
        now = utc_now()
        stale_before = now - timedelta(seconds=settings.PROVISIONING_CLAIM_TIMEOUT_SECONDS)

        async with self.session_factory() as session:
            repo = TenantRepository(session)
            tenant = await repo.claim_provisioning(
                tenant_id, now=now, stale_before=stale_before, allow_provisioned=force
            )
            if tenant is None:
                current = await repo.get_by_id(tenant_id)
                if current is None:
                    raise TenantNotFoundError(tenant_id)
                if current.is_provisioned and not force:
                    raise TenantAlreadyProvisionedError(tenant_id)
                raise ProvisioningInProgressError(tenant_id)
            await session.commit()

        logger.info("Claimed tenant %s for provisioning", tenant_id)
        return tenant

    async def release_claim(self, tenant_id: str) -> Tenant:
        """Give up a claim without changing the marker or the status."""
        async with self.session_factory() as session:
            tenant = await TenantRepository(session).release_claim(tenant_id)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            await session.commit()
        return tenant

    async def mark_provisioned(self, tenant_id: str) -> Tenant:
        """
        Record that the namespace is complete and drop the claim.

        The trial starts only on a tenant's first provisioning. A rebuild of
        a tenant that was provisioned before keeps its status and trial end.
        """
        now = utc_now()
        async with self.session_factory() as session:
            repo = TenantRepository(session)
            tenant = await repo.get_by_id(tenant_id)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)

            if tenant.provisioned_at is None and tenant.status == TenantStatus.INACTIVE:
                tenant = await repo.set_provisioning(
                    tenant_id,
                    provisioned_at=now,
                    status=TenantStatus.TRIAL,
                    trial_ends_at=now + timedelta(days=settings.TRIAL_DAYS),
                )
            else:
                tenant = await repo.set_provisioning(tenant_id, provisioned_at=now)
            await session.commit()
        return tenant

    async def mark_dropped(self, tenant_id: str) -> Tenant:
        """
        Record that the namespace is gone.

        The tenant is left suspended so nothing provisions it again lazily
        before its registry row is deleted.
        """
        async with self.session_factory() as session:
            tenant = await TenantRepository(session).set_provisioning(
                tenant_id, provisioned_at=None, status=TenantStatus.SUSPENDED
            )
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            await session.commit()
        return tenant

    async def delete_tenant(self, tenant_id: str) -> None:
        """
        Remove the registry row.

        Only allowed once the namespace is dropped, so a crash halfway through
        a deletion leaves a harmless registry row instead of a namespace
        nobody owns.
        """
        async with self.session_factory() as session:
            repo = TenantRepository(session)
            tenant = await repo.get_by_id(tenant_id)
            if tenant is None:
                raise TenantNotFoundError(tenant_id)
            if tenant.provisioned_at is not None:
                raise NamespaceStillProvisionedError(tenant_id)

            await repo.delete(tenant_id)
            await session.commit()

        logger.info("Deleted registry record for tenant %s", tenant_id)
