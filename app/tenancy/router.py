"""
Tenant connection router.

Maps a tenant id to a `TenantHandle` bound to the tenant's namespace. Handles
are cached for the lifetime of the router; all of them share one engine and
therefore one connection pool. A tenant that has never been provisioned is
provisioned on first resolve. A provisioned tenant is never provisioned again
by the router, and a tenant claimed by a build or drop is not served.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import settings
from app.errors import (
    ProvisioningInProgressError,
    TenancyError,
    TenantInactiveError,
    TenantResolutionError,
    TenantSuspendedError,
    TrialExpiredError,
)
from app.models.tenant import Tenant, TenantStatus
from app.services.tenant_registry import TenantRegistry
from app.tenancy.naming import SchemaName
from app.tenancy.provisioner import SchemaProvisioner
from app.tenancy.store import TenantScopedStore
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class TenantHandle:
    """
    A tenant's namespace-bound store, as handed out by the router.

    The handle keeps the registry record it was last checked against, so
    status and trial end are enforced on every resolve, not only on a miss.
    """

    def __init__(self, tenant: Tenant, store: TenantScopedStore):
        self.tenant_id = tenant.id
        self.namespace = store.namespace
        self.store = store
        self.refresh(tenant)

    def __repr__(self) -> str:
        return f"<TenantHandle tenant_id={self.tenant_id!r} closed={self.closed}>"

    @property
    def closed(self) -> bool:
        return self.store.closed

    def close(self) -> None:
        self.store.close()

    def refresh(self, tenant: Tenant) -> None:
        self.tenant = tenant
        self.checked_at = time.monotonic()

    def needs_recheck(self, recheck_seconds: float) -> bool:
        return time.monotonic() - self.checked_at >= recheck_seconds


class TenantConnectionRouter:
    """
    Resolves tenant ids to cached handles.

    The engine, registry and provisioner are passed in; the router only
    disposes the engine on `release_all()` when it was told it owns it.
    Cached handles are re-read from the registry every `recheck_seconds`.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        registry: TenantRegistry,
        provisioner: SchemaProvisioner,
        *,
        owns_engine: bool = False,
        recheck_seconds: Optional[float] = None,
    ):
        self.engine = engine
        self.registry = registry
        self.provisioner = provisioner
        self.owns_engine = owns_engine
        if recheck_seconds is None:
            recheck_seconds = settings.TENANT_RECHECK_SECONDS
        self.recheck_seconds = recheck_seconds
        self._handles: Dict[str, TenantHandle] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, tenant_id: str) -> asyncio.Lock:
        lock = self._locks.get(tenant_id)
        if lock is None:
            lock = self._locks.setdefault(tenant_id, asyncio.Lock())
        return lock

    async def resolve(self, tenant_id: str) -> TenantHandle:
        """
        Return the handle for `tenant_id`, creating it on first use.

        Raises TenantNotFoundError for unknown tenants; TenantSuspendedError,
        TenantInactiveError and TrialExpiredError for tenants that may not be
        served (a cached handle is released when that happens);
        ProvisioningInProgressError while another caller builds or drops the
        namespace; and ProvisioningError when a first-time provisioning fails.
        Database failures during the lookup raise TenantResolutionError.
        """
        handle = self._handles.get(tenant_id)
        if handle is not None and not handle.needs_recheck(self.recheck_seconds):
            return self._serve(handle)

        async with self._lock_for(tenant_id):
            # Another task may have built or rechecked it while we waited
            handle = self._handles.get(tenant_id)
            if handle is not None and not handle.needs_recheck(self.recheck_seconds):
                return self._serve(handle)

            if handle is None:
                logger.info("Resolving tenant %s (cache miss)", tenant_id)
            try:
                tenant = await self._load(tenant_id)
            except TenancyError:
                self.release(tenant_id)
                raise
            except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
                logger.error("Resolving tenant %s failed: %s", tenant_id, exc)
                raise TenantResolutionError(f"Could not resolve tenant {tenant_id!r}") from exc

            if handle is not None and handle.namespace == tenant.schema_name:
                handle.refresh(tenant)
                return handle

            namespace = SchemaName(tenant.schema_name)
            handle = TenantHandle(tenant, TenantScopedStore(self.engine, namespace))
            self._handles[tenant_id] = handle
            return handle

    async def _load(self, tenant_id: str) -> Tenant:
        """Registry record of a tenant that may be served, provisioning it if it never was."""
        tenant = await self.registry.get_tenant(tenant_id)
        if tenant.provisioning_in_progress(utc_now()):
            raise ProvisioningInProgressError(tenant_id)

        if not tenant.is_provisioned:
            if tenant.status == TenantStatus.SUSPENDED:
                raise TenantSuspendedError(f"Tenant {tenant_id!r} is suspended")
            await self.provisioner.provision(tenant_id)
            tenant = await self.registry.get_tenant(tenant_id)

        self._check_access(tenant)
        return tenant

    def _serve(self, handle: TenantHandle) -> TenantHandle:
        try:
            self._check_access(handle.tenant)
        except TenancyError:
            self.release(handle.tenant_id)
            raise
        return handle

    @staticmethod
    def _check_access(tenant: Tenant) -> None:
        if tenant.status == TenantStatus.SUSPENDED:
            raise TenantSuspendedError(f"Tenant {tenant.id!r} is suspended")
        if (
            tenant.status == TenantStatus.TRIAL
            and tenant.trial_ends_at is not None
            and tenant.trial_ends_at <= utc_now()
        ):
            raise TrialExpiredError(f"Trial of tenant {tenant.id!r} ended at {tenant.trial_ends_at}")
        if tenant.status not in TenantStatus.SERVING:
            raise TenantInactiveError(f"Tenant {tenant.id!r} has status {tenant.status!r}")

    @asynccontextmanager
    async def exclusive(self, tenant_id: str) -> AsyncIterator[None]:
        """
        Hold the tenant's resolve lock with its cached handle released.

        Resolves of the tenant wait until the block exits. Namespace builds
        and drops run inside it.
        """
        async with self._lock_for(tenant_id):
            self.release(tenant_id)
            yield

    def release(self, tenant_id: str) -> None:
        """Drop the tenant's cached handle and close it. Unknown ids are ignored."""
        handle = self._handles.pop(tenant_id, None)
        if handle is not None:
            handle.close()
            logger.info("Released handle for tenant %s", tenant_id)

    async def release_all(self) -> None:
        """Close every handle; dispose the engine if this router owns it."""
        count = len(self._handles)
        for handle in self._handles.values():
            handle.close()
        self._handles.clear()
        self._locks.clear()
        if self.owns_engine:
            await self.engine.dispose()
        logger.info("Released %d tenant handles", count)

    def is_cached(self, tenant_id: str) -> bool:
        return tenant_id in self._handles

    def cached_tenant_ids(self) -> List[str]:
        return sorted(self._handles)

    def stats(self) -> Dict[str, object]:
        return {
            "active_tenants": len(self._handles),
            "tenant_ids": self.cached_tenant_ids(),
        }
