"""
Tenant lifecycle service - multi-step operations over registry, provisioner
and router.

Every namespace build or drop runs inside the router's `exclusive()` block
for the tenant, so requests in this process wait for it instead of racing
it. The registry claim taken by the provisioner covers other processes.
"""

import logging

from app.errors import ProvisioningError
from app.models.tenant import Tenant, TenantStatus
from app.schemas.tenant import TenantCreate
from app.services.tenant_registry import TenantRegistry
from app.tenancy.provisioner import SchemaProvisioner
from app.tenancy.router import TenantConnectionRouter

logger = logging.getLogger(__name__)


class TenantLifecycleService:
    """Service for creating, rebuilding and deleting tenants."""

    def __init__(
        self,
        registry: TenantRegistry,
        provisioner: SchemaProvisioner,
        router: TenantConnectionRouter,
    ):
        self.registry = registry
        self.provisioner = provisioner
        self.router = router

    async def create_tenant(self, data: TenantCreate) -> Tenant:
        """
        Register a tenant and provision its namespace.

        If provisioning fails the tenant stays registered as inactive and
        ProvisioningError propagates; retry with `reprovision()`.
        """
        tenant = await self.registry.create_tenant(data)
        try:
            async with self.router.exclusive(tenant.id):
                await self.provisioner.provision(tenant.id)
        except ProvisioningError:
            logger.error("Tenant %s registered but not provisioned", tenant.id)
            raise
        return await self.registry.get_tenant(tenant.id)

    async def reprovision(self, tenant_id: str) -> Tenant:
        """Drop and rebuild the tenant's namespace. All tenant data is lost."""
        async with self.router.exclusive(tenant_id):
            await self.provisioner.provision(tenant_id, force=True)
        logger.warning("Tenant %s reprovisioned; previous data discarded", tenant_id)
        return await self.registry.get_tenant(tenant_id)

    async def update_status(self, tenant_id: str, status: str) -> Tenant:
        tenant = await self.registry.update_status(tenant_id, status)
        if status not in TenantStatus.SERVING:
            self.router.release(tenant_id)
        return tenant

    async def delete_tenant(self, tenant_id: str) -> None:
        """
        Delete a tenant and its data.

        The namespace is dropped first, then the registry row removed, both
        while resolves of the tenant are held back. If the drop fails the
        tenant keeps its data and stays provisioned; if the row deletion
        fails the tenant is left suspended and can be deleted again.
        """
        await self.registry.get_tenant(tenant_id)
        async with self.router.exclusive(tenant_id):
            await self.provisioner.drop(tenant_id)
            await self.registry.delete_tenant(tenant_id)
        logger.info("Tenant %s deleted", tenant_id)
