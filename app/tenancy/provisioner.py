"""
Schema provisioner - creates and drops tenant namespaces.

Provisioning is destructive: an existing namespace is dropped with all of its
data before the fresh one is built. The registry's `provisioned_at` marker
decides whether a tenant needs provisioning, and `provision()` refuses to
rebuild a provisioned tenant unless it is called with `force=True`. Builds and
drops first take the registry claim, so only one runs per tenant at a time.
"""

import logging
import random
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import inspect, insert
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.schema import CreateSchema, DropSchema

from app.core.config import settings
from app.errors import ProvisioningError
from app.models.tenant_schema import TenantTables
from app.services.tenant_registry import TenantRegistry
from app.tenancy.naming import SchemaName

logger = logging.getLogger(__name__)


DEFAULT_COMPANIES = (
    {
        "name": "SC FAST & EXPRESS SRL",
        "commission_rate": Decimal("0.0200"),
        "cif": "RO35986465",
        "trade_register_number": "J40/12345/2015",
        "address": "Str. Transportului nr. 1",
        "location": "București",
        "county": "București",
        "country": "Romania",
        "contact": "contact@fastexpress.ro",
        "is_main_company": True,
    },
    {
        "name": "DE Cargo Speed",
        "commission_rate": Decimal("0.1500"),
        "cif": "RO12345678",
        "trade_register_number": "J40/1234/2020",
        "address": "Strada Transportului, Nr. 1, București",
        "location": "București",
        "county": "București",
        "country": "Romania",
    },
    {
        "name": "Fast Express",
        "commission_rate": Decimal("0.1200"),
        "cif": "RO87654321",
        "trade_register_number": "J40/5678/2021",
        "address": "Strada Vitezei, Nr. 10, Cluj",
        "location": "Cluj",
        "county": "Cluj",
        "country": "Romania",
    },
    {
        "name": "Transport Company SRL",
        "commission_rate": Decimal("0.0400"),
        "address": "Adresa companiei de transport",
        "location": "București",
        "county": "București",
        "country": "Romania",
        "contact": "contact@transport.ro",
    },
)


class SchemaProvisioner:
    """Builds tenant namespaces from the table template."""

    def __init__(
        self,
        engine: AsyncEngine,
        registry: TenantRegistry,
        rng: Optional[random.Random] = None,
    ):
        self.engine = engine
        self.registry = registry
        self.rng = rng or random.Random()

    async def provision(self, tenant_id: str, *, force: bool = False) -> SchemaName:
        """
        Create the tenant's namespace with every table and the default rows.

        Raises TenantNotFoundError for an unregistered tenant,
        TenantAlreadyProvisionedError when the tenant is already provisioned
        and `force` is not set, and ProvisioningInProgressError while another
        caller holds the tenant. With `force=True` the namespace is dropped
        and rebuilt, so all tenant data is lost.

        The build runs in one transaction. If it fails the claim is released
        and the registry keeps the marker and status it had before, then
        ProvisioningError is raised. Retry by provisioning again from scratch.
        """
        tenant = await self.registry.claim(tenant_id, force=force)
        namespace = SchemaName(tenant.schema_name)

        logger.info("Provisioning namespace %s for tenant %s (force=%s)", namespace, tenant_id, force)
        try:
            async with self.engine.begin() as conn:
                await self._build(conn, namespace)
        except Exception as exc:
            logger.error("Provisioning %s for tenant %s failed: %s", namespace, tenant_id, exc)
            await self._release_claim(tenant_id)
            raise ProvisioningError(f"Provisioning {namespace} failed") from exc

        await self.registry.mark_provisioned(tenant_id)
        logger.info("Provisioned namespace %s", namespace)
        return namespace

    async def _build(self, conn: AsyncConnection, namespace: SchemaName) -> None:
        tables = TenantTables(namespace)

        await conn.execute(DropSchema(str(namespace), cascade=True, if_exists=True))
        await conn.execute(CreateSchema(str(namespace)))
        # create_all orders tables by foreign key dependency
        await conn.run_sync(tables.metadata.create_all)

        start = settings.ORDER_SEQUENCE_BASE + self.rng.randint(0, settings.ORDER_SEQUENCE_SPREAD - 1)
        await conn.execute(insert(tables.order_sequence).values(current_number=start))
        for company in DEFAULT_COMPANIES:
            await conn.execute(insert(tables.companies).values(**company))

    async def drop(self, tenant_id: str) -> None:
        """
        Drop the tenant's namespace and everything in it. Irreversible.

        The tenant is claimed for the whole drop, and the marker is cleared
        only after the drop committed. A failed drop releases the claim and
        leaves the tenant provisioned with its data in place.
        """
        tenant = await self.registry.claim(tenant_id, force=True)
        namespace = SchemaName(tenant.schema_name)

        try:
            async with self.engine.begin() as conn:
                await conn.execute(DropSchema(str(namespace), cascade=True, if_exists=True))
        except Exception:
            logger.error("Dropping namespace %s of tenant %s failed", namespace, tenant_id)
            await self._release_claim(tenant_id)
            raise

        await self.registry.mark_dropped(tenant_id)
        logger.warning("Dropped namespace %s of tenant %s", namespace, tenant_id)

    async def _release_claim(self, tenant_id: str) -> None:
        # The original failure is what the caller sees; a stuck claim expires
        try:
            await self.registry.release_claim(tenant_id)
        except Exception:
            logger.exception("Could not release provisioning claim of tenant %s", tenant_id)

    async def namespace_exists(self, namespace: SchemaName) -> bool:
        namespace = SchemaName(namespace)
        async with self.engine.connect() as conn:
            return await conn.run_sync(lambda sync_conn: inspect(sync_conn).has_schema(str(namespace)))

    async def list_tables(self, namespace: SchemaName) -> List[str]:
        """Names of the tables that exist in the namespace, sorted."""
        namespace = SchemaName(namespace)
        async with self.engine.connect() as conn:
            names = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names(schema=str(namespace))
            )
        return sorted(names)
