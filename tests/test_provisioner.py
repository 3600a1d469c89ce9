"""
SchemaProvisioner claim handling with an in-memory registry and an engine
whose transactions fail.
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import (
    ProvisioningError,
    ProvisioningInProgressError,
    TenantAlreadyProvisionedError,
    TenantNotFoundError,
)
from app.models.tenant import Tenant, TenantStatus
from app.tenancy.naming import derive_namespace
from app.tenancy.provisioner import SchemaProvisioner
from app.tenancy.router import TenantConnectionRouter
from app.utils.time import utc_now


class MemoryRegistry:
    """Claim, release and marker operations over plain Tenant objects."""

    def __init__(self):
        self.tenants = {}
        self.calls = []

    def add(self, tenant_id, status=TenantStatus.INACTIVE, provisioned=False, trial_ends_at=None):
        self.tenants[tenant_id] = Tenant(
            id=tenant_id,
            name=tenant_id,
            subdomain=tenant_id,
            status=status,
            schema_name=str(derive_namespace(tenant_id)),
            provisioned_at=utc_now() - timedelta(days=30) if provisioned else None,
            trial_ends_at=trial_ends_at,
        )
        return self.tenants[tenant_id]

    async def get_tenant(self, tenant_id):
        if tenant_id not in self.tenants:
            raise TenantNotFoundError(tenant_id)
        return self.tenants[tenant_id]

    async def claim(self, tenant_id, *, force=False):
        self.calls.append(("claim", tenant_id, force))
        tenant = await self.get_tenant(tenant_id)
        if tenant.is_provisioned and not force:
            raise TenantAlreadyProvisionedError(tenant_id)
        if tenant.provisioning_in_progress(utc_now()):
            raise ProvisioningInProgressError(tenant_id)
        tenant.provisioning_started_at = utc_now()
        return tenant

    async def release_claim(self, tenant_id):
        self.calls.append(("release_claim", tenant_id))
        tenant = await self.get_tenant(tenant_id)
        tenant.provisioning_started_at = None
        return tenant

    async def mark_provisioned(self, tenant_id):
        self.calls.append(("mark_provisioned", tenant_id))

    async def mark_dropped(self, tenant_id):
        self.calls.append(("mark_dropped", tenant_id))


class FailingEngine:
    """Every transaction fails to start, as on a lost connection."""

    def __init__(self):
        self.attempts = 0

    def begin(self):
        return self

    async def __aenter__(self):
        self.attempts += 1
        raise OperationalError("BEGIN", {}, ConnectionResetError("connection reset"))

    async def __aexit__(self, *exc_info):
        return False


def make_provisioner():
    registry = MemoryRegistry()
    engine = FailingEngine()
    return SchemaProvisioner(engine, registry), registry, engine


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_drop_keeps_tenant_provisioned():
    provisioner, registry, _ = make_provisioner()
    tenant = registry.add("acme-1", status=TenantStatus.ACTIVE, provisioned=True)
    provisioned_at = tenant.provisioned_at

    with pytest.raises(OperationalError):
        await provisioner.drop("acme-1")

    assert tenant.provisioned_at == provisioned_at
    assert tenant.status == TenantStatus.ACTIVE
    assert tenant.provisioning_started_at is None
    assert ("mark_dropped", "acme-1") not in registry.calls


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resolve_after_failed_drop_does_not_rebuild():
    provisioner, registry, engine = make_provisioner()
    registry.add("acme-1", status=TenantStatus.ACTIVE, provisioned=True)
    with pytest.raises(OperationalError):
        await provisioner.drop("acme-1")
    attempts = engine.attempts

    router = TenantConnectionRouter(engine, registry, provisioner)
    handle = await router.resolve("acme-1")

    assert handle.namespace == "tenant_acme_1"
    assert engine.attempts == attempts
    assert [call for call in registry.calls if call[0] == "claim"] == [("claim", "acme-1", True)]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_rebuild_keeps_status_and_marker():
    provisioner, registry, _ = make_provisioner()
    tenant = registry.add("acme-1", status=TenantStatus.ACTIVE, provisioned=True)
    provisioned_at = tenant.provisioned_at

    with pytest.raises(ProvisioningError):
        await provisioner.provision("acme-1", force=True)

    assert tenant.status == TenantStatus.ACTIVE
    assert tenant.provisioned_at == provisioned_at
    assert tenant.trial_ends_at is None
    assert tenant.provisioning_started_at is None
    assert ("mark_provisioned", "acme-1") not in registry.calls


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_first_provisioning_leaves_tenant_inactive():
    provisioner, registry, _ = make_provisioner()
    tenant = registry.add("acme-1")

    with pytest.raises(ProvisioningError):
        await provisioner.provision("acme-1")

    assert tenant.status == TenantStatus.INACTIVE
    assert not tenant.is_provisioned
    assert tenant.provisioning_started_at is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_claimed_tenant_cannot_be_provisioned_or_dropped():
    provisioner, registry, engine = make_provisioner()
    tenant = registry.add("acme-1", status=TenantStatus.ACTIVE, provisioned=True)
    tenant.provisioning_started_at = utc_now()

    with pytest.raises(ProvisioningInProgressError):
        await provisioner.provision("acme-1", force=True)
    with pytest.raises(ProvisioningInProgressError):
        await provisioner.drop("acme-1")
    assert engine.attempts == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_provisioned_tenant_needs_force():
    provisioner, registry, engine = make_provisioner()
    registry.add("acme-1", status=TenantStatus.ACTIVE, provisioned=True)

    with pytest.raises(TenantAlreadyProvisionedError):
        await provisioner.provision("acme-1")
    assert engine.attempts == 0
