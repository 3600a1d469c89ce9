"""
HTTP layer tests: routing, header handling and error mapping.

The tenancy core is replaced through dependency overrides, so no database
is needed.
"""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from app.core.dependencies import get_db, get_lifecycle, get_registry, get_tenant_router
from app.errors import (
    EntityNotFoundError,
    NoRowsAffectedError,
    ProvisioningError,
    StatementTimeoutError,
    TenantAlreadyExistsError,
    TenantNotFoundError,
    TenantSuspendedError,
    TrialExpiredError,
)
from app.main import app
from app.models.tenant import Tenant, TenantStatus
from app.schemas.company import CompanyRead
from app.schemas.driver import DriverRead
from app.schemas.payment import PaymentHistoryRead, PaymentRead

NOW = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


def company(company_id=1, name="Fast Express"):
    return CompanyRead(id=company_id, name=name, commission_rate=Decimal("0.1200"))


class FakeCompanies:
    def __init__(self):
        self.rows = {1: company()}

    async def list(self, limit=None, offset=0):
        return list(self.rows.values())

    async def get_by_id(self, company_id):
        if company_id not in self.rows:
            raise EntityNotFoundError("Company", company_id)
        return self.rows[company_id]

    async def get_by_name(self, name):
        for row in self.rows.values():
            if row.name == name:
                return row
        raise EntityNotFoundError("Company", {"name": name})

    async def create(self, data):
        row = company(max(self.rows) + 1, data.name)
        self.rows[row.id] = row
        return row

    async def update(self, company_id, data):
        if company_id not in self.rows:
            raise NoRowsAffectedError("Company", "update", company_id)
        row = self.rows[company_id].model_copy(update=data.model_dump(exclude_unset=True))
        self.rows[company_id] = row
        return row

    async def delete(self, company_id):
        if self.rows.pop(company_id, None) is None:
            raise NoRowsAffectedError("Company", "delete", company_id)


class FakeDrivers:
    def __init__(self):
        self.by_company_calls = []

    async def list(self, limit=None, offset=0):
        return [DriverRead(id=1, name="Ion Popescu", company_id=1)]

    async def list_by_company(self, company_id, limit=None, offset=0):
        self.by_company_calls.append((company_id, limit, offset))
        return []


class FakeStore:
    """Tenant store with in-memory payments and their history."""

    def __init__(self):
        self.companies = FakeCompanies()
        self.drivers = FakeDrivers()
        self.rows = {}
        self.history = []
        self.list_by_calls = []
        self.payments = SimpleNamespace(list_by=self.list_payments_by)
        self.payment_history = SimpleNamespace(list_for_payment=self.list_for_payment)

    async def record_payment(self, data):
        row = PaymentRead(id=len(self.rows) + 1, **data.model_dump(exclude_none=True))
        self.rows[row.id] = row
        self.history.append((row.id, "created"))
        return row

    async def update_payment(self, payment_id, data):
        if payment_id not in self.rows:
            raise NoRowsAffectedError("Payment", "update", payment_id)
        row = self.rows[payment_id].model_copy(update=data.model_dump(exclude_unset=True))
        self.rows[payment_id] = row
        self.history.append((payment_id, "updated"))
        return row

    async def delete_payment(self, payment_id):
        if self.rows.pop(payment_id, None) is None:
            raise NoRowsAffectedError("Payment", "delete", payment_id)
        self.history.append((payment_id, "deleted"))

    async def list_payments_by(self, limit=None, offset=0, **filters):
        self.list_by_calls.append((filters, limit, offset))
        return [row for row in self.rows.values() if all(getattr(row, k) == v for k, v in filters.items())]

    async def list_for_payment(self, payment_id):
        return [
            PaymentHistoryRead(id=index, payment_id=key, action=action)
            for index, (key, action) in enumerate(self.history, start=1)
            if key == payment_id
        ]


class FakeRouter:
    def __init__(self):
        self.stores = {}
        self.error = None

    async def resolve(self, tenant_id):
        if self.error is not None:
            raise self.error
        store = self.stores.setdefault(tenant_id, FakeStore())
        return SimpleNamespace(tenant_id=tenant_id, store=store)

    def stats(self):
        return {"active_tenants": len(self.stores), "tenant_ids": sorted(self.stores)}


def tenant(tenant_id="acme-1", status=TenantStatus.TRIAL):
    return Tenant(
        id=tenant_id,
        name="Acme",
        subdomain=tenant_id,
        status=status,
        schema_name="tenant_acme_1",
        provisioned_at=NOW,
        created_at=NOW,
        updated_at=NOW,
    )


class FakeRegistry:
    async def get_tenant(self, tenant_id):
        if tenant_id != "acme-1":
            raise TenantNotFoundError(tenant_id)
        return tenant()

    async def get_by_subdomain(self, subdomain):
        return tenant(subdomain)

    async def list_tenants(self, limit=50, offset=0, status=None):
        return [tenant()]

    async def update_tenant(self, tenant_id, data):
        row = await self.get_tenant(tenant_id)
        row.name = data.name
        return row


class FakeLifecycle:
    def __init__(self):
        self.error = None
        self.deleted = []

    async def create_tenant(self, data):
        if self.error is not None:
            raise self.error
        return tenant(data.id)

    async def update_status(self, tenant_id, status):
        return tenant(tenant_id, status=status)

    async def reprovision(self, tenant_id):
        return tenant(tenant_id)

    async def delete_tenant(self, tenant_id):
        self.deleted.append(tenant_id)


@pytest.fixture
def fakes():
    fake = SimpleNamespace(router=FakeRouter(), registry=FakeRegistry(), lifecycle=FakeLifecycle())
    app.dependency_overrides[get_tenant_router] = lambda: fake.router
    app.dependency_overrides[get_registry] = lambda: fake.registry
    app.dependency_overrides[get_lifecycle] = lambda: fake.lifecycle
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(fakes):
    # No context manager: the lifespan (real engine) is not started
    return TestClient(app)


HEADERS = {"X-Tenant-ID": "acme-1"}


@pytest.mark.unit
def test_tenant_header_is_required(client):
    response = client.get("/companies")
    assert response.status_code == 400
    assert response.json()["detail"] == "X-Tenant-ID header is required"


@pytest.mark.unit
def test_list_companies(client):
    response = client.get("/companies", headers=HEADERS)
    assert response.status_code == 200
    assert [row["name"] for row in response.json()] == ["Fast Express"]


@pytest.mark.unit
def test_tenants_get_separate_stores(client, fakes):
    client.post("/companies", headers=HEADERS, json={"name": "Only Acme"})
    response = client.get("/companies", headers={"X-Tenant-ID": "other-2"})
    assert [row["name"] for row in response.json()] == ["Fast Express"]
    assert sorted(fakes.router.stores) == ["acme-1", "other-2"]


@pytest.mark.unit
def test_missing_company_is_404(client):
    response = client.get("/companies/99", headers=HEADERS)
    assert response.status_code == 404
    assert response.json() == {"error": {"code": "NOT_FOUND", "message": "Company not found"}}


@pytest.mark.unit
def test_delete_company_twice(client):
    assert client.delete("/companies/1", headers=HEADERS).status_code == 204

    response = client.delete("/companies/1", headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "NO_ROWS_AFFECTED"


@pytest.mark.unit
def test_create_company_validates_body(client):
    response = client.post("/companies", headers=HEADERS, json={"name": ""})
    assert response.status_code == 422


@pytest.mark.unit
def test_update_company(client):
    response = client.put("/companies/1", headers=HEADERS, json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"


@pytest.mark.unit
def test_drivers_filtered_by_company(client, fakes):
    response = client.get("/drivers", headers=HEADERS, params={"company_id": 3})
    assert response.status_code == 200
    assert fakes.router.stores["acme-1"].drivers.by_company_calls == [(3, 50, 0)]


@pytest.mark.unit
@pytest.mark.parametrize(
    "error, status_code, code",
    [
        (TenantNotFoundError("acme-1"), 404, "TENANT_NOT_FOUND"),
        (TenantSuspendedError("suspended"), 403, "TENANT_SUSPENDED"),
        (TrialExpiredError("expired"), 402, "TRIAL_EXPIRED"),
        (ProvisioningError("tenant_acme_1 failed"), 503, "TENANT_PROVISIONING_FAILED"),
        (StatementTimeoutError("tenant_acme_1 timed out"), 503, "DATABASE_TIMEOUT"),
    ],
)
def test_resolution_errors_are_mapped(client, fakes, error, status_code, code):
    fakes.router.error = error
    response = client.get("/companies", headers=HEADERS)

    assert response.status_code == status_code
    assert response.json()["error"]["code"] == code
    assert "tenant_acme_1" not in response.text


@pytest.mark.unit
def test_create_tenant(client):
    response = client.post(
        "/admin/tenants",
        json={"id": "acme-1", "name": "Acme", "subdomain": "acme-1", "contact_email": "ops@acme.test"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == "acme-1"
    assert "schema_name" not in body


@pytest.mark.unit
def test_create_tenant_provisioning_failure(client, fakes):
    fakes.lifecycle.error = ProvisioningError("tenant_acme_1 failed")
    response = client.post("/admin/tenants", json={"id": "acme-1", "name": "Acme", "subdomain": "acme-1"})

    assert response.status_code == 503
    assert response.json()["error"]["message"] == "Tenant creation failed, please retry"


@pytest.mark.unit
def test_create_duplicate_tenant(client, fakes):
    fakes.lifecycle.error = TenantAlreadyExistsError("dup")
    response = client.post("/admin/tenants", json={"id": "acme-1", "name": "Acme", "subdomain": "acme-1"})
    assert response.status_code == 409


@pytest.mark.unit
def test_create_tenant_rejects_bad_subdomain(client):
    response = client.post("/admin/tenants", json={"id": "acme-1", "name": "Acme", "subdomain": "Acme Corp"})
    assert response.status_code == 422


@pytest.mark.unit
def test_get_unknown_tenant(client):
    assert client.get("/admin/tenants/ghost").status_code == 404


@pytest.mark.unit
def test_list_tenants(client):
    response = client.get("/admin/tenants")
    assert response.status_code == 200
    assert response.json()[0]["subdomain"] == "acme-1"


@pytest.mark.unit
def test_update_status(client):
    response = client.patch("/admin/tenants/acme-1/status", json={"status": "suspended"})
    assert response.status_code == 200
    assert response.json()["status"] == "suspended"

    assert client.patch("/admin/tenants/acme-1/status", json={"status": "deleted"}).status_code == 422


@pytest.mark.unit
def test_delete_tenant(client, fakes):
    assert client.delete("/admin/tenants/acme-1").status_code == 204
    assert fakes.lifecycle.deleted == ["acme-1"]


class UnreachableSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, ConnectionRefusedError("refused"))


@pytest.mark.unit
def test_health_reports_database_down(client, fakes):
    app.dependency_overrides[get_db] = lambda: UnreachableSession()
    fakes.router.stores["acme-1"] = SimpleNamespace()

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["api_ok"] is True
    assert body["db_ok"] is False
    assert body["alembic_head"] == "002_tenant_provisioning_claim"
    assert body["active_tenants"] == 1


@pytest.mark.unit
def test_payment_writes_leave_history(client):
    created = client.post(
        "/payments",
        headers=HEADERS,
        json={"company_name": "Fast Express", "amount": "150.00", "week_label": "W1"},
    )
    assert created.status_code == 201
    payment_id = created.json()["id"]

    updated = client.put(f"/payments/{payment_id}", headers=HEADERS, json={"amount": "175.00"})
    assert updated.status_code == 200
    assert updated.json()["amount"] == "175.00"

    assert client.delete(f"/payments/{payment_id}", headers=HEADERS).status_code == 204

    history = client.get(f"/payments/{payment_id}/history", headers=HEADERS)
    assert [entry["action"] for entry in history.json()] == ["created", "updated", "deleted"]


@pytest.mark.unit
def test_update_missing_payment_is_409(client):
    response = client.put("/payments/42", headers=HEADERS, json={"amount": "10.00"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "NO_ROWS_AFFECTED"


@pytest.mark.unit
def test_update_tenant_metadata(client):
    response = client.patch("/admin/tenants/acme-1", json={"name": "Acme Logistics"})
    assert response.status_code == 200
    assert response.json()["name"] == "Acme Logistics"

    assert client.patch("/admin/tenants/ghost", json={"name": "Ghost"}).status_code == 404


@pytest.mark.unit
def test_filtered_payment_list_is_paginated(client, fakes):
    response = client.get("/payments", headers=HEADERS, params={"week_label": "W1", "limit": 10, "offset": 20})

    assert response.status_code == 200
    assert fakes.router.stores["acme-1"].list_by_calls == [({"week_label": "W1"}, 10, 20)]
