import pytest

from app.errors import (
    EntityNotFoundError,
    HandleClosedError,
    InvalidNamespaceError,
    NoRowsAffectedError,
    ProvisioningError,
    ProvisioningInProgressError,
    StatementTimeoutError,
    TenancyError,
    TenantInactiveError,
    TenantResolutionError,
    build_error_payload,
)


@pytest.mark.unit
def test_build_error_payload_shape():
    assert build_error_payload("X", "msg") == {"error": {"code": "X", "message": "msg"}}
    assert build_error_payload("X", "msg", {"a": 1})["error"]["details"] == {"a": 1}


@pytest.mark.unit
def test_no_rows_affected_is_not_a_not_found():
    assert not issubclass(NoRowsAffectedError, EntityNotFoundError)
    assert not issubclass(EntityNotFoundError, NoRowsAffectedError)
    assert NoRowsAffectedError.status_code == 409
    assert EntityNotFoundError.status_code == 404


@pytest.mark.unit
def test_payloads_do_not_leak_internal_text():
    error = ProvisioningError("CREATE SCHEMA tenant_acme_1 failed")
    payload = error.to_payload()
    assert payload == {
        "error": {"code": "TENANT_PROVISIONING_FAILED", "message": "Tenant creation failed, please retry"}
    }
    assert "tenant_acme_1" in str(error)


@pytest.mark.unit
def test_entity_messages():
    missing = EntityNotFoundError("Driver", 7)
    stale = NoRowsAffectedError("Driver", "delete", 7)
    assert missing.public_message == "Driver not found"
    assert stale.public_message == "Driver was not deleted because it no longer exists"
    assert stale.key == 7


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_class",
    [ProvisioningError, ProvisioningInProgressError, TenantResolutionError, HandleClosedError, StatementTimeoutError],
)
def test_infrastructure_errors_are_retryable(error_class):
    assert error_class.retryable is True
    assert error_class.status_code == 503


@pytest.mark.unit
def test_every_error_is_a_tenancy_error():
    for error_class in (InvalidNamespaceError, EntityNotFoundError, NoRowsAffectedError, StatementTimeoutError):
        assert issubclass(error_class, TenancyError)


@pytest.mark.unit
def test_inactive_tenant_is_forbidden_not_retryable():
    error = TenantInactiveError()
    assert error.status_code == 403
    assert error.retryable is False
    assert error.to_payload()["error"]["code"] == "TENANT_INACTIVE"
