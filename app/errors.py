"""Tenancy error taxonomy and structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


# ---------------------------------------------------------------------------
# Tenancy errors
#
# Each class carries the HTTP status, error code and the user-facing message
# it maps to. The exception text itself may mention namespaces and is meant
# for logs only; `public_message` is what reaches API clients.
# ---------------------------------------------------------------------------


class TenancyError(Exception):
    """Base class for every error raised by the tenancy core."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "TENANCY_ERROR"
    public_message = "Internal error"
    retryable = False

    def to_payload(self) -> Dict[str, Any]:
        return build_error_payload(self.code, self.public_message)


class InvalidNamespaceError(TenancyError, ValueError):
    """A proposed namespace name is unsafe. Raised before touching the database."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_TENANT_IDENTIFIER"
    public_message = "Tenant identifier is not valid"


class TenantNotFoundError(TenancyError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TENANT_NOT_FOUND"
    public_message = "Tenant not found"

    def __init__(self, tenant_id: str):
        super().__init__(f"Tenant {tenant_id!r} is not registered")
        self.tenant_id = tenant_id


class TenantAlreadyExistsError(TenancyError):
    status_code = status.HTTP_409_CONFLICT
    code = "TENANT_ALREADY_EXISTS"
    public_message = "A tenant with this identifier or subdomain already exists"


class TenantAlreadyProvisionedError(TenancyError):
    """Provisioning was requested for a tenant whose namespace is already live."""

    status_code = status.HTTP_409_CONFLICT
    code = "TENANT_ALREADY_PROVISIONED"
    public_message = "Tenant is already provisioned"

    def __init__(self, tenant_id: str):
        super().__init__(
            f"Tenant {tenant_id!r} is already provisioned; pass force=True to wipe and recreate it"
        )
        self.tenant_id = tenant_id


class NamespaceStillProvisionedError(TenancyError):
    """Registry row deletion attempted before the namespace was dropped."""

    status_code = status.HTTP_409_CONFLICT
    code = "TENANT_NAMESPACE_NOT_DROPPED"
    public_message = "Tenant data must be removed before the tenant record"

    def __init__(self, tenant_id: str):
        super().__init__(f"Tenant {tenant_id!r} still has a provisioned namespace")
        self.tenant_id = tenant_id


class TenantSuspendedError(TenancyError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "TENANT_SUSPENDED"
    public_message = "Tenant is not active"


class TenantInactiveError(TenancyError):
    """The tenant is provisioned but its status does not allow serving it."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "TENANT_INACTIVE"
    public_message = "Tenant is not active"


class TrialExpiredError(TenancyError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "TRIAL_EXPIRED"
    public_message = "Trial period expired"


class ProvisioningError(TenancyError):
    """Namespace creation failed. Fatal to tenant activation; retry from scratch."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "TENANT_PROVISIONING_FAILED"
    public_message = "Tenant creation failed, please retry"
    retryable = True


class ProvisioningInProgressError(TenancyError):
    """Another caller holds the tenant for a namespace build or drop."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "TENANT_PROVISIONING_IN_PROGRESS"
    public_message = "Tenant is being set up, please retry shortly"
    retryable = True

    def __init__(self, tenant_id: str):
        super().__init__(f"Tenant {tenant_id!r} is being provisioned or dropped")
        self.tenant_id = tenant_id


class TenantResolutionError(TenancyError):
    """A handle could not be obtained for an existing tenant."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "TENANT_UNAVAILABLE"
    public_message = "Service temporarily unavailable"
    retryable = True


class HandleClosedError(TenantResolutionError):
    """The handle was released; resolve the tenant again."""


class StatementTimeoutError(TenancyError):
    """A database round trip exceeded the statement timeout."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "DATABASE_TIMEOUT"
    public_message = "Service temporarily unavailable"
    retryable = True


class EntityNotFoundError(TenancyError, LookupError):
    """An entity looked up by id or natural key does not exist in this tenant."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} {key!r} not found")
        self.entity = entity
        self.key = key

    @property
    def public_message(self) -> str:
        return f"{self.entity} not found"


class NoRowsAffectedError(TenancyError):
    """
    An update or delete matched nothing.

    Kept apart from EntityNotFoundError: the caller acted on a reference it
    assumed was live, which is a stale-reference bug rather than an expected
    absence.
    """

    status_code = status.HTTP_409_CONFLICT
    code = "NO_ROWS_AFFECTED"

    def __init__(self, entity: str, operation: str, key: Any):
        super().__init__(f"{operation} on {entity} {key!r} affected no rows")
        self.entity = entity
        self.operation = operation
        self.key = key

    @property
    def public_message(self) -> str:
        return f"{self.entity} was not {self.operation}d because it no longer exists"


class StoredDataError(TenancyError):
    """A row read from a tenant namespace does not match its schema."""

    code = "INVALID_STORED_DATA"
    public_message = "Stored data could not be read"

    def __init__(self, entity: str):
        super().__init__(f"Stored {entity} row failed validation")
        self.entity = entity


async def tenancy_error_handler(_: Request, exc: TenancyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
