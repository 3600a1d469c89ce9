"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from app.models.tenant import Tenant, TenantStatus
from app.models.tenant_schema import REQUIRED_TABLES, TenantTables, template_metadata

# Export all models
__all__ = [
    "Tenant",
    "TenantStatus",
    "TenantTables",
    "REQUIRED_TABLES",
    "template_metadata",
]
