"""
SQLAlchemy declarative base.

This is the foundation for the control-plane models (the tenant registry).
Tenant namespace tables are plain Core tables, see app/models/tenant_schema.py.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all control-plane SQLAlchemy models.

    All registry tables inherit from this class so Alembic can track them
    together.
    """
    pass
