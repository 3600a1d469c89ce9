"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from pydantic import BaseModel, ConfigDict


class NamespaceRecordRead(BaseModel):
    """
    Base schema for reading a row of a tenant namespace table.

    Rows carry no tenant column: the namespace they were read from is the
    only owner they have.
    """

    id: int

    # This tells Pydantic to read SQLAlchemy rows and mappings
    model_config = ConfigDict(from_attributes=True)
