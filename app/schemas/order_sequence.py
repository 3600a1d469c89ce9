"""
Order sequence Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class OrderSequenceCreate(BaseModel):
    current_number: int = Field(ge=0)


class OrderSequenceUpdate(BaseModel):
    current_number: Optional[int] = Field(default=None, ge=0)


class OrderSequenceRead(NamespaceRecordRead):
    current_number: int
    last_updated: Optional[datetime] = None
