"""
Historical trip Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class HistoricalTripCreate(BaseModel):
    vrid: str = Field(min_length=1, max_length=100)
    driver_name: Optional[str] = None
    week_label: str = Field(min_length=1, max_length=100)
    trip_date: Optional[datetime] = None
    route: Optional[str] = None
    raw_trip_data: Optional[Any] = None


class HistoricalTripUpdate(BaseModel):
    driver_name: Optional[str] = None
    week_label: Optional[str] = None
    trip_date: Optional[datetime] = None
    route: Optional[str] = None
    raw_trip_data: Optional[Any] = None


class HistoricalTripRead(NamespaceRecordRead):
    vrid: str
    driver_name: Optional[str] = None
    week_label: str
    trip_date: Optional[datetime] = None
    route: Optional[str] = None
    raw_trip_data: Optional[Any] = None
    created_at: Optional[datetime] = None
