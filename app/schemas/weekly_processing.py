"""
Weekly processing Pydantic schemas.

One record per processed invoice week; the JSON columns hold the uploaded
trip and invoice data as received.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.schemas.base import NamespaceRecordRead


class WeeklyProcessingCreate(BaseModel):
    week_label: str = Field(min_length=1, max_length=100)
    trip_data_count: int = 0
    invoice7_count: int = 0
    invoice30_count: int = 0
    processed_data: Optional[Any] = None
    trip_data: Optional[Any] = None
    invoice7_data: Optional[Any] = None
    invoice30_data: Optional[Any] = None


class WeeklyProcessingUpdate(BaseModel):
    trip_data_count: Optional[int] = None
    invoice7_count: Optional[int] = None
    invoice30_count: Optional[int] = None
    processed_data: Optional[Any] = None
    trip_data: Optional[Any] = None
    invoice7_data: Optional[Any] = None
    invoice30_data: Optional[Any] = None


class WeeklyProcessingRead(NamespaceRecordRead):
    week_label: str
    processing_date: Optional[datetime] = None
    trip_data_count: Optional[int] = 0
    invoice7_count: Optional[int] = 0
    invoice30_count: Optional[int] = 0
    processed_data: Optional[Any] = None
    trip_data: Optional[Any] = None
    invoice7_data: Optional[Any] = None
    invoice30_data: Optional[Any] = None
