"""
Schemas package.

Import all schemas here for easy access.
"""

from app.schemas.tenant import TenantCreate, TenantUpdate, TenantStatusUpdate, TenantRead
from app.schemas.company import CompanyCreate, CompanyUpdate, CompanyRead
from app.schemas.driver import DriverCreate, DriverUpdate, DriverRead
from app.schemas.weekly_processing import (
    WeeklyProcessingCreate,
    WeeklyProcessingUpdate,
    WeeklyProcessingRead,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentRead,
    PaymentHistoryCreate,
    PaymentHistoryRead,
)
from app.schemas.company_balance import CompanyBalanceCreate, CompanyBalanceUpdate, CompanyBalanceRead
from app.schemas.transport_order import TransportOrderCreate, TransportOrderUpdate, TransportOrderRead
from app.schemas.historical_trip import HistoricalTripCreate, HistoricalTripUpdate, HistoricalTripRead
from app.schemas.order_sequence import OrderSequenceCreate, OrderSequenceUpdate, OrderSequenceRead

__all__ = [
    "TenantCreate",
    "TenantUpdate",
    "TenantStatusUpdate",
    "TenantRead",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyRead",
    "DriverCreate",
    "DriverUpdate",
    "DriverRead",
    "WeeklyProcessingCreate",
    "WeeklyProcessingUpdate",
    "WeeklyProcessingRead",
    "PaymentCreate",
    "PaymentUpdate",
    "PaymentRead",
    "PaymentHistoryCreate",
    "PaymentHistoryRead",
    "CompanyBalanceCreate",
    "CompanyBalanceUpdate",
    "CompanyBalanceRead",
    "TransportOrderCreate",
    "TransportOrderUpdate",
    "TransportOrderRead",
    "HistoricalTripCreate",
    "HistoricalTripUpdate",
    "HistoricalTripRead",
    "OrderSequenceCreate",
    "OrderSequenceUpdate",
    "OrderSequenceRead",
]
