"""
Payment and payment history repositories.
"""

from typing import List

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.payment import PaymentHistoryRead, PaymentRead


class PaymentRepository(ScopedRepository[PaymentRead]):
    table_name = "payments"
    entity = "Payment"
    read_schema = PaymentRead

    async def list_by_week(self, week_label: str) -> List[PaymentRead]:
        return await self.list_by(week_label=week_label)

    async def list_by_company(self, company_name: str) -> List[PaymentRead]:
        return await self.list_by(company_name=company_name)


class PaymentHistoryRepository(ScopedRepository[PaymentHistoryRead]):
    table_name = "payment_history"
    entity = "PaymentHistory"
    read_schema = PaymentHistoryRead
    default_order = ("-created_at", "-id")

    async def list_for_payment(self, payment_id: int) -> List[PaymentHistoryRead]:
        return await self.list_by(payment_id=payment_id)
