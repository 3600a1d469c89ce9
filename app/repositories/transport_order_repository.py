"""
Transport order repository.
"""

from typing import List

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.transport_order import TransportOrderRead


class TransportOrderRepository(ScopedRepository[TransportOrderRead]):
    table_name = "transport_orders"
    entity = "TransportOrder"
    read_schema = TransportOrderRead

    async def get_by_order_number(self, order_number: str) -> TransportOrderRead:
        return await self.get_by(order_number=order_number)

    async def list_by_week(self, week_label: str) -> List[TransportOrderRead]:
        return await self.list_by(week_label=week_label)

    async def list_by_company(self, company_name: str) -> List[TransportOrderRead]:
        return await self.list_by(company_name=company_name)
