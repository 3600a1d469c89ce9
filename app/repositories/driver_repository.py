"""
Driver repository - drivers of one tenant namespace.
"""

from typing import List, Optional

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.driver import DriverRead


class DriverRepository(ScopedRepository[DriverRead]):
    table_name = "drivers"
    entity = "Driver"
    read_schema = DriverRead

    async def get_by_name(self, name: str) -> DriverRead:
        return await self.get_by(name=name)

    async def list_by_company(
        self, company_id: int, limit: Optional[int] = None, offset: int = 0
    ) -> List[DriverRead]:
        return await self.list_by(limit=limit, offset=offset, company_id=company_id)
