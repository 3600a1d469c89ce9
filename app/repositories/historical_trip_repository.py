"""
Historical trip repository.
"""

from typing import List, Sequence

from sqlalchemy import select

from app.repositories.scoped_repository import ScopedRepository
from app.schemas.historical_trip import HistoricalTripRead


class HistoricalTripRepository(ScopedRepository[HistoricalTripRead]):
    table_name = "historical_trips"
    entity = "HistoricalTrip"
    read_schema = HistoricalTripRead

    async def get_by_vrid(self, vrid: str) -> HistoricalTripRead:
        return await self.get_by(vrid=vrid)

    async def list_by_week(self, week_label: str) -> List[HistoricalTripRead]:
        return await self.list_by(week_label=week_label)

    async def search_by_vrids(self, vrids: Sequence[str]) -> List[HistoricalTripRead]:
        """All trips whose VRID is in `vrids`; bound parameters, never inlined."""
        if not vrids:
            return []
        stmt = (
            select(self.table)
            .where(self.table.c.vrid.in_(list(vrids)))
            .order_by(*self._ordering())
        )
        rows = await self.store.execute(stmt)
        return [self._to_model(row) for row in rows]
