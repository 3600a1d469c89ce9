"""
Weekly processing repository.

A week label identifies at most one processing record per namespace, so the
week doubles as the natural key for reads, updates and upserts.
"""

from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert

from app.errors import NoRowsAffectedError
from app.repositories.scoped_repository import ScopedRepository
from app.schemas.weekly_processing import (
    WeeklyProcessingCreate,
    WeeklyProcessingRead,
    WeeklyProcessingUpdate,
)


class WeeklyProcessingRepository(ScopedRepository[WeeklyProcessingRead]):
    table_name = "weekly_processing"
    entity = "WeeklyProcessing"
    read_schema = WeeklyProcessingRead
    default_order = ("-processing_date", "-id")

    async def get_by_week(self, week_label: str) -> WeeklyProcessingRead:
        return await self.get_by(week_label=week_label)

    async def update_by_week(self, week_label: str, data: WeeklyProcessingUpdate) -> WeeklyProcessingRead:
        stmt = (
            update(self.table)
            .where(self.table.c.week_label == week_label)
            .values(**self._update_values(data))
            .returning(*self.table.c)
        )
        rows = await self.store.execute(stmt)
        if not rows:
            raise NoRowsAffectedError(self.entity, "update", week_label)
        return self._to_model(rows[0])

    async def upsert(self, data: WeeklyProcessingCreate) -> WeeklyProcessingRead:
        """Insert the week, or overwrite the stored week with the same label."""
        values = data.model_dump()
        stmt = pg_insert(self.table).values(**values)
        replaced = {name: stmt.excluded[name] for name in values if name != "week_label"}
        replaced["processing_date"] = func.now()
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.table.c.week_label],
            set_=replaced,
        ).returning(*self.table.c)
        rows = await self.store.execute(stmt)
        return self._to_model(rows[0])
