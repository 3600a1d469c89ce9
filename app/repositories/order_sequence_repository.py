"""
Order sequence repository.

Each namespace holds a single sequence row seeded at provisioning time.
"""

from sqlalchemy import func, select, update

from app.errors import EntityNotFoundError, NoRowsAffectedError
from app.repositories.scoped_repository import ScopedRepository
from app.schemas.order_sequence import OrderSequenceRead


class OrderSequenceRepository(ScopedRepository[OrderSequenceRead]):
    table_name = "order_sequence"
    entity = "OrderSequence"
    read_schema = OrderSequenceRead
    touch_column = "last_updated"

    def _first_row_id(self):
        return select(func.min(self.table.c.id)).scalar_subquery()

    async def get_current(self) -> OrderSequenceRead:
        rows = await self.store.execute(select(self.table).order_by(self.table.c.id).limit(1))
        if not rows:
            raise EntityNotFoundError(self.entity, "current")
        return self._to_model(rows[0])

    async def next_order_number(self) -> int:
        """Advance the sequence and return the new number, in one statement."""
        stmt = (
            update(self.table)
            .where(self.table.c.id == self._first_row_id())
            .values(current_number=self.table.c.current_number + 1, last_updated=func.now())
            .returning(self.table.c.current_number)
        )
        rows = await self.store.execute(stmt)
        if not rows:
            raise EntityNotFoundError(self.entity, "current")
        return rows[0]["current_number"]

    async def set_current(self, current_number: int) -> OrderSequenceRead:
        if current_number < 0:
            raise ValueError("current_number must not be negative")
        stmt = (
            update(self.table)
            .where(self.table.c.id == self._first_row_id())
            .values(current_number=current_number, last_updated=func.now())
            .returning(*self.table.c)
        )
        rows = await self.store.execute(stmt)
        if not rows:
            raise NoRowsAffectedError(self.entity, "update", "current")
        return self._to_model(rows[0])
