"""
Base repository for tables inside one tenant namespace.

Every statement is built from the namespace's own copy of the table, so it
names the tenant's schema explicitly. Nothing here sets connection state
such as search_path, and no method accepts a tenant argument: the namespace
is fixed by the store the repository was created from.
"""

from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.sql.elements import ColumnElement

from app.errors import EntityNotFoundError, NoRowsAffectedError, StoredDataError

if TYPE_CHECKING:
    from app.tenancy.store import TenantScopedStore

ReadT = TypeVar("ReadT", bound=BaseModel)


class ScopedRepository(Generic[ReadT]):
    """
    CRUD for one namespace table.

    Subclasses set `table_name`, `entity` (used in error messages) and
    `read_schema`; they may override `default_order` and `touch_column`.
    """

    table_name: str
    entity: str
    read_schema: Type[ReadT]

    # Column names, prefixed with "-" for descending order
    default_order: Sequence[str] = ("id",)

    # Timestamp column refreshed on every update, if the table has one
    touch_column: Optional[str] = None

    def __init__(self, store: "TenantScopedStore"):
        self.store = store
        self.table: Table = getattr(store.tables, self.table_name)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _column(self, name: str):
        if name not in self.table.c:
            raise ValueError(f"{self.entity} has no column {name!r}")
        return self.table.c[name]

    def _criteria(self, filters: Dict[str, Any]) -> List[ColumnElement]:
        clauses = []
        for name, value in filters.items():
            column = self._column(name)
            clauses.append(column.is_(None) if value is None else column == value)
        return clauses

    def _ordering(self) -> List[ColumnElement]:
        ordering = []
        for name in self.default_order:
            if name.startswith("-"):
                ordering.append(self._column(name[1:]).desc())
            else:
                ordering.append(self._column(name).asc())
        return ordering

    def _to_model(self, row) -> ReadT:
        try:
            return self.read_schema.model_validate(dict(row))
        except ValidationError as exc:
            raise StoredDataError(self.entity) from exc

    def _create_values(self, data: BaseModel) -> Dict[str, Any]:
        # None means "use the column default"
        values = data.model_dump(exclude_none=True)
        for name in values:
            self._column(name)
        return values

    def _update_values(self, data: BaseModel) -> Dict[str, Any]:
        values = data.model_dump(exclude_unset=True)
        if not values:
            raise ValueError(f"No fields to update on {self.entity}")
        for name in values:
            self._column(name)
        if self.touch_column is not None:
            values[self.touch_column] = func.now()
        return values

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def list(self, limit: Optional[int] = None, offset: int = 0) -> List[ReadT]:
        """List every row of this table in this namespace."""
        stmt = select(self.table).order_by(*self._ordering()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = await self.store.execute(stmt)
        return [self._to_model(row) for row in rows]

    async def list_by(self, *, limit: Optional[int] = None, offset: int = 0, **filters: Any) -> List[ReadT]:
        stmt = (
            select(self.table)
            .where(*self._criteria(filters))
            .order_by(*self._ordering())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = await self.store.execute(stmt)
        return [self._to_model(row) for row in rows]

    async def get_by_id(self, record_id: int) -> ReadT:
        rows = await self.store.execute(select(self.table).where(self.table.c.id == record_id))
        if not rows:
            raise EntityNotFoundError(self.entity, record_id)
        return self._to_model(rows[0])

    async def get_by(self, **natural_key: Any) -> ReadT:
        """First row matching the natural key. Raises EntityNotFoundError if none."""
        if not natural_key:
            raise ValueError("get_by() needs at least one column")
        stmt = (
            select(self.table)
            .where(*self._criteria(natural_key))
            .order_by(*self._ordering())
            .limit(1)
        )
        rows = await self.store.execute(stmt)
        if not rows:
            raise EntityNotFoundError(self.entity, natural_key)
        return self._to_model(rows[0])

    async def count(self) -> int:
        rows = await self.store.execute(select(func.count().label("n")).select_from(self.table))
        return rows[0]["n"]

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    async def create(self, data: BaseModel) -> ReadT:
        stmt = insert(self.table).values(**self._create_values(data)).returning(*self.table.c)
        rows = await self.store.execute(stmt)
        return self._to_model(rows[0])

    async def update(self, record_id: int, data: BaseModel) -> ReadT:
        """
        Update one row by id.

        Raises NoRowsAffectedError when the id matches nothing: the caller
        holds a stale reference, which is not the same as a lookup miss.
        """
        stmt = (
            update(self.table)
            .where(self.table.c.id == record_id)
            .values(**self._update_values(data))
            .returning(*self.table.c)
        )
        rows = await self.store.execute(stmt)
        if not rows:
            raise NoRowsAffectedError(self.entity, "update", record_id)
        return self._to_model(rows[0])

    async def delete(self, record_id: int) -> None:
        """Delete exactly one row by id. A delete that matches nothing raises."""
        stmt = delete(self.table).where(self.table.c.id == record_id).returning(self.table.c.id)
        rows = await self.store.execute(stmt)
        if not rows:
            raise NoRowsAffectedError(self.entity, "delete", record_id)
