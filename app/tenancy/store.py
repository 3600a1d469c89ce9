"""
Tenant-scoped data access.

A `TenantScopedStore` is bound to exactly one namespace when it is built.
Its repositories only see the schema-qualified tables of that namespace,
so there is no call on the store that can reach another tenant's data.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql.base import Executable

from app.errors import HandleClosedError, NoRowsAffectedError, StatementTimeoutError
from app.models.tenant_schema import TenantTables
from app.repositories.company_balance_repository import CompanyBalanceRepository
from app.repositories.company_repository import CompanyRepository
from app.repositories.driver_repository import DriverRepository
from app.repositories.historical_trip_repository import HistoricalTripRepository
from app.repositories.order_sequence_repository import OrderSequenceRepository
from app.repositories.payment_repository import PaymentHistoryRepository, PaymentRepository
from app.repositories.transport_order_repository import TransportOrderRepository
from app.repositories.weekly_processing_repository import WeeklyProcessingRepository
from app.schemas.historical_trip import HistoricalTripCreate
from app.schemas.payment import PaymentCreate, PaymentHistoryCreate, PaymentRead, PaymentUpdate
from app.schemas.weekly_processing import WeeklyProcessingCreate, WeeklyProcessingRead
from app.tenancy.naming import SchemaName

logger = logging.getLogger(__name__)

# PostgreSQL "query_canceled", raised when statement_timeout fires
QUERY_CANCELED = "57014"

# Keys the uploaded trip rows use for the VRID
TRIP_VRID_KEYS = ("Trip ID", "VR ID")

_datetime_adapter = TypeAdapter(datetime)


def _trip_date(value: Any) -> Optional[datetime]:
    # Unparseable dates stay available in raw_trip_data
    if not value:
        return None
    try:
        return _datetime_adapter.validate_python(value)
    except ValidationError:
        return None


def _is_statement_timeout(exc: DBAPIError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and orig is not None:
        code = getattr(orig.__cause__, "sqlstate", None)
    return code == QUERY_CANCELED


class TenantScopedStore:
    """
    Repositories and units of work for one tenant namespace.

    Outside a transaction each statement runs on its own pooled connection
    and commits on success. Inside `transaction()` every statement of the
    yielded store shares one connection and commits or rolls back together.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        namespace: SchemaName,
        *,
        tables: Optional[TenantTables] = None,
        _conn: Optional[AsyncConnection] = None,
        _parent: Optional["TenantScopedStore"] = None,
    ):
        self.engine = engine
        self.namespace = SchemaName(namespace)
        self.tables = tables if tables is not None else TenantTables(self.namespace)
        self._conn = _conn
        self._parent = _parent
        self._closed = False

        self.companies = CompanyRepository(self)
        self.drivers = DriverRepository(self)
        self.weekly_processing = WeeklyProcessingRepository(self)
        self.historical_trips = HistoricalTripRepository(self)
        self.payments = PaymentRepository(self)
        self.payment_history = PaymentHistoryRepository(self)
        self.company_balances = CompanyBalanceRepository(self)
        self.transport_orders = TransportOrderRepository(self)
        self.order_sequence = OrderSequenceRepository(self)

    def __repr__(self) -> str:
        return f"<TenantScopedStore namespace={self.namespace!s}>"

    @property
    def closed(self) -> bool:
        if self._parent is not None and self._parent.closed:
            return True
        return self._closed

    def close(self) -> None:
        """Refuse further statements. The shared engine stays open."""
        self._closed = True

    def _check_open(self) -> None:
        if self.closed:
            raise HandleClosedError(f"Store for {self.namespace} has been released")

    async def execute(self, stmt: Executable) -> List[RowMapping]:
        """
        Run one statement and return its rows as mappings.

        Statements that return no rows give an empty list. A statement
        cancelled by the server or the driver timeout raises
        StatementTimeoutError; other driver errors propagate unchanged.
        """
        self._check_open()
        try:
            if self._conn is not None:
                return await self._run(self._conn, stmt)
            async with self.engine.begin() as conn:
                return await self._run(conn, stmt)
        except asyncio.TimeoutError as exc:
            logger.warning("Statement timed out in %s", self.namespace)
            raise StatementTimeoutError(f"Statement timed out in {self.namespace}") from exc
        except DBAPIError as exc:
            if _is_statement_timeout(exc):
                logger.warning("Statement cancelled by statement_timeout in %s", self.namespace)
                raise StatementTimeoutError(f"Statement timed out in {self.namespace}") from exc
            raise

    @staticmethod
    async def _run(conn: AsyncConnection, stmt: Executable) -> List[RowMapping]:
        result = await conn.execute(stmt)
        if not result.returns_rows:
            return []
        return list(result.mappings().all())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["TenantScopedStore"]:
        """
        Yield a store whose statements share one transaction.

        Nested calls reuse the enclosing transaction.
        """
        self._check_open()
        if self._conn is not None:
            yield self
            return
        async with self.engine.begin() as conn:
            yield TenantScopedStore(
                self.engine,
                self.namespace,
                tables=self.tables,
                _conn=conn,
                _parent=self,
            )

    # ------------------------------------------------------------------
    # units of work
    # ------------------------------------------------------------------

    async def record_payment(self, data: PaymentCreate) -> PaymentRead:
        """Insert a payment together with its "created" history entry."""
        async with self.transaction() as tx:
            payment = await tx.payments.create(data)
            await tx.payment_history.create(
                PaymentHistoryCreate(
                    payment_id=payment.id,
                    action="created",
                    previous_data=payment.model_dump(mode="json"),
                )
            )
        return payment

    async def update_payment(self, payment_id: int, data: PaymentUpdate) -> PaymentRead:
        """Update a payment, keeping the prior values as an "updated" history entry."""
        async with self.transaction() as tx:
            rows = await tx.execute(
                tx.payments.table.select()
                .where(tx.payments.table.c.id == payment_id)
                .with_for_update()
            )
            if not rows:
                raise NoRowsAffectedError("Payment", "update", payment_id)
            previous = tx.payments._to_model(rows[0])
            payment = await tx.payments.update(payment_id, data)
            await tx.payment_history.create(
                PaymentHistoryCreate(
                    payment_id=payment_id,
                    action="updated",
                    previous_data=previous.model_dump(mode="json"),
                )
            )
        return payment

    async def delete_payment(self, payment_id: int) -> None:
        """
        Delete a payment after snapshotting it into the history.

        The snapshot keeps its data once the payment row is gone; its
        payment_id reference is cleared by the foreign key.
        """
        async with self.transaction() as tx:
            rows = await tx.execute(
                tx.payments.table.select()
                .where(tx.payments.table.c.id == payment_id)
                .with_for_update()
            )
            if not rows:
                raise NoRowsAffectedError("Payment", "delete", payment_id)
            snapshot = tx.payments._to_model(rows[0])
            await tx.payment_history.create(
                PaymentHistoryCreate(
                    payment_id=payment_id,
                    action="deleted",
                    previous_data=snapshot.model_dump(mode="json"),
                )
            )
            await tx.payments.delete(payment_id)

    async def save_weekly_data_with_history(
        self,
        week_label: str,
        trip_data: Sequence[Dict[str, Any]],
        invoice7_data: Sequence[Any],
        invoice30_data: Sequence[Any],
        processed_data: Any = None,
    ) -> WeeklyProcessingRead:
        """
        Store one processed week and record each of its trips.

        Saving a week that already exists overwrites it. Trips whose VRID is
        already recorded are skipped, as are rows without a VRID.
        """
        week = WeeklyProcessingCreate(
            week_label=week_label,
            trip_data_count=len(trip_data),
            invoice7_count=len(invoice7_data),
            invoice30_count=len(invoice30_data),
            processed_data=processed_data,
            trip_data=list(trip_data),
            invoice7_data=list(invoice7_data),
            invoice30_data=list(invoice30_data),
        )

        trips: Dict[str, HistoricalTripCreate] = {}
        for row in trip_data:
            vrid = next((row[key] for key in TRIP_VRID_KEYS if row.get(key)), None)
            if not vrid or str(vrid) in trips:
                continue
            trips[str(vrid)] = HistoricalTripCreate(
                vrid=str(vrid),
                driver_name=row.get("Driver") or None,
                week_label=week_label,
                trip_date=_trip_date(row.get("Trip Date")),
                route=row.get("Route") or None,
                raw_trip_data=row,
            )

        async with self.transaction() as tx:
            saved = await tx.weekly_processing.upsert(week)
            known = {trip.vrid for trip in await tx.historical_trips.search_by_vrids(list(trips))}
            for vrid, trip in trips.items():
                if vrid in known:
                    continue
                await tx.historical_trips.create(trip)

        logger.info(
            "Saved week %s in %s (%d trips, %d new)",
            week_label,
            self.namespace,
            len(trip_data),
            len(set(trips) - known),
        )
        return saved
