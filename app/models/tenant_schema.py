"""
Tenant namespace table template.

These tables are declared without a schema. They are never queried directly:
`TenantTables` copies them into a per-tenant MetaData with the tenant's
schema set, so every statement built from the copies names the namespace in
front of each table.

Foreign keys point at tables of the same template, so after copying they
stay inside the tenant's namespace.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB

from app.tenancy.naming import SchemaName

template_metadata = MetaData()


companies = Table(
    "companies",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("commission_rate", Numeric(5, 4), nullable=False),
    Column("cif", String(50)),
    Column("trade_register_number", String(100)),
    Column("address", Text),
    Column("location", String(100)),
    Column("county", String(100)),
    Column("country", String(100), server_default="Romania"),
    Column("contact", Text),
    Column("is_main_company", Boolean, nullable=False, server_default="false"),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

drivers = Table(
    "drivers",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("company_id", Integer, ForeignKey("companies.id")),
    Column("name_variants", JSONB),
    Column("phone", String(20), server_default=""),
    Column("email", String(100), server_default=""),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

weekly_processing = Table(
    "weekly_processing",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("week_label", String(100), nullable=False, unique=True),
    Column("processing_date", DateTime(timezone=True), server_default=func.now()),
    Column("trip_data_count", Integer, server_default="0"),
    Column("invoice7_count", Integer, server_default="0"),
    Column("invoice30_count", Integer, server_default="0"),
    Column("processed_data", JSONB),
    Column("trip_data", JSONB),
    Column("invoice7_data", JSONB),
    Column("invoice30_data", JSONB),
)

historical_trips = Table(
    "historical_trips",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("vrid", String(100), nullable=False),
    Column("driver_name", String(200)),
    Column("week_label", String(100), nullable=False),
    Column("trip_date", DateTime(timezone=True)),
    Column("route", String(200)),
    Column("raw_trip_data", JSONB),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Index("ix_historical_trips_vrid", "vrid"),
)

payments = Table(
    "payments",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("company_name", String(100), nullable=False),
    Column("amount", Numeric(10, 2), nullable=False),
    Column("description", Text),
    Column("payment_date", DateTime(timezone=True), server_default=func.now()),
    Column("week_label", String(100), nullable=False),
    Column("payment_type", String(50), server_default="partial"),
)

payment_history = Table(
    "payment_history",
    template_metadata,
    Column("id", Integer, primary_key=True),
    # History outlives the payment it describes ("deleted" snapshots).
    Column("payment_id", Integer, ForeignKey("payments.id", ondelete="SET NULL")),
    Column("action", String(50), nullable=False),
    Column("previous_data", JSONB),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

company_balances = Table(
    "company_balances",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("company_name", String(100), nullable=False),
    Column("week_label", String(100), nullable=False),
    Column("total_invoiced", Numeric(10, 2), nullable=False),
    Column("total_paid", Numeric(10, 2), server_default="0"),
    Column("outstanding_balance", Numeric(10, 2), nullable=False),
    Column("payment_status", String(50), server_default="pending"),
    Column("last_updated", DateTime(timezone=True), server_default=func.now()),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

transport_orders = Table(
    "transport_orders",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("order_number", String(100), nullable=False),
    Column("company_name", String(100), nullable=False),
    Column("order_date", DateTime(timezone=True), nullable=False),
    Column("week_label", String(100), nullable=False),
    Column("vrids", JSONB),
    Column("total_amount", Numeric(10, 2), nullable=False),
    Column("route", String(200), server_default="DE-BE-NL"),
    Column("status", String(50), server_default="draft"),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

order_sequence = Table(
    "order_sequence",
    template_metadata,
    Column("id", Integer, primary_key=True),
    Column("current_number", Integer, nullable=False, server_default="1000"),
    Column("last_updated", DateTime(timezone=True), server_default=func.now()),
)

# Every table a provisioned namespace must contain.
REQUIRED_TABLES = tuple(table.name for table in template_metadata.sorted_tables)


class TenantTables:
    """
    Schema-qualified copies of the template tables for one namespace.

    Attribute access mirrors the template: `TenantTables(ns).drivers` is the
    `drivers` table living in `ns`.
    """

    def __init__(self, namespace: SchemaName):
        self.namespace = SchemaName(namespace)
        self.metadata = MetaData()
        # sorted_tables puts referenced tables first so foreign keys resolve
        for table in template_metadata.sorted_tables:
            table.to_metadata(self.metadata, schema=str(self.namespace))

    def __getattr__(self, name: str) -> Table:
        metadata = self.__dict__.get("metadata")
        namespace = self.__dict__.get("namespace")
        key = f"{namespace}.{name}"
        if metadata is None or key not in metadata.tables:
            raise AttributeError(name)
        return metadata.tables[key]

    def __iter__(self):
        return iter(self.metadata.sorted_tables)
