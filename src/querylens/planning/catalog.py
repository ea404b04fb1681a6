"""Static table catalog: columns per field kind and the join map.

The catalog is what lets the planner and the filter compiler reason about
tables without touching the database. It mirrors the demo schema created by
``querylens.execution.demo``.
"""

from dataclasses import dataclass, field
from enum import Enum


class FieldKind(str, Enum):
    """Column families a filter can target."""

    NUMERIC = "numeric"
    STATUS = "status"
    PRIORITY = "priority"
    LOCATION = "location"
    USER = "user"
    TIMESTAMP = "timestamp"


@dataclass(frozen=True)
class JoinSpec:
    """Foreign key from a primary table to a related table.

    Joined as ``<primary>.<local_column> = <table>.<remote_column>``.
    """

    table: str
    local_column: str
    remote_column: str = "id"


@dataclass(frozen=True)
class TableSpec:
    """Columns of one table, grouped by the filters that can use them."""

    name: str
    columns: tuple[str, ...]
    fields: dict[FieldKind, str] = field(default_factory=dict)
    searchable: tuple[str, ...] = ()
    display: str | None = None

    def field_for(self, kind: FieldKind) -> str | None:
        return self.fields.get(kind)

    def has_column(self, column: str) -> bool:
        return column in self.columns


@dataclass(frozen=True)
class TableCatalog:
    """Tables, join map and tie-break precedence."""

    tables: dict[str, TableSpec]
    joins: dict[str, tuple[JoinSpec, ...]]
    precedence: tuple[str, ...] = ("sales", "tasks", "stock", "customers")
    default_table: str = "products"

    def table(self, name: str) -> TableSpec | None:
        return self.tables.get(name)

    def join_targets(self, primary: str) -> list[str]:
        return [spec.table for spec in self.joins.get(primary, ())]

    def join_spec(self, primary: str, target: str) -> JoinSpec | None:
        for spec in self.joins.get(primary, ()):
            if spec.table == target:
                return spec
        return None

    def referencing_tables(self, table: str) -> list[str]:
        """Tables whose join map reaches ``table``, in catalog order."""
        return [name for name, specs in self.joins.items() if any(s.table == table for s in specs)]

    def field_owner(
        self, kind: FieldKind, primary: str, joins: list[str]
    ) -> tuple[str, str] | None:
        """Find the table and column serving a field kind.

        The primary table wins; otherwise the first joined table, in join
        order, that has a column of that kind.

        Returns:
            ``(table, column)`` or None if nothing in scope has the field
        """
        for name in [primary, *joins]:
            spec = self.tables.get(name)
            if spec is None:
                continue
            column = spec.field_for(kind)
            if column is not None:
                return name, column
        return None

    def joinable_owner(self, kind: FieldKind, primary: str) -> str | None:
        """First join target of ``primary`` that has a column of ``kind``."""
        for target in self.join_targets(primary):
            spec = self.tables.get(target)
            if spec is not None and spec.field_for(kind) is not None:
                return target
        return None


def default_catalog() -> TableCatalog:
    """Catalog of the eight demo tables."""
    tables = [
        TableSpec(
            name="customers",
            columns=("id", "name", "email", "phone", "company", "address", "city", "status", "created_at"),
            fields={
                FieldKind.LOCATION: "city",
                FieldKind.STATUS: "status",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("name", "email", "company", "city"),
            display="name",
        ),
        TableSpec(
            name="products",
            columns=("id", "name", "description", "price", "sku", "category", "created_at"),
            fields={FieldKind.NUMERIC: "price", FieldKind.TIMESTAMP: "created_at"},
            searchable=("name", "description", "sku", "category"),
            display="name",
        ),
        TableSpec(
            name="users",
            columns=("id", "email", "full_name", "role", "created_at"),
            fields={FieldKind.USER: "id", FieldKind.TIMESTAMP: "created_at"},
            searchable=("full_name", "email", "role"),
            display="full_name",
        ),
        TableSpec(
            name="tasks",
            columns=(
                "id", "title", "description", "assigned_to", "status", "priority",
                "due_date", "completed_at", "created_at",
            ),
            fields={
                FieldKind.STATUS: "status",
                FieldKind.PRIORITY: "priority",
                FieldKind.USER: "assigned_to",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("title", "description"),
            display="title",
        ),
        TableSpec(
            name="sales",
            columns=(
                "id", "customer_id", "product_id", "sales_rep_id", "quantity", "unit_price",
                "total_amount", "sale_date", "status", "notes", "created_at",
            ),
            fields={
                FieldKind.NUMERIC: "total_amount",
                FieldKind.STATUS: "status",
                FieldKind.USER: "sales_rep_id",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("status", "notes"),
        ),
        TableSpec(
            name="stock",
            columns=(
                "id", "product_id", "warehouse_location", "quantity_available",
                "reserved_quantity", "reorder_level", "last_restocked", "created_at",
            ),
            fields={
                FieldKind.NUMERIC: "quantity_available",
                FieldKind.LOCATION: "warehouse_location",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("warehouse_location",),
        ),
        TableSpec(
            name="shifts",
            columns=(
                "id", "user_id", "shift_date", "start_time", "end_time", "break_duration",
                "location", "notes", "created_at",
            ),
            fields={
                FieldKind.NUMERIC: "break_duration",
                FieldKind.LOCATION: "location",
                FieldKind.USER: "user_id",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("location", "notes"),
            display="shift_date",
        ),
        TableSpec(
            name="attendance",
            columns=(
                "id", "user_id", "shift_id", "clock_in", "clock_out", "status",
                "total_hours", "notes", "created_at",
            ),
            fields={
                FieldKind.NUMERIC: "total_hours",
                FieldKind.STATUS: "status",
                FieldKind.USER: "user_id",
                FieldKind.TIMESTAMP: "created_at",
            },
            searchable=("status", "notes"),
        ),
    ]
    joins = {
        "sales": (
            JoinSpec("customers", "customer_id"),
            JoinSpec("products", "product_id"),
            JoinSpec("users", "sales_rep_id"),
        ),
        "stock": (JoinSpec("products", "product_id"),),
        "tasks": (JoinSpec("users", "assigned_to"),),
        "attendance": (JoinSpec("users", "user_id"), JoinSpec("shifts", "shift_id")),
        "shifts": (JoinSpec("users", "user_id"),),
    }
    return TableCatalog(tables={t.name: t for t in tables}, joins=joins)
