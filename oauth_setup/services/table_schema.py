# oauth_setup/services/table_schema.py
# Immutable description of a single table: columns, unique constraints,
# row-level security policies, indexes and the updated_at trigger.

from dataclasses import dataclass, field
from typing import Optional, Tuple

OPERATIONS = ("select", "insert", "update", "delete")
DEFAULT_TRIGGER_FUNCTION = "update_updated_at_column"


class SchemaError(ValueError):
    """Raised when a TableSchema references something it does not define."""


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    constraints: str = ""


@dataclass(frozen=True)
class Policy:
    """
    One RLS policy.
      - using: predicate filtering existing rows (select/update/delete)
      - check: predicate new rows must satisfy (insert/update)
    """
    name: str
    operation: str
    role: str
    using: Optional[str] = None
    check: Optional[str] = None


@dataclass(frozen=True)
class Index:
    name: str
    column: str


@dataclass(frozen=True)
class UpdateTrigger:
    """BEFORE UPDATE trigger stamping `column`; the function defaults to update_<column>_column."""
    name: str
    column: str = "updated_at"
    function: Optional[str] = None

    @property
    def function_name(self) -> str:
        return self.function or f"update_{self.column}_column"


@dataclass(frozen=True)
class TableSchema:
    name: str
    columns: Tuple[Column, ...]
    unique: Tuple[Tuple[str, ...], ...] = ()
    policies: Tuple[Policy, ...] = ()
    indexes: Tuple[Index, ...] = ()
    trigger: Optional[UpdateTrigger] = None
    extensions: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        _validate(self)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)


def _check_policy(table: str, p: Policy) -> None:
    if p.operation not in OPERATIONS:
        raise SchemaError(f"{table}: policy {p.name!r} has unknown operation {p.operation!r}")
    # Postgres: INSERT only accepts WITH CHECK, SELECT/DELETE only USING
    if p.operation == "insert" and (p.using or not p.check):
        raise SchemaError(f"{table}: insert policy {p.name!r} needs a check predicate only")
    if p.operation in ("select", "delete") and (p.check or not p.using):
        raise SchemaError(f"{table}: {p.operation} policy {p.name!r} needs a using predicate only")
    if p.operation == "update" and not (p.using or p.check):
        raise SchemaError(f"{table}: update policy {p.name!r} needs a predicate")


def _validate(schema: TableSchema) -> None:
    if not schema.columns:
        raise SchemaError(f"{schema.name}: no columns defined")

    names = schema.column_names
    seen = set()
    for n in names:
        if n in seen:
            raise SchemaError(f"{schema.name}: duplicate column {n!r}")
        seen.add(n)

    for group in schema.unique:
        missing = [c for c in group if c not in seen]
        if not group or missing:
            raise SchemaError(f"{schema.name}: unique constraint references unknown columns {missing}")

    policy_names = set()
    for p in schema.policies:
        if p.name in policy_names:
            raise SchemaError(f"{schema.name}: duplicate policy {p.name!r}")
        policy_names.add(p.name)
        _check_policy(schema.name, p)

    index_names = set()
    for ix in schema.indexes:
        if ix.name in index_names:
            raise SchemaError(f"{schema.name}: duplicate index {ix.name!r}")
        index_names.add(ix.name)
        if ix.column not in seen:
            raise SchemaError(f"{schema.name}: index {ix.name!r} references unknown column {ix.column!r}")

    if schema.trigger is not None and schema.trigger.column not in seen:
        raise SchemaError(
            f"{schema.name}: trigger {schema.trigger.name!r} references unknown column {schema.trigger.column!r}"
        )

    # update_updated_at_column() is shared by every updated_at trigger in the project
    if (
        schema.trigger is not None
        and schema.trigger.column != "updated_at"
        and schema.trigger.function_name == DEFAULT_TRIGGER_FUNCTION
    ):
        raise SchemaError(
            f"{schema.name}: trigger {schema.trigger.name!r} on {schema.trigger.column!r} "
            f"cannot reuse {DEFAULT_TRIGGER_FUNCTION}()"
        )
