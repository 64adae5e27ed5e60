"""Table schema definitions for the gameshop_tables library."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gameshop_tables.errors import SchemaError


class ColumnType(Enum):
    """Column types a table schema can declare."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"

    @classmethod
    def from_name(cls, name: str) -> ColumnType:
        """Look up a column type by its wire name."""
        try:
            return COLUMN_TYPE_NAMES[name]
        except (KeyError, TypeError):
            raise SchemaError(f"Unknown column type {name!r}") from None


# Mapping from wire type names to ColumnType enum values
COLUMN_TYPE_NAMES: dict[str, ColumnType] = {ct.value: ct for ct in ColumnType}


def _require(data: Any, key: str, kind: type, where: str) -> Any:
    """Fetch a required key from a schema object, checking its JSON type."""
    if not isinstance(data, dict):
        raise SchemaError(f"Expected an object for {where}, got {type(data).__name__}")
    if key not in data:
        raise SchemaError(f"Missing '{key}' in {where}")
    value = data[key]
    if not isinstance(value, kind):
        raise SchemaError(f"Field '{key}' in {where} has unexpected type {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ForeignKeyRef:
    """A reference from a column to a column of another table."""

    table: str
    column: str

    @classmethod
    def from_dict(cls, data: Any) -> ForeignKeyRef:
        return cls(
            table=_require(data, "table", str, "foreign key"),
            column=_require(data, "column", str, "foreign key"),
        )


@dataclass(frozen=True)
class ColumnSchema:
    """Definition of a column within a table schema.

    `mapper` is a display hint passed through from the service untouched.
    """

    name: str
    type: ColumnType
    optional: bool = False
    primary_key: bool = False
    foreign_keys: tuple[ForeignKeyRef, ...] = ()
    mapper: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ColumnSchema:
        """Parse one column object of the schema response."""
        name = _require(data, "name", str, "column")
        where = f"column '{name}'"
        keys = _require(data, "foreign_keys", list, where)
        mapper = data.get("mapper")
        if mapper is not None and not isinstance(mapper, str):
            raise SchemaError(f"Field 'mapper' in {where} has unexpected type {type(mapper).__name__}")
        return cls(
            name=name,
            type=ColumnType.from_name(_require(data, "type", str, where)),
            optional=_require(data, "optional", bool, where),
            primary_key=_require(data, "primary_key", bool, where),
            foreign_keys=tuple(ForeignKeyRef.from_dict(k) for k in keys),
            mapper=mapper,
        )

    @property
    def is_reference(self) -> bool:
        """Return whether this column references another table."""
        return bool(self.foreign_keys)


@dataclass(frozen=True)
class TableSchema:
    """A table as described by the service.

    Only the first column flagged as primary key is considered the table's
    identity column; schemas with several such columns are not rejected.
    """

    name: str
    table_id: str
    columns: tuple[ColumnSchema, ...] = field(default_factory=tuple)
    polymorphic: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TableSchema:
        """Parse one table object of the schema response."""
        table_id = _require(data, "table", str, "table")
        where = f"table '{table_id}'"
        polymorphic = data.get("polymorphic")
        if polymorphic is not None and not isinstance(polymorphic, str):
            raise SchemaError(f"Field 'polymorphic' in {where} has unexpected type {type(polymorphic).__name__}")
        columns = _require(data, "columns", list, where)
        return cls(
            name=_require(data, "name", str, where),
            table_id=table_id,
            columns=tuple(ColumnSchema.from_dict(c) for c in columns),
            polymorphic=polymorphic,
        )

    @property
    def primary_key(self) -> ColumnSchema | None:
        """Return the first column flagged as primary key, if any."""
        for column in self.columns:
            if column.primary_key:
                return column
        return None

    @property
    def is_root(self) -> bool:
        """A table is a root when its identity column references nothing."""
        key = self.primary_key
        return key is None or not key.foreign_keys

    @property
    def parent_ids(self) -> list[str]:
        """Table ids referenced by the identity column, without duplicates."""
        key = self.primary_key
        if key is None:
            return []
        seen: list[str] = []
        for ref in key.foreign_keys:
            if ref.table not in seen:
                seen.append(ref.table)
        return seen

    @property
    def pretty_name(self) -> str:
        """Human-readable form of the table id, e.g. 'board_game' -> 'Board game'."""
        text = self.table_id.replace("_", " ")
        return text[:1].upper() + text[1:]

    def get_column(self, name: str) -> ColumnSchema | None:
        """Get a column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]


def load_tables(payload: Any) -> list[TableSchema]:
    """Parse the schema fetch response (a JSON array of table objects)."""
    if not isinstance(payload, list):
        raise SchemaError(f"Expected an array of tables, got {type(payload).__name__}")
    tables = [TableSchema.from_dict(item) for item in payload]

    seen: set[str] = set()
    for table in tables:
        if table.table_id in seen:
            raise SchemaError(f"Table '{table.table_id}' is defined more than once")
        seen.add(table.table_id)
    return tables
