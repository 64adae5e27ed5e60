"""Gameshop Tables - table hierarchies and typed rows from the game shop service."""

from gameshop_tables.client import TableClient
from gameshop_tables.errors import (
    ColumnParseError,
    ConversionError,
    FilterSyntaxError,
    GameshopError,
    OrphanedTablesError,
    ParseErrorKind,
    RowDecodeError,
    SchemaError,
)
from gameshop_tables.filters import Comparison, Filter, Operator, Selection, SelectionKind
from gameshop_tables.hierarchy import (
    DefinitionKind,
    Forest,
    TableDefinition,
    TableNode,
    build_forest,
    flatten,
    resolve_definitions,
)
from gameshop_tables.parsing import FilterParser
from gameshop_tables.rows import TableEntry, decode_row, decode_rows
from gameshop_tables.types import ColumnSchema, ColumnType, ForeignKeyRef, TableSchema, load_tables
from gameshop_tables.values import ColumnValue, from_text, from_untyped, to_untyped, type_of

__all__ = [
    # Schema
    "ColumnType",
    "ForeignKeyRef",
    "ColumnSchema",
    "TableSchema",
    "load_tables",
    # Hierarchy
    "TableNode",
    "Forest",
    "DefinitionKind",
    "TableDefinition",
    "build_forest",
    "flatten",
    "resolve_definitions",
    # Values and rows
    "ColumnValue",
    "from_untyped",
    "to_untyped",
    "from_text",
    "type_of",
    "TableEntry",
    "decode_row",
    "decode_rows",
    # Filters
    "Operator",
    "Comparison",
    "Filter",
    "SelectionKind",
    "Selection",
    "FilterParser",
    # Client
    "TableClient",
    # Errors
    "GameshopError",
    "ConversionError",
    "ParseErrorKind",
    "ColumnParseError",
    "SchemaError",
    "OrphanedTablesError",
    "RowDecodeError",
    "FilterSyntaxError",
]

__version__ = "0.1.0"
