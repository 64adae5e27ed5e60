"""Exception types raised by gameshop_tables."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gameshop_tables.types import TableSchema


class GameshopError(Exception):
    """Base class for all errors raised by this package."""


class ConversionError(GameshopError, ValueError):
    """An untyped value cannot be represented as a column value.

    Raised for arrays, objects and any other non-scalar input.
    """

    def __init__(self, value: Any, column: str | None = None) -> None:
        self.value = value
        self.column = column
        kind = type(value).__name__
        if column is None:
            message = f"Cannot convert {kind} value to a column value"
        else:
            message = f"Cannot convert {kind} value in column '{column}' to a column value"
        super().__init__(message)


class ParseErrorKind(Enum):
    """Why user-entered text could not be turned into a column value."""

    EMPTY = "empty"
    PARSE_ERROR = "parse_error"


class ColumnParseError(GameshopError, ValueError):
    """User-entered text does not fit a column's declared type."""

    def __init__(self, kind: ParseErrorKind, column: str, text: str, detail: str | None = None) -> None:
        self.kind = kind
        self.column = column
        self.text = text
        if kind is ParseErrorKind.EMPTY:
            message = f"Column '{column}' requires a value"
        else:
            message = f"Cannot parse {text!r} for column '{column}'"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)


class SchemaError(GameshopError, ValueError):
    """The table schema payload is malformed or inconsistent."""


class OrphanedTablesError(SchemaError):
    """Tables whose primary key references a table that no tree reaches."""

    def __init__(self, orphans: list[TableSchema]) -> None:
        self.orphans = orphans
        names = ", ".join(t.table_id for t in orphans)
        super().__init__(f"Tables without a resolvable root: {names}")


class RowDecodeError(GameshopError, ValueError):
    """A row payload does not have the expected object/array shape."""


class FilterSyntaxError(GameshopError, SyntaxError):
    """A filter expression cannot be lexed, parsed or typed."""


class ClientError(GameshopError):
    """Base class for service client failures."""


class RequestError(ClientError):
    """The request could not be sent or no response was received."""


class ResponseError(ClientError):
    """The service answered with a non-success status."""

    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self.text = text
        super().__init__(f"HTTP {status}: {text}")
