"""Decode row payloads into typed table entries."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from gameshop_tables.errors import ConversionError, RowDecodeError
from gameshop_tables.values import ColumnValue, from_untyped

# A row: column name -> optional typed value
TableEntry = Dict[str, Optional[ColumnValue]]


def decode_row(record: Any) -> TableEntry:
    """Convert one JSON object into a row of typed values.

    Raises:
        RowDecodeError: If the record is not an object.
        ConversionError: If a field holds an array or an object.
    """
    if not isinstance(record, dict):
        raise RowDecodeError(f"Expected a row object, got {type(record).__name__}")
    entry: TableEntry = {}
    for column, raw in record.items():
        try:
            entry[column] = from_untyped(raw)
        except ConversionError as e:
            raise ConversionError(raw, column=column) from e
    return entry


def decode_rows(payload: Any, single: bool = False) -> list[TableEntry]:
    """Decode a row response.

    Args:
        payload: Decoded JSON response body.
        single: True for a by-id response holding one object rather than an
            array of objects.
    """
    if single:
        return [decode_row(payload)]
    if not isinstance(payload, list):
        raise RowDecodeError(f"Expected an array of rows, got {type(payload).__name__}")
    return [decode_row(record) for record in payload]


def load_rows(text: str, single: bool = False) -> list[TableEntry]:
    """Parse a JSON row response and decode it."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise RowDecodeError(f"Invalid JSON in row response: {e}") from e
    return decode_rows(payload, single=single)
