"""Typed column values and their conversions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Union

from gameshop_tables.errors import ColumnParseError, ConversionError, ParseErrorKind
from gameshop_tables.types import ColumnSchema, ColumnType

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MASK = (1 << 64) - 1

Scalar = Union[bool, int, float, str]

_BOOL_LITERALS = {"true": True, "false": False}


@dataclass(frozen=True)
class ColumnValue:
    """A value of one of the column types.

    The variant is carried by `type`, the payload by `value`. Values of
    different variants never compare equal, so `Int(1) != Bool(True)` and
    `Int(5) != Float(5.0)`. Absence is represented by `None` outside this
    class, never by a variant.
    """

    type: ColumnType
    value: Scalar

    @classmethod
    def bool_(cls, value: bool) -> ColumnValue:
        return cls(ColumnType.BOOL, bool(value))

    @classmethod
    def int_(cls, value: int) -> ColumnValue:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Int value must be an int, got {type(value).__name__}")
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"Int value {value} is outside the signed 64-bit range")
        return cls(ColumnType.INT, int(value))

    @classmethod
    def float_(cls, value: float) -> ColumnValue:
        return cls(ColumnType.FLOAT, float(value))

    @classmethod
    def str_(cls, value: str) -> ColumnValue:
        return cls(ColumnType.STR, str(value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnValue):
            return NotImplemented
        # compare payloads by identity of type too: True == 1 in Python
        return (
            self.type is other.type
            and type(self.value) is type(other.value)
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value))

    def __str__(self) -> str:
        if self.type is ColumnType.BOOL:
            return "true" if self.value else "false"
        return str(self.value)

    def __repr__(self) -> str:
        names = {
            ColumnType.BOOL: "Bool",
            ColumnType.INT: "Int",
            ColumnType.FLOAT: "Float",
            ColumnType.STR: "String",
        }
        return f"{names[self.type]}({self.value!r})"

    def to_untyped(self) -> Scalar | None:
        """Return the JSON-compatible form of this value."""
        return to_untyped(self)


def type_of(value: ColumnValue) -> ColumnType:
    """Return the column type matching a value's variant."""
    return value.type


def _wrap_to_int64(number: int) -> int:
    """Reinterpret an integer as unsigned 64-bit, then as signed 64-bit."""
    unsigned = number & UINT64_MASK
    return unsigned - (1 << 64) if unsigned > INT64_MAX else unsigned


def _number_to_value(number: int | float) -> ColumnValue:
    """Pick Int or Float for a JSON number.

    A number that fits a 64-bit float becomes Float, so plain integers such
    as 5 come back as Float(5.0). Int is only used for integers too large
    for a float.
    """
    if isinstance(number, float):
        return ColumnValue.float_(number)
    try:
        return ColumnValue.float_(float(number))
    except OverflowError:
        pass
    if INT64_MIN <= number <= INT64_MAX:
        return ColumnValue.int_(number)
    return ColumnValue.int_(_wrap_to_int64(number))


def from_untyped(raw: Any) -> ColumnValue | None:
    """Convert a decoded JSON value into an optional column value.

    Raises:
        ConversionError: If the value is an array, an object or anything
            else that is not a JSON scalar.
    """
    if raw is None:
        return None
    # bool before numbers: bool is a subclass of int
    if isinstance(raw, bool):
        return ColumnValue.bool_(raw)
    if isinstance(raw, (int, float)):
        return _number_to_value(raw)
    if isinstance(raw, str):
        return ColumnValue.str_(raw)
    raise ConversionError(raw)


def to_untyped(value: ColumnValue | None) -> Scalar | None:
    """Convert an optional column value into its JSON-compatible form.

    Non-finite floats have no JSON representation and become None.
    """
    if value is None:
        return None
    if value.type is ColumnType.FLOAT and not math.isfinite(value.value):
        return None
    return value.value


def _check_number_text(text: str) -> None:
    # int() and float() also accept padding and digit separators
    if text != text.strip() or "_" in text:
        raise ValueError("not a plain number")


def _parse_int(text: str) -> int:
    _check_number_text(text)
    number = int(text)
    if not INT64_MIN <= number <= INT64_MAX:
        raise ValueError("outside the signed 64-bit range")
    return number


def _parse_float(text: str) -> float:
    _check_number_text(text)
    return float(text)


def _parse_bool(text: str) -> bool:
    try:
        return _BOOL_LITERALS[text]
    except KeyError:
        raise ValueError("expected 'true' or 'false'") from None


def from_text(column: ColumnSchema, text: str) -> ColumnValue | None:
    """Parse user-entered text according to a column's declared type.

    Empty text means "no value" for optional columns and the empty string
    for required string columns.

    Raises:
        ColumnParseError: With kind EMPTY for empty text on any other
            required column, or PARSE_ERROR when the text does not parse.
    """
    if text == "":
        if column.optional:
            return None
        if column.type is ColumnType.STR:
            return ColumnValue.str_("")
        raise ColumnParseError(ParseErrorKind.EMPTY, column.name, text)

    try:
        if column.type is ColumnType.BOOL:
            return ColumnValue.bool_(_parse_bool(text))
        if column.type is ColumnType.INT:
            return ColumnValue.int_(_parse_int(text))
        if column.type is ColumnType.FLOAT:
            return ColumnValue.float_(_parse_float(text))
    except ValueError as e:
        raise ColumnParseError(ParseErrorKind.PARSE_ERROR, column.name, text, str(e)) from e
    return ColumnValue.str_(text)


def coerce(column_type: ColumnType, raw: Scalar) -> ColumnValue:
    """Build a value of `column_type` from a Python scalar literal.

    Integers widen to floats; every other mismatch raises TypeError.
    """
    if column_type is ColumnType.BOOL and isinstance(raw, bool):
        return ColumnValue.bool_(raw)
    if column_type is ColumnType.STR and isinstance(raw, str):
        return ColumnValue.str_(raw)
    if not isinstance(raw, bool):
        if column_type is ColumnType.INT and isinstance(raw, int):
            return ColumnValue.int_(raw)
        if column_type is ColumnType.FLOAT and isinstance(raw, (int, float)):
            return ColumnValue.float_(raw)
    raise TypeError(f"{type(raw).__name__} literal {raw!r} does not fit a {column_type.value} column")


def infer(raw: Scalar) -> ColumnValue:
    """Build a value from a Python scalar literal using the literal's own type."""
    if isinstance(raw, bool):
        return ColumnValue.bool_(raw)
    if isinstance(raw, int):
        return ColumnValue.int_(raw)
    if isinstance(raw, float):
        return ColumnValue.float_(raw)
    if isinstance(raw, str):
        return ColumnValue.str_(raw)
    raise TypeError(f"Unsupported literal type {type(raw).__name__}")
