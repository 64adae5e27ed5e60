"""Comparisons, filters and row selections sent to the table service."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator

from gameshop_tables.values import ColumnValue, to_untyped


class Operator(Enum):
    """Comparison operators, valued by their wire token."""

    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="
    IN = "in"
    NOT_IN = "not_in"
    RANGE = "range"

    @property
    def arity(self) -> str:
        """'one' for single-value operators, 'many' for sets, 'range' for ranges."""
        if self in (Operator.IN, Operator.NOT_IN):
            return "many"
        if self is Operator.RANGE:
            return "range"
        return "one"


@dataclass(frozen=True)
class Comparison:
    """An operator applied to one or more column values.

    Single-value operators hold one operand, IN/NOT_IN any number, and RANGE
    exactly two: the inclusive minimum and maximum. The range bounds are not
    reordered.
    """

    operator: Operator
    operands: tuple[ColumnValue, ...]

    def __post_init__(self) -> None:
        arity = self.operator.arity
        count = len(self.operands)
        if arity == "one" and count != 1:
            raise ValueError(f"Operator '{self.operator.value}' takes one operand, got {count}")
        if arity == "range" and count != 2:
            raise ValueError(f"Operator 'range' takes two operands, got {count}")

    @classmethod
    def lt(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.LT, (value,))

    @classmethod
    def gt(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.GT, (value,))

    @classmethod
    def le(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.LE, (value,))

    @classmethod
    def ge(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.GE, (value,))

    @classmethod
    def eq(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.EQ, (value,))

    @classmethod
    def ne(cls, value: ColumnValue) -> Comparison:
        return cls(Operator.NE, (value,))

    @classmethod
    def in_(cls, values: Iterable[ColumnValue]) -> Comparison:
        return cls(Operator.IN, tuple(values))

    @classmethod
    def not_in(cls, values: Iterable[ColumnValue]) -> Comparison:
        return cls(Operator.NOT_IN, tuple(values))

    @classmethod
    def between(cls, minimum: ColumnValue, maximum: ColumnValue) -> Comparison:
        return cls(Operator.RANGE, (minimum, maximum))

    def to_wire(self) -> list[Any]:
        """Encode as the `[operator, operand]` pair the service expects."""
        values = [to_untyped(v) for v in self.operands]
        if self.operator.arity == "one":
            return [self.operator.value, values[0]]
        return [self.operator.value, values]


class Filter:
    """Per-column comparisons, combined conjunctively by the service.

    Columns are not checked against any schema here.
    """

    def __init__(self, comparisons: dict[str, Comparison] | None = None) -> None:
        self._comparisons: dict[str, Comparison] = dict(comparisons or {})

    def insert(self, column: str, comparison: Comparison) -> None:
        """Set the comparison for a column, replacing any previous one."""
        self._comparisons[column] = comparison

    def get(self, column: str) -> Comparison | None:
        return self._comparisons.get(column)

    def to_wire(self) -> dict[str, list[Any]]:
        """Encode as a JSON object of column -> comparison pair."""
        return {column: comp.to_wire() for column, comp in self._comparisons.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_wire())

    def __len__(self) -> int:
        return len(self._comparisons)

    def __contains__(self, column: object) -> bool:
        return column in self._comparisons

    def __iter__(self) -> Iterator[str]:
        return iter(self._comparisons)

    def items(self) -> Iterable[tuple[str, Comparison]]:
        return self._comparisons.items()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Filter):
            return NotImplemented
        return self._comparisons == other._comparisons

    def __repr__(self) -> str:
        return f"Filter({self._comparisons!r})"


class SelectionKind(Enum):
    """Ways of requesting rows from a table."""

    ALL = "all"
    BY_ID = "by_id"
    FILTER = "filter"


@dataclass(frozen=True)
class Selection:
    """Which rows of a table to request."""

    kind: SelectionKind
    identifier: int | None = None
    filter: Filter | None = None

    @classmethod
    def all(cls) -> Selection:
        return cls(SelectionKind.ALL)

    @classmethod
    def by_id(cls, identifier: int) -> Selection:
        return cls(SelectionKind.BY_ID, identifier=identifier)

    @classmethod
    def where(cls, filter: Filter) -> Selection:
        return cls(SelectionKind.FILTER, filter=filter)

    @property
    def is_by_id(self) -> bool:
        return self.kind is SelectionKind.BY_ID

    def path(self, table_id: str) -> str:
        """Endpoint path serving this selection."""
        if self.is_by_id:
            return f"/api/item/{table_id}/{self.identifier}"
        return f"/api/items/{table_id}"

    def body(self) -> str | None:
        """JSON request body; an empty object asks for every row."""
        if self.kind is SelectionKind.BY_ID:
            return None
        if self.kind is SelectionKind.FILTER and self.filter is not None:
            return self.filter.to_json()
        return "{}"
