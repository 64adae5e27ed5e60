"""Parser for the filter expression language.

A filter expression is a list of conditions joined by `and`:

    price >= 10 and name in ("Catan", "Azul") and id between 1 and 5

Each condition becomes one entry of a Filter. When a table schema is given,
literals are converted to the declared type of their column.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from gameshop_tables.errors import FilterSyntaxError
from gameshop_tables.filters import Comparison, Filter, Operator
from gameshop_tables.parsing.filter_lexer import FilterLexer, escape_if_keyword
from gameshop_tables.types import TableSchema
from gameshop_tables.values import ColumnValue, Scalar, coerce, infer


@dataclass
class Condition:
    """A parsed condition before its literals are typed."""

    column: str
    operator: Operator
    values: list[Scalar] = field(default_factory=list)


class FilterParser:
    """Parser for filter expressions."""

    tokens = FilterLexer.tokens

    def __init__(self) -> None:
        self.lexer = FilterLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_filter_empty(self, p: yacc.YaccProduction) -> None:
        """filter : """
        p[0] = []

    def p_filter(self, p: yacc.YaccProduction) -> None:
        """filter : condition_list"""
        p[0] = p[1]

    def p_condition_list_single(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition"""
        p[0] = [p[1]]

    def p_condition_list_multiple(self, p: yacc.YaccProduction) -> None:
        """condition_list : condition_list AND condition"""
        p[0] = p[1] + [p[3]]

    def p_condition_comparison(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER EQ value
                     | IDENTIFIER NEQ value
                     | IDENTIFIER LT value
                     | IDENTIFIER LTE value
                     | IDENTIFIER GT value
                     | IDENTIFIER GTE value"""
        op_map = {
            "=": Operator.EQ,
            "==": Operator.EQ,
            "!=": Operator.NE,
            "<": Operator.LT,
            "<=": Operator.LE,
            ">": Operator.GT,
            ">=": Operator.GE,
        }
        p[0] = Condition(column=p[1], operator=op_map[p[2]], values=[p[3]])

    def p_condition_in(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER IN LPAREN value_list RPAREN"""
        p[0] = Condition(column=p[1], operator=Operator.IN, values=p[4])

    def p_condition_not_in(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER NOT IN LPAREN value_list RPAREN"""
        p[0] = Condition(column=p[1], operator=Operator.NOT_IN, values=p[5])

    def p_condition_between(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER BETWEEN value AND value"""
        p[0] = Condition(column=p[1], operator=Operator.RANGE, values=[p[3], p[5]])

    def p_value_list_empty(self, p: yacc.YaccProduction) -> None:
        """value_list : """
        p[0] = []

    def p_value_list_items(self, p: yacc.YaccProduction) -> None:
        """value_list : value_items
                      | value_items COMMA"""
        p[0] = p[1]

    def p_value_items_single(self, p: yacc.YaccProduction) -> None:
        """value_items : value"""
        p[0] = [p[1]]

    def p_value_items_multiple(self, p: yacc.YaccProduction) -> None:
        """value_items : value_items COMMA value"""
        p[0] = p[1] + [p[3]]

    def p_value_literal(self, p: yacc.YaccProduction) -> None:
        """value : INTEGER
                 | FLOAT
                 | STRING"""
        p[0] = p[1]

    def p_value_true(self, p: yacc.YaccProduction) -> None:
        """value : TRUE"""
        p[0] = True

    def p_value_false(self, p: yacc.YaccProduction) -> None:
        """value : FALSE"""
        p[0] = False

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise FilterSyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise FilterSyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="filter", **kwargs)

    def parse_conditions(self, data: str) -> list[Condition]:
        """Parse a filter expression into untyped conditions."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        conditions = self.parser.parse(data, lexer=self.lexer.lexer)
        if conditions is None:
            conditions = []
        return conditions

    def parse(self, data: str, table: TableSchema | None = None) -> Filter:
        """Parse a filter expression into a Filter.

        Args:
            data: The expression text.
            table: Schema used to type the literals. Without it each
                literal keeps its own type (42 is an Int, 4.2 a Float).

        Raises:
            FilterSyntaxError: On a syntax error, an unknown column or a
                literal that does not fit its column.
        """
        result = Filter()
        for condition in self.parse_conditions(data):
            values = [self._type_value(condition.column, v, table) for v in condition.values]
            result.insert(condition.column, Comparison(condition.operator, tuple(values)))
        return result

    def _type_value(self, column: str, raw: Scalar, table: TableSchema | None) -> ColumnValue:
        try:
            if table is None:
                return infer(raw)
            column_def = table.get_column(column)
            if column_def is None:
                raise FilterSyntaxError(f"Table '{table.table_id}' has no column '{column}'")
            return coerce(column_def.type, raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise FilterSyntaxError(f"Invalid value for column '{column}': {e}") from e


def _format_literal(value: ColumnValue) -> str:
    if isinstance(value.value, str):
        escaped = value.value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return str(value)


def format_filter(filter: Filter) -> str:
    """Render a Filter back into filter expression text."""
    parts = []
    for column, comparison in filter.items():
        name = escape_if_keyword(column)
        operands = comparison.operands
        if comparison.operator is Operator.RANGE:
            parts.append(f"{name} between {_format_literal(operands[0])} and {_format_literal(operands[1])}")
        elif comparison.operator in (Operator.IN, Operator.NOT_IN):
            keyword = "in" if comparison.operator is Operator.IN else "not in"
            items = ", ".join(_format_literal(v) for v in operands)
            parts.append(f"{name} {keyword} ({items})")
        else:
            parts.append(f"{name} {comparison.operator.value} {_format_literal(operands[0])}")
    return " and ".join(parts)
