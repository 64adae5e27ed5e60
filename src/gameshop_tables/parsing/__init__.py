"""Parsing module for the filter expression language."""

from gameshop_tables.parsing.filter_parser import Condition, FilterParser, format_filter

__all__ = [
    "Condition",
    "FilterParser",
    "format_filter",
]
