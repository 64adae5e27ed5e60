"""Command line access to the table service."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from gameshop_tables.client import TableClient
from gameshop_tables.errors import GameshopError
from gameshop_tables.filters import Selection
from gameshop_tables.hierarchy import TableDefinition, TableNode, build_forest, flatten
from gameshop_tables.parsing import FilterParser, format_filter
from gameshop_tables.rows import TableEntry
from gameshop_tables.settings import Settings
from gameshop_tables.types import ColumnSchema, ColumnType, TableSchema, load_tables
from gameshop_tables.values import ColumnValue

logger = logging.getLogger(__name__)


def format_value(value: ColumnValue | None, max_width: int = 40) -> str:
    """Format a column value for display.

    Args:
        value: The value to format
        max_width: Maximum character width before truncating
    """
    if value is None:
        return "NULL"
    if value.type is ColumnType.FLOAT:
        return f"{value.value:.6g}"
    if value.type is ColumnType.STR:
        if len(value.value) > max_width:
            return repr(value.value[:max_width - 3] + "...")
        return repr(value.value)
    return str(value)


def describe_column(column: ColumnSchema) -> str:
    """One-line summary of a column: name, type and flags."""
    flags = []
    if column.primary_key:
        flags.append("primary key")
    if column.optional:
        flags.append("optional")
    for ref in column.foreign_keys:
        flags.append(f"-> {ref.table}.{ref.column}")
    text = f"{column.name}: {column.type.value}"
    if flags:
        text += f" ({', '.join(flags)})"
    return text


def print_table(table: TableSchema, indent: str = "") -> None:
    print(f"{indent}{table.pretty_name} [{table.table_id}]")
    for column in table.columns:
        print(f"{indent}    {describe_column(column)}")


def print_definition(definition: TableDefinition) -> None:
    """Print a definition: the base table, then each leaf indented under it."""
    print_table(definition.base)
    for leaf in definition.leaves:
        print_table(leaf, indent="  + ")


def print_tree(node: TableNode) -> None:
    """Print a tree with every level, including intermediate tables."""
    pending = [(node, 0)]
    while pending:
        current, depth = pending.pop()
        print(f"{'  ' * depth}{current.table.pretty_name} [{current.table.table_id}]")
        pending.extend((child, depth + 1) for child in reversed(current.children))


def print_rows(rows: list[TableEntry], columns: list[str] | None = None, max_col_width: int = 40) -> None:
    """Print rows in a formatted table."""
    if not rows:
        print("(no results)")
        return

    if columns is None:
        columns = []
        for row in rows:
            for col in row:
                if col not in columns:
                    columns.append(col)

    # Calculate column widths
    col_widths = {col: len(col) for col in columns}
    for row in rows:
        for col in columns:
            col_widths[col] = max(col_widths[col], len(format_value(row.get(col))))
    for col in col_widths:
        col_widths[col] = min(col_widths[col], max_col_width)

    header = " | ".join(col.ljust(col_widths[col])[:col_widths[col]] for col in columns)
    print(header)
    print("-" * len(header))

    for row in rows:
        values = []
        for col in columns:
            val = format_value(row.get(col))
            if len(val) > col_widths[col]:
                val = val[: col_widths[col] - 3] + "..."
            values.append(val.ljust(col_widths[col]))
        print(" | ".join(values))

    print(f"\n({len(rows)} row{'s' if len(rows) != 1 else ''})")


def _load_schema_file(path: Path) -> list[TableSchema]:
    with open(path) as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise GameshopError(f"Invalid JSON in {path}: {e}") from e
    return load_tables(payload)


def run_tables(args: argparse.Namespace, settings: Settings) -> int:
    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        schemas = _load_schema_file(args.file)
    else:
        with TableClient.from_settings(settings) as client:
            schemas = client.schemas()

    forest = build_forest(schemas)
    if forest.orphans:
        names = ", ".join(t.table_id for t in forest.orphans)
        print(f"Warning: tables without a resolvable root: {names}", file=sys.stderr)
        if args.strict or settings.strict_schema:
            return 1

    for i, tree in enumerate(forest.trees):
        if i:
            print()
        if args.tree:
            print_tree(tree)
        else:
            print_definition(flatten(tree))
    return 0


def run_items(args: argparse.Namespace, settings: Settings) -> int:
    with TableClient.from_settings(settings) as client:
        schema = None
        if args.where is not None:
            schema = next((t for t in client.schemas() if t.table_id == args.table), None)
            if schema is None:
                print(f"Error: Unknown table: {args.table}", file=sys.stderr)
                return 1
            row_filter = FilterParser().parse(args.where, table=schema)
            logger.debug("Filter: %s", format_filter(row_filter))
            selection = Selection.where(row_filter)
        elif args.id is not None:
            selection = Selection.by_id(args.id)
        else:
            selection = Selection.all()

        rows = client.get(args.table, selection)

    print_rows(rows, columns=schema.column_names() if schema else None)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Inspect the tables and rows served by the game shop service"
    )
    arg_parser.add_argument("--url", help="Service base URL (default: $GAMESHOP_URL)")
    arg_parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log requests and resolver details",
    )
    commands = arg_parser.add_subparsers(dest="command", required=True)

    tables_parser = commands.add_parser("tables", help="Show table definitions")
    tables_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Read a saved schema response instead of querying the service",
    )
    tables_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when some tables cannot be placed under a root table",
    )
    tables_parser.add_argument(
        "--tree",
        action="store_true",
        help="Show every level of each hierarchy instead of base and leaves",
    )

    items_parser = commands.add_parser("items", help="Show rows of a table")
    items_parser.add_argument("table", help="Table identifier")
    selection_group = items_parser.add_mutually_exclusive_group()
    selection_group.add_argument("--id", type=int, help="Fetch a single row by id")
    selection_group.add_argument(
        "-w", "--where",
        help='Filter expression, e.g. \'price < 40 and name in ("Azul")\'',
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
        if args.url:
            settings.url = args.url.rstrip("/")
        if args.timeout is not None:
            settings.timeout = args.timeout

        if args.command == "tables":
            return run_tables(args, settings)
        return run_items(args, settings)
    except (GameshopError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
