"""Resolve table schemas into single-table-inheritance definitions.

A table whose identity (primary key) column is itself a foreign key to
another table's identity column extends that table. Following those links
from every root table gives a forest; each tree is then collapsed into a
base table plus the deepest tables derived from it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from gameshop_tables.errors import OrphanedTablesError
from gameshop_tables.types import TableSchema

logger = logging.getLogger(__name__)


@dataclass
class TableNode:
    """A table together with the tables that extend it."""

    table: TableSchema
    children: list[TableNode] = field(default_factory=list)


@dataclass
class Forest:
    """Result of building trees from a flat list of tables.

    `orphans` are tables that extend a table no tree reaches: a missing
    parent, or a reference cycle between non-root tables.
    """

    trees: list[TableNode] = field(default_factory=list)
    orphans: list[TableSchema] = field(default_factory=list)


def build_forest(tables: Iterable[TableSchema]) -> Forest:
    """Build one tree per root table.

    Candidate children are indexed once by the table ids their identity
    column references. A node claims all of its unclaimed candidates before
    any of them is expanded, and a table is attached at most once, to the
    first node that claims it.
    """
    tables = list(tables)

    roots: list[TableSchema] = []
    candidates: dict[str, list[int]] = {}
    for index, table in enumerate(tables):
        if table.is_root:
            roots.append(table)
            continue
        for parent_id in table.parent_ids:
            candidates.setdefault(parent_id, []).append(index)

    claimed: set[int] = set()

    trees = []
    for root in roots:
        tree = TableNode(root)
        # depth-first, first child expanded first
        pending = [tree]
        while pending:
            node = pending.pop()
            found = [i for i in candidates.get(node.table.table_id, []) if i not in claimed]
            claimed.update(found)
            node.children = [TableNode(tables[i]) for i in found]
            pending.extend(reversed(node.children))
        trees.append(tree)

    orphans = [
        table
        for index, table in enumerate(tables)
        if not table.is_root and index not in claimed
    ]
    logger.debug(
        "Built %d tree(s) from %d table(s), %d orphan(s)",
        len(trees), len(tables), len(orphans),
    )
    return Forest(trees=trees, orphans=orphans)


def outer_leaves(node: TableNode) -> list[TableSchema] | None:
    """Collect the deepest descendants of a node.

    Returns None for a node without children. Children that have children
    of their own contribute their deepest descendants and are dropped
    themselves; children without children are leaves. Descendant leaves come
    first, followed by the direct leaves, so for a chain A <- B <- C only C
    is returned for A.
    """
    if not node.children:
        return None

    # post-order: a node's leaves are assembled once all of its children are done
    collected: dict[int, list[TableSchema]] = {}
    pending: list[tuple[TableNode, bool]] = [(node, False)]
    while pending:
        current, expanded = pending.pop()
        if not expanded:
            pending.append((current, True))
            pending.extend((child, False) for child in current.children if child.children)
            continue
        deeper: list[TableSchema] = []
        direct: list[TableSchema] = []
        for child in current.children:
            if child.children:
                deeper.extend(collected.pop(id(child)))
            else:
                direct.append(child.table)
        collected[id(current)] = deeper + direct
    return collected[id(node)]


class DefinitionKind(Enum):
    """Shape of a table definition."""

    SINGLE = "single"
    FAMILY = "family"


@dataclass(frozen=True)
class TableDefinition:
    """A standalone table, or a base table with the tables derived from it.

    `base` is always a root table. A SINGLE definition has no leaves; a
    FAMILY definition has one or more, all with distinct table ids.
    """

    kind: DefinitionKind
    base: TableSchema
    leaves: tuple[TableSchema, ...] = ()

    @classmethod
    def single(cls, table: TableSchema) -> TableDefinition:
        return cls(kind=DefinitionKind.SINGLE, base=table)

    @classmethod
    def family(cls, base: TableSchema, leaves: Iterable[TableSchema]) -> TableDefinition:
        return cls(kind=DefinitionKind.FAMILY, base=base, leaves=tuple(leaves))

    @property
    def is_family(self) -> bool:
        return self.kind is DefinitionKind.FAMILY

    @property
    def tables(self) -> list[TableSchema]:
        """The base table followed by the leaves."""
        return [self.base, *self.leaves]

    def get(self, table_id: str) -> TableSchema | None:
        """Return the base or leaf with the given table id, if present."""
        for table in self.tables:
            if table.table_id == table_id:
                return table
        return None

    def __contains__(self, table_id: object) -> bool:
        return isinstance(table_id, str) and self.get(table_id) is not None


def flatten(node: TableNode) -> TableDefinition:
    """Collapse a tree into a TableDefinition."""
    leaves = outer_leaves(node)
    if leaves is None:
        return TableDefinition.single(node.table)
    return TableDefinition.family(node.table, leaves)


def resolve_definitions(tables: Iterable[TableSchema], strict: bool = False) -> list[TableDefinition]:
    """Turn a flat list of table schemas into table definitions.

    Args:
        tables: All tables described by the service.
        strict: If True, raise when some tables cannot be placed in a tree.
            Otherwise they are logged and left out of the result.

    Returns:
        One definition per root table, in input order.

    Raises:
        OrphanedTablesError: If `strict` and there are orphaned tables.
    """
    forest = build_forest(tables)
    if forest.orphans:
        if strict:
            raise OrphanedTablesError(forest.orphans)
        logger.warning(
            "Ignoring tables without a resolvable root: %s",
            ", ".join(t.table_id for t in forest.orphans),
        )
    return [flatten(tree) for tree in forest.trees]


def find_definition(definitions: Iterable[TableDefinition], table_id: str) -> TableDefinition | None:
    """Find the definition that contains a table id."""
    for definition in definitions:
        if table_id in definition:
            return definition
    return None
