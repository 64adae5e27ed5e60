"""Tests for resolving table hierarchies."""

import logging

import pytest

from gameshop_tables.errors import OrphanedTablesError
from gameshop_tables.hierarchy import (
    DefinitionKind,
    TableDefinition,
    TableNode,
    build_forest,
    find_definition,
    flatten,
    outer_leaves,
    resolve_definitions,
)
from gameshop_tables.types import ColumnSchema, ColumnType, ForeignKeyRef, TableSchema


def make_table(table_id, *parents, with_key=True):
    """Build a table whose identity column references the given parents."""
    columns = []
    if with_key:
        columns.append(
            ColumnSchema(
                name="id",
                type=ColumnType.INT,
                primary_key=True,
                foreign_keys=tuple(ForeignKeyRef(p, "id") for p in parents),
            )
        )
    columns.append(ColumnSchema(name="name", type=ColumnType.STR))
    return TableSchema(name=table_id.title(), table_id=table_id, columns=tuple(columns))


def ids(tables):
    return [t.table_id for t in tables]


class TestBuildForest:
    """Tests for building trees from flat table lists."""

    def test_roots(self):
        """Test every root table starts its own tree."""
        a = make_table("a")
        b = make_table("b")
        log = make_table("log", with_key=False)

        forest = build_forest([a, b, log])

        assert [tree.table for tree in forest.trees] == [a, b, log]
        assert all(not tree.children for tree in forest.trees)
        assert forest.orphans == []

    def test_chain(self):
        """Test A <- B <- C builds one tree A -> B -> C."""
        a = make_table("a")
        b = make_table("b", "a")
        c = make_table("c", "b")

        forest = build_forest([c, b, a])

        assert len(forest.trees) == 1
        root = forest.trees[0]
        assert root.table is a
        assert [n.table for n in root.children] == [b]
        assert [n.table for n in root.children[0].children] == [c]
        assert root.children[0].children[0].children == []

    def test_siblings_in_input_order(self):
        """Test children are attached in input order."""
        a = make_table("a")
        d = make_table("d", "a")
        b = make_table("b", "a")

        forest = build_forest([a, d, b])

        assert [n.table for n in forest.trees[0].children] == [d, b]

    def test_foreign_key_on_other_column_ignored(self):
        """Test only the identity column's references create edges."""
        a = make_table("a")
        review = TableSchema(
            name="Review",
            table_id="review",
            columns=(
                ColumnSchema("id", ColumnType.INT, primary_key=True),
                ColumnSchema("a_id", ColumnType.INT, foreign_keys=(ForeignKeyRef("a", "id"),)),
            ),
        )

        forest = build_forest([a, review])

        assert [tree.table for tree in forest.trees] == [a, review]
        assert forest.trees[0].children == []

    def test_missing_parent_is_orphan(self):
        """Test a table referencing an unknown table is reported."""
        a = make_table("a")
        lost = make_table("lost", "nowhere")
        below_lost = make_table("below_lost", "lost")

        forest = build_forest([a, lost, below_lost])

        assert [tree.table for tree in forest.trees] == [a]
        assert forest.orphans == [lost, below_lost]

    def test_cycle_is_orphan(self):
        """Test tables referencing each other without a root are reported."""
        x = make_table("x", "y")
        y = make_table("y", "x")
        selfish = make_table("selfish", "selfish")

        forest = build_forest([x, y, selfish])

        assert forest.trees == []
        assert forest.orphans == [x, y, selfish]

    def test_table_attached_once(self):
        """Test a table extending two tables is attached to the first claimer only."""
        a = make_table("a")
        b = make_table("b")
        both = make_table("both", "b", "a")

        forest = build_forest([a, b, both])

        first, second = forest.trees
        assert [n.table for n in first.children] == [both]
        assert second.children == []
        assert forest.orphans == []

    def test_input_not_modified(self):
        """Test the caller's list is left untouched."""
        tables = [make_table("a"), make_table("b", "a")]
        snapshot = list(tables)

        build_forest(tables)

        assert tables == snapshot


class TestOuterLeaves:
    """Tests for collecting the deepest descendants."""

    def test_no_children(self):
        """Test a node without children has no leaves."""
        assert outer_leaves(TableNode(make_table("a"))) is None

    def test_direct_children(self):
        """Test childless children are leaves."""
        b, d = make_table("b", "a"), make_table("d", "a")
        node = TableNode(make_table("a"), [TableNode(b), TableNode(d)])

        assert outer_leaves(node) == [b, d]

    def test_deeper_leaves_come_first(self):
        """Test descendant leaves precede direct leaves."""
        a = make_table("a")
        b = make_table("b", "a")
        c = make_table("c", "b")
        d = make_table("d", "a")
        node = TableNode(a, [TableNode(d), TableNode(b, [TableNode(c)])])

        assert outer_leaves(node) == [c, d]


class TestFlatten:
    """Tests for collapsing trees into definitions."""

    def test_single(self):
        """Test a table without children becomes a single definition."""
        a = make_table("a")

        definition = flatten(TableNode(a))

        assert definition == TableDefinition.single(a)
        assert definition.kind is DefinitionKind.SINGLE
        assert definition.is_family is False
        assert definition.leaves == ()

    def test_chain_drops_intermediate(self):
        """Test A <- B <- C flattens to base A with leaf C only."""
        a, b, c = make_table("a"), make_table("b", "a"), make_table("c", "b")
        tree = build_forest([a, b, c]).trees[0]

        definition = flatten(tree)

        assert definition.kind is DefinitionKind.FAMILY
        assert definition.base is a
        assert ids(definition.leaves) == ["c"]
        assert definition.get("b") is None

    def test_deep_chain(self):
        """Test chains deeper than the recursion limit resolve."""
        tables = [make_table("t0")]
        tables += [make_table(f"t{i}", f"t{i - 1}") for i in range(1, 3000)]

        forest = build_forest(reversed(tables))
        definition = flatten(forest.trees[0])

        assert forest.orphans == []
        assert definition.base.table_id == "t0"
        assert ids(definition.leaves) == ["t2999"]

    def test_two_siblings(self):
        """Test a root with two childless children keeps both as leaves."""
        a, b, d = make_table("a"), make_table("b", "a"), make_table("d", "a")
        tree = build_forest([a, b, d]).trees[0]

        definition = flatten(tree)

        assert definition.base is a
        assert sorted(ids(definition.leaves)) == ["b", "d"]

    def test_mixed_depths(self):
        """Test leaves at different depths are all kept."""
        tables = [
            make_table("item"),
            make_table("game", "item"),
            make_table("board_game", "game"),
            make_table("video_game", "game"),
            make_table("accessory", "item"),
        ]

        definition = flatten(build_forest(tables).trees[0])

        assert definition.base.table_id == "item"
        assert ids(definition.leaves) == ["board_game", "video_game", "accessory"]

    def test_leaves_distinct(self):
        """Test no table appears twice in a definition."""
        tables = [
            make_table("a"),
            make_table("b", "a"),
            make_table("c", "a", "b"),
        ]

        definition = flatten(build_forest(tables).trees[0])

        all_ids = ids(definition.tables)
        assert len(all_ids) == len(set(all_ids))


class TestTableDefinition:
    """Tests for TableDefinition lookups."""

    def test_get(self):
        """Test lookup of base, leaf and unrelated table ids."""
        a, b, d = make_table("a"), make_table("b", "a"), make_table("d", "a")
        definition = TableDefinition.family(a, [b, d])

        assert definition.get("a") is a
        assert definition.get("d") is d
        assert definition.get("zzz") is None

    def test_contains(self):
        """Test membership by table id."""
        definition = TableDefinition.single(make_table("a"))

        assert "a" in definition
        assert "b" not in definition
        assert 1 not in definition

    def test_tables(self):
        """Test tables lists the base before the leaves."""
        a, b = make_table("a"), make_table("b", "a")
        assert TableDefinition.family(a, [b]).tables == [a, b]

    def test_find_definition(self):
        """Test finding the definition containing a table."""
        a, b = make_table("a"), make_table("b", "a")
        x = make_table("x")
        definitions = [TableDefinition.family(a, [b]), TableDefinition.single(x)]

        assert find_definition(definitions, "b") is definitions[0]
        assert find_definition(definitions, "x") is definitions[1]
        assert find_definition(definitions, "q") is None


class TestResolveDefinitions:
    """Tests for the full schema-to-definition pipeline."""

    def test_resolve(self):
        """Test one definition per root, in input order."""
        tables = [
            make_table("customer"),
            make_table("item"),
            make_table("board_game", "item"),
        ]

        definitions = resolve_definitions(tables)

        assert [d.base.table_id for d in definitions] == ["customer", "item"]
        assert definitions[0].kind is DefinitionKind.SINGLE
        assert ids(definitions[1].leaves) == ["board_game"]

    def test_orphans_logged(self, caplog):
        """Test orphans are left out with a warning by default."""
        tables = [make_table("a"), make_table("lost", "nowhere")]

        with caplog.at_level(logging.WARNING, logger="gameshop_tables.hierarchy"):
            definitions = resolve_definitions(tables)

        assert [d.base.table_id for d in definitions] == ["a"]
        assert "lost" in caplog.text

    def test_orphans_strict(self):
        """Test strict mode raises with the orphan list."""
        lost = make_table("lost", "nowhere")

        with pytest.raises(OrphanedTablesError) as exc_info:
            resolve_definitions([make_table("a"), lost], strict=True)

        assert exc_info.value.orphans == [lost]
        assert "lost" in str(exc_info.value)

    def test_empty(self):
        """Test no tables give no definitions."""
        assert resolve_definitions([]) == []
