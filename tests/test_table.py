"""Tests for the in-memory table and database catalog."""

import pytest

from potatorf.config import INITIAL_ROW_CAPACITY
from potatorf.database import Database, display_name_for
from potatorf.errors import SchemaError
from potatorf.table import Column, Row, Table
from potatorf.types import ColumnType


def _people() -> Table:
    return Table(
        "people",
        [
            Column("id", ColumnType.INT, nullable=False, primary_key=True),
            Column("name", ColumnType.TEXT),
        ],
    )


def _row(table: Table, *values) -> Row:
    row = table.new_row()
    for i, value in enumerate(values):
        if value is not None:
            row.set(i, value)
    return row


class TestRow:
    """Tests for Row slots."""

    def test_empty_row_is_all_null(self):
        row = Row.empty([Column("a", ColumnType.INT), Column("b", ColumnType.TEXT)])
        assert row.nulls == [True, True]
        assert row.values == [0, ""]
        assert row.get(0) is None
        assert not row.deleted

    def test_set_and_set_null(self):
        row = Row.empty([Column("a", ColumnType.INT)])
        row.set(0, 5)
        assert row.get(0) == 5
        assert not row.is_null(0)
        row.set_null(0)
        assert row.is_null(0)
        assert row.get(0) is None


class TestTable:
    """Tests for Table storage."""

    def test_column_lookup_is_case_insensitive(self):
        table = _people()
        assert table.column_index("NAME") == 1
        assert table.column_index("Id") == 0
        assert table.column_index("missing") is None

    def test_duplicate_column_rejected(self):
        with pytest.raises(SchemaError):
            Table("t", [Column("a", ColumnType.INT), Column("A", ColumnType.TEXT)])

    def test_too_many_columns_rejected(self):
        columns = [Column(f"c{i}", ColumnType.INT) for i in range(5)]
        with pytest.raises(SchemaError):
            Table("t", columns, max_columns=4)

    def test_insert_advances_next_id(self):
        table = _people()
        assert table.insert(_row(table, 1, "a")) == 0
        assert table.insert(_row(table, 2, "b")) == 1
        assert table.next_id == 2
        assert table.count == 2

    def test_capacity_doubles(self):
        table = _people()
        assert table.capacity == INITIAL_ROW_CAPACITY
        for i in range(INITIAL_ROW_CAPACITY + 1):
            table.insert(_row(table, i, "x"))
        assert table.capacity == INITIAL_ROW_CAPACITY * 2

    def test_delete_is_a_tombstone(self):
        table = _people()
        for i in range(3):
            table.insert(_row(table, i, f"n{i}"))
        table.delete(1)
        assert table.rows[1].deleted
        assert table.count == 3
        assert table.live_count == 2
        assert [row.get(0) for row in table.live_rows()] == [0, 2]

    def test_get_out_of_range(self):
        with pytest.raises(IndexError):
            _people().get(0)

    def test_compact_keeps_order(self):
        table = _people()
        for i in range(5):
            table.insert(_row(table, i, f"n{i}"))
        table.delete(0)
        table.delete(3)
        assert table.compact() == 2
        assert [row.get(0) for row in table.rows] == [1, 2, 4]
        assert table.compact() == 0
        # next_id is not rewound by compaction
        assert table.next_id == 5


class TestDatabase:
    """Tests for the catalog."""

    def test_display_name_strips_extension(self, tmp_path):
        assert display_name_for(tmp_path / "shop.dbm") == "shop"
        assert display_name_for(tmp_path / "archive.v2.dbm") == "archive.v2"
        assert display_name_for(tmp_path / "plain") == "plain"

    def test_add_and_find(self):
        db = Database("test")
        db.add_table(_people())
        assert db.get_table("PEOPLE") is db.tables[0]
        assert db.get_table("nobody") is None

    def test_duplicate_table_rejected(self):
        db = Database("test")
        db.add_table(_people())
        with pytest.raises(SchemaError, match="exists"):
            db.add_table(_people())

    def test_max_tables(self):
        db = Database("test", max_tables=2)
        db.add_table(Table("a", [Column("x", ColumnType.INT)]))
        db.add_table(Table("b", [Column("x", ColumnType.INT)]))
        with pytest.raises(SchemaError, match="Max tables reached"):
            db.add_table(Table("c", [Column("x", ColumnType.INT)]))

    def test_drop_keeps_order(self):
        db = Database("test")
        for name in ("a", "b", "c"):
            db.add_table(Table(name, [Column("x", ColumnType.INT)]))
        db.drop_table("B")
        assert [t.name for t in db.tables] == ["a", "c"]

    def test_drop_missing(self):
        with pytest.raises(SchemaError, match="not found"):
            Database("test").drop_table("nope")

    def test_open_missing_file_is_fresh(self, tmp_path):
        path = tmp_path / "new.dbm"
        db = Database.open(path)
        assert db.name == "new"
        assert db.tables == []
        assert db.path == path
        assert not path.exists()

    def test_open_foreign_file_is_fresh(self, tmp_path):
        path = tmp_path / "foreign.dbm"
        path.write_bytes(b"not a database at all, just some text" * 10)
        db = Database.open(path)
        assert db.tables == []
        assert db.name == "foreign"

    def test_close_writes_snapshot(self, tmp_path):
        path = tmp_path / "closed.dbm"
        with Database.open(path) as db:
            db.add_table(_people())
        assert path.exists()
        reopened = Database.open(path)
        assert [t.name for t in reopened.tables] == ["people"]
