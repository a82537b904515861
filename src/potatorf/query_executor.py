"""Statement execution for potatorf."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from potatorf import snapshot
from potatorf.conditions import Condition, matches
from potatorf.database import Database
from potatorf.errors import PotatorfError, SchemaError, SnapshotIOError
from potatorf.parsing.statement_parser import (
    CreateTableStatement,
    DeleteStatement,
    DescribeStatement,
    DropTableStatement,
    EmptyStatement,
    InsertStatement,
    SelectStatement,
    ShowTablesStatement,
    Statement,
    StatementParser,
    UpdateStatement,
    VacuumStatement,
)
from potatorf.table import Column, Row, Table
from potatorf.types import ColumnType, coerce, format_value, parse_type_name

logger = logging.getLogger(__name__)

# Statements that change the database and therefore rewrite the snapshot
MUTATING_STATEMENTS = (
    CreateTableStatement,
    DropTableStatement,
    InsertStatement,
    UpdateStatement,
    DeleteStatement,
    VacuumStatement,
)


@dataclass
class ColumnDescriptor:
    """Name and type of a result column."""

    name: str
    type: ColumnType


@dataclass
class QueryResult:
    """Result of executing one statement.

    A failed statement has ``success`` False and the reason in ``message``.
    Row-returning statements fill ``columns`` and ``rows`` with cell text.
    """

    success: bool
    message: str
    affected_count: int = 0
    columns: list[ColumnDescriptor] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @classmethod
    def ok(cls, message: str, affected_count: int = 0) -> QueryResult:
        return cls(success=True, message=message, affected_count=affected_count)

    @classmethod
    def error(cls, message: str, affected_count: int = 0) -> QueryResult:
        return cls(success=False, message=message, affected_count=affected_count)

    @property
    def is_success(self) -> bool:
        return self.success

    @property
    def is_row_set(self) -> bool:
        return bool(self.columns)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def cell_at(self, row: int, col: int) -> str:
        """Return the text of one cell."""
        if not 0 <= row < len(self.rows):
            raise IndexError(f"Row {row} out of range [0, {len(self.rows)})")
        if not 0 <= col < len(self.columns):
            raise IndexError(f"Column {col} out of range [0, {len(self.columns)})")
        return self.rows[row][col]


class QueryExecutor:
    """Executes statements against one database, persisting after each change."""

    def __init__(self, database: Database, parser: StatementParser | None = None) -> None:
        self.database = database
        self.parser = parser or StatementParser()

    def execute_text(self, text: str) -> QueryResult:
        """Parse and execute one statement."""
        logger.debug("Executing: %s", text.strip())
        try:
            statement = self.parser.parse(text)
        except PotatorfError as e:
            return QueryResult.error(str(e))
        return self.execute(statement)

    def execute(self, statement: Statement) -> QueryResult:
        """Execute a parsed statement.

        Engine errors become failure results. After a successful mutating
        statement the whole database is written to its snapshot; if that
        write fails the tables are rolled back to their state before the
        statement and the result reports the failure with the affected count.
        """
        mutating = isinstance(statement, MUTATING_STATEMENTS)
        pre_image = self._capture() if mutating and self.database.path is not None else None

        try:
            result = self._dispatch(statement)
        except PotatorfError as e:
            return QueryResult.error(str(e))
        except MemoryError:
            return QueryResult.error("Out of memory")

        if result.success and mutating:
            try:
                self.database.save()
            except SnapshotIOError as e:
                logger.warning("Snapshot write failed, rolling back: %s", e)
                if pre_image is not None:
                    self._restore(*pre_image)
                return QueryResult.error(f"Snapshot write failed: {e}", result.affected_count)
        return result

    def _capture(self) -> tuple[bytes, list[int]]:
        """Encode the current tables so a failed statement can be undone."""
        return snapshot.dumps(self.database), [table.capacity for table in self.database.tables]

    def _restore(self, image: bytes, capacities: list[int]) -> None:
        restored = snapshot.loads(image, self.database.path)
        for table, capacity in zip(restored.tables, capacities):
            table.capacity = capacity
        self.database.tables = restored.tables

    def _dispatch(self, statement: Statement) -> QueryResult:
        if isinstance(statement, CreateTableStatement):
            return self._execute_create_table(statement)
        elif isinstance(statement, DropTableStatement):
            return self._execute_drop_table(statement)
        elif isinstance(statement, InsertStatement):
            return self._execute_insert(statement)
        elif isinstance(statement, SelectStatement):
            return self._execute_select(statement)
        elif isinstance(statement, UpdateStatement):
            return self._execute_update(statement)
        elif isinstance(statement, DeleteStatement):
            return self._execute_delete(statement)
        elif isinstance(statement, ShowTablesStatement):
            return self._execute_show_tables()
        elif isinstance(statement, DescribeStatement):
            return self._execute_describe(statement)
        elif isinstance(statement, VacuumStatement):
            return self._execute_vacuum()
        elif isinstance(statement, EmptyStatement):
            return QueryResult.ok("Empty")
        else:
            raise ValueError(f"Unknown statement type: {type(statement)}")

    @staticmethod
    def _matching_rows(table: Table, where: Condition | None) -> list[Row]:
        """Live rows of ``table`` satisfying ``where`` (all live rows if None)."""
        return [row for row in table.live_rows() if where is None or matches(row, table, where)]

    @staticmethod
    def _resolve_columns(table: Table, names: list[str]) -> list[int]:
        positions = []
        for name in names:
            index = table.column_index(name)
            if index is None:
                raise SchemaError(f"Column '{name}' not found")
            positions.append(index)
        return positions

    def _execute_create_table(self, statement: CreateTableStatement) -> QueryResult:
        """Execute CREATE TABLE."""
        self.database.check_capacity()
        if self.database.get_table(statement.table) is not None:
            raise SchemaError(f"Table '{statement.table}' exists")

        columns = []
        for spec in statement.columns:
            column_type = parse_type_name(spec.type_name)
            if column_type is None:
                raise SchemaError(f"Unknown type '{spec.type_name}'")
            columns.append(Column(spec.name, column_type, spec.nullable, spec.primary_key))
        if not columns:
            raise SchemaError("No columns defined")

        table = Table(statement.table, columns)
        self.database.add_table(table)
        return QueryResult.ok(f"Table '{table.name}' created ({len(columns)} cols)")

    def _execute_drop_table(self, statement: DropTableStatement) -> QueryResult:
        """Execute DROP TABLE."""
        self.database.drop_table(statement.table)
        return QueryResult.ok(f"Table '{statement.table}' dropped")

    def _execute_insert(self, statement: InsertStatement) -> QueryResult:
        """Execute INSERT INTO.

        Values pair up with the target columns by position; surplus values
        are ignored and columns without a value stay null.
        """
        table = self.database.require_table(statement.table)
        if statement.columns is None:
            targets = list(range(len(table.columns)))
        else:
            targets = self._resolve_columns(table, statement.columns)

        row = table.new_row()
        for index, value in zip(targets, statement.values):
            if value is None:
                row.set_null(index)
            else:
                row.set(index, coerce(value, table.columns[index].type))
        table.insert(row)
        return QueryResult.ok("1 row inserted", 1)

    def _execute_select(self, statement: SelectStatement) -> QueryResult:
        """Execute SELECT."""
        table = self.database.require_table(statement.table)
        if statement.columns is None:
            positions = list(range(len(table.columns)))
        else:
            positions = self._resolve_columns(table, statement.columns)

        rows = []
        for row in self._matching_rows(table, statement.where):
            rows.append([
                "NULL" if row.is_null(i) else format_value(row.values[i], table.columns[i].type)
                for i in positions
            ])
        return QueryResult(
            success=True,
            message=f"{len(rows)} row(s) returned",
            affected_count=len(rows),
            columns=[ColumnDescriptor(table.columns[i].name, table.columns[i].type) for i in positions],
            rows=rows,
        )

    def _execute_update(self, statement: UpdateStatement) -> QueryResult:
        """Execute UPDATE. Assignments to unknown columns are skipped."""
        table = self.database.require_table(statement.table)
        assignments = []
        for assignment in statement.assignments:
            index = table.column_index(assignment.column)
            if index is None:
                continue
            if assignment.value is None:
                assignments.append((index, None))
            else:
                assignments.append((index, coerce(assignment.value, table.columns[index].type)))

        targets = self._matching_rows(table, statement.where)
        for row in targets:
            for index, value in assignments:
                if value is None:
                    row.set_null(index)
                else:
                    row.set(index, value)
        return QueryResult.ok(f"{len(targets)} row(s) updated", len(targets))

    def _execute_delete(self, statement: DeleteStatement) -> QueryResult:
        """Execute DELETE FROM by tombstoning matching rows."""
        table = self.database.require_table(statement.table)
        targets = [
            index
            for index, row in enumerate(table.rows)
            if not row.deleted and (statement.where is None or matches(row, table, statement.where))
        ]
        for index in targets:
            table.delete(index)
        return QueryResult.ok(f"{len(targets)} row(s) deleted", len(targets))

    def _execute_show_tables(self) -> QueryResult:
        """Execute SHOW TABLES."""
        rows = [
            [table.name, str(len(table.columns)), str(table.live_count)]
            for table in self.database.tables
        ]
        return QueryResult(
            success=True,
            message=f"{len(rows)} table(s)",
            affected_count=len(rows),
            columns=[
                ColumnDescriptor("Table", ColumnType.TEXT),
                ColumnDescriptor("Columns", ColumnType.INT),
                ColumnDescriptor("Rows", ColumnType.INT),
            ],
            rows=rows,
        )

    def _execute_describe(self, statement: DescribeStatement) -> QueryResult:
        """Execute DESCRIBE / DESC."""
        table = self.database.require_table(statement.table)
        rows = [
            [
                col.name,
                col.type.display_name,
                "YES" if col.nullable else "NO",
                "YES" if col.primary_key else "NO",
            ]
            for col in table.columns
        ]
        return QueryResult(
            success=True,
            message=f"Table '{table.name}': {len(rows)} column(s)",
            columns=[
                ColumnDescriptor("Column", ColumnType.TEXT),
                ColumnDescriptor("Type", ColumnType.TEXT),
                ColumnDescriptor("Nullable", ColumnType.TEXT),
                ColumnDescriptor("PK", ColumnType.TEXT),
            ],
            rows=rows,
        )

    def _execute_vacuum(self) -> QueryResult:
        """Execute VACUUM: drop tombstoned rows from every table."""
        purged = sum(table.compact() for table in self.database.tables)
        logger.info("VACUUM purged %d row(s)", purged)
        return QueryResult.ok(f"VACUUM: purged {purged} row(s)", purged)


def execute(database: Database, statement_text: str) -> QueryResult:
    """Parse and execute one statement against ``database``."""
    return QueryExecutor(database).execute_text(statement_text)
