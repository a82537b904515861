"""In-memory table storage for potatorf."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from potatorf.config import INITIAL_ROW_CAPACITY, MAX_COLUMNS, ROW_GROWTH_FACTOR
from potatorf.errors import SchemaError
from potatorf.types import ColumnType


@dataclass
class Column:
    """A column definition. Fixed once the table is created."""

    name: str
    type: ColumnType
    nullable: bool = True
    primary_key: bool = False


@dataclass
class Row:
    """One stored row: a value and a null flag per column, plus a tombstone.

    Null slots still hold the column type's zero value so the slot layout
    stays uniform.
    """

    values: list[Any]
    nulls: list[bool]
    deleted: bool = False

    @classmethod
    def empty(cls, columns: list[Column]) -> Row:
        """Create a row with every slot null."""
        return cls(
            values=[col.type.default_value for col in columns],
            nulls=[True] * len(columns),
        )

    def is_null(self, index: int) -> bool:
        return self.nulls[index]

    def get(self, index: int) -> Any:
        """Return the slot's value, or None if the slot is null."""
        if self.nulls[index]:
            return None
        return self.values[index]

    def set(self, index: int, value: Any) -> None:
        self.values[index] = value
        self.nulls[index] = False

    def set_null(self, index: int) -> None:
        self.nulls[index] = True


class Table:
    """Rows of a single table, kept in append order.

    Deleting a row only sets its tombstone; ``compact`` drops tombstoned rows.
    ``capacity`` mirrors the slot budget of the row store and doubles when
    exhausted.
    """

    def __init__(
        self,
        name: str,
        columns: list[Column],
        rows: list[Row] | None = None,
        next_id: int = 0,
        max_columns: int = MAX_COLUMNS,
    ) -> None:
        if len(columns) > max_columns:
            raise SchemaError(f"Too many columns ({len(columns)} > {max_columns})")
        seen: set[str] = set()
        for col in columns:
            key = col.name.lower()
            if key in seen:
                raise SchemaError(f"Duplicate column '{col.name}'")
            seen.add(key)

        self.name = name
        self.columns = list(columns)
        self.rows: list[Row] = list(rows) if rows else []
        # Incremented on every insert; nothing reads it back into a row.
        self.next_id = next_id
        self.capacity = len(self.rows) * ROW_GROWTH_FACTOR if self.rows else INITIAL_ROW_CAPACITY

    def __repr__(self) -> str:
        return f"Table({self.name!r}, columns={len(self.columns)}, rows={len(self.rows)})"

    @property
    def count(self) -> int:
        """Return the number of stored rows, tombstoned ones included."""
        return len(self.rows)

    @property
    def live_count(self) -> int:
        """Return the number of rows that are not tombstoned."""
        return sum(1 for row in self.rows if not row.deleted)

    def column_index(self, name: str) -> int | None:
        """Find a column position by case-insensitive name."""
        key = name.lower()
        for i, col in enumerate(self.columns):
            if col.name.lower() == key:
                return i
        return None

    def new_row(self) -> Row:
        return Row.empty(self.columns)

    def insert(self, row: Row) -> int:
        """Append a row and return its index."""
        if len(self.rows) >= self.capacity:
            self.capacity *= ROW_GROWTH_FACTOR
        self.rows.append(row)
        self.next_id += 1
        return len(self.rows) - 1

    def get(self, index: int) -> Row:
        if index < 0 or index >= len(self.rows):
            raise IndexError(f"Index {index} out of range [0, {len(self.rows)})")
        return self.rows[index]

    def delete(self, index: int) -> None:
        """Tombstone the row at ``index``. Storage is kept until ``compact``."""
        self.get(index).deleted = True

    def live_rows(self) -> Iterator[Row]:
        """Yield non-tombstoned rows in storage order."""
        for row in self.rows:
            if not row.deleted:
                yield row

    def compact(self) -> int:
        """Drop tombstoned rows, keeping survivor order. Return how many were dropped."""
        survivors = [row for row in self.rows if not row.deleted]
        purged = len(self.rows) - len(survivors)
        self.rows = survivors
        return purged
