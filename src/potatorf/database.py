"""The database catalog: an ordered set of tables bound to one snapshot file."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from potatorf.config import FORMAT_VERSION, MAX_NAME_LEN, MAX_TABLES, TIMESTAMP_FORMAT
from potatorf.errors import LoadError, SchemaError
from potatorf.table import Table
from potatorf.types import truncate_text

logger = logging.getLogger(__name__)


def display_name_for(path: Path) -> str:
    """Derive a database display name from its file name, minus the extension."""
    name = path.name
    if "." in name:
        name = name[: name.rindex(".")]
    return truncate_text(name, MAX_NAME_LEN - 1)


class Database:
    """All tables of one database, in creation order.

    ``path`` is the snapshot file written after every mutating command; a
    database without a path lives only in memory.
    """

    def __init__(
        self,
        name: str,
        created: str | None = None,
        tables: list[Table] | None = None,
        path: Path | None = None,
        version: int = FORMAT_VERSION,
        max_tables: int = MAX_TABLES,
    ) -> None:
        self.name = name
        self.created = created or datetime.now().strftime(TIMESTAMP_FORMAT)
        self.tables: list[Table] = list(tables) if tables else []
        self.path = Path(path) if path is not None else None
        self.version = version
        self.max_tables = max_tables

    def __repr__(self) -> str:
        return f"Database({self.name!r}, tables={len(self.tables)}, path={self.path})"

    @classmethod
    def open(cls, path: Path | str, max_tables: int = MAX_TABLES) -> Database:
        """Load the snapshot at ``path``, or start a fresh database there.

        A missing file, a foreign file (bad magic) or a file too short to hold
        a header all yield an empty database; it reaches disk at the first
        write. Other OS errors propagate as ``SnapshotIOError``.
        """
        from potatorf.snapshot import load

        path = Path(path)
        if path.exists():
            try:
                db = load(path)
            except LoadError as e:
                logger.warning("Ignoring unreadable snapshot %s: %s", path, e)
            else:
                db.max_tables = max_tables
                logger.info("Opened %s (%d tables)", path, len(db.tables))
                return db

        logger.info("Created new database at %s", path)
        return cls(name=display_name_for(path), path=path, max_tables=max_tables)

    def get_table(self, name: str) -> Table | None:
        """Find a table by case-insensitive name."""
        key = name.lower()
        for table in self.tables:
            if table.name.lower() == key:
                return table
        return None

    def require_table(self, name: str) -> Table:
        """Like ``get_table`` but raise ``SchemaError`` when the table is absent."""
        table = self.get_table(name)
        if table is None:
            raise SchemaError(f"Table '{name}' not found")
        return table

    def check_capacity(self) -> None:
        """Raise ``SchemaError`` if no further table can be created."""
        if len(self.tables) >= self.max_tables:
            raise SchemaError("Max tables reached")

    def add_table(self, table: Table) -> None:
        self.check_capacity()
        if self.get_table(table.name) is not None:
            raise SchemaError(f"Table '{table.name}' exists")
        self.tables.append(table)
        logger.info("Created table %s (%d columns)", table.name, len(table.columns))

    def drop_table(self, name: str) -> Table:
        """Remove a table and its rows; the remaining tables keep their order."""
        table = self.require_table(name)
        self.tables.remove(table)
        logger.info("Dropped table %s", table.name)
        return table

    def save(self) -> None:
        """Write the full snapshot to ``path``. No-op for in-memory databases."""
        if self.path is None:
            return
        from potatorf.snapshot import save

        save(self, self.path)

    def close(self) -> None:
        """Write a final snapshot."""
        self.save()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
