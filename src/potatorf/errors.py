"""Exception types raised by the potatorf engine.

Parsers and executors raise these; ``QueryExecutor`` turns any
``PotatorfError`` into a failure ``QueryResult`` carrying the message.
"""

from __future__ import annotations


class PotatorfError(Exception):
    """Base class for all engine errors."""


class ParseError(PotatorfError):
    """Malformed statement: unknown command, missing keyword or parenthesis."""


class SchemaError(PotatorfError):
    """Statement is well formed but conflicts with the catalog.

    Examples: unknown table or column, duplicate table, unknown type name,
    maximum tables or columns exceeded.
    """


class SnapshotIOError(PotatorfError):
    """Reading or writing the snapshot file failed at the OS level."""


class LoadError(PotatorfError):
    """The snapshot file exists but cannot be used as a database."""


class BadMagicError(LoadError):
    """The snapshot header does not start with the expected magic number."""

    def __init__(self, found: int) -> None:
        self.found = found
        super().__init__(f"Bad snapshot magic 0x{found:08X}")


class TruncatedSnapshotError(LoadError):
    """The snapshot ended before a complete header could be read."""
