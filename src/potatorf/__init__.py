"""potatorf - an embedded single-file relational store with a small SQL dialect."""

from potatorf.conditions import Condition
from potatorf.database import Database
from potatorf.errors import (
    BadMagicError,
    LoadError,
    ParseError,
    PotatorfError,
    SchemaError,
    SnapshotIOError,
    TruncatedSnapshotError,
)
from potatorf.parsing import StatementParser
from potatorf.query_executor import ColumnDescriptor, QueryExecutor, QueryResult, execute
from potatorf.table import Column, Row, Table
from potatorf.types import ColumnType

__all__ = [
    # Main API
    "Database",
    "execute",
    "QueryExecutor",
    "QueryResult",
    "ColumnDescriptor",
    "StatementParser",
    # Data model
    "Table",
    "Column",
    "Row",
    "ColumnType",
    "Condition",
    # Errors
    "PotatorfError",
    "ParseError",
    "SchemaError",
    "SnapshotIOError",
    "LoadError",
    "BadMagicError",
    "TruncatedSnapshotError",
]

__version__ = "1.0"
