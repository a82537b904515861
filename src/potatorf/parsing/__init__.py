"""Parsing module for the statement dialect."""

from potatorf.parsing.statement_parser import (
    Assignment,
    ColumnSpec,
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
    parse_condition,
)

__all__ = [
    "Assignment",
    "ColumnSpec",
    "CreateTableStatement",
    "DeleteStatement",
    "DescribeStatement",
    "DropTableStatement",
    "EmptyStatement",
    "InsertStatement",
    "SelectStatement",
    "ShowTablesStatement",
    "Statement",
    "StatementParser",
    "UpdateStatement",
    "VacuumStatement",
    "parse_condition",
]
