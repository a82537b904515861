"""Parser for the potatorf statement dialect.

There is no grammar: the command is picked by a case-insensitive keyword
prefix and each command then reads its own clauses with the helpers in
``potatorf.parsing.scanner``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from potatorf.conditions import COMPARISON_OPERATORS, IS_NOT_NULL, IS_NULL, Condition
from potatorf.errors import ParseError
from potatorf.parsing.scanner import (
    find_keyword,
    normalize_statement,
    parse_literal,
    quoted_start,
    read_name,
    split_items,
    starts_with_keyword,
    unquote,
)

# Longest type name kept from a column definition
_MAX_TYPE_NAME_LEN = 31


@dataclass
class ColumnSpec:
    """A column definition as written in CREATE TABLE; the type is resolved later."""

    name: str
    type_name: str
    nullable: bool = True
    primary_key: bool = False


@dataclass
class CreateTableStatement:
    table: str
    columns: list[ColumnSpec] = field(default_factory=list)


@dataclass
class DropTableStatement:
    table: str


@dataclass
class InsertStatement:
    """INSERT INTO. ``columns`` is None when no column list was given; NULL values are None."""

    table: str
    columns: list[str] | None
    values: list[str | None] = field(default_factory=list)


@dataclass
class SelectStatement:
    """SELECT. ``columns`` is None for ``*``."""

    table: str
    columns: list[str] | None
    where: Condition | None = None


@dataclass
class Assignment:
    column: str
    value: str | None


@dataclass
class UpdateStatement:
    table: str
    assignments: list[Assignment] = field(default_factory=list)
    where: Condition | None = None


@dataclass
class DeleteStatement:
    table: str
    where: Condition | None = None


@dataclass
class ShowTablesStatement:
    pass


@dataclass
class DescribeStatement:
    table: str


@dataclass
class VacuumStatement:
    pass


@dataclass
class EmptyStatement:
    pass


Statement = (
    CreateTableStatement
    | DropTableStatement
    | InsertStatement
    | SelectStatement
    | UpdateStatement
    | DeleteStatement
    | ShowTablesStatement
    | DescribeStatement
    | VacuumStatement
    | EmptyStatement
)


def parse_condition(text: str) -> Condition | None:
    """Parse a single WHERE predicate, or return None if none can be found.

    Null tests are recognised first. Comparison operators are searched for in
    the text before any quoted literal, trying ``<=``, ``>=``, ``!=``, ``<>``
    before ``=``, ``<``, ``>``.
    """
    text = text.strip()
    for marker, op in ((" IS NOT NULL", IS_NOT_NULL), (" IS NULL", IS_NULL)):
        pos = find_keyword(text, marker)
        if pos >= 0:
            return Condition(column=text[:pos].strip(), op=op)

    head = text[: quoted_start(text)]
    for op in COMPARISON_OPERATORS:
        pos = head.find(op)
        if pos >= 0:
            return Condition(
                column=text[:pos].strip(),
                op="!=" if op == "<>" else op,
                value=unquote(text[pos + len(op) :]),
            )
    return None


class StatementParser:
    """Turns statement text into one of the statement dataclasses."""

    # Dispatch order matters: the first matching prefix wins.
    COMMANDS = (
        ("CREATE TABLE", "_parse_create_table"),
        ("DROP TABLE", "_parse_drop_table"),
        ("INSERT INTO", "_parse_insert"),
        ("SELECT", "_parse_select"),
        ("UPDATE", "_parse_update"),
        ("DELETE FROM", "_parse_delete"),
        ("SHOW TABLES", "_parse_show_tables"),
        ("DESCRIBE", "_parse_describe"),
        ("DESC ", "_parse_describe"),
        ("VACUUM", "_parse_vacuum"),
    )

    def parse(self, text: str) -> Statement:
        """Parse one statement. Raises ``ParseError`` for unknown or malformed input."""
        text = normalize_statement(text)
        if not text:
            return EmptyStatement()
        for keyword, method in self.COMMANDS:
            if starts_with_keyword(text, keyword):
                return getattr(self, method)(text, text[len(keyword) :])
        raise ParseError("Unknown command")

    def _parse_where(self, text: str) -> Condition | None:
        pos = find_keyword(text, "WHERE")
        if pos < 0:
            return None
        condition = parse_condition(text[pos + len("WHERE") :])
        if condition is None:
            raise ParseError("Malformed WHERE condition")
        return condition

    def _parse_create_table(self, text: str, rest: str) -> CreateTableStatement:
        name, rest = read_name(rest, stop="(")
        if not name:
            raise ParseError("Missing table name")
        if not rest.startswith("("):
            raise ParseError("Expected '('")
        end = rest.rfind(")")
        if end < 1:
            raise ParseError("Missing ')'")

        columns = []
        for definition in split_items(rest[1:end]):
            words = definition.split()
            lower = definition.lower()
            columns.append(
                ColumnSpec(
                    name=read_name(words[0])[0],
                    type_name=words[1][:_MAX_TYPE_NAME_LEN] if len(words) > 1 else "",
                    nullable="not null" not in lower,
                    primary_key="primary key" in lower,
                )
            )
        return CreateTableStatement(table=name, columns=columns)

    def _parse_drop_table(self, text: str, rest: str) -> DropTableStatement:
        return DropTableStatement(table=rest.strip())

    def _parse_insert(self, text: str, rest: str) -> InsertStatement:
        name, rest = read_name(rest, stop="(")

        columns = None
        if rest.startswith("("):
            close = rest.find(")")
            if close < 0:
                raise ParseError("Missing ')'")
            columns = split_items(rest[1:close])
            rest = rest[close + 1 :].lstrip()

        pos = find_keyword(rest, "VALUES")
        if pos < 0:
            raise ParseError("Missing VALUES")
        rest = rest[pos + len("VALUES") :].lstrip()
        if not rest.startswith("("):
            raise ParseError("Expected '('")
        end = rest.rfind(")")
        if end < 1:
            raise ParseError("Missing ')'")

        values = [parse_literal(item) for item in split_items(rest[1:end])]
        return InsertStatement(table=name, columns=columns, values=values)

    def _parse_select(self, text: str, rest: str) -> SelectStatement:
        pos = find_keyword(rest, "FROM")
        if pos < 0:
            raise ParseError("Missing FROM")
        column_text = rest[:pos].strip()
        name, tail = read_name(rest[pos + len("FROM") :])
        columns = None if column_text == "*" else split_items(column_text)
        return SelectStatement(table=name, columns=columns, where=self._parse_where(tail))

    def _parse_update(self, text: str, rest: str) -> UpdateStatement:
        name, rest = read_name(rest)
        if not starts_with_keyword(rest, "SET"):
            raise ParseError("Expected SET")
        rest = rest[len("SET") :].lstrip()

        pos = find_keyword(rest, "WHERE")
        set_text = rest[:pos] if pos >= 0 else rest
        where = self._parse_where(rest[pos:]) if pos >= 0 else None

        assignments = []
        for item in split_items(set_text):
            eq = item.find("=")
            if eq < 0:
                raise ParseError("Bad SET")
            assignments.append(
                Assignment(column=item[:eq].strip(), value=parse_literal(item[eq + 1 :]))
            )
        return UpdateStatement(table=name, assignments=assignments, where=where)

    def _parse_delete(self, text: str, rest: str) -> DeleteStatement:
        name, tail = read_name(rest)
        return DeleteStatement(table=name, where=self._parse_where(tail))

    def _parse_show_tables(self, text: str, rest: str) -> ShowTablesStatement:
        return ShowTablesStatement()

    def _parse_describe(self, text: str, rest: str) -> DescribeStatement:
        parts = text.split(None, 1)
        return DescribeStatement(table=parts[1].strip() if len(parts) > 1 else "")

    def _parse_vacuum(self, text: str, rest: str) -> VacuumStatement:
        return VacuumStatement()
