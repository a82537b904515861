"""WHERE-clause predicates and their evaluation against rows."""

from __future__ import annotations

from dataclasses import dataclass

from potatorf.table import Row, Table
from potatorf.types import coerce, compare_values

IS_NULL = "IS NULL"
IS_NOT_NULL = "IS NOT NULL"

# Comparison operators in the order they must be searched for: two-character
# operators before their one-character prefixes.
COMPARISON_OPERATORS = ("<=", ">=", "!=", "<>", "=", "<", ">")

_TESTS = {
    "=": lambda cmp: cmp == 0,
    "!=": lambda cmp: cmp != 0,
    "<": lambda cmp: cmp < 0,
    ">": lambda cmp: cmp > 0,
    "<=": lambda cmp: cmp <= 0,
    ">=": lambda cmp: cmp >= 0,
}


@dataclass
class Condition:
    """A single predicate: ``column op value`` or a null test."""

    column: str
    op: str
    value: str = ""

    @property
    def is_null_test(self) -> bool:
        return self.op in (IS_NULL, IS_NOT_NULL)


def matches(row: Row, table: Table, condition: Condition) -> bool:
    """Return whether ``row`` of ``table`` satisfies ``condition``.

    An unknown column matches no row. A comparison against a null slot is
    false; the literal is coerced to the column's type before comparing.
    """
    index = table.column_index(condition.column)
    if index is None:
        return False
    if condition.op == IS_NULL:
        return row.is_null(index)
    if condition.op == IS_NOT_NULL:
        return not row.is_null(index)
    if row.is_null(index):
        return False

    column_type = table.columns[index].type
    operand = coerce(condition.value, column_type)
    test = _TESTS.get(condition.op)
    if test is None:
        return False
    return test(compare_values(row.values[index], operand, column_type))
