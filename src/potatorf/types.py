"""Column types and literal coercion for potatorf."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from potatorf.config import MAX_TEXT_LEN

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Usable bytes in a TEXT slot (one byte is reserved for the terminator)
TEXT_CAPACITY = MAX_TEXT_LEN - 1

# ASCII only: digits and spaces from other scripts do not count
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)", re.ASCII)
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE | re.ASCII,
)


class ColumnType(Enum):
    """The four value kinds a column can hold. Values are the stored type tags."""

    INT = 1
    FLOAT = 2
    TEXT = 3
    BOOL = 4

    @property
    def display_name(self) -> str:
        """Return the canonical name shown by DESCRIBE."""
        return self.name

    @property
    def default_value(self) -> Any:
        """Return the zero value stored in a null slot."""
        defaults = {
            ColumnType.INT: 0,
            ColumnType.FLOAT: 0.0,
            ColumnType.TEXT: "",
            ColumnType.BOOL: False,
        }
        return defaults[self]


# Type names accepted by CREATE TABLE (case-insensitive)
TYPE_NAMES: dict[str, ColumnType] = {
    "int": ColumnType.INT,
    "integer": ColumnType.INT,
    "float": ColumnType.FLOAT,
    "double": ColumnType.FLOAT,
    "real": ColumnType.FLOAT,
    "text": ColumnType.TEXT,
    "varchar": ColumnType.TEXT,
    "string": ColumnType.TEXT,
    "bool": ColumnType.BOOL,
    "boolean": ColumnType.BOOL,
}


def parse_type_name(name: str) -> ColumnType | None:
    """Look up a column type by name, or return None if it is unknown."""
    return TYPE_NAMES.get(name.lower())


def truncate_text(text: str, capacity: int = TEXT_CAPACITY) -> str:
    """Cut ``text`` to at most ``capacity`` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= capacity:
        return text
    return encoded[:capacity].decode("utf-8", errors="ignore")


def parse_int(literal: str) -> int:
    """Parse the leading base-10 integer of ``literal``.

    Trailing characters are ignored, input without digits yields 0 and the
    result is clamped to the signed 64-bit range.
    """
    match = _INT_PREFIX.match(literal)
    if match is None:
        return 0
    return max(INT64_MIN, min(INT64_MAX, int(match.group(1))))


def parse_float(literal: str) -> float:
    """Parse the leading decimal number of ``literal``, or 0.0 if there is none."""
    match = _FLOAT_PREFIX.match(literal)
    if match is None:
        return 0.0
    return float(match.group(1))


def parse_bool(literal: str) -> bool:
    """Return True iff the literal is ``true`` (any case) or ``1``."""
    return literal.lower() == "true" or literal == "1"


def coerce(literal: str, column_type: ColumnType) -> Any:
    """Convert a literal's text to a value of ``column_type``. Never fails."""
    if column_type == ColumnType.INT:
        return parse_int(literal)
    elif column_type == ColumnType.FLOAT:
        return parse_float(literal)
    elif column_type == ColumnType.TEXT:
        return truncate_text(literal)
    else:
        return parse_bool(literal)


def format_value(value: Any, column_type: ColumnType) -> str:
    """Render a stored value as result cell text."""
    if column_type == ColumnType.INT:
        return str(value)
    elif column_type == ColumnType.FLOAT:
        return f"{value:.6g}"
    elif column_type == ColumnType.TEXT:
        return value
    else:
        return "true" if value else "false"


def compare_values(left: Any, right: Any, column_type: ColumnType) -> int:
    """Three-way compare two values of ``column_type``: -1, 0 or 1.

    TEXT compares case-insensitively; BOOL compares as 0/1.
    """
    if column_type == ColumnType.TEXT:
        left, right = left.lower(), right.lower()
    elif column_type == ColumnType.BOOL:
        left, right = int(left), int(right)
    return (left > right) - (left < right)
