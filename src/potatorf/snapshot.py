"""Binary snapshot codec: the whole database in one fixed-layout file.

Layout (little-endian)::

    header     magic u32, version u32, table_count i32, name[64], created[32]
    per table  name[64], column_count i32,
               column_count x (name[64], type_tag i32, nullable i8, pk i8, pad[2]),
               row_count i32, next_id i32,
               row_count x row record
    row record MAX_COLUMNS x value slot[MAX_TEXT_LEN], MAX_COLUMNS x null i8,
               deleted i8, pad[7]

Every row record has a slot for all MAX_COLUMNS positions whatever the
table's own width, so records are the same size in every table.
"""

from __future__ import annotations

import logging
import os
import struct
import tempfile
from pathlib import Path
from typing import Any

from potatorf.config import (
    CREATED_LEN,
    DB_MAGIC,
    MAX_COLUMNS,
    MAX_NAME_LEN,
    MAX_TEXT_LEN,
)
from potatorf.database import Database
from potatorf.errors import BadMagicError, SchemaError, SnapshotIOError, TruncatedSnapshotError
from potatorf.table import Column, Row, Table
from potatorf.types import TEXT_CAPACITY, ColumnType, truncate_text

logger = logging.getLogger(__name__)

HEADER = struct.Struct(f"<IIi{MAX_NAME_LEN}s{CREATED_LEN}s")
NAME = struct.Struct(f"<{MAX_NAME_LEN}s")
INT32 = struct.Struct("<i")
COLUMN = struct.Struct(f"<{MAX_NAME_LEN}sibb2x")
ROW = struct.Struct(f"<{MAX_COLUMNS * MAX_TEXT_LEN}s{MAX_COLUMNS}sb7x")

_SLOT_FORMATS = {
    ColumnType.INT: struct.Struct("<q"),
    ColumnType.FLOAT: struct.Struct("<d"),
    ColumnType.BOOL: struct.Struct("<b"),
}


def _encode_name(name: str, width: int = MAX_NAME_LEN) -> bytes:
    return truncate_text(name, width - 1).encode("utf-8")


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def _encode_slot(value: Any, column_type: ColumnType) -> bytes:
    if column_type == ColumnType.TEXT:
        data = truncate_text(value).encode("utf-8")
    elif column_type == ColumnType.BOOL:
        data = _SLOT_FORMATS[column_type].pack(1 if value else 0)
    else:
        data = _SLOT_FORMATS[column_type].pack(value)
    return data.ljust(MAX_TEXT_LEN, b"\x00")


def _decode_slot(slot: bytes, column_type: ColumnType) -> Any:
    if column_type == ColumnType.TEXT:
        return _decode_name(slot[:TEXT_CAPACITY])
    value = _SLOT_FORMATS[column_type].unpack_from(slot)[0]
    if column_type == ColumnType.BOOL:
        return value != 0
    return value


def _encode_row(row: Row, columns: list[Column]) -> bytes:
    slots = b"".join(
        _encode_slot(row.values[i], col.type) for i, col in enumerate(columns)
    )
    nulls = bytes(1 if row.nulls[i] else 0 for i in range(len(columns)))
    return ROW.pack(slots, nulls, 1 if row.deleted else 0)


def _decode_row(record: bytes, columns: list[Column]) -> Row:
    slots, nulls, deleted = ROW.unpack(record)
    values = []
    for i, col in enumerate(columns):
        slot = slots[i * MAX_TEXT_LEN : (i + 1) * MAX_TEXT_LEN]
        values.append(_decode_slot(slot, col.type))
    return Row(
        values=values,
        nulls=[nulls[i] != 0 for i in range(len(columns))],
        deleted=deleted != 0,
    )


def dumps(database: Database) -> bytes:
    """Serialize a database to snapshot bytes."""
    parts = [
        HEADER.pack(
            DB_MAGIC,
            database.version,
            len(database.tables),
            _encode_name(database.name),
            _encode_name(database.created, CREATED_LEN),
        )
    ]
    for table in database.tables:
        parts.append(NAME.pack(_encode_name(table.name)))
        parts.append(INT32.pack(len(table.columns)))
        for col in table.columns:
            parts.append(
                COLUMN.pack(
                    _encode_name(col.name),
                    col.type.value,
                    1 if col.nullable else 0,
                    1 if col.primary_key else 0,
                )
            )
        parts.append(INT32.pack(len(table.rows)))
        parts.append(INT32.pack(table.next_id))
        for row in table.rows:
            parts.append(_encode_row(row, table.columns))
    return b"".join(parts)


class _Reader:
    """Sequential reader over snapshot bytes."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def read(self, fmt: struct.Struct) -> tuple[Any, ...]:
        end = self.offset + fmt.size
        if end > len(self.data):
            raise TruncatedSnapshotError(
                f"Snapshot ends at byte {len(self.data)}, expected {fmt.size} bytes at {self.offset}"
            )
        values = fmt.unpack_from(self.data, self.offset)
        self.offset = end
        return values

    def read_bytes(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise TruncatedSnapshotError(
                f"Snapshot ends at byte {len(self.data)}, expected {size} bytes at {self.offset}"
            )
        data = self.data[self.offset : end]
        self.offset = end
        return data


def _read_table_header(reader: _Reader) -> tuple[str, list[Column], int, int]:
    """Read a table's name, schema, row count and next_id."""
    (raw_name,) = reader.read(NAME)
    (column_count,) = reader.read(INT32)
    if not 0 <= column_count <= MAX_COLUMNS:
        raise TruncatedSnapshotError(f"Implausible column count {column_count}")
    columns = []
    for _ in range(column_count):
        col_name, tag, nullable, pk = reader.read(COLUMN)
        try:
            col_type = ColumnType(tag)
        except ValueError:
            raise TruncatedSnapshotError(f"Unknown type tag {tag}") from None
        columns.append(Column(_decode_name(col_name), col_type, nullable != 0, pk != 0))
    (row_count,) = reader.read(INT32)
    (next_id,) = reader.read(INT32)
    if row_count < 0:
        raise TruncatedSnapshotError(f"Implausible row count {row_count}")
    return _decode_name(raw_name), columns, row_count, next_id


def loads(data: bytes, path: Path | None = None) -> Database:
    """Deserialize snapshot bytes.

    Raises ``BadMagicError`` or ``TruncatedSnapshotError`` when the header is
    unusable. Anything unreadable after the header ends the catalog: tables
    (and rows) read up to that point are kept.
    """
    reader = _Reader(data)
    magic, version, table_count, raw_name, raw_created = reader.read(HEADER)
    if magic != DB_MAGIC:
        raise BadMagicError(magic)

    tables: list[Table] = []
    for _ in range(table_count):
        try:
            name, columns, row_count, next_id = _read_table_header(reader)
        except TruncatedSnapshotError as e:
            logger.warning("Snapshot tail unreadable after %d tables: %s", len(tables), e)
            break

        rows: list[Row] = []
        truncated = False
        for _ in range(row_count):
            try:
                rows.append(_decode_row(reader.read_bytes(ROW.size), columns))
            except TruncatedSnapshotError as e:
                logger.warning("Table %s truncated after %d of %d rows: %s", name, len(rows), row_count, e)
                truncated = True
                break

        try:
            tables.append(Table(name, columns, rows, next_id))
        except SchemaError as e:
            logger.warning("Dropping corrupt table %s: %s", name, e)
            break
        if truncated:
            break

    return Database(
        name=_decode_name(raw_name),
        created=_decode_name(raw_created),
        tables=tables,
        path=path,
        version=version,
    )


def load(path: Path | str) -> Database:
    """Read the snapshot at ``path``."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SnapshotIOError(f"Cannot read {path}: {e}") from e
    return loads(data, path)


def save(database: Database, path: Path | str) -> None:
    """Write the full snapshot of ``database`` to ``path``.

    The bytes go to a temporary file beside the target which then replaces
    it, so a failed write leaves the previous snapshot in place.
    """
    path = Path(path)
    data = dumps(database)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise SnapshotIOError(f"Cannot write {path}: {e}") from e
    logger.debug("Wrote snapshot %s (%d tables, %d bytes)", path, len(database.tables), len(data))
