"""Configuration constants for the potatorf storage engine.

Limits, snapshot layout parameters and shell defaults live here so the
engine, the codec and the shell agree on them.
"""

from pathlib import Path

# ============================================================================
# Catalog limits
# ============================================================================

# Maximum number of tables in one database
MAX_TABLES = 64

# Maximum number of columns per table; also the number of value slots in
# every persisted row record
MAX_COLUMNS = 32

# Width of a stored table/column/database name, including the NUL terminator
MAX_NAME_LEN = 64

# Width of a stored TEXT slot, including the NUL terminator
MAX_TEXT_LEN = 256

# ============================================================================
# Row storage
# ============================================================================

INITIAL_ROW_CAPACITY = 16
ROW_GROWTH_FACTOR = 2

# ============================================================================
# Snapshot format
# ============================================================================

# "BGMD" when read as little-endian bytes
DB_MAGIC = 0x444D4742
FORMAT_VERSION = 1

# Width of the creation timestamp field in the header
CREATED_LEN = 32
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# ============================================================================
# Shell
# ============================================================================

DEFAULT_EXTENSION = ".dbm"
HISTORY_FILE = Path.home() / ".potatorf_history"
