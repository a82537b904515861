"""Interactive shell and command-line front end for potatorf."""

from __future__ import annotations

import argparse
import logging
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path

from potatorf import __version__
from potatorf.config import DEFAULT_EXTENSION, HISTORY_FILE
from potatorf.database import Database
from potatorf.errors import PotatorfError
from potatorf.query_executor import QueryExecutor, QueryResult

# Statements that run as soon as they are typed, without waiting for ';'
_IMMEDIATE_PREFIXES = ("show", "vacuum", "desc")


def _split_statements(content: str) -> list[str]:
    """Split script content into statements on semicolons outside quotes."""
    statements = []
    current = []
    quote = None

    for ch in content:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue

        if ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == ";":
            stmt = "".join(current).strip()
            if stmt:
                statements.append(stmt)
            current = []
        else:
            current.append(ch)

    # Handle any remaining content
    stmt = "".join(current).strip()
    if stmt:
        statements.append(stmt)

    return statements


def resolve_database_path(path: str | Path) -> Path:
    """Append the default extension unless the path already mentions it."""
    text = str(path)
    if DEFAULT_EXTENSION not in text:
        text += DEFAULT_EXTENSION
    return Path(text)


def format_table(result: QueryResult) -> str:
    """Render a row set as an ASCII grid."""
    widths = [len(col.name) for col in result.columns]
    for row in result.rows:
        for j, cell in enumerate(row):
            widths[j] = max(widths[j], len(cell))

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [border]
    lines.append("|" + "|".join(f" {col.name.ljust(w)} " for col, w in zip(result.columns, widths)) + "|")
    lines.append(border)
    for row in result.rows:
        lines.append("|" + "|".join(f" {cell.ljust(w)} " for cell, w in zip(row, widths)) + "|")
    lines.append(border)
    return "\n".join(lines)


def print_result(result: QueryResult) -> None:
    """Print a statement result: errors to stderr, row sets as a grid."""
    if not result.is_success:
        print(f"ERROR: {result.message}", file=sys.stderr)
        return
    if not result.is_row_set:
        print(f"OK: {result.message}")
        return
    print(format_table(result))
    print(result.message)


def run_repl(database: Database) -> int:
    """Run the interactive loop until quit/exit or end of input."""
    executor = QueryExecutor(database)
    print("Type SQL (end with ;) or 'quit'.\n")

    try:
        readline.read_history_file(HISTORY_FILE)
    except (FileNotFoundError, OSError):
        pass

    buffer = ""
    try:
        while True:
            try:
                line = input("... " if buffer else "db> ").strip()
            except EOFError:
                print()
                break

            if line.lower() in ("quit", "exit"):
                break
            if not line:
                continue

            buffer += line + " "
            # Keep reading until the statement is terminated
            if ";" in line or buffer.lower().startswith(_IMMEDIATE_PREFIXES):
                print_result(executor.execute_text(buffer))
                buffer = ""
    except KeyboardInterrupt:
        print()
    finally:
        try:
            readline.set_history_length(1000)
            readline.write_history_file(HISTORY_FILE)
        except OSError:
            pass

    return 0


def run_file(file_path: Path, database: Database, verbose: bool = False) -> int:
    """Execute the statements of a script file, stopping at the first failure.

    Args:
        file_path: Path to the script
        database: Database to run it against
        verbose: If True, print each statement before executing

    Returns:
        0 on success, 1 on error
    """
    try:
        content = file_path.read_text()
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    # Strip comments (lines starting with --)
    lines = [line for line in content.split("\n") if not line.strip().startswith("--")]
    statements = _split_statements("\n".join(lines))

    executor = QueryExecutor(database)
    for statement in statements:
        if verbose:
            print(f"db> {statement};")
        result = executor.execute_text(statement)
        print_result(result)
        if not result.is_success:
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        prog="potatorf",
        description="Single-file relational database shell",
    )
    arg_parser.add_argument(
        "database",
        help=f"Path to the database file ({DEFAULT_EXTENSION} is appended if missing)",
    )
    arg_parser.add_argument(
        "sql",
        nargs="*",
        help="Execute a single statement and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing (for -f/--file)",
    )
    arg_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for engine diagnostics (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    path = resolve_database_path(args.database)
    try:
        database = Database.open(path)
    except PotatorfError as e:
        print(f"Fatal: cannot open '{path}': {e}", file=sys.stderr)
        return 1

    print(f"potatorf v{__version__}  db={database.name}  tables={len(database.tables)}")

    try:
        if args.file:
            status = run_file(args.file, database, args.verbose)
        elif args.sql:
            result = QueryExecutor(database).execute_text(" ".join(args.sql))
            print_result(result)
            status = 0 if result.is_success else 1
        else:
            status = run_repl(database)
    finally:
        try:
            database.close()
        except PotatorfError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            status = 1

    if not args.sql and not args.file:
        print("Goodbye.")
    return status


if __name__ == "__main__":
    sys.exit(main())
