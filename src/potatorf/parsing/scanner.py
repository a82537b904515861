"""Scanning helpers shared by the statement parsers.

Statements are not tokenized as a whole: each command pulls its pieces out
of the text with these functions, left to right.
"""

from __future__ import annotations

from potatorf.config import MAX_NAME_LEN
from potatorf.parsing.clause_lexer import ClauseLexer

QUOTES = "'\""

_lexer: ClauseLexer | None = None


def _clause_lexer() -> ClauseLexer:
    global _lexer
    if _lexer is None:
        _lexer = ClauseLexer()
        _lexer.build()
    return _lexer


def tokenize(text: str) -> list:
    """Split ``text`` into QUOTED, TEXT and COMMA tokens."""
    return _clause_lexer().tokenize(text)


def normalize_statement(text: str) -> str:
    """Trim whitespace and a single trailing semicolon."""
    text = text.strip()
    if text.endswith(";"):
        text = text[:-1].strip()
    return text


def starts_with_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive prefix test."""
    return text[: len(keyword)].lower() == keyword.lower()


def find_keyword(text: str, keyword: str) -> int:
    """Return the index of the first case-insensitive occurrence of ``keyword``
    outside quoted spans, or -1.
    """
    needle = keyword.lower()
    for tok in tokenize(text):
        if tok.type != "TEXT":
            continue
        pos = tok.value.lower().find(needle)
        if pos >= 0:
            return tok.lexpos + pos
    return -1


def quoted_start(text: str) -> int:
    """Return where the first quoted span begins, or ``len(text)`` if there is none."""
    for tok in tokenize(text):
        if tok.type == "QUOTED":
            return tok.lexpos
    return len(text)


def read_name(text: str, stop: str = "") -> tuple[str, str]:
    """Read a name up to whitespace or a ``stop`` character.

    Returns the name (capped at the storable name length) and the remaining
    text with leading whitespace removed.
    """
    text = text.lstrip()
    end = 0
    while end < len(text) and not text[end].isspace() and text[end] not in stop:
        end += 1
    return text[:end][: MAX_NAME_LEN - 1], text[end:].lstrip()


def split_items(text: str) -> list[str]:
    """Split on commas outside quotes; items are trimmed and empty ones dropped."""
    items = []
    start = 0
    for tok in tokenize(text):
        if tok.type == "COMMA":
            items.append(text[start : tok.lexpos])
            start = tok.lexpos + 1
    items.append(text[start:])
    return [item.strip() for item in items if item.strip()]


def unquote(text: str) -> str:
    """Return a literal's text.

    A literal starting with a quote loses that quote and a trailing quote if
    present; its contents are kept verbatim. Other literals are trimmed.
    """
    text = text.strip()
    if text and text[0] in QUOTES:
        text = text[1:]
        if text and text[-1] in QUOTES:
            text = text[:-1]
    return text


def is_null_literal(text: str) -> bool:
    return text.lower() == "null"


def parse_literal(text: str) -> str | None:
    """Unquote a literal; the NULL marker becomes None."""
    value = unquote(text)
    if is_null_literal(value):
        return None
    return value
