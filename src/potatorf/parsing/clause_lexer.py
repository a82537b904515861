"""Lexer that splits a statement clause into quoted spans, commas and plain text."""

import ply.lex as lex

from potatorf.errors import ParseError


class ClauseLexer:
    """Tokenize clause text so that commas and keywords inside quotes are inert.

    Every input character belongs to exactly one token, so token positions
    map straight back onto the source text. A quote without a matching
    closing quote is lexed as plain text.
    """

    tokens = [
        "QUOTED",
        "TEXT",
        "COMMA",
    ]

    t_ignore = ""

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    # Function rules are tried in definition order: a closed quoted span
    # wins over the lone-quote fallback in t_TEXT.
    def t_QUOTED(self, t: lex.LexToken) -> lex.LexToken:
        r"'[^']*'|\"[^\"]*\""
        return t

    def t_TEXT(self, t: lex.LexToken) -> lex.LexToken:
        r"[^,'\"]+|['\"]"
        return t

    def t_COMMA(self, t: lex.LexToken) -> lex.LexToken:
        r","
        return t

    def t_error(self, t: lex.LexToken) -> None:
        raise ParseError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
