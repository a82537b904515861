"""Tests for the clause lexer and scanning helpers."""

import pytest

from potatorf.parsing.clause_lexer import ClauseLexer
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


@pytest.fixture
def lexer():
    lexer = ClauseLexer()
    lexer.build()
    return lexer


class TestClauseLexer:
    """Tests for ClauseLexer token boundaries."""

    def test_plain_text_and_commas(self, lexer):
        tokens = lexer.tokenize("a, b,c")
        assert [t.type for t in tokens] == ["TEXT", "COMMA", "TEXT", "COMMA", "TEXT"]
        assert [t.value for t in tokens] == ["a", ",", " b", ",", "c"]

    def test_quoted_span_hides_commas(self, lexer):
        tokens = lexer.tokenize("1, 'x, y', \"p,q\"")
        types = [t.type for t in tokens]
        assert types == ["TEXT", "COMMA", "TEXT", "QUOTED", "COMMA", "TEXT", "QUOTED"]
        assert tokens[3].value == "'x, y'"
        assert tokens[6].value == '"p,q"'

    def test_mixed_quotes_do_not_close_each_other(self, lexer):
        tokens = lexer.tokenize("'it\"s'")
        assert [t.type for t in tokens] == ["QUOTED"]

    def test_lone_quote_is_text(self, lexer):
        tokens = lexer.tokenize("it's")
        assert [t.type for t in tokens] == ["TEXT", "TEXT", "TEXT"]
        assert "".join(t.value for t in tokens) == "it's"

    def test_positions_cover_input(self, lexer):
        """Token positions map straight back onto the source text."""
        text = "  name = 'a, b' , x"
        for tok in lexer.tokenize(text):
            assert text[tok.lexpos : tok.lexpos + len(tok.value)] == tok.value

    def test_empty_input(self, lexer):
        assert lexer.tokenize("") == []


class TestStatementText:
    """Tests for statement-level trimming and prefix matching."""

    def test_normalize(self):
        assert normalize_statement("  SELECT * FROM t ;  ") == "SELECT * FROM t"
        assert normalize_statement("VACUUM") == "VACUUM"
        assert normalize_statement(";") == ""

    def test_only_one_semicolon_removed(self):
        assert normalize_statement("x;;") == "x;"

    def test_starts_with_keyword(self):
        assert starts_with_keyword("select * from t", "SELECT")
        assert starts_with_keyword("Show Tables", "SHOW TABLES")
        assert not starts_with_keyword("SEL", "SELECT")


class TestFindKeyword:
    """Tests for keyword search outside quotes."""

    def test_case_insensitive(self):
        assert find_keyword("select * from t", "FROM") == 9

    def test_skips_quoted_spans(self):
        text = "x = 'where' WHERE y"
        assert find_keyword(text, "WHERE") == 12

    def test_missing(self):
        assert find_keyword("a = 'from'", "FROM") == -1

    def test_substring_match(self):
        """Keywords are found inside longer words as well."""
        assert find_keyword("fromage", "FROM") == 0

    def test_quoted_start(self):
        assert quoted_start("a = 'b'") == 4
        assert quoted_start("a = 5") == 5


class TestReadName:
    """Tests for read_name."""

    def test_reads_to_whitespace(self):
        assert read_name("  people WHERE x") == ("people", "WHERE x")

    def test_stop_character(self):
        assert read_name(" t(id INT)", stop="(") == ("t", "(id INT)")

    def test_long_name_capped(self):
        name, rest = read_name("n" * 100 + " tail")
        assert name == "n" * 63
        assert rest == "tail"

    def test_empty(self):
        assert read_name("   ") == ("", "")


class TestSplitItems:
    """Tests for comma splitting."""

    def test_trims_items(self):
        assert split_items(" id ,name,  age ") == ["id", "name", "age"]

    def test_commas_inside_quotes(self):
        assert split_items("1, 'a, b', \"c,d\"") == ["1", "'a, b'", '"c,d"']

    def test_empty_items_dropped(self):
        assert split_items("1,,2, ,") == ["1", "2"]
        assert split_items("") == []


class TestLiterals:
    """Tests for unquoting literals."""

    def test_unquote(self):
        assert unquote("'abc'") == "abc"
        assert unquote('"abc"') == "abc"
        assert unquote("  42 ") == "42"

    def test_unquote_keeps_inner_spaces(self):
        assert unquote("'  padded  '") == "  padded  "

    def test_unquote_unterminated(self):
        assert unquote("'abc") == "abc"

    def test_null_literal(self):
        assert parse_literal("NULL") is None
        assert parse_literal("null") is None
        assert parse_literal("'NULL'") is None
        assert parse_literal("'nullable'") == "nullable"
        assert parse_literal("'x'") == "x"
