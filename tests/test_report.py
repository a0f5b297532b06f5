"""Tests for error rendering."""

import pytest

from tallybook import CompileError, JournalError, LexError, ParseError, compile_string, format_error, lex, parse
from tallybook.report import excerpt, locate

SOURCE = "line1\nline2\nline3\nline4\nline5\nline6\nline7\nline8\nline9\n"


class TestLocate:
    @pytest.mark.parametrize(
        "offset,expected",
        [
            (0, (1, 1)),
            (3, (1, 4)),
            (5, (1, 6)),
            (6, (2, 1)),
            (14, (3, 3)),
        ],
    )
    def test_offsets(self, offset, expected):
        assert locate(SOURCE, offset) == expected

    def test_clamps_past_end(self):
        assert locate("ab\ncd", 100) == (2, 3)


class TestExcerpt:
    def test_marks_target_line(self):
        text = excerpt(SOURCE, 5)
        lines = text.split("\n")
        assert lines[0] == "  ..."
        assert "-> line5" in lines
        assert "   line2" in lines
        assert "   line8" in lines
        assert "   line1" not in lines
        assert lines[-1] == "  ..."

    def test_first_line_has_no_leading_ellipsis(self):
        lines = excerpt("a\nb\n", 1).split("\n")
        assert lines == ["-> a", "   b", "   "]

    def test_context_width(self):
        lines = excerpt(SOURCE, 5, context=0).split("\n")
        assert lines == ["  ...", "-> line5", "  ..."]


class TestFormatError:
    def test_lex_error(self):
        source = "foo\n@bar\n"
        with pytest.raises(LexError) as exc:
            lex(source)
        text = format_error(exc.value, source, "books.journal")
        assert text.startswith("Lex Error:")
        assert "books.journal:2:1" in text
        assert "-> @bar" in text
        assert "no token matched the input" in text
        assert "after: identifier('foo'), line_separator" in text

    def test_parse_error(self):
        source = "2026-01-01\n  a;JPY\n"
        with pytest.raises(ParseError) as exc:
            parse(source)
        text = format_error(exc.value, source)
        assert text.startswith("Parse Error:")
        assert "<string>:1:1" in text
        assert "- token 0: all alternatives failed (2 alternatives tried)" in text
        assert "- token 2: invalid posting" in text
        assert "expected posting_separator, got line_separator" in text

    def test_parse_error_without_tokens(self):
        from tallybook.errors import Incomplete

        text = format_error(ParseError(3, Incomplete()), "")
        assert text == "Parse Error:\n  - token 3: ran out of tokens before end of input"

    def test_compile_error(self):
        source = "2026-01-01\n  a;JPY;1000\n"
        with pytest.raises(CompileError) as exc:
            compile_string(source)
        text = format_error(exc.value, source)
        assert text == "Compile Error (node 0):\n  a transaction needs 2 or more postings, got 1"

    def test_generic_error(self):
        assert format_error(JournalError("boom"), "") == "Error:\n  boom"
