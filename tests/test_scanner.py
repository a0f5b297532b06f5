"""Tests for the source scanner."""

import re

import pytest

from tallybook import Scanner


class TestScanner:
    def test_from_str_covers_whole_buffer(self):
        s = Scanner.from_str("hello")
        assert len(s) == 5
        assert s.location == 0
        assert s.as_str() == "hello"

    def test_split_at_returns_views(self):
        s = Scanner.from_str("hello world")
        consumed, rest = s.split_at(5)
        assert consumed.as_str() == "hello"
        assert rest.as_str() == " world"
        assert rest.location == 5
        assert consumed.buffer is s.buffer
        assert rest.buffer is s.buffer

    def test_split_at_bounds(self):
        s = Scanner.from_str("abc")
        with pytest.raises(IndexError):
            s.split_at(4)
        consumed, rest = s.split_at(3)
        assert rest.is_empty()
        assert consumed.as_str() == "abc"

    def test_invalid_bounds_rejected(self):
        with pytest.raises(ValueError):
            Scanner("abc", 2, 1)
        with pytest.raises(ValueError):
            Scanner("abc", 0, 10)

    def test_startswith(self):
        s = Scanner.from_str("Set foo").advance(0)
        assert s.startswith("Set")
        assert not s.startswith("set")
        assert s.startswith("set", ignore_case=True)
        assert not s.startswith("set foo bar", ignore_case=True)

    def test_startswith_respects_limit(self):
        s = Scanner.from_str("abcdef").take(3)
        assert s.startswith("abc")
        assert not s.startswith("abcd")

    def test_find_is_relative(self):
        s = Scanner.from_str("xx--yy--").advance(2)
        assert s.find("--") == 0
        assert s.advance(1).find("--") == 3
        assert s.find("zz") == -1

    def test_iteration(self):
        s = Scanner.from_str("abcd").advance(1).take(2)
        assert list(s) == ["b", "c"]
        assert list(s.iter_indices()) == [(0, "b"), (1, "c")]
        assert s[1] == "c"
        with pytest.raises(IndexError):
            s[2]

    def test_match_is_anchored_at_cursor(self):
        s = Scanner.from_str("foo bar").advance(4)
        m = s.match(re.compile(r"[a-z]+"))
        assert m is not None
        assert m.group(0) == "bar"
        assert s.take(2).match(re.compile(r"bar")) is None
