"""Token types produced by the lexer and consumed by the parser."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class TokenType(Enum):
    KEYWORD = "keyword"
    TIMESTAMP = "timestamp"
    AMOUNT = "amount"
    IDENTIFIER = "identifier"
    ACCOUNT_SEPARATOR = "account_separator"
    POSTING_SEPARATOR = "posting_separator"
    LINE_SEPARATOR = "line_separator"
    COMMENT = "comment"
    YAML_MATTER = "yaml_matter"
    INDENT = "indent"
    EOF = "eof"


class Keyword(Enum):
    SET = "set"


@dataclass(frozen=True)
class Token:
    """A lexed token.

    ``value`` holds the payload: a ``Keyword`` for keywords, an aware
    ``datetime`` for timestamps, an ``int`` for amounts, a ``str`` for
    identifiers and comments and a ``dict`` for front matter. Structural
    tokens carry ``None``.
    """

    type: TokenType
    value: Any = None

    @property
    def name(self) -> str:
        return self.type.value

    def __str__(self) -> str:
        if self.value is None:
            return self.name
        if isinstance(self.value, Keyword):
            return f"{self.name}({self.value.value})"
        if isinstance(self.value, datetime):
            return f"{self.name}({self.value.isoformat()})"
        return f"{self.name}({self.value!r})"


@dataclass(frozen=True)
class DecoratedToken:
    """A token plus the offset in the source where its match started."""

    token: Token
    location: int

    @property
    def type(self) -> TokenType:
        return self.token.type
