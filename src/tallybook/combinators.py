"""Backtracking parser core over a token stream.

A parser is any callable taking a ``TokenScanner`` and returning a value,
raising ``ParseError`` on failure. Every combinator here rewinds the scanner
to where it started when it fails, so alternatives can be tried freely. The
module knows nothing about the journal grammar.
"""

from collections.abc import Sequence
from typing import Any, Callable, TypeVar

from .errors import (
    BranchingError,
    ExpectedSomethingElse,
    IllegalImplementation,
    Incomplete,
    Nested,
    ParseError,
)
from .tokens import DecoratedToken, Keyword, Token, TokenType

T = TypeVar("T")
U = TypeVar("U")


class TokenScanner:
    """Cursor over an immutable token sequence. Backtracking is ``seek``."""

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = tuple(tokens)
        self._location = 0

    @classmethod
    def from_decorated(cls, tokens: Sequence[DecoratedToken]) -> "TokenScanner":
        return cls([t.token for t in tokens])

    def __len__(self) -> int:
        return len(self._tokens)

    def tell(self) -> int:
        return self._location

    def seek(self, i: int) -> None:
        if not 0 <= i <= len(self._tokens):
            raise ParseError(
                self._location,
                IllegalImplementation(f"attempted to seek to {i} in {len(self._tokens)} tokens"),
            )
        self._location = i

    def advance(self, n: int = 1) -> None:
        self.seek(self._location + n)

    def peek(self) -> Token | None:
        if self._location < len(self._tokens):
            return self._tokens[self._location]
        return None

    def next(self) -> Token | None:
        token = self.peek()
        if token is not None:
            self._location += 1
        return token


Parser = Callable[[TokenScanner], T]


def peek_next(scanner: TokenScanner) -> Token:
    token = scanner.peek()
    if token is None:
        raise ParseError(scanner.tell(), Incomplete())
    return token


def get_next(scanner: TokenScanner) -> Token:
    location = scanner.tell()
    token = scanner.next()
    if token is None:
        raise ParseError(location, Incomplete())
    return token


# Token parsers


def token(kind: TokenType) -> Parser[Any]:
    """Parser consuming one token of ``kind`` and returning its payload."""

    def parse(scanner: TokenScanner) -> Any:
        location = scanner.tell()
        t = get_next(scanner)
        if t.type is not kind:
            raise ParseError(location, ExpectedSomethingElse(kind.value, t))
        return t.value

    parse.__name__ = f"parse_{kind.value}"
    return parse


def keyword(kw: Keyword) -> Parser[Keyword]:
    def parse(scanner: TokenScanner) -> Keyword:
        location = scanner.tell()
        t = get_next(scanner)
        if t.type is not TokenType.KEYWORD or t.value is not kw:
            raise ParseError(location, ExpectedSomethingElse(f"{TokenType.KEYWORD.value} {kw.value!r}", t))
        return kw

    parse.__name__ = f"parse_keyword_{kw.value}"
    return parse


parse_timestamp = token(TokenType.TIMESTAMP)
parse_amount = token(TokenType.AMOUNT)
parse_identifier = token(TokenType.IDENTIFIER)
parse_account_separator = token(TokenType.ACCOUNT_SEPARATOR)
parse_posting_separator = token(TokenType.POSTING_SEPARATOR)
parse_line_separator = token(TokenType.LINE_SEPARATOR)
parse_comment = token(TokenType.COMMENT)
parse_yaml_matter = token(TokenType.YAML_MATTER)
parse_indent = token(TokenType.INDENT)
parse_eof = token(TokenType.EOF)


# Combinators


def many(parser: Parser[T]) -> Parser[list[T]]:
    """Apply ``parser`` until it fails. Never fails itself."""

    def parse(scanner: TokenScanner) -> list[T]:
        parsed: list[T] = []
        while True:
            i = scanner.tell()
            try:
                parsed.append(parser(scanner))
            except ParseError:
                scanner.seek(i)
                break
            if scanner.tell() == i:
                # A parser that succeeds without consuming would loop forever.
                break
        return parsed

    return parse


def optional(parser: Parser[T]) -> Parser[T | None]:
    """Apply ``parser``, returning ``None`` instead of failing."""

    def parse(scanner: TokenScanner) -> T | None:
        i = scanner.tell()
        try:
            return parser(scanner)
        except ParseError:
            scanner.seek(i)
            return None

    return parse


def preceded(first: Parser[Any], second: Parser[T]) -> Parser[T]:
    """Run both parsers in sequence, keeping the second result."""

    def parse(scanner: TokenScanner) -> T:
        i = scanner.tell()
        try:
            first(scanner)
            return second(scanner)
        except ParseError:
            scanner.seek(i)
            raise

    return parse


def terminated(first: Parser[T], second: Parser[Any]) -> Parser[T]:
    """Run both parsers in sequence, keeping the first result."""

    def parse(scanner: TokenScanner) -> T:
        i = scanner.tell()
        try:
            x = first(scanner)
            second(scanner)
        except ParseError:
            scanner.seek(i)
            raise
        return x

    return parse


def one_of(parsers: Sequence[Parser[T]]) -> Parser[T]:
    """Try each parser from the same position; the first success wins.

    When every alternative fails the error is a ``BranchingError`` holding
    each alternative's error, in order.
    """

    def parse(scanner: TokenScanner) -> T:
        i = scanner.tell()
        errors: list[ParseError] = []
        for p in parsers:
            scanner.seek(i)
            try:
                return p(scanner)
            except ParseError as e:
                errors.append(e)
        scanner.seek(i)
        raise ParseError(i, BranchingError("all alternatives failed", tuple(errors)))

    return parse


def nested(message: str, parser: Parser[T]) -> Parser[T]:
    """Attribute a failure of ``parser`` to an enclosing construct."""

    def parse(scanner: TokenScanner) -> T:
        i = scanner.tell()
        try:
            return parser(scanner)
        except ParseError as e:
            scanner.seek(i)
            raise ParseError(i, Nested(message, e)) from e

    return parse
