"""Lexer for journal files.

Each recognizer is a plain function taking a ``Scanner`` and returning
``(remainder, token)`` or ``None``. Front matter and indentation are tried
first and win outright; every other recognizer is run and the longest match
is taken, ties going to the earlier recognizer in ``Lexer.RECOGNIZERS``.

The raw token stream is then folded:
    - runs of line separators collapse into one
    - an indent followed by a line separator (an indented blank line) is
      dropped together with a line separator right before it
    - an indent not at the start of a line is dropped
"""

import re
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

import yaml

from .errors import LexError, LexErrorKind
from .logging_setup import get_logger
from .scanner import Scanner
from .tokens import DecoratedToken, Keyword, Token, TokenType

logger = get_logger(__name__)

Recognizer = Callable[[Scanner], "tuple[Scanner, Token] | None"]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

KEYWORDS = {kw.value: kw for kw in Keyword}

_BLANK_LINES = re.compile(r"(?:[ \t]*\r?\n)+")
_TRAILING_SPACE = re.compile(r"[ \t]*")
_INDENT = re.compile(r"  (?=[^\n])")
_FRONT_MATTER = re.compile(r"  ---\r?\n((?:(?:  [^\r\n]*)?\r?\n)*?)  ---(?=\r?\n|\Z)")
_KEYWORD = re.compile("|".join(re.escape(k) for k in sorted(KEYWORDS, key=len, reverse=True)))
_IDENTIFIER = re.compile(r"[ \t]*([A-Za-z_][A-Za-z0-9_]*)")
_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}[+-]\d{2}:\d{2}")
_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_AMOUNT = re.compile(r"[ \t]*([+-]?)(\d+(?:,\d+)*)")
_ACCOUNT_SEPARATOR = re.compile(r"[ \t]*/")
_POSTING_SEPARATOR = re.compile(r"[ \t]*;")
_LINE_SEPARATOR = re.compile(r"[ \t]*(?://[^\n]*)?\r?\n")


def _consume(scanner: Scanner, m: re.Match[str] | None, token: Token) -> tuple[Scanner, Token] | None:
    if m is None:
        return None
    return scanner.advance(m.end() - m.start()), token


def lex_front_matter(scanner: Scanner) -> tuple[Scanner, Token] | None:
    m = scanner.match(_FRONT_MATTER)
    if m is None:
        return None
    body = "\n".join(line[2:] for line in m.group(1).splitlines())
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as e:
        raise LexError(
            scanner.location,
            LexErrorKind.INTERNAL_ERROR,
            f"could not decode front matter: {e}",
        ) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LexError(
            scanner.location,
            LexErrorKind.INTERNAL_ERROR,
            f"front matter must be a mapping, got {type(data).__name__}",
        )
    attributes = {str(k): v for k, v in data.items()}
    return _consume(scanner, m, Token(TokenType.YAML_MATTER, attributes))


def lex_indent(scanner: Scanner) -> tuple[Scanner, Token] | None:
    return _consume(scanner, scanner.match(_INDENT), Token(TokenType.INDENT))


def lex_keyword(scanner: Scanner) -> tuple[Scanner, Token] | None:
    m = scanner.match(_KEYWORD)
    if m is None:
        return None
    return _consume(scanner, m, Token(TokenType.KEYWORD, KEYWORDS[m.group(0)]))


def lex_identifier(scanner: Scanner) -> tuple[Scanner, Token] | None:
    m = scanner.match(_IDENTIFIER)
    if m is None:
        return None
    return _consume(scanner, m, Token(TokenType.IDENTIFIER, m.group(1)))


def parse_timestamp(text: str) -> datetime | None:
    """Parse a full timestamp or a bare date (midnight UTC)."""
    if _DATETIME.fullmatch(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d %H:%M:%S.%f%z")
        except ValueError:
            return None
    if _DATE.fullmatch(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        except ValueError:
            return None
    return None


def lex_timestamp(scanner: Scanner) -> tuple[Scanner, Token] | None:
    for pattern in (_DATETIME, _DATE):
        m = scanner.match(pattern)
        if m is None:
            continue
        ts = parse_timestamp(m.group(0))
        if ts is not None:
            return _consume(scanner, m, Token(TokenType.TIMESTAMP, ts))
    return None


def lex_amount(scanner: Scanner) -> tuple[Scanner, Token] | None:
    m = scanner.match(_AMOUNT)
    if m is None:
        return None
    sign, digits = m.groups()
    value = int(digits.replace(",", ""))
    if sign == "-":
        value = -value
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return _consume(scanner, m, Token(TokenType.AMOUNT, value))


def lex_account_separator(scanner: Scanner) -> tuple[Scanner, Token] | None:
    return _consume(scanner, scanner.match(_ACCOUNT_SEPARATOR), Token(TokenType.ACCOUNT_SEPARATOR))


def lex_posting_separator(scanner: Scanner) -> tuple[Scanner, Token] | None:
    return _consume(scanner, scanner.match(_POSTING_SEPARATOR), Token(TokenType.POSTING_SEPARATOR))


def lex_line_separator(scanner: Scanner) -> tuple[Scanner, Token] | None:
    """Match a newline, swallowing trailing whitespace and a ``//`` comment."""
    return _consume(scanner, scanner.match(_LINE_SEPARATOR), Token(TokenType.LINE_SEPARATOR))


def skip_blank_lines(scanner: Scanner) -> Scanner:
    m = scanner.match(_BLANK_LINES)
    if m is None:
        return scanner
    return scanner.advance(m.end() - m.start())


class Lexer:
    """Turns journal source into a list of located tokens."""

    PRIORITY_RECOGNIZERS: tuple[Recognizer, ...] = (lex_front_matter, lex_indent)

    # Declaration order breaks ties between equally long matches.
    RECOGNIZERS: tuple[Recognizer, ...] = (
        lex_keyword,
        lex_identifier,
        lex_timestamp,
        lex_amount,
        lex_account_separator,
        lex_posting_separator,
        lex_line_separator,
    )

    RECENT_TOKENS = 3

    def __init__(self, source: str):
        self.source = source

    @classmethod
    def lex_token(cls, scanner: Scanner) -> tuple[Scanner, Token] | None:
        """Recognize a single token at the cursor."""
        for recognize in cls.PRIORITY_RECOGNIZERS:
            result = recognize(scanner)
            if result is not None:
                return result

        matches = [r for r in (recognize(scanner) for recognize in cls.RECOGNIZERS) if r is not None]
        if not matches:
            return None
        # min() keeps the first of equal candidates, so declaration order wins ties.
        return min(matches, key=lambda m: len(m[0]))

    def tokenize(self) -> list[DecoratedToken]:
        """Lex the whole source, without folding. The last token is Eof."""
        scanner = skip_blank_lines(Scanner.from_str(self.source))
        tokens: list[DecoratedToken] = []

        while not scanner.is_empty():
            # Whitespace trailing the last line, with no newline after it.
            if scanner.match(_TRAILING_SPACE).end() == scanner.limit:
                break

            location = scanner.location
            result = self.lex_token(scanner)
            if result is None:
                raise LexError(
                    location,
                    LexErrorKind.NOTHING_MATCHED,
                    recent_tokens=tokens[-self.RECENT_TOKENS :],
                )
            scanner, token = result
            tokens.append(DecoratedToken(token, location))
            if token.type is TokenType.LINE_SEPARATOR:
                scanner = skip_blank_lines(scanner)

        tokens.append(DecoratedToken(Token(TokenType.EOF), len(self.source)))
        logger.debug("lexed %d raw tokens from %d characters", len(tokens), len(self.source))
        return tokens


def fold_tokens(tokens: Iterable[DecoratedToken]) -> list[DecoratedToken]:
    """Normalize line structure in a raw token stream."""
    folded: list[DecoratedToken] = []

    for t in tokens:
        if not folded:
            folded.append(t)
            continue

        last = folded[-1].type
        if last is TokenType.LINE_SEPARATOR and t.type is TokenType.LINE_SEPARATOR:
            continue
        if last is TokenType.INDENT and t.type is TokenType.LINE_SEPARATOR:
            location = folded.pop().location
            if folded and folded[-1].type is TokenType.LINE_SEPARATOR:
                location = folded.pop().location
            folded.append(DecoratedToken(t.token, location))
            continue
        if t.type is TokenType.INDENT and last is not TokenType.LINE_SEPARATOR:
            continue
        folded.append(t)

    return folded


def lex(source: str) -> list[DecoratedToken]:
    """Lex and fold ``source``. The result always ends with an Eof token."""
    tokens = fold_tokens(Lexer(source).tokenize())
    logger.debug("folded to %d tokens", len(tokens))
    return tokens
