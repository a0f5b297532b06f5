"""Error types for each stage of the pipeline.

Every error carries enough positional data to point back into the source:
lex errors a character offset, parse errors a token index (plus, once the
whole document has been parsed, the token snapshot that index refers to),
compile errors the index of the failing node.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .tokens import DecoratedToken, Token


class JournalError(Exception):
    """Base class for every error raised while compiling a journal."""


# Lexing


class LexErrorKind(Enum):
    NOTHING_MATCHED = "nothing_matched"
    INTERNAL_ERROR = "internal_error"


class LexError(JournalError):
    def __init__(
        self,
        location: int,
        kind: LexErrorKind,
        message: str = "",
        recent_tokens: Sequence[DecoratedToken] = (),
    ):
        self.location = location
        self.kind = kind
        self.message = message or "no token matched the input"
        self.recent_tokens = tuple(recent_tokens)
        super().__init__(f"offset {location}: {self.message}")


# Parsing


@dataclass(frozen=True)
class Incomplete:
    """All tokens were consumed without reaching an Eof token."""


@dataclass(frozen=True)
class ExpectedSomethingElse:
    expected: str
    actual: Token


@dataclass(frozen=True)
class BranchingError:
    message: str
    errors: tuple["ParseError", ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Nested:
    message: str
    error: "ParseError"


@dataclass(frozen=True)
class IllegalImplementation:
    message: str


ParseErrorDetails = Union[Incomplete, ExpectedSomethingElse, BranchingError, Nested, IllegalImplementation]


def describe_details(details: ParseErrorDetails) -> str:
    """One-line description of a parse failure, without nested causes."""
    match details:
        case Incomplete():
            return "ran out of tokens before end of input"
        case ExpectedSomethingElse(expected=expected, actual=actual):
            return f"expected {expected}, got {actual}"
        case BranchingError(message=message, errors=errors):
            return f"{message} ({len(errors)} alternatives tried)"
        case Nested(message=message):
            return message
        case IllegalImplementation(message=message):
            return f"illegal implementation: {message}"
    return repr(details)


class ParseError(JournalError):
    def __init__(
        self,
        location: int,
        details: ParseErrorDetails,
        tokens: Sequence[DecoratedToken] | None = None,
    ):
        self.location = location
        self.details = details
        self.tokens = tuple(tokens) if tokens is not None else None
        super().__init__(f"token {location}: {describe_details(details)}")

    @property
    def nested_errors(self) -> tuple["ParseError", ...]:
        match self.details:
            case BranchingError(errors=errors):
                return errors
            case Nested(error=error):
                return (error,)
        return ()

    def source_offset(self) -> int | None:
        """Character offset of the failing token, if a token snapshot is attached."""
        if not self.tokens:
            return None
        index = min(self.location, len(self.tokens) - 1)
        return self.tokens[index].location


# Compiling


class CompileError(JournalError):
    def __init__(self, message: str, node_index: int | None = None):
        self.message = message
        self.node_index = node_index
        super().__init__(message)


class TooFewPostingsError(CompileError):
    pass


class MultipleOmittedAmountsError(CompileError):
    pass


class MultipleUnbalancedCommoditiesError(CompileError):
    pass


class CommodityMismatchError(CompileError):
    pass


class UnbalancedTransactionError(CompileError):
    pass


class AmountOutOfRangeError(CompileError):
    pass
