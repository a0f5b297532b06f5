"""tallybook: compile plain-text double-entry journals into balanced ledgers.

Pipeline: lex journal source -> parse tokens into nodes -> compile nodes into a Journal.

Example:
    from tallybook import compile_string

    journal = compile_string(open("books.journal").read())
    print(journal.to_json())
"""

__version__ = "0.1.0"

from collections.abc import Iterable
from pathlib import Path

from .ast import Node, SetAttribute, Transaction, TransactionHeader
from .ast import Posting as ASTPosting
from .combinators import TokenScanner, many, nested, one_of, optional, preceded, terminated
from .compiler import Compiler, compile_transaction
from .errors import (
    AmountOutOfRangeError,
    CommodityMismatchError,
    CompileError,
    JournalError,
    LexError,
    LexErrorKind,
    MultipleOmittedAmountsError,
    MultipleUnbalancedCommoditiesError,
    ParseError,
    TooFewPostingsError,
    UnbalancedTransactionError,
)
from .journal import Journal, JournalHeader, Posting
from .lexer import Lexer, fold_tokens, lex
from .parser import parse, parse_file, parse_node, parse_tokens
from .report import format_error
from .scanner import Scanner
from .tokens import DecoratedToken, Keyword, Token, TokenType


def compile(nodes: Iterable[Node], header: JournalHeader | None = None) -> Journal:  # noqa: A001
    """Compile parsed nodes into a Journal."""
    return Compiler(header).compile(nodes)


def compile_string(source: str, header: JournalHeader | None = None) -> Journal:
    """Lex, parse and compile journal source."""
    return compile(parse(source), header)


def compile_file(filepath: str | Path, header: JournalHeader | None = None) -> Journal:
    """Compile a journal file. ``OSError`` from reading it propagates unchanged."""
    return compile_string(Path(filepath).read_text(encoding="utf-8"), header)


__all__ = [
    # Lex
    "Scanner",
    "Lexer",
    "lex",
    "fold_tokens",
    "Token",
    "TokenType",
    "Keyword",
    "DecoratedToken",
    # Parse
    "TokenScanner",
    "many",
    "optional",
    "preceded",
    "terminated",
    "one_of",
    "nested",
    "parse",
    "parse_file",
    "parse_node",
    "parse_tokens",
    # AST
    "Node",
    "Transaction",
    "TransactionHeader",
    "ASTPosting",
    "SetAttribute",
    # Compile
    "compile",
    "compile_string",
    "compile_file",
    "compile_transaction",
    "Compiler",
    "Journal",
    "JournalHeader",
    "Posting",
    # Errors
    "JournalError",
    "LexError",
    "LexErrorKind",
    "ParseError",
    "CompileError",
    "TooFewPostingsError",
    "MultipleOmittedAmountsError",
    "MultipleUnbalancedCommoditiesError",
    "CommodityMismatchError",
    "UnbalancedTransactionError",
    "AmountOutOfRangeError",
    "format_error",
]
