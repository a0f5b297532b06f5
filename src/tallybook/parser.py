"""Grammar rules for journal files.

Grammar:
    document      = node* EOF
    node          = (COMMENT | NEWLINE)* (transaction | set_attribute)
    set_attribute = "set" IDENT IDENT NEWLINE
    transaction   = header (INDENT posting)*
    header        = TIMESTAMP NEWLINE (YAML_MATTER NEWLINE)?
    posting       = account ";" IDENT? ";" AMOUNT? NEWLINE
    account       = IDENT ("/" IDENT)*
"""

from collections.abc import Sequence
from pathlib import Path

from . import ast
from .combinators import (
    TokenScanner,
    keyword,
    many,
    nested,
    one_of,
    optional,
    parse_account_separator,
    parse_amount,
    parse_identifier,
    parse_indent,
    parse_line_separator,
    parse_posting_separator,
    parse_timestamp,
    parse_yaml_matter,
    peek_next,
    preceded,
    terminated,
)
from .errors import ParseError
from .lexer import lex
from .logging_setup import get_logger
from .tokens import DecoratedToken, Keyword, TokenType

logger = get_logger(__name__)

ACCOUNT_SEPARATOR = "/"

parse_set_keyword = keyword(Keyword.SET)


def parse_set_attribute(scanner: TokenScanner) -> ast.SetAttribute:
    parse_set_keyword(scanner)
    name = parse_identifier(scanner)
    value = parse_identifier(scanner)
    parse_line_separator(scanner)
    return ast.SetAttribute(name=name, value=value)


parse_transaction_attributes = terminated(parse_yaml_matter, parse_line_separator)


def parse_transaction_header(scanner: TokenScanner) -> ast.TransactionHeader:
    timestamp = parse_timestamp(scanner)
    parse_line_separator(scanner)
    attributes = optional(parse_transaction_attributes)(scanner)
    return ast.TransactionHeader(timestamp=timestamp, attributes=attributes or {})


parse_subaccount = preceded(parse_account_separator, parse_identifier)


def parse_account(scanner: TokenScanner) -> str:
    root = parse_identifier(scanner)
    rest = many(parse_subaccount)(scanner)
    return ACCOUNT_SEPARATOR.join([root, *rest])


def parse_posting(scanner: TokenScanner) -> ast.Posting:
    account = parse_account(scanner)
    parse_posting_separator(scanner)
    commodity = optional(parse_identifier)(scanner)
    parse_posting_separator(scanner)
    amount = optional(parse_amount)(scanner)
    parse_line_separator(scanner)
    return ast.Posting(account=account, commodity=commodity, amount=amount)


parse_indented_posting = nested("invalid posting", preceded(parse_indent, parse_posting))


def parse_transaction(scanner: TokenScanner) -> ast.Transaction:
    header = parse_transaction_header(scanner)

    postings = []
    while (t := scanner.peek()) is not None and t.type is TokenType.INDENT:
        postings.append(parse_indented_posting(scanner))

    return ast.Transaction(header=header, postings=postings)


parse_a_node = one_of([parse_transaction, parse_set_attribute])


def skip_blank_lines_and_comments(scanner: TokenScanner) -> None:
    while peek_next(scanner).type in (TokenType.COMMENT, TokenType.LINE_SEPARATOR):
        scanner.advance()


def parse_node(scanner: TokenScanner) -> ast.Node | None:
    """Parse the next node, or return ``None`` once Eof is reached.

    Raises ``ParseError`` with ``Incomplete`` details if the tokens run out
    before an Eof token is seen.
    """
    skip_blank_lines_and_comments(scanner)
    if peek_next(scanner).type is TokenType.EOF:
        return None
    return parse_a_node(scanner)


def parse_tokens(tokens: Sequence[DecoratedToken]) -> list[ast.Node]:
    """Parse a whole token stream into nodes.

    A ``ParseError`` raised here carries the token snapshot, so its token index
    can be mapped back to a source offset.
    """
    scanner = TokenScanner.from_decorated(tokens)
    nodes: list[ast.Node] = []
    try:
        while (node := parse_node(scanner)) is not None:
            nodes.append(node)
    except ParseError as e:
        e.tokens = tuple(tokens)
        raise
    logger.debug("parsed %d nodes from %d tokens", len(nodes), len(tokens))
    return nodes


def parse(source: str) -> list[ast.Node]:
    """Lex and parse journal source into AST nodes."""
    return parse_tokens(lex(source))


def parse_file(filepath: str | Path) -> list[ast.Node]:
    return parse(Path(filepath).read_text(encoding="utf-8"))
