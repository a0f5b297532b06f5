"""Compiler: turns parsed nodes into a balanced Journal.

Nodes are compiled left to right into a single Journal. A ``set`` directive
affects every node after it and none before it. Transactions are resolved
against the journal header as it stands, auto-balanced, and checked.
"""

from collections.abc import Iterable, Sequence

from . import ast
from .errors import (
    AmountOutOfRangeError,
    CommodityMismatchError,
    CompileError,
    MultipleOmittedAmountsError,
    MultipleUnbalancedCommoditiesError,
    TooFewPostingsError,
    UnbalancedTransactionError,
)
from .journal import (
    INT64_MAX,
    INT64_MIN,
    Journal,
    JournalHeader,
    Posting,
    Transaction,
    TransactionHeader,
    compute_balances,
)
from .logging_setup import get_logger

logger = get_logger(__name__)

MIN_POSTINGS = 2


def resolve_postings(
    postings: Sequence[ast.Posting], default_commodity: str
) -> tuple[list[Posting], int | None]:
    """Fill in commodities and placeholder amounts.

    Returns the resolved postings and the index of the single posting whose
    amount was omitted, if any.
    """
    resolved = []
    omitted: int | None = None

    for i, p in enumerate(postings):
        if p.amount is None:
            if omitted is not None:
                raise MultipleOmittedAmountsError(
                    f"only a single posting can omit its amount "
                    f"(postings {omitted + 1} and {i + 1} both do)"
                )
            omitted = i
        elif not INT64_MIN <= p.amount <= INT64_MAX:
            raise AmountOutOfRangeError(f"amount {p.amount} of posting {i + 1} is out of range")
        resolved.append(
            Posting(
                account=p.account,
                commodity=p.commodity if p.commodity is not None else default_commodity,
                amount=p.amount if p.amount is not None else 0,
            )
        )

    return resolved, omitted


def find_unbalanced_commodities(postings: Iterable[Posting]) -> list[tuple[str, int]]:
    return [(c, v) for c, v in compute_balances(postings).items() if v != 0]


def compile_transaction(t: ast.Transaction, header: JournalHeader) -> Transaction:
    """Resolve, auto-balance and validate a single transaction."""
    if len(t.postings) < MIN_POSTINGS:
        raise TooFewPostingsError(
            f"a transaction needs {MIN_POSTINGS} or more postings, got {len(t.postings)}"
        )

    postings, omitted = resolve_postings(t.postings, header.default_commodity)

    unbalanced = find_unbalanced_commodities(postings)
    if len(unbalanced) > 1:
        names = ", ".join(c for c, _ in unbalanced)
        raise MultipleUnbalancedCommoditiesError(
            f"only a single commodity can be unbalanced, got {names}"
        )

    if omitted is not None:
        posting = postings[omitted]
        commodity, imbalance = unbalanced[0] if unbalanced else (posting.commodity, 0)
        if posting.commodity != commodity:
            raise CommodityMismatchError(
                f"posting to {posting.account} omits its amount in {posting.commodity}, "
                f"but the unbalanced commodity is {commodity}"
            )
        amount = -imbalance
        if not INT64_MIN <= amount <= INT64_MAX:
            raise AmountOutOfRangeError(f"inferred amount {amount} is out of range")
        posting.amount = amount
        logger.debug("inferred %d %s for %s", amount, commodity, posting.account)

    out = Transaction(
        header=TransactionHeader(
            timestamp=t.header.timestamp,
            attributes=t.header.attributes,
        ),
        postings=postings,
    )

    balances = out.balances()
    if any(v != 0 for v in balances.values()):
        detail = ", ".join(f"{c} {v:+d}" for c, v in balances.items() if v != 0)
        raise UnbalancedTransactionError(f"unbalanced transaction: {detail}")

    return out


class Compiler:
    """Compiles AST nodes into a Journal."""

    def __init__(self, header: JournalHeader | None = None):
        self.journal = Journal(header=header.model_copy() if header else JournalHeader())

    def compile(self, nodes: Iterable[ast.Node]) -> Journal:
        """Compile every node in order. The first error aborts compilation."""
        for index, node in enumerate(nodes):
            try:
                self.compile_node(node)
            except CompileError as e:
                e.node_index = index
                raise

        logger.info(
            "compiled %d transactions (default commodity %r)",
            len(self.journal.transactions),
            self.journal.header.default_commodity,
        )
        return self.journal

    def compile_node(self, node: ast.Node) -> None:
        match node:
            case ast.Transaction():
                self.journal.transactions.append(compile_transaction(node, self.journal.header))
                logger.debug("compiled transaction at %s", node.header.timestamp.isoformat())
            case ast.SetAttribute(name=name, value=value):
                self._set_attribute(name, value)
            case _:
                raise CompileError(f"unknown node type: {type(node).__name__}")

    def _set_attribute(self, name: str, value: str) -> None:
        if name == "default_commodity":
            self.journal.header.default_commodity = value
            logger.debug("default commodity set to %s", value)
        else:
            logger.debug("ignoring unknown attribute %s", name)
