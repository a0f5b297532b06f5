"""Tests for transaction resolution and the journal compiler."""

from datetime import datetime, timezone

import pytest

from tallybook import (
    AmountOutOfRangeError,
    ASTPosting,
    CommodityMismatchError,
    Compiler,
    JournalHeader,
    MultipleOmittedAmountsError,
    MultipleUnbalancedCommoditiesError,
    SetAttribute,
    TooFewPostingsError,
    Transaction,
    TransactionHeader,
    UnbalancedTransactionError,
    compile,
    compile_transaction,
)
from tallybook.journal import INT64_MIN

TS = datetime(2026, 1, 1, tzinfo=timezone.utc)


def txn(*postings, attributes=None):
    return Transaction(
        header=TransactionHeader(timestamp=TS, attributes=attributes or {}),
        postings=[ASTPosting(account=a, commodity=c, amount=v) for a, c, v in postings],
    )


class TestCompileTransaction:
    def test_simple(self):
        result = compile_transaction(
            txn(("assets/cash", "JPY", -1000), ("expenses/food", "JPY", 1000)),
            JournalHeader(),
        )
        assert [(p.account, p.commodity, p.amount) for p in result.postings] == [
            ("assets/cash", "JPY", -1000),
            ("expenses/food", "JPY", 1000),
        ]
        assert result.header.timestamp == TS
        assert result.is_balanced()

    def test_default_commodity(self):
        result = compile_transaction(
            txn(("a", None, 1000), ("b", "USD", 0), ("c", None, -1000)),
            JournalHeader(default_commodity="JPY"),
        )
        assert [p.commodity for p in result.postings] == ["JPY", "USD", "JPY"]

    def test_auto_balance(self):
        result = compile_transaction(
            txn(("expenses/books", "JPY", 1200), ("assets/cash", "JPY", None)),
            JournalHeader(),
        )
        assert result.postings[1].amount == -1200
        assert result.balances() == {"JPY": 0}

    def test_auto_balance_with_default_commodity(self):
        result = compile_transaction(
            txn(("a", "JPY", 1000), ("b", None, None)),
            JournalHeader(default_commodity="JPY"),
        )
        assert result.postings[1].commodity == "JPY"
        assert result.postings[1].amount == -1000

    def test_auto_balance_other_commodities_balanced(self):
        result = compile_transaction(
            txn(("a", "USD", 10), ("b", "USD", -10), ("c", "JPY", 500), ("d", "JPY", None)),
            JournalHeader(),
        )
        assert result.postings[3].amount == -500

    def test_omitted_amount_in_balanced_transaction_is_zero(self):
        result = compile_transaction(
            txn(("a", "JPY", 1000), ("b", "JPY", -1000), ("c", "JPY", None)),
            JournalHeader(),
        )
        assert result.postings[2].amount == 0

    def test_attributes_carried_over(self):
        result = compile_transaction(
            txn(("a", "JPY", 1), ("b", "JPY", -1), attributes={"payee": "Bookstore"}),
            JournalHeader(),
        )
        assert result.header.attributes == {"payee": "Bookstore"}

    @pytest.mark.parametrize(
        "postings,error",
        [
            ((), TooFewPostingsError),
            ((("a", "JPY", 1000),), TooFewPostingsError),
            ((("a", "JPY", None),), TooFewPostingsError),
            ((("a", "JPY", 1000), ("b", "JPY", -2000)), UnbalancedTransactionError),
            ((("a", "JPY", 2000), ("b", "JPY", -1000)), UnbalancedTransactionError),
            ((("a", "JPY", None), ("b", "JPY", None)), MultipleOmittedAmountsError),
            ((("a", "JPY", 1000), ("b", "USD", -10)), MultipleUnbalancedCommoditiesError),
            (
                (("a", "JPY", 1000), ("b", "USD", -10), ("c", "JPY", None)),
                MultipleUnbalancedCommoditiesError,
            ),
            ((("a", "JPY", 1000), ("b", "USD", None)), CommodityMismatchError),
        ],
    )
    def test_rejected(self, postings, error):
        with pytest.raises(error):
            compile_transaction(txn(*postings), JournalHeader())

    def test_unbalanced_message(self):
        with pytest.raises(UnbalancedTransactionError, match="JPY -1000"):
            compile_transaction(txn(("a", "JPY", 1000), ("b", "JPY", -2000)), JournalHeader())

    def test_inferred_amount_out_of_range(self):
        with pytest.raises(AmountOutOfRangeError):
            compile_transaction(txn(("a", "JPY", INT64_MIN), ("b", "JPY", None)), JournalHeader())


class TestCompiler:
    def test_empty(self):
        journal = compile([])
        assert journal.transactions == []
        assert journal.header.default_commodity == ""

    def test_set_only_affects_later_nodes(self):
        nodes = [
            txn(("a", None, 1), ("b", None, -1)),
            SetAttribute(name="default_commodity", value="JPY"),
            txn(("a", None, 1), ("b", None, -1)),
        ]
        journal = compile(nodes)
        assert [p.commodity for p in journal.transactions[0].postings] == ["", ""]
        assert [p.commodity for p in journal.transactions[1].postings] == ["JPY", "JPY"]
        assert journal.header.default_commodity == "JPY"

    def test_later_set_overrides_earlier(self):
        nodes = [
            SetAttribute(name="default_commodity", value="JPY"),
            SetAttribute(name="default_commodity", value="USD"),
            txn(("a", None, 1), ("b", None, -1)),
        ]
        journal = compile(nodes)
        assert journal.transactions[0].postings[0].commodity == "USD"

    def test_unknown_attribute_is_ignored(self):
        journal = compile([SetAttribute(name="operator", value="alice")])
        assert journal.header == JournalHeader()

    def test_initial_header(self):
        journal = compile(
            [txn(("a", None, 1), ("b", None, -1))], JournalHeader(default_commodity="EUR")
        )
        assert journal.transactions[0].postings[0].commodity == "EUR"

    def test_initial_header_not_mutated(self):
        header = JournalHeader(default_commodity="EUR")
        compile([SetAttribute(name="default_commodity", value="JPY")], header)
        assert header.default_commodity == "EUR"

    def test_error_records_node_index(self):
        nodes = [
            txn(("a", "JPY", 1), ("b", "JPY", -1)),
            SetAttribute(name="default_commodity", value="JPY"),
            txn(("a", "JPY", 1)),
        ]
        with pytest.raises(TooFewPostingsError) as exc:
            Compiler().compile(nodes)
        assert exc.value.node_index == 2

    @pytest.mark.parametrize("value", [2**63, -(2**63) - 1])
    def test_explicit_amount_out_of_range(self, value):
        nodes = [txn(("a", "JPY", value), ("b", "JPY", None))]
        with pytest.raises(AmountOutOfRangeError) as exc:
            compile(nodes)
        assert exc.value.node_index == 0

    def test_preserves_order(self):
        nodes = [
            txn(("a", "JPY", 1), ("b", "JPY", -1), attributes={"n": 1}),
            txn(("a", "JPY", 2), ("b", "JPY", -2), attributes={"n": 2}),
        ]
        journal = compile(nodes)
        assert [t.header.attributes["n"] for t in journal.transactions] == [1, 2]
