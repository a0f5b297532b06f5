"""The compiled journal: the sole output of the pipeline.

Every posting here has a concrete commodity and amount, and within each
transaction every commodity's amounts sum to zero.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, Field

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

Amount = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


class JournalHeader(BaseModel):
    default_commodity: str = ""


class Posting(BaseModel):
    account: str
    commodity: str
    amount: Amount


class TransactionHeader(BaseModel):
    timestamp: datetime
    attributes: dict[str, Any] = {}


class Transaction(BaseModel):
    header: TransactionHeader
    postings: list[Posting] = []

    def balances(self) -> dict[str, int]:
        return compute_balances(self.postings)

    def is_balanced(self) -> bool:
        return all(v == 0 for v in self.balances().values())


class Journal(BaseModel):
    header: JournalHeader = Field(default_factory=JournalHeader)
    transactions: list[Transaction] = []

    def to_json(self, indent: int | None = None) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "Journal":
        return cls.model_validate_json(data)


def compute_balances(postings: Iterable[Posting]) -> dict[str, int]:
    """Sum amounts per commodity, in order of first appearance."""
    balances: dict[str, int] = defaultdict(int)
    for p in postings:
        balances[p.commodity] += p.amount
    return dict(balances)
