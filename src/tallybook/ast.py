"""AST nodes produced by the parser.

Nodes are unvalidated: postings may leave their commodity or amount out, to
be filled in by the compiler.
"""

from datetime import datetime
from typing import Annotated, Any
from typing import Literal as TypingLiteral

from pydantic import BaseModel, Field


class Posting(BaseModel):
    account: str  # e.g. assets/bank/checking
    commodity: str | None = None  # None = journal default
    amount: int | None = None  # None = inferred by balancing


class TransactionHeader(BaseModel):
    timestamp: datetime
    attributes: dict[str, Any] = {}  # decoded front matter


class Transaction(BaseModel):
    type: TypingLiteral["transaction"] = "transaction"
    header: TransactionHeader
    postings: list[Posting] = []


class SetAttribute(BaseModel):
    """Document-level directive, e.g. ``set default_commodity JPY``."""

    type: TypingLiteral["set_attribute"] = "set_attribute"
    name: str
    value: str


Node = Annotated[Transaction | SetAttribute, Field(discriminator="type")]
