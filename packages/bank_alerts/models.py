"""Data models for ``bank_alerts``.

``TransactionRecord`` is the only persisted entity. Python attribute names
describe the domain; the aliases are the on-the-wire keys shared with the UI
collaborator and the persisted blob::

    {amount, type, account, method, merchant, balance, date,
     timestamp, sender, body, processed}

``SourceMessage`` is the uniform tuple produced by every source adapter and
``NotificationEvent`` is the raw payload of the push channel.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator

PAYMENT_METHODS: frozenset[str] = frozenset({"UPI", "IMPS", "NEFT", "RTGS", "NACH"})

# Sentinel for "balance not present in the message".
UNKNOWN_BALANCE = Decimal("-1")

_ACCOUNT_SUFFIX_RE = re.compile(r"^XX\d{4}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Decimals travel as JSON numbers, not strings.
WireDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Direction(StrEnum):
    DEBIT = "debit"
    CREDIT = "credit"


class SourceMessage(NamedTuple):
    """A message as seen by the classifier, whichever channel delivered it."""

    sender: str
    body: str
    timestamp_ms: int


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """A platform notification as delivered to the push adapter.

    ``big_text`` is the expanded notification text; when present it usually
    holds the full message while ``text`` is truncated.
    """

    source_id: str
    title: str
    text: str
    posted_at_ms: int
    big_text: str | None = None


class TransactionRecord(BaseModel):
    """A transaction inferred from one bank message.

    Only ``amount`` is guaranteed to carry information; every other extracted
    field may be empty (or ``UNKNOWN_BALANCE`` for ``balance``). Instances are
    immutable; :meth:`mark_processed` returns an updated copy.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    amount: WireDecimal
    direction: Direction = Field(default=Direction.DEBIT, alias="type")
    account_suffix: str = Field(default="", alias="account")
    payment_method: str = Field(default="", alias="method")
    merchant: str = ""
    balance: WireDecimal = UNKNOWN_BALANCE
    occurred_date: str = Field(alias="date")
    occurred_at: int = Field(alias="timestamp")
    source_identifier: str = Field(default="", alias="sender")
    raw_text: str = Field(default="", alias="body")
    processed: bool = False

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or v <= 0:
            raise ValueError("amount must be a positive number")
        return v

    @field_validator("balance")
    @classmethod
    def _balance_known_or_sentinel(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or (v < 0 and v != UNKNOWN_BALANCE):
            raise ValueError("balance must be non-negative or -1 (unknown)")
        return v

    @field_validator("account_suffix")
    @classmethod
    def _account_suffix_shape(cls, v: str) -> str:
        if v and not _ACCOUNT_SUFFIX_RE.fullmatch(v):
            raise ValueError("account must be empty or 'XX' followed by 4 digits")
        return v

    @field_validator("payment_method")
    @classmethod
    def _known_payment_method(cls, v: str) -> str:
        if v and v not in PAYMENT_METHODS:
            raise ValueError(f"method must be one of {sorted(PAYMENT_METHODS)} or empty")
        return v

    @field_validator("occurred_date")
    @classmethod
    def _date_shape(cls, v: str) -> str:
        if not _DATE_RE.fullmatch(v):
            raise ValueError("date must be formatted YYYY-MM-DD")
        return v

    @property
    def dedup_key(self) -> tuple[int, Decimal]:
        """Key under which two observations count as the same physical event.

        Two distinct transactions with the same millisecond timestamp and
        amount collapse into one record. That is an accepted approximation.
        """

        return (self.occurred_at, self.amount)

    @property
    def has_balance(self) -> bool:
        return self.balance != UNKNOWN_BALANCE

    def mark_processed(self) -> TransactionRecord:
        return self.model_copy(update={"processed": True})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "PAYMENT_METHODS",
    "UNKNOWN_BALANCE",
    "Direction",
    "SourceMessage",
    "NotificationEvent",
    "TransactionRecord",
]
