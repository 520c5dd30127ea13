"""Transaction-candidate classifier.

A message is a candidate when it carries a currency amount and either comes
from a recognised bank/fintech sender or reads like a transaction (a
debit/credit keyword or an account reference). The two signals are OR-ed so
that messages which never name the bank, and messages that omit the verb but
quote an account, are both accepted.
"""

from __future__ import annotations

from .patterns import ACCOUNT_RE, AMOUNT_RE, BANK_SENDER_RE, CREDIT_RE, DEBIT_RE


def has_amount(body: str) -> bool:
    return AMOUNT_RE.search(body) is not None


def has_transaction_keyword(body: str) -> bool:
    return DEBIT_RE.search(body) is not None or CREDIT_RE.search(body) is not None


def has_account_reference(body: str) -> bool:
    return ACCOUNT_RE.search(body) is not None


def is_bank_sender(sender_or_title: str) -> bool:
    return BANK_SENDER_RE.search(sender_or_title) is not None


def is_transaction_candidate(sender_or_title: str | None, body: str | None) -> bool:
    """Return ``True`` when ``body`` plausibly describes a bank transaction."""

    if not body:
        return False
    if not has_amount(body):
        return False
    if sender_or_title and is_bank_sender(sender_or_title):
        return True
    return has_transaction_keyword(body) or has_account_reference(body)


__all__ = [
    "has_amount",
    "has_transaction_keyword",
    "has_account_reference",
    "is_bank_sender",
    "is_transaction_candidate",
]
