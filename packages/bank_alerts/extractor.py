"""Best-effort field extraction from classified bank messages.

Each field is resolved by an ordered tuple of independent matchers: a matcher
takes the message body and returns a value or ``None``, and the first
non-``None`` value wins. Only the amount is mandatory; when it is missing,
unparsable or not positive the message is rejected with
:class:`~bank_alerts.errors.ParseRejected`. Every other field falls back to
its empty default.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, tzinfo
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo

from .errors import ParseRejected
from .models import UNKNOWN_BALANCE, Direction, SourceMessage, TransactionRecord
from .patterns import (
    ACCOUNT_RE,
    AMOUNT_RE,
    BALANCE_RE,
    CREDIT_RE,
    DEBIT_RE,
    MERCHANT_RE,
    MERCHANT_TAIL_RE,
    PAYMENT_METHOD_RE,
)

type Matcher[T] = Callable[[str], T | None]


def first_match[T](matchers: Sequence[Matcher[T]], text: str) -> T | None:
    for matcher in matchers:
        value = matcher(text)
        if value is not None:
            return value
    return None


def _parse_number(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


# ---------------------------------------------------------------------------
# Field matchers
# ---------------------------------------------------------------------------


def match_amount(text: str) -> Decimal | None:
    # Only the first currency token counts; later ones are usually balances.
    m = AMOUNT_RE.search(text)
    return _parse_number(m.group(1)) if m else None


def match_credit_only(text: str) -> Direction | None:
    if CREDIT_RE.search(text) and not DEBIT_RE.search(text):
        return Direction.CREDIT
    return None


def match_account_suffix(text: str) -> str | None:
    m = ACCOUNT_RE.search(text)
    return f"XX{m.group(1)}" if m else None


def match_payment_method(text: str) -> str | None:
    m = PAYMENT_METHOD_RE.search(text)
    return m.group(0).upper() if m else None


def match_merchant(text: str) -> str | None:
    """Best-effort payee after a preposition marker.

    The capture is cut at its first ` on` / ` at` / ` dated` word, which drops
    trailing dates and times but also shortens names containing those words
    ("SHOP AT HOME" becomes "SHOP").
    """

    m = MERCHANT_RE.search(text)
    if not m:
        return None
    merchant = MERCHANT_TAIL_RE.sub("", m.group(1).strip()).strip()
    return merchant or None


def match_balance(text: str) -> Decimal | None:
    m = BALANCE_RE.search(text)
    return _parse_number(m.group(1)) if m else None


AMOUNT_MATCHERS: tuple[Matcher[Decimal], ...] = (match_amount,)
DIRECTION_MATCHERS: tuple[Matcher[Direction], ...] = (match_credit_only,)
ACCOUNT_MATCHERS: tuple[Matcher[str], ...] = (match_account_suffix,)
PAYMENT_METHOD_MATCHERS: tuple[Matcher[str], ...] = (match_payment_method,)
MERCHANT_MATCHERS: tuple[Matcher[str], ...] = (match_merchant,)
BALANCE_MATCHERS: tuple[Matcher[Decimal], ...] = (match_balance,)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def resolve_timezone(tz: tzinfo | str | None = None) -> tzinfo | None:
    """Resolve the zone used for ``occurred_date``.

    Explicit argument first, then ``BANK_ALERTS_TZ``; ``None`` means the host's
    local zone.
    """

    if isinstance(tz, tzinfo):
        return tz
    name = tz or os.getenv("BANK_ALERTS_TZ")
    if name and name.strip():
        name = name.strip()
        if name.upper() in {"UTC", "Z"}:
            return UTC
        return ZoneInfo(name)
    return None


def format_occurred_date(timestamp_ms: int, tz: tzinfo | str | None = None) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=resolve_timezone(tz)).strftime(
        "%Y-%m-%d"
    )


# ---------------------------------------------------------------------------
# Record extraction
# ---------------------------------------------------------------------------


def extract_transaction(
    message: SourceMessage, *, tz: tzinfo | str | None = None
) -> TransactionRecord:
    """Build a :class:`TransactionRecord` from a classifier-positive message.

    Raises
    ------
    ParseRejected
        When the body has no currency amount, or the first one is not a
        positive number.
    """

    body = message.body
    amount = first_match(AMOUNT_MATCHERS, body)
    if amount is None:
        raise ParseRejected("no parsable currency amount")
    if amount <= 0:
        raise ParseRejected(f"non-positive amount: {amount}")

    balance = first_match(BALANCE_MATCHERS, body)
    return TransactionRecord(
        amount=amount,
        direction=first_match(DIRECTION_MATCHERS, body) or Direction.DEBIT,
        account_suffix=first_match(ACCOUNT_MATCHERS, body) or "",
        payment_method=first_match(PAYMENT_METHOD_MATCHERS, body) or "",
        merchant=first_match(MERCHANT_MATCHERS, body) or "",
        balance=balance if balance is not None else UNKNOWN_BALANCE,
        occurred_date=format_occurred_date(message.timestamp_ms, tz),
        occurred_at=message.timestamp_ms,
        source_identifier=message.sender,
        raw_text=body,
    )


__all__ = [
    "Matcher",
    "first_match",
    "match_amount",
    "match_credit_only",
    "match_account_suffix",
    "match_payment_method",
    "match_merchant",
    "match_balance",
    "resolve_timezone",
    "format_occurred_date",
    "extract_transaction",
]
