"""Compiled patterns and vocabularies for Indian bank/fintech messages.

Every pattern is case-insensitive and searched (not anchored) anywhere in the
text. Capturing groups hold the value a matcher extracts.
"""

from __future__ import annotations

import re

_I = re.IGNORECASE

# Numeric literal: digits with optional thousands separators and fraction.
_NUMBER = r"(\d[\d,]*(?:\.\d+)?)"

CURRENCY_MARKER = r"(?:INR|Rs\.?|₹)"

AMOUNT_RE = re.compile(CURRENCY_MARKER + r"\s*" + _NUMBER, _I)

DEBIT_KEYWORDS: tuple[str, ...] = (
    "debited",
    "debit",
    "spent",
    "paid",
    "purchase",
    "withdrawn",
    "txn",
    "sent",
    "payment",
    "transferred",
)

CREDIT_KEYWORDS: tuple[str, ...] = (
    "credited",
    "credit",
    "received",
    "refund",
    "cashback",
    "reversed",
    "deposited",
)

DEBIT_RE = re.compile("|".join(DEBIT_KEYWORDS), _I)
CREDIT_RE = re.compile("|".join(CREDIT_KEYWORDS), _I)

ACCOUNT_RE = re.compile(
    r"(?:a/c|acct|account|card)\s*(?:no\.?|#|ending)?\s*[xX*]*\s*(\d{4})", _I
)

PAYMENT_METHOD_RE = re.compile(r"UPI|IMPS|NEFT|RTGS|NACH", _I)

# Longer markers first so "trf to" wins over "to" at the same position.
MERCHANT_RE = re.compile(
    r"\b(?:trf\s+to|trf\s+from|info:?|to|at|for|from)\s+([A-Za-z][A-Za-z0-9 .&'-]{2,30})",
    _I,
)

# Everything from the first " on" / " at" / " dated" onward is noise. The cut is
# not anchored to a date or time, so a name such as "SHOP AT HOME" becomes "SHOP".
MERCHANT_TAIL_RE = re.compile(r"\s+(?:on|at|dated)\b.*$", _I)

BALANCE_RE = re.compile(
    r"(?:avl\.?\s*bal|available\s*balance|bal(?:ance)?)[:\s]*"
    + CURRENCY_MARKER
    + r"?\s*"
    + _NUMBER,
    _I,
)

# Sender IDs and notification titles of banks, card issuers and payment apps.
BANK_BRAND_TOKENS: tuple[str, ...] = (
    "SBI",
    "HDFC",
    "ICICI",
    "AXIS",
    "KOTAK",
    "BOB",
    "PNB",
    "BOI",
    "CANARA",
    "UNION",
    "IDBI",
    "CITI",
    "PAYTM",
    "GPAY",
    "PHONEPE",
    "AMAZON",
    "BAJAJ",
    "AMEX",
    "RBL",
    "FEDERAL",
    "INDUS",
    "YES",
    "IDFCF",
    "HSBC",
    "SCSBNK",
    "JKBANK",
    "KARNAT",
    "SYNDIC",
    "MAHABK",
    "DENA",
    "OBC",
    "ALLAHD",
    "BNKBRD",
    "HDFCBK",
    "ICICIB",
    "SBIINB",
    "ATMSBI",
    "CBSSBI",
    "AXISBK",
    "KOTAKB",
    "BOBIN",
)

BANK_SENDER_RE = re.compile("|".join(BANK_BRAND_TOKENS), _I)
