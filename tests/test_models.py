import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from bank_alerts.models import UNKNOWN_BALANCE, Direction, TransactionRecord


def _record(**overrides) -> TransactionRecord:
    fields = {
        "amount": Decimal("500"),
        "direction": Direction.DEBIT,
        "account_suffix": "",
        "payment_method": "UPI",
        "merchant": "STARBUCKS",
        "balance": Decimal("10000"),
        "occurred_date": "2024-05-12",
        "occurred_at": 1715509800000,
        "source_identifier": "VM-HDFCBK",
        "raw_text": "₹500 spent using UPI at STARBUCKS",
    }
    fields.update(overrides)
    return TransactionRecord(**fields)


def test_wire_schema_keys_and_types():
    wire = _record().to_wire()
    assert list(wire) == [
        "amount",
        "type",
        "account",
        "method",
        "merchant",
        "balance",
        "date",
        "timestamp",
        "sender",
        "body",
        "processed",
    ]
    assert wire["amount"] == 500
    assert isinstance(wire["amount"], float)
    assert wire["type"] == "debit"
    assert wire["balance"] == 10000
    assert wire["timestamp"] == 1715509800000
    assert wire["processed"] is False
    # Serializes as plain JSON numbers.
    assert '"amount":500.0' in json.dumps(wire, separators=(",", ":"))


def test_parse_from_wire_keys():
    rec = TransactionRecord.model_validate(
        {
            "amount": 1234.5,
            "type": "credit",
            "account": "XX1234",
            "method": "",
            "merchant": "",
            "balance": -1,
            "date": "2024-05-12",
            "timestamp": 1,
            "sender": "x",
            "body": "y",
            "processed": True,
        }
    )
    assert rec.amount == Decimal("1234.50")
    assert rec.direction is Direction.CREDIT
    assert rec.balance == UNKNOWN_BALANCE
    assert rec.processed is True
    assert rec.dedup_key == (1, Decimal("1234.5"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": Decimal("0")},
        {"amount": Decimal("-5")},
        {"account_suffix": "1234"},
        {"account_suffix": "XX12"},
        {"payment_method": "CASH"},
        {"occurred_date": "12-05-2024"},
        {"balance": Decimal("-2")},
    ],
)
def test_invalid_fields_are_rejected(overrides):
    with pytest.raises(ValidationError):
        _record(**overrides)


def test_mark_processed_returns_copy():
    rec = _record()
    done = rec.mark_processed()
    assert done.processed is True
    assert rec.processed is False
    assert done.dedup_key == rec.dedup_key
    with pytest.raises(ValidationError):
        rec.processed = True  # frozen
