import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from bank_alerts.cli import app

runner = CliRunner()

TS = 1715509800000


@pytest.fixture
def inbox(tmp_path: Path) -> Path:
    path = tmp_path / "inbox.json"
    path.write_text(
        json.dumps(
            [
                {"address": "VM-HDFCBK", "body": "Rs. 1,234.50 debited from a/c XX1234", "date": TS},
                {"address": "Mom", "body": "call me", "date": TS + 1},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_scan_then_query_then_mark(inbox: Path, tmp_path: Path):
    data_dir = tmp_path / "store"
    base = ["--data-dir", str(data_dir)]

    result = runner.invoke(app, [*base, "scan", "--inbox", str(inbox)])
    assert result.exit_code == 0, result.output
    assert "1 new transaction(s)" in result.output

    # Re-scanning the same inbox adds nothing.
    result = runner.invoke(app, [*base, "scan", "--inbox", str(inbox)])
    assert "0 new transaction(s)" in result.output

    result = runner.invoke(app, [*base, "since", str(TS - 1)])
    assert result.exit_code == 0, result.output
    [row] = json.loads(result.output)
    assert row["amount"] == 1234.5
    assert row["account"] == "XX1234"
    assert row["type"] == "debit"

    result = runner.invoke(app, [*base, "mark-processed", str(TS)])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, [*base, "since", str(TS - 1)])
    assert json.loads(result.output) == []


def test_recent_reads_env_data_dir(inbox: Path):
    assert runner.invoke(app, ["scan", "--inbox", str(inbox)]).exit_code == 0
    result = runner.invoke(app, ["recent", "--days", "100000"])
    assert result.exit_code == 0, result.output
    assert len(json.loads(result.output)) == 1


def test_scan_above_capacity_keeps_newest(tmp_path: Path):
    path = tmp_path / "big_inbox.json"
    rows = [
        {"address": "VM-HDFCBK", "body": f"Rs {i + 1} debited from a/c XX1234", "date": TS + i}
        for i in range(120)
    ]
    path.write_text(json.dumps(rows), encoding="utf-8")

    result = runner.invoke(app, ["scan", "--inbox", str(path)])
    assert result.exit_code == 0, result.output
    assert "100 new transaction(s)" in result.output
    result = runner.invoke(app, ["scan", "--inbox", str(path)])
    assert "0 new transaction(s)" in result.output

    result = runner.invoke(app, ["since", "0"])
    assert [row["timestamp"] for row in json.loads(result.output)] == [
        TS + i for i in range(20, 120)
    ]


def test_notify_replays_events(tmp_path: Path):
    events = tmp_path / "events.json"
    events.write_text(
        json.dumps(
            [
                {
                    "package": "com.google.android.apps.messaging",
                    "title": "AX-SBIINB",
                    "text": "Rs 99 debited...",
                    "big_text": "Rs 99 debited from a/c XX4455 to Swiggy",
                    "timestamp": TS,
                },
                {"package": "com.whatsapp", "title": "Bob", "text": "Rs 5 paid", "timestamp": TS},
            ]
        ),
        encoding="utf-8",
    )
    result = runner.invoke(app, ["notify", "--events", str(events)])
    assert result.exit_code == 0, result.output
    assert "1 new transaction(s)" in result.output

    [row] = json.loads(runner.invoke(app, ["since", "0"]).output)
    assert row["merchant"] == "Swiggy"
    assert row["sender"] == "AX-SBIINB"


def test_scan_missing_inbox_fails(tmp_path: Path):
    result = runner.invoke(app, ["scan", "--inbox", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_notify_invalid_file_fails(tmp_path: Path):
    events = tmp_path / "events.json"
    events.write_text('[{"title": "x"}]', encoding="utf-8")
    assert runner.invoke(app, ["notify", "--events", str(events)]).exit_code == 1


def test_no_subcommand_exits_nonzero():
    result = runner.invoke(app, [])
    assert result.exit_code == 1
