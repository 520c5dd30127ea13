from decimal import Decimal
from pathlib import Path

import pytest

from bank_alerts.api import MS_PER_DAY, TransactionQueryApi, as_wire
from bank_alerts.blobs import FileBlobBackend
from bank_alerts.models import SourceMessage, TransactionRecord
from bank_alerts.sources import PullAdapter, StaticCapability
from bank_alerts.store import DEFAULT_BLOB_NAME, TransactionStore
from tests.helpers.sources import ListMessageStore

NOW = 1715509800000


def _rec(ts: int, amount: str = "100") -> TransactionRecord:
    return TransactionRecord(
        amount=Decimal(amount), occurred_at=ts, occurred_date="2024-05-12"
    )


def _api(store: TransactionStore, **kw) -> TransactionQueryApi:
    return TransactionQueryApi(store, clock=lambda: NOW, **kw)


def test_fetch_since_excludes_processed_but_fetch_recent_keeps_them(store):
    t0, t1 = NOW - 10_000, NOW - 5_000
    store.insert(_rec(t1))
    api = _api(store)

    assert [r.occurred_at for r in api.fetch_since(t0)] == [t1]
    api.mark_processed([t1])
    assert api.fetch_since(t0) == []
    assert [r.occurred_at for r in api.fetch_recent(1)] == [t1]
    assert api.fetch_recent(1)[0].processed is True


def test_fetch_since_bound_is_exclusive_and_keeps_store_order(store):
    store.insert_many([_rec(NOW - 1), _rec(NOW - 3), _rec(NOW - 2)])
    api = _api(store)
    assert [r.occurred_at for r in api.fetch_since(NOW - 3)] == [NOW - 1, NOW - 2]
    assert api.fetch_since(NOW) == []


def test_fetch_recent_window(store):
    store.insert_many(
        [_rec(NOW - 3 * MS_PER_DAY - 1), _rec(NOW - 3 * MS_PER_DAY), _rec(NOW - MS_PER_DAY)]
    )
    api = _api(store)
    assert [r.occurred_at for r in api.fetch_recent(3)] == [NOW - MS_PER_DAY]
    assert len(api.fetch_recent(4)) == 3
    assert api.fetch_recent(0) == []


def test_corrupt_blob_behaves_as_empty(tmp_path: Path):
    backend = FileBlobBackend(tmp_path)
    backend.write(DEFAULT_BLOB_NAME, "[{\"amount\": ")
    api = _api(TransactionStore(backend))
    assert api.fetch_since(0) == []
    assert api.fetch_recent(30) == []
    api.mark_processed([1, 2, 3])
    assert api.fetch_since(0) == []


class _BrokenStore:
    def records(self):
        raise OSError("I/O error")

    def mark_processed(self, timestamps):
        raise OSError("read-only file system")


def test_faults_are_never_surfaced():
    api = _api(_BrokenStore())  # type: ignore[arg-type]
    assert api.fetch_since(0) == []
    assert api.fetch_recent(7) == []
    api.mark_processed([1])
    api.mark_processed(["not-a-timestamp"])  # type: ignore[list-item]


def test_reads_pull_fresh_messages_and_collapse_duplicates(store):
    body = "Rs 500 debited from a/c XX1234"
    # Already delivered by the notification path.
    store.insert(_rec(NOW - 1000, "500"))
    inbox = ListMessageStore(
        [
            SourceMessage("VM-HDFCBK", body, NOW - 1000),
            SourceMessage("AX-SBIINB", "INR 42 spent at DMART", NOW - 500),
            SourceMessage("Mom", "dinner at 8?", NOW - 200),
        ]
    )
    api = _api(store, pull=PullAdapter(inbox, StaticCapability(granted=True)))

    got = api.fetch_since(NOW - 2000)
    assert [(r.occurred_at, r.amount) for r in got] == [
        (NOW - 1000, Decimal("500")),
        (NOW - 500, Decimal("42")),
    ]
    assert inbox.queries == [NOW - 2000]

    api.fetch_recent(1)
    assert inbox.queries[-1] == NOW - MS_PER_DAY
    assert len(store.records()) == 2


def test_pull_above_capacity_keeps_newest_and_processed_state(store):
    stamps = [NOW - (150 - i) * 1000 for i in range(150)]
    inbox = ListMessageStore(
        SourceMessage("VM-HDFCBK", f"Rs {i + 1} debited from a/c XX1234", ts)
        for i, ts in enumerate(stamps)
    )
    api = _api(store, pull=PullAdapter(inbox, StaticCapability(granted=True)))

    got = api.fetch_since(0)
    assert [r.occurred_at for r in got] == stamps[50:]

    api.mark_processed([stamps[60]])
    for _ in range(3):
        unprocessed = api.fetch_since(0)
        assert len(unprocessed) == 99
        assert stamps[60] not in [r.occurred_at for r in unprocessed]
        recent = api.fetch_recent(1)
        assert [r.occurred_at for r in recent] == stamps[50:]
        assert [r.occurred_at for r in recent if r.processed] == [stamps[60]]


def test_capability_delegation():
    requested: list[bool] = []
    cap = StaticCapability(granted=False, on_request=lambda: requested.append(True))
    api = TransactionQueryApi(TransactionStore(FileBlobBackend(".")), capability=cap)
    assert api.has_capability() is False
    api.request_capability()
    assert requested == [True]
    cap.grant()
    assert api.has_capability() is True


def test_capability_from_pull_adapter_and_absent(store):
    cap = StaticCapability(granted=True)
    api = TransactionQueryApi(store, pull=PullAdapter(ListMessageStore(), cap))
    assert api.has_capability() is True
    bare = TransactionQueryApi(store)
    assert bare.has_capability() is False
    bare.request_capability()


def test_capability_faults_are_swallowed(store):
    class _Angry:
        def is_granted(self) -> bool:
            raise RuntimeError("settings provider died")

        def request(self) -> None:
            raise RuntimeError("no activity")

    api = TransactionQueryApi(store, capability=_Angry())
    assert api.has_capability() is False
    api.request_capability()


def test_as_wire(store):
    store.insert(_rec(NOW, "12.5"))
    [wire] = as_wire(_api(store).fetch_since(0))
    assert wire["amount"] == 12.5
    assert wire["type"] == "debit"
    assert wire["balance"] == -1


@pytest.mark.parametrize("days", [1, 7, 30])
def test_fetch_recent_uses_clock(store, days: int):
    store.insert(_rec(NOW - days * MS_PER_DAY + 1))
    assert len(_api(store).fetch_recent(days)) == 1
