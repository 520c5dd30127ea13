"""Bounded, deduplicating transaction store.

The store is an insertion-ordered sequence of at most ``capacity`` records
persisted as one JSON array in a named blob. Insertion is at-most-once per
Dedup Key ``(occurred_at, amount)``: the same physical transaction observed
through both the inbox and the notification stream is stored once. When the
sequence grows past capacity the oldest insertions are evicted first.
Records are never reordered.

Every mutation is a read-modify-write of the whole blob performed under a
per-instance lock, so concurrent notification bursts and queries sharing one
store cannot interleave a scan with another writer's append. Writers in
other processes are not coordinated.

A blob that cannot be decoded is treated as an empty store; the next write
replaces it.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from .blobs import BlobBackend
from .errors import MalformedPersistedState
from .logging_setup import get_logger
from .models import TransactionRecord

DEFAULT_CAPACITY = 100
DEFAULT_BLOB_NAME = "pending_transactions"

_RECORDS = TypeAdapter(list[TransactionRecord])

_logger = get_logger("bank_alerts.store")


def decode_records(payload: str) -> list[TransactionRecord]:
    """Parse a persisted blob; raise :class:`MalformedPersistedState` on any defect."""

    try:
        return _RECORDS.validate_json(payload)
    except (ValidationError, ValueError) as e:
        raise MalformedPersistedState(str(e)) from e


def encode_records(records: Iterable[TransactionRecord]) -> str:
    return json.dumps(
        [r.to_wire() for r in records], ensure_ascii=False, separators=(",", ":")
    )


class TransactionStore:
    def __init__(
        self,
        backend: BlobBackend,
        *,
        capacity: int = DEFAULT_CAPACITY,
        blob_name: str = DEFAULT_BLOB_NAME,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self.backend = backend
        self.capacity = capacity
        self.blob_name = blob_name
        self._lock = threading.Lock()

    # ---- persistence -----------------------------------------------------

    def _load(self) -> list[TransactionRecord]:
        payload = self.backend.read(self.blob_name)
        if payload is None:
            return []
        try:
            return decode_records(payload)
        except MalformedPersistedState:
            _logger.warning(
                "store:blob_corrupt; treating as empty blob=%s", self.blob_name, exc_info=True
            )
            return []

    def _save(self, records: list[TransactionRecord]) -> None:
        self.backend.write(self.blob_name, encode_records(records))

    # ---- reads -----------------------------------------------------------

    def records(self) -> list[TransactionRecord]:
        """Return a snapshot of all records in insertion order."""

        with self._lock:
            return self._load()

    def __len__(self) -> int:
        return len(self.records())

    # ---- writes ----------------------------------------------------------

    def _append_unique(
        self, current: list[TransactionRecord], candidate: TransactionRecord
    ) -> bool:
        key = candidate.dedup_key
        for existing in current:
            if existing.dedup_key == key:
                _logger.debug(
                    "store:duplicate timestamp=%d amount=%s",
                    candidate.occurred_at,
                    candidate.amount,
                )
                return False
        current.append(candidate)
        return True

    def _evict(self, current: list[TransactionRecord]) -> None:
        overflow = len(current) - self.capacity
        if overflow > 0:
            del current[:overflow]
            _logger.debug("store:evicted count=%d", overflow)

    def insert(self, record: TransactionRecord) -> bool:
        """Insert ``record`` unless its Dedup Key is already stored.

        Returns ``True`` when the record was appended.
        """

        with self._lock:
            current = self._load()
            if not self._append_unique(current, record):
                return False
            self._evict(current)
            self._save(current)
            return True

    def insert_many(self, records: Iterable[TransactionRecord]) -> int:
        """Insert a batch with a single blob rewrite; return the number appended."""

        with self._lock:
            current = self._load()
            added = 0
            for rec in records:
                if self._append_unique(current, rec):
                    added += 1
            if added:
                self._evict(current)
                self._save(current)
            return added

    def merge_recent(self, records: Iterable[TransactionRecord]) -> int:
        """Insert a pulled batch so repeated pulls converge on the newest records.

        The batch is appended oldest first and only its newest ``capacity``
        records are considered. While the store is full, a candidate older
        than every retained record is skipped: appending it would evict a
        newer one, and the next pull would put that one back. Returns the
        number appended.
        """

        batch = sorted(records, key=lambda r: r.occurred_at)[-self.capacity :]
        with self._lock:
            current = self._load()
            added = 0
            for rec in batch:
                if len(current) >= self.capacity and rec.occurred_at < min(
                    r.occurred_at for r in current
                ):
                    continue
                if self._append_unique(current, rec):
                    added += 1
                    self._evict(current)
            if added:
                self._save(current)
            return added

    def mark_processed(self, timestamps: Iterable[int]) -> int:
        """Flag every record whose ``occurred_at`` is in ``timestamps``.

        Returns the number of records that changed state.
        """

        wanted = set(timestamps)
        if not wanted:
            return 0
        with self._lock:
            current = self._load()
            changed = 0
            for i, rec in enumerate(current):
                if rec.occurred_at in wanted and not rec.processed:
                    current[i] = rec.mark_processed()
                    changed += 1
            if changed:
                self._save(current)
            return changed

    def reset(self) -> None:
        with self._lock:
            self._save([])

    def __repr__(self) -> str:
        return (
            f"TransactionStore(backend={self.backend!r}, capacity={self.capacity}, "
            f"blob_name={self.blob_name!r})"
        )


__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_BLOB_NAME",
    "decode_records",
    "encode_records",
    "TransactionStore",
]
