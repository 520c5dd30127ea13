"""Query surface consumed by the UI collaborator.

:class:`TransactionQueryApi` answers reads over a :class:`TransactionStore`
and forwards capability checks to the host. When a pull adapter is attached,
each read first ingests fresh inbox messages above the query's lower bound,
so the pull path is retried simply by being queried again and its messages
collapse with notification-delivered copies in the store.

Every operation fails safe: a fault is logged and turns into an empty list
(reads) or a no-op (writes). Nothing is raised to the caller.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from datetime import tzinfo
from typing import Any

from .logging_setup import get_logger
from .models import TransactionRecord
from .pipeline import ingest
from .sources.capability import Capability
from .sources.pull import PullAdapter
from .store import TransactionStore

MS_PER_DAY = 86_400_000

_logger = get_logger("bank_alerts.api")


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def as_wire(records: Iterable[TransactionRecord]) -> list[dict[str, Any]]:
    """Render records in the on-the-wire schema shared with the UI."""

    return [r.to_wire() for r in records]


class TransactionQueryApi:
    def __init__(
        self,
        store: TransactionStore,
        *,
        pull: PullAdapter | None = None,
        capability: Capability | None = None,
        clock: Callable[[], int] = _now_ms,
        tz: tzinfo | str | None = None,
    ) -> None:
        self.store = store
        self.pull = pull
        self.capability = capability if capability is not None else (
            pull.capability if pull is not None else None
        )
        self.clock = clock
        self.tz = tz

    def _refresh(self, since_ms: int) -> None:
        if self.pull is None:
            return
        # A failed refresh must not hide what is already stored.
        try:
            ingest(self.pull.fetch(since_ms), self.store, tz=self.tz)
        except Exception:
            _logger.warning("api:refresh_failed since_ms=%d", since_ms, exc_info=True)

    def fetch_since(self, threshold_ms: int) -> list[TransactionRecord]:
        """Unprocessed records with ``occurred_at > threshold_ms``, in store order."""

        try:
            self._refresh(threshold_ms)
            return [
                r
                for r in self.store.records()
                if r.occurred_at > threshold_ms and not r.processed
            ]
        except Exception:
            _logger.warning("api:fetch_since_failed threshold_ms=%s", threshold_ms, exc_info=True)
            return []

    def fetch_recent(self, days: int) -> list[TransactionRecord]:
        """Records from the last ``days`` days, processed or not."""

        try:
            since = self.clock() - int(days) * MS_PER_DAY
            self._refresh(since)
            return [r for r in self.store.records() if r.occurred_at > since]
        except Exception:
            _logger.warning("api:fetch_recent_failed days=%s", days, exc_info=True)
            return []

    def mark_processed(self, timestamps: Iterable[int]) -> None:
        try:
            changed = self.store.mark_processed(int(t) for t in timestamps)
            _logger.debug("api:marked_processed count=%d", changed)
        except Exception:
            _logger.warning("api:mark_processed_failed", exc_info=True)

    def has_capability(self) -> bool:
        try:
            return self.capability is not None and bool(self.capability.is_granted())
        except Exception:
            _logger.warning("api:has_capability_failed", exc_info=True)
            return False

    def request_capability(self) -> None:
        if self.capability is None:
            return
        try:
            self.capability.request()
        except Exception:
            _logger.warning("api:request_capability_failed", exc_info=True)


__all__ = ["MS_PER_DAY", "as_wire", "TransactionQueryApi"]
