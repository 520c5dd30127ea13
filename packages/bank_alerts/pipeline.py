"""Message-to-record pipeline shared by both source adapters.

``process_message`` gates a message through the classifier and the extractor;
``ingest`` feeds the resulting records into a :class:`TransactionStore`.
Rejected messages are dropped quietly (DEBUG only): most of an inbox is not
bank traffic and an unparsable amount is an expected outcome.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import tzinfo

from .classifier import is_transaction_candidate
from .errors import ParseRejected
from .extractor import extract_transaction
from .logging_setup import get_logger
from .models import SourceMessage, TransactionRecord
from .store import TransactionStore

_logger = get_logger("bank_alerts.pipeline")


def process_message(
    message: SourceMessage, *, tz: tzinfo | str | None = None
) -> TransactionRecord | None:
    if not is_transaction_candidate(message.sender, message.body):
        return None
    try:
        return extract_transaction(message, tz=tz)
    except ParseRejected as e:
        _logger.debug("pipeline:rejected timestamp=%d reason=%s", message.timestamp_ms, e)
        return None


def ingest(
    messages: Iterable[SourceMessage],
    store: TransactionStore,
    *,
    tz: tzinfo | str | None = None,
) -> int:
    """Store the transactions found in a pulled batch; return how many were new.

    ``messages`` may arrive in any order (the pull adapter yields newest
    first). See :meth:`TransactionStore.merge_recent`.
    """

    records = [r for m in messages if (r := process_message(m, tz=tz)) is not None]
    if not records:
        return 0
    added = store.merge_recent(records)
    _logger.debug("pipeline:ingested candidates=%d added=%d", len(records), added)
    return added


def store_handler(
    store: TransactionStore, *, tz: tzinfo | str | None = None
) -> Callable[[SourceMessage], int]:
    """Return a per-message handler suitable for :class:`PushAdapter`."""

    def _handle(message: SourceMessage) -> int:
        record = process_message(message, tz=tz)
        if record is None:
            return 0
        return int(store.insert(record))

    return _handle


__all__ = ["process_message", "ingest", "store_handler"]
