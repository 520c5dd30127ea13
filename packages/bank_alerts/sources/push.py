"""Push adapter over platform notification events.

The host hands two entry points to the platform: :meth:`PushAdapter.on_event`
for every posted notification and :meth:`PushAdapter.on_removed` for
dismissals. ``on_event`` runs on the host's delivery thread, so it only
filters the event and enqueues the work on a single worker thread; the
handler (classification, extraction, the store write) runs there. No
exception ever propagates out of either entry point.

Events are accepted from an allow-list of source identifiers: the explicit
``KNOWN_SOURCES`` set, unioned with any identifier containing one of
``SOURCE_HINTS``.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Collection
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait

from ..logging_setup import get_logger
from ..models import NotificationEvent, SourceMessage

_logger = get_logger("bank_alerts.sources.push")

KNOWN_SOURCES: frozenset[str] = frozenset(
    {
        # SMS / messaging apps whose notifications carry bank texts
        "com.google.android.apps.messaging",
        "com.samsung.android.messaging",
        "com.android.mms",
        "com.sonyericsson.conversations",
        "com.oneplus.mms",
        # Banking and payment apps
        "com.sbi.lotusintouch",
        "com.sbi.SBIFreedomPlus",
        "com.snapwork.hdfc",
        "com.csam.icici.bank.imobile",
        "com.axis.mobile",
        "com.msf.kbank.mobile",
        "com.bankofbaroda.mconnect",
        "com.fss.pnbone",
        "net.one97.paytm",
        "com.google.android.apps.nbu.paisa.user",
        "com.phonepe.app",
        "in.amazon.mShop.android.shopping",
        "in.org.npci.upiapp",
        "com.dreamplug.androidapp",
    }
)

SOURCE_HINTS: tuple[str, ...] = ("bank", "finserv", "finance", ".pay", "wallet", "upi")


def is_allowed_source(source_id: str | None, allowed: Collection[str] = KNOWN_SOURCES) -> bool:
    if not source_id:
        return False
    if source_id in allowed:
        return True
    lowered = source_id.lower()
    return any(hint in lowered for hint in SOURCE_HINTS)


def event_body(event: NotificationEvent) -> str:
    """Prefer the expanded text (full message) over the truncated one."""

    if event.big_text:
        return event.big_text
    return event.text or ""


class PushAdapter:
    def __init__(
        self,
        handler: Callable[[SourceMessage], object],
        *,
        allowed_sources: Collection[str] = KNOWN_SOURCES,
        executor: Executor | None = None,
    ) -> None:
        self._handler = handler
        self._allowed = allowed_sources
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="bank-alerts-push"
        )
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def to_message(self, event: NotificationEvent) -> SourceMessage | None:
        if not is_allowed_source(event.source_id, self._allowed):
            return None
        body = event_body(event)
        if not body:
            return None
        return SourceMessage(event.title or "", body, event.posted_at_ms)

    def on_event(self, event: NotificationEvent) -> None:
        try:
            message = self.to_message(event)
            if message is None:
                return
            future = self._executor.submit(self._run, message)
            with self._pending_lock:
                self._pending.add(future)
            future.add_done_callback(self._forget)
        except Exception:
            _logger.warning("push:event_dropped", exc_info=True)

    def on_removed(self, event: NotificationEvent) -> None:
        # Dismissing a notification does not undo the transaction.
        return None

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _run(self, message: SourceMessage) -> None:
        try:
            self._handler(message)
        except Exception:
            _logger.warning(
                "push:handler_failed timestamp=%d", message.timestamp_ms, exc_info=True
            )

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued events; return ``True`` when none remain pending."""

        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _done, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self, *, wait_for_pending: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait_for_pending)


__all__ = [
    "KNOWN_SOURCES",
    "SOURCE_HINTS",
    "is_allowed_source",
    "event_body",
    "PushAdapter",
]
