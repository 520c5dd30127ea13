"""Public interface for the ``bank_alerts`` package.

Infers structured transaction records from bank text messages and
notifications, deduplicates them across both channels into a bounded store,
and answers queries over that store. This module only re-exports symbols.
"""

from .api import MS_PER_DAY, TransactionQueryApi, as_wire
from .blobs import BlobBackend, FileBlobBackend, SqlBlobBackend, backend_from_env
from .classifier import is_transaction_candidate
from .errors import (
    BankAlertsError,
    CapabilityUnavailable,
    MalformedPersistedState,
    ParseRejected,
    TransientSourceError,
)
from .extractor import extract_transaction
from .models import (
    PAYMENT_METHODS,
    UNKNOWN_BALANCE,
    Direction,
    NotificationEvent,
    SourceMessage,
    TransactionRecord,
)
from .pipeline import ingest, process_message, store_handler
from .sources import (
    JsonInboxMessageStore,
    PullAdapter,
    PushAdapter,
    StaticCapability,
)
from .store import DEFAULT_CAPACITY, TransactionStore

__all__ = [
    # Query API
    "TransactionQueryApi",
    "as_wire",
    "MS_PER_DAY",
    # Pipeline
    "is_transaction_candidate",
    "extract_transaction",
    "process_message",
    "ingest",
    "store_handler",
    # Sources
    "PullAdapter",
    "PushAdapter",
    "JsonInboxMessageStore",
    "StaticCapability",
    # Storage
    "TransactionStore",
    "DEFAULT_CAPACITY",
    "BlobBackend",
    "FileBlobBackend",
    "SqlBlobBackend",
    "backend_from_env",
    # Models / types
    "TransactionRecord",
    "Direction",
    "SourceMessage",
    "NotificationEvent",
    "PAYMENT_METHODS",
    "UNKNOWN_BALANCE",
    # Errors
    "BankAlertsError",
    "CapabilityUnavailable",
    "ParseRejected",
    "MalformedPersistedState",
    "TransientSourceError",
]
