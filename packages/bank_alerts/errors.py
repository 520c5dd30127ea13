"""Error taxonomy for ``bank_alerts``.

None of these escape the package's public boundaries (adapters, the query
API): they are raised inside a module and caught where the failure is turned
into an empty result or a dropped message.
"""

from __future__ import annotations


class BankAlertsError(Exception):
    """Base class for package errors."""


class CapabilityUnavailable(BankAlertsError):
    """A read/listen permission required by a source has not been granted."""


class ParseRejected(BankAlertsError, ValueError):
    """The message carries no usable positive amount; the candidate is dropped."""


class MalformedPersistedState(BankAlertsError, ValueError):
    """The persisted blob could not be decoded into transaction records."""


class TransientSourceError(BankAlertsError):
    """A message source failed while producing messages."""


__all__ = [
    "BankAlertsError",
    "CapabilityUnavailable",
    "ParseRejected",
    "MalformedPersistedState",
    "TransientSourceError",
]
