"""Pull adapter over a message inbox.

``PullAdapter.fetch(since_ms)`` synchronously returns every inbox message
newer than ``since_ms``, newest first. It needs a read capability: without
it, or when the inbox fails for any reason, the result is an empty list.
Nothing raised by the inbox crosses this boundary.

``JsonInboxMessageStore`` reads an inbox exported as a JSON array of objects
with the usual SMS content-provider columns::

    [{"address": "VM-HDFCBK", "body": "...", "date": 1715500000000}, ...]

``sender`` and ``timestamp`` are accepted as alternatives to ``address`` and
``date``.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..errors import CapabilityUnavailable, TransientSourceError
from ..logging_setup import get_logger
from ..models import SourceMessage
from .capability import Capability

_logger = get_logger("bank_alerts.sources.pull")


class MessageStore(Protocol):
    def query(self, since_ms: int) -> Iterable[SourceMessage]:
        """Yield messages with ``timestamp_ms > since_ms`` in any order."""
        ...


class _InboxRow(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    sender: str = Field(validation_alias=AliasChoices("address", "sender"))
    body: str
    timestamp_ms: int = Field(validation_alias=AliasChoices("date", "timestamp"))


class JsonInboxMessageStore:
    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def _rows(self) -> list[object]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise CapabilityUnavailable(f"inbox not available: {os.fspath(self.path)}") from e
        except PermissionError as e:
            raise CapabilityUnavailable(f"inbox not readable: {os.fspath(self.path)}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise TransientSourceError(f"failed to read inbox: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TransientSourceError(f"inbox is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise TransientSourceError("inbox export must be a JSON array")
        return data

    def query(self, since_ms: int) -> Iterator[SourceMessage]:
        for i, raw in enumerate(self._rows()):
            try:
                row = _InboxRow.model_validate(raw)
            except ValidationError:
                _logger.debug("inbox:row_skipped index=%d", i)
                continue
            if row.timestamp_ms > since_ms:
                yield SourceMessage(row.sender, row.body, row.timestamp_ms)


class PullAdapter:
    def __init__(self, store: MessageStore, capability: Capability) -> None:
        self.store = store
        self.capability = capability

    def fetch(self, since_ms: int) -> list[SourceMessage]:
        try:
            if not self.capability.is_granted():
                _logger.debug("pull:capability_missing")
                return []
            messages = [
                m
                for m in self.store.query(since_ms)
                if m.sender and m.body and m.timestamp_ms > since_ms
            ]
        except CapabilityUnavailable:
            _logger.debug("pull:capability_unavailable", exc_info=True)
            return []
        except Exception:
            _logger.warning("pull:source_failed since_ms=%d", since_ms, exc_info=True)
            return []
        messages.sort(key=lambda m: m.timestamp_ms, reverse=True)
        return messages


__all__ = ["MessageStore", "JsonInboxMessageStore", "PullAdapter"]
