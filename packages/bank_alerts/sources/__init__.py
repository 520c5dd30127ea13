"""Source adapters: turn platform message channels into ``SourceMessage`` tuples."""

from .capability import Capability, StaticCapability
from .pull import JsonInboxMessageStore, MessageStore, PullAdapter
from .push import KNOWN_SOURCES, SOURCE_HINTS, PushAdapter, is_allowed_source

__all__ = [
    "Capability",
    "StaticCapability",
    "MessageStore",
    "JsonInboxMessageStore",
    "PullAdapter",
    "KNOWN_SOURCES",
    "SOURCE_HINTS",
    "PushAdapter",
    "is_allowed_source",
]
