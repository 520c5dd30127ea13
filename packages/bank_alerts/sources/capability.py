"""Capabilities: permission-gated access to a platform resource.

The host (mobile shell, desktop wrapper, CLI) owns the real permission
surface. This package only needs to ask whether access is granted and to
forward a request for it; it never implements any permission UI itself.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from ..logging_setup import get_logger

_logger = get_logger("bank_alerts.sources.capability")


class Capability(Protocol):
    def is_granted(self) -> bool: ...

    def request(self) -> None: ...


class StaticCapability:
    """A capability whose state is decided by the embedding application.

    ``on_request`` is invoked by :meth:`request` when provided (e.g., to open
    the host's settings screen); ``grant``/``revoke`` flip the state.
    """

    def __init__(self, granted: bool = False, *, on_request: Callable[[], None] | None = None):
        self._granted = granted
        self._on_request = on_request

    def is_granted(self) -> bool:
        return self._granted

    def request(self) -> None:
        _logger.info("capability:requested granted=%s", self._granted)
        if self._on_request is not None:
            self._on_request()

    def grant(self) -> None:
        self._granted = True

    def revoke(self) -> None:
        self._granted = False


__all__ = ["Capability", "StaticCapability"]
