"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the named-blob table used by ``bank_alerts``.
"""

from .blobs import BaBlob, Base

__all__ = [
    "Base",
    "BaBlob",
]
