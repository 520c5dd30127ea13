"""Named-blob persistence backends.

The store keeps its entire state in one named text blob (a JSON array of
records) and always rewrites it in full. Two backends are provided:

- ``FileBlobBackend``: ``<root>/<name>.json``. Writes target ``.tmp`` first and
  then ``os.replace`` into place, so readers never observe a half-written file.
- ``SqlBlobBackend``: one row per blob in ``ba_blobs`` via the shared
  ``db.client`` session helpers (SQLite or Postgres).

``backend_from_env`` picks the SQL backend when ``DATABASE_URL`` is set and
falls back to the file backend under ``BANK_ALERTS_DATA_DIR`` (default
``./.cache``).
"""

from __future__ import annotations

import contextlib
import os
import re
from pathlib import Path
from typing import Protocol

from .logging_setup import get_logger

_logger = get_logger("bank_alerts.blobs")

_BLOB_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


def _validate_blob_name(name: str) -> str:
    # Blob names become file names; keep them to a safe character set.
    if not _BLOB_NAME_RE.fullmatch(name) or name in {".", ".."}:
        raise ValueError(f"Invalid blob name: {name!r}")
    return name


class BlobBackend(Protocol):
    def read(self, name: str) -> str | None:
        """Return the blob text, or ``None`` when it has never been written."""
        ...

    def write(self, name: str, payload: str) -> None: ...


class FileBlobBackend:
    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).expanduser().resolve()

    def _path(self, name: str) -> Path:
        return self.root / f"{_validate_blob_name(name)}.json"

    def read(self, name: str) -> str | None:
        path = self._path(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, name: str, payload: str) -> None:
        path = self._path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def __repr__(self) -> str:
        return f"FileBlobBackend(root={os.fspath(self.root)!r})"


class SqlBlobBackend:
    def __init__(self, database_url: str | None = None) -> None:
        # Resolve eagerly so a missing DATABASE_URL fails at construction.
        url = database_url or os.getenv("DATABASE_URL")
        if not url:
            raise RuntimeError("DATABASE_URL is not set; cannot initialize SQL blob backend")
        self.database_url = url

    def read(self, name: str) -> str | None:
        from db.client import session_scope
        from db.models.blobs import BaBlob

        with session_scope(database_url=self.database_url) as session:
            row = session.get(BaBlob, _validate_blob_name(name))
            return row.payload if row is not None else None

    def write(self, name: str, payload: str) -> None:
        from db.client import session_scope
        from db.models.blobs import BaBlob
        from sqlalchemy import func

        with session_scope(database_url=self.database_url) as session:
            row = session.get(BaBlob, _validate_blob_name(name))
            if row is None:
                session.add(BaBlob(name=name, payload=payload))
            else:
                row.payload = payload
                row.updated_at = func.now()

    def __repr__(self) -> str:
        return "SqlBlobBackend(database_url=<redacted>)"


def default_data_dir() -> Path:
    """Return the file-backend root.

    Default: ``./.cache`` under the current working directory.
    Override: ``BANK_ALERTS_DATA_DIR`` environment variable.
    """

    root = os.getenv("BANK_ALERTS_DATA_DIR")
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".cache").resolve()


def backend_from_env(
    *, database_url: str | None = None, data_dir: str | os.PathLike[str] | None = None
) -> BlobBackend:
    url = database_url or os.getenv("DATABASE_URL")
    if url:
        _logger.debug("blobs:backend=sql")
        return SqlBlobBackend(url)
    root = Path(data_dir) if data_dir is not None else default_data_dir()
    _logger.debug("blobs:backend=file root=%s", os.fspath(root))
    return FileBlobBackend(root)


__all__ = [
    "BlobBackend",
    "FileBlobBackend",
    "SqlBlobBackend",
    "default_data_dir",
    "backend_from_env",
]
