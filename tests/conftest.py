"""Pytest configuration for test isolation.

The store's file backend defaults to a project-relative directory
(``./.cache``) and record dates depend on the host time zone. To keep tests
hermetic, every test gets its own data directory, a fixed ``UTC`` zone, and
no ``DATABASE_URL`` leaking in from the developer's environment.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# Make the workspace packages importable without an install.
_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT)]
    if p not in sys.path
]


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("BANK_ALERTS_DATA_DIR", os.fspath(data_dir))
    monkeypatch.setenv("BANK_ALERTS_TZ", "UTC")
    monkeypatch.delenv("DATABASE_URL", raising=False)


@pytest.fixture
def store(tmp_path: Path):
    from bank_alerts.blobs import FileBlobBackend
    from bank_alerts.store import TransactionStore

    return TransactionStore(FileBlobBackend(tmp_path / "blobs"))


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Iterator[str]:
    from db.client import dispose_engines
    from tests.helpers.db import bootstrap_sqlite_db

    url = bootstrap_sqlite_db(tmp_path / "db" / "bank_alerts.sqlite")
    yield url
    dispose_engines()
