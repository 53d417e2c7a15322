"""
Shared pytest fixtures for doclabels tests.

Provides real SQLite and in-memory substrates plus helpers for seeding
stored records directly, the way another session would.
"""

import json
from typing import Any

import pytest

from doclabels.storage import MemoryStorage, SqliteStorage
from doclabels.types import KEY_PREFIX, Session


def doc_url(doc_id: str) -> str:
    return f"https://docs.google.com/document/d/{doc_id}/edit"


def seed(storage, doc_id: str, value: Any, prefix: str = KEY_PREFIX) -> None:
    """Write a raw value for a document. Non-strings are JSON-encoded."""
    raw = value if isinstance(value, str) else json.dumps(value)
    storage.set(prefix + doc_id, raw)


def stored(storage, doc_id: str, prefix: str = KEY_PREFIX) -> Any:
    """Read and JSON-decode a document's stored value (None if absent)."""
    raw = storage.get(prefix + doc_id)
    return json.loads(raw) if raw is not None else None


class FailingStorage:
    """Substrate wrapper that raises StorageFailure on demand."""

    def __init__(self, real):
        self._real = real
        self.fail_set = False
        self.fail_get = False
        self.fail_keys: set[str] = set()
        self.set_calls = 0

    def __getattr__(self, name):
        return getattr(self._real, name)

    def get(self, key):
        from doclabels.errors import StorageFailure
        if self.fail_get:
            raise StorageFailure("simulated read failure")
        return self._real.get(key)

    def set(self, key, value):
        from doclabels.errors import StorageFailure
        self.set_calls += 1
        if self.fail_set or key in self.fail_keys:
            raise StorageFailure("simulated quota exceeded")
        self._real.set(key, value)


@pytest.fixture
def sqlite_storage(tmp_path):
    """A real SQLite substrate in a temp directory."""
    storage = SqliteStorage(tmp_path / "labels.db")
    yield storage
    storage.close()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture(params=["sqlite", "memory"])
def storage(request, tmp_path):
    """Each substrate implementation in turn."""
    if request.param == "sqlite":
        s = SqliteStorage(tmp_path / "labels.db")
    else:
        s = MemoryStorage()
    yield s
    s.close()


@pytest.fixture
def session():
    """Session for an active document with host context."""
    return Session(document_id="docA", title="Report", url=doc_url("docA"))
