"""
Protocol definitions for the key-value substrate.

The label engine touches persistent state only through a StorageAdapter:
- SqliteStorage: file-backed, shared between processes
- MemoryStorage: process-local, for embedding and tests
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """
    Thin capability over a persistent key-value substrate.

    No caching: every call reflects the substrate's current value.
    Implementations raise StorageFailure for substrate exceptions.
    """

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def keys_with_prefix(self, prefix: str) -> list[str]: ...

    def close(self) -> None: ...
