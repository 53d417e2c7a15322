"""
Document Labels

Ordered, user-controlled labels for documents, persisted in a shared
key-value store so that every open session sees the same labels.

Quick Start:
    from doclabels import Labels

    labels = Labels()  # uses ~/.doclabels/
    session = labels.open_session("1AbC", title="Report")
    labels.store.add_label(session, "Q1")
    labels.find("Q1")

CLI Usage:
    doclabels add 1AbC Q1 --title Report
    doclabels find Q1
    doclabels export Q1 q1.json

Environment Variables:
    DOCLABELS_STORE_PATH  - Override default store location
    DOCLABELS_VERBOSE     - Set to 1 for debug logging
"""

from .api import Labels
from .errors import (
    DecodeDegraded,
    IndexOutOfRange,
    InvalidFormat,
    LabelStoreError,
    StorageFailure,
)
from .label_index import LabelIndex
from .label_store import LabelStore
from .storage import MemoryStorage, SqliteStorage
from .transfer import LabelTransfer
from .types import (
    DocumentRef,
    ExportPayload,
    ImportResult,
    LabelRecord,
    Session,
)
from .watcher import ChangeWatcher, WatchState

__version__ = "0.1.0"
__all__ = [
    "Labels",
    "LabelStore",
    "LabelIndex",
    "LabelTransfer",
    "ChangeWatcher",
    "WatchState",
    "SqliteStorage",
    "MemoryStorage",
    "LabelRecord",
    "Session",
    "DocumentRef",
    "ExportPayload",
    "ImportResult",
    "LabelStoreError",
    "DecodeDegraded",
    "StorageFailure",
    "InvalidFormat",
    "IndexOutOfRange",
]
