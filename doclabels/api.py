"""
Core API for document labels.

Wires a configured substrate to the label engine:
- open_session(): load the active document's labels
- LabelStore operations through the session (add, remove, reorder)
- find() / list_labels(): reverse index across all documents
- export_label() / import_label(): portable label snapshots
- watch(): change detection against other sessions
"""

import logging
from pathlib import Path
from typing import Optional

from .config import StoreConfig, get_default_store_path, load_or_create_config
from .host import DocumentUrlScheme
from .label_index import LabelIndex
from .label_store import LabelStore
from .protocol import StorageAdapter
from .storage import open_storage
from .transfer import LabelTransfer, Payload
from .types import DEFAULT_TITLE, DocumentRef, ExportPayload, ImportResult, LabelRecord, Session
from .watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class Labels:
    """
    A label store rooted at a directory.

    Example:
        labels = Labels("/tmp/labels")
        session = labels.open_session("1AbC", title="Report")
        labels.store.add_label(session, "Q1")
        labels.find("Q1")
    """

    def __init__(
        self,
        store_path: Optional[str | Path] = None,
        *,
        config: Optional[StoreConfig] = None,
        storage: Optional[StorageAdapter] = None,
    ) -> None:
        """
        Initialize or open an existing label store.

        Args:
            store_path: Path to store directory. Uses default if not specified.
            config: Pre-loaded StoreConfig (skips filesystem config discovery).
            storage: Injected substrate (skips backend creation from config).
        """
        # --- Config resolution ---
        if config is not None:
            self._config = config
            self._store_path = config.path
        else:
            if store_path is not None:
                self._store_path = Path(store_path).resolve()
            else:
                self._store_path = get_default_store_path()
            self._config = load_or_create_config(self._store_path)

        # --- Persistent operations log ---
        from .logging_config import configure_ops_log
        self._ops_log_handler = configure_ops_log(self._store_path)

        # --- Storage backend (injected or created from config) ---
        if storage is not None:
            self._storage = storage
        else:
            self._storage = open_storage(
                self._config.storage.backend,
                self._store_path,
                quota_bytes=self._config.storage.quota_bytes,
            )

        documents = self._config.documents
        self._scheme: DocumentUrlScheme = documents.scheme()
        self._prefix = documents.key_prefix
        self.store = LabelStore(self._storage, prefix=self._prefix)
        self.index = LabelIndex(self._storage, self._scheme, prefix=self._prefix)
        self.transfer = LabelTransfer(
            self._storage, self._scheme, prefix=self._prefix, index=self.index,
        )

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def scheme(self) -> DocumentUrlScheme:
        return self._scheme

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def open_session(
        self,
        document_id: str,
        *,
        title: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Session:
        """
        Start a session on a document and load its labels.

        Without a title, the stored one is kept ("Untitled" for new
        records). Without a URL, the stored one is kept (or the document's
        canonical URL).
        """
        if not document_id:
            raise ValueError("Document ID must not be empty")
        session = Session(document_id=document_id)
        record = self.store.load(session)
        session.title = title or record.title or DEFAULT_TITLE
        session.url = url or record.url or self._scheme.document_url(document_id)
        return session

    def session_for_url(self, url: str, *, title: Optional[str] = None) -> Session:
        """Start a session on the document a URL points at."""
        doc_id = self._scheme.extract_document_id(url)
        if doc_id is None:
            raise ValueError(f"Not a document URL: {url}")
        return self.open_session(doc_id, title=title, url=url)

    def get(self, document_id: str) -> LabelRecord:
        """Read a document's record without starting a session."""
        return self.open_session(document_id).record

    def watch(self, session: Session) -> ChangeWatcher:
        """Create a change watcher for a session."""
        return ChangeWatcher(self._storage, session, prefix=self._prefix)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, label: str, current_doc_id: Optional[str] = None) -> list[DocumentRef]:
        """Documents carrying a label, sorted by title for display."""
        refs = self.index.find_documents_with_label(label, current_doc_id)
        return sorted(refs, key=lambda r: (r.title.casefold(), r.id))

    def list_labels(self) -> dict[str, int]:
        return self.index.list_labels()

    # -------------------------------------------------------------------------
    # Export / Import
    # -------------------------------------------------------------------------

    def export_label(self, label: str, current_doc_id: Optional[str] = None) -> ExportPayload:
        return self.transfer.export_label(label, current_doc_id)

    def import_label(self, payload: Payload) -> ImportResult:
        return self.transfer.import_label(payload)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the substrate and detach the operations log."""
        if self._storage is not None:
            self._storage.close()
        if getattr(self, "_ops_log_handler", None):
            logging.getLogger("doclabels").removeHandler(self._ops_log_handler)
            self._ops_log_handler.close()
            self._ops_log_handler = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False
