"""
Label export and import.

An export is a snapshot of the documents carrying one label:

    {"label": "Q1", "documents": [{"title": "Report", "url": "https://..."}]}

Importing merges it additively: each listed document gains the label if it
doesn't already have it. Existing labels are never removed or reordered.
"""

import json
import logging
from typing import Any, Optional, Union

from . import codec
from .errors import DecodeDegraded, InvalidFormat, StorageFailure
from .host import DocumentUrlScheme
from .label_index import LabelIndex
from .protocol import StorageAdapter
from .types import (
    DEFAULT_TITLE,
    KEY_PREFIX,
    ExportedDocument,
    ExportPayload,
    ImportResult,
    LabelRecord,
    storage_key,
)

logger = logging.getLogger(__name__)

Payload = Union[str, bytes, dict, ExportPayload]


def validate_payload(payload: Payload) -> tuple[str, list]:
    """
    Check an import payload and return (label, documents).

    Accepts a JSON string, a parsed dict, or an ExportPayload.

    Raises:
        InvalidFormat: If the JSON is malformed or a field is missing
    """
    if isinstance(payload, ExportPayload):
        payload = payload.to_dict()
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise InvalidFormat(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidFormat(
            "Invalid format: expected an object with 'label' and 'documents'"
        )
    label = payload.get("label")
    if not isinstance(label, str) or not label:
        raise InvalidFormat("Invalid format: missing or empty 'label'")
    documents = payload.get("documents")
    if not isinstance(documents, list):
        raise InvalidFormat("Invalid format: 'documents' must be a list")
    return label, documents


class LabelTransfer:
    """
    Export a label's documents and merge imported ones into storage.

    Imports write records directly, without going through a Session; the
    active document picks up the change on its next ChangeWatcher check.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        scheme: Optional[DocumentUrlScheme] = None,
        prefix: str = KEY_PREFIX,
        index: Optional[LabelIndex] = None,
    ):
        self._storage = storage
        self._scheme = scheme or DocumentUrlScheme()
        self._prefix = prefix
        self._index = index or LabelIndex(storage, self._scheme, prefix)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_label(self, label: str, current_doc_id: Optional[str] = None) -> ExportPayload:
        """Snapshot the documents carrying a label, in scan order."""
        documents = [
            ExportedDocument(title=ref.title, url=ref.url)
            for ref in self._index.find_documents_with_label(label, current_doc_id)
        ]
        logger.info("Exported label %r with %d documents", label, len(documents))
        return ExportPayload(label=label, documents=documents)

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    def import_label(self, payload: Payload) -> ImportResult:
        """
        Merge an exported label into storage.

        Payload-level problems fail the whole import with no effect.
        Per-document problems (no URL, unrecognized URL, storage errors)
        skip that document only.

        Returns:
            ImportResult; imported_count counts documents that gained the label
        """
        try:
            label, documents = validate_payload(payload)
        except InvalidFormat as e:
            logger.info("Rejected label import: %s", e)
            return ImportResult(success=False, message=str(e))

        document_ids = []
        for entry in documents:
            doc_id = self._merge_entry(label, entry)
            if doc_id is not None:
                document_ids.append(doc_id)

        count = len(document_ids)
        logger.info("Imported label %r to %d of %d documents", label, count, len(documents))
        return ImportResult(
            success=True,
            message=f'Imported label "{label}" to {count} document(s).',
            imported_count=count,
            document_ids=document_ids,
        )

    def _merge_entry(self, label: str, entry: Any) -> Optional[str]:
        """Add the label to one listed document. Returns its ID if it changed."""
        if not isinstance(entry, dict):
            logger.debug("Skipping non-object import entry: %r", entry)
            return None
        url = entry.get("url")
        if not url or not isinstance(url, str):
            return None
        doc_id = self._scheme.extract_document_id(url)
        if doc_id is None:
            logger.debug("Skipping unrecognized document URL: %s", url)
            return None

        key = storage_key(doc_id, self._prefix)
        title = entry.get("title")
        if not isinstance(title, str) or not title:
            title = DEFAULT_TITLE

        try:
            value = codec.parse(self._storage.get(key))
        except DecodeDegraded as e:
            logger.warning("Replacing malformed label record %s: %s", key, e)
            value = None
        except StorageFailure as e:
            logger.warning("Could not read %s during import: %s", key, e)
            return None

        if isinstance(value, codec.CurrentRecord):
            record = codec.normalize(value)
        else:
            # New or legacy record: take display metadata from the payload
            labels = list(value.labels) if value is not None else []
            record = LabelRecord(labels=labels, title=title, url=url)

        if label in record.labels:
            return None
        record.labels.append(label)
        try:
            self._storage.set(key, codec.encode(record))
        except StorageFailure as e:
            logger.warning("Could not save imported label for %s: %s", doc_id, e)
            return None
        return doc_id
