"""
Reverse index from label to documents.

Nothing is materialized: every query scans the substrate, so results always
reflect writes made by other sessions.
"""

import logging
from typing import Iterator, Optional

from . import codec
from .errors import DecodeDegraded, StorageFailure
from .host import DocumentUrlScheme
from .protocol import StorageAdapter
from .types import DEFAULT_TITLE, KEY_PREFIX, DocumentRef, LabelRecord

logger = logging.getLogger(__name__)


class LabelIndex:
    """Answer "which documents carry label L" by scanning stored records."""

    def __init__(
        self,
        storage: StorageAdapter,
        scheme: Optional[DocumentUrlScheme] = None,
        prefix: str = KEY_PREFIX,
    ):
        self._storage = storage
        self._scheme = scheme or DocumentUrlScheme()
        self._prefix = prefix

    def _records(self) -> Iterator[tuple[str, LabelRecord]]:
        """
        Yield (doc_id, record) for every readable record.

        Malformed or unreadable entries are skipped; one bad record must
        not abort the scan.
        """
        try:
            keys = self._storage.keys_with_prefix(self._prefix)
        except StorageFailure as e:
            logger.warning("Could not scan label records: %s", e)
            return
        for key in keys:
            doc_id = key[len(self._prefix):]
            try:
                value = codec.parse(self._storage.get(key))
            except (DecodeDegraded, StorageFailure) as e:
                logger.debug("Skipping %s: %s", key, e)
                continue
            if value is None:
                # Removed between listing and reading
                continue
            record = codec.normalize(value)
            if not record.title:
                record.title = DEFAULT_TITLE
            if not record.url:
                record.url = self._scheme.document_url(doc_id)
            yield doc_id, record

    def find_documents_with_label(
        self,
        label: str,
        current_doc_id: Optional[str] = None,
    ) -> list[DocumentRef]:
        """
        Find documents whose labels include an exact (case-sensitive) match.

        Order follows the substrate's enumeration and is not guaranteed to
        be stable; sort the result if display order matters.

        Args:
            label: Label to look for
            current_doc_id: Active document, flagged with is_current

        Returns:
            List of DocumentRefs
        """
        return [
            DocumentRef(
                id=doc_id,
                title=record.title,
                url=record.url,
                is_current=doc_id == current_doc_id,
            )
            for doc_id, record in self._records()
            if label in record.labels
        ]

    def list_labels(self) -> dict[str, int]:
        """
        Count documents per distinct label.

        A document listing a label twice counts once.

        Returns:
            Dict label → document count, sorted by label
        """
        counts: dict[str, int] = {}
        for _, record in self._records():
            for label in set(record.labels):
                counts[label] = counts.get(label, 0) + 1
        return dict(sorted(counts.items()))
