"""
Ordered label list for the active document.

LabelStore is stateless: the working copy and the last-known snapshot live
on the caller's Session. Mutations return a new LabelRecord and persist it;
they never modify the record they were given.
"""

import logging

from . import codec
from .errors import IndexOutOfRange, StorageFailure
from .protocol import StorageAdapter
from .types import KEY_PREFIX, LabelRecord, Session, storage_key

logger = logging.getLogger(__name__)


class LabelStore:
    """
    Load, mutate and persist one document's labels.

    Example:
        store = LabelStore(SqliteStorage(path))
        session = Session("1AbC", title="Report", url=url)
        store.load(session)
        store.add_label(session, "Q1")
    """

    def __init__(self, storage: StorageAdapter, prefix: str = KEY_PREFIX):
        self._storage = storage
        self._prefix = prefix

    def _key(self, doc_id: str) -> str:
        return storage_key(doc_id, self._prefix)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self, session: Session) -> LabelRecord:
        """
        Read the session's record from storage.

        Sets session.record and the last-known snapshot. A read failure
        yields an empty record.
        """
        try:
            raw = self._storage.get(self._key(session.document_id))
        except StorageFailure as e:
            logger.warning("Could not load labels for %s: %s", session.document_id, e)
            raw = None
        record = codec.decode(raw)
        session.record = record
        session.last_known = list(record.labels)
        return record

    def persist(self, session: Session, record: LabelRecord) -> LabelRecord:
        """
        Write a record for the session's document.

        Title and URL come from the session (the host context), not from
        the record. On StorageFailure the write is dropped and logged; the
        session still adopts the record.
        """
        stored = LabelRecord(labels=list(record.labels), title=session.title, url=session.url)
        session.record = stored
        try:
            self._storage.set(self._key(session.document_id), codec.encode(stored))
        except StorageFailure as e:
            logger.warning("Could not save labels for %s: %s", session.document_id, e)
            return stored
        session.last_known = list(stored.labels)
        logger.debug("Saved %d labels for %s", len(stored.labels), session.document_id)
        return stored

    def refresh_metadata(self, session: Session) -> LabelRecord:
        """Re-persist the current labels so a changed title or URL is stored."""
        return self.persist(session, session.record)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_label(self, session: Session, text: str) -> LabelRecord:
        """
        Append a label. Blank text is ignored.

        Duplicates are allowed.
        """
        label = text.strip() if text else ""
        if not label:
            return session.record
        record = session.record.copy()
        record.labels.append(label)
        return self.persist(session, record)

    def remove_label(self, session: Session, index: int) -> LabelRecord:
        """
        Remove the label at a position.

        Raises:
            IndexOutOfRange: If index is not a current position
        """
        self._check_index(session.record, index)
        record = session.record.copy()
        del record.labels[index]
        return self.persist(session, record)

    def reorder_label(self, session: Session, from_index: int, to_index: int) -> LabelRecord:
        """
        Move a label to a new position.

        The label is removed first and then inserted at to_index in the
        shortened list, so a label moved down lands after the label
        previously at to_index.

        Raises:
            IndexOutOfRange: If either index is not a current position
        """
        self._check_index(session.record, from_index)
        self._check_index(session.record, to_index)
        if from_index == to_index:
            return session.record
        record = session.record.copy()
        label = record.labels.pop(from_index)
        record.labels.insert(to_index, label)
        return self.persist(session, record)

    @staticmethod
    def _check_index(record: LabelRecord, index: int) -> None:
        if not 0 <= index < len(record.labels):
            raise IndexOutOfRange(index, len(record.labels))
