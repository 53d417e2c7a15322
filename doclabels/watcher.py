"""
Detect label changes made by other sessions.

The watcher has no timer of its own. The caller triggers check() from
whatever events it has (a periodic tick, focus regained, a tab becoming
visible); each check compares the stored labels against the session's
last-known snapshot and notifies subscribers when they differ.
"""

import enum
import logging
from typing import Callable

from . import codec
from .errors import StorageFailure
from .protocol import StorageAdapter
from .types import KEY_PREFIX, Session, storage_key

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[list[str]], None]


class WatchState(enum.Enum):
    SYNCED = "synced"
    CHECKING = "checking"


class ChangeWatcher:
    """
    Reconcile a session's labels with the substrate.

    Level-triggered: any number of external writes between two checks are
    seen as a single change.
    """

    def __init__(self, storage: StorageAdapter, session: Session, prefix: str = KEY_PREFIX):
        self._storage = storage
        self._session = session
        self._prefix = prefix
        self._handlers: list[ChangeHandler] = []
        self.state = WatchState.SYNCED

    @property
    def session(self) -> Session:
        return self._session

    def on_external_change(self, handler: ChangeHandler) -> Callable[[], None]:
        """
        Register a callback invoked with the new labels after a change.

        Returns:
            A function that unregisters the handler
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def check(self) -> bool:
        """
        Re-read the active record and reload it if its labels changed.

        Returns:
            True if a change was detected and subscribers were notified
        """
        session = self._session
        self.state = WatchState.CHECKING
        try:
            try:
                raw = self._storage.get(storage_key(session.document_id, self._prefix))
            except StorageFailure as e:
                logger.warning("Error checking for label changes: %s", e)
                return False
            current = codec.decode(raw)
            if current.labels == session.last_known:
                return False

            session.record = session.record.copy()
            session.record.labels = list(current.labels)
            session.last_known = list(current.labels)
        finally:
            self.state = WatchState.SYNCED

        logger.info("Labels for %s reloaded due to external change", session.document_id)
        for handler in list(self._handlers):
            handler(list(current.labels))
        return True
