"""
Error types and error logging utilities for doclabels.

Logs full stack traces for debugging while showing clean messages to users.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path


class LabelStoreError(Exception):
    """Base class for doclabels errors."""


class DecodeDegraded(LabelStoreError, ValueError):
    """A stored value could not be parsed as a label record."""


class StorageFailure(LabelStoreError):
    """The key-value substrate rejected a read or write (e.g. quota exceeded)."""


class InvalidFormat(LabelStoreError, ValueError):
    """An import payload does not have the expected shape."""


class IndexOutOfRange(LabelStoreError, IndexError):
    """A label position is outside the current label list."""

    def __init__(self, index: int, length: int):
        super().__init__(f"Label index {index} out of range (0-{length - 1})"
                         if length else f"Label index {index} out of range (no labels)")
        self.index = index
        self.length = length


def _error_log_path() -> Path:
    """Resolve error log path, respecting DOCLABELS_STORE_PATH."""
    store = os.environ.get("DOCLABELS_STORE_PATH")
    if store:
        return Path(store) / "doclabels-errors.log"
    return Path.home() / ".doclabels" / "doclabels-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log — don't crash over it
    return log_path
