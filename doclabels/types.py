"""
Data types for document labels.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


# Prefix separating label records from unrelated entries in the substrate
KEY_PREFIX = "gd-labels-"

# Title used when a record (or a legacy value) carries none
DEFAULT_TITLE = "Untitled"


def storage_key(doc_id: str, prefix: str = KEY_PREFIX) -> str:
    """Substrate key for a document's label record."""
    return prefix + doc_id


@dataclass
class LabelRecord:
    """
    Persisted label state for one document.

    ``labels`` is ordered and user-controlled; duplicates are allowed.
    """
    labels: list[str] = field(default_factory=list)
    title: str = DEFAULT_TITLE
    url: str = ""

    def copy(self) -> "LabelRecord":
        return LabelRecord(labels=list(self.labels), title=self.title, url=self.url)

    def to_dict(self) -> dict[str, Any]:
        return {"labels": list(self.labels), "title": self.title, "url": self.url}


@dataclass
class DocumentRef:
    """A document found to carry a label."""
    id: str
    title: str
    url: str
    is_current: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "is_current": self.is_current,
        }


@dataclass
class ExportedDocument:
    title: str
    url: str


@dataclass
class ExportPayload:
    """
    Portable snapshot of the documents carrying one label.

    Only title and URL travel; the receiving side re-derives document IDs
    from the URLs.
    """
    label: str
    documents: list[ExportedDocument] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "documents": [{"title": d.title, "url": d.url} for d in self.documents],
        }

    def to_json(self) -> str:
        import json
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


@dataclass
class ImportResult:
    """Outcome of merging an export payload into the substrate."""
    success: bool
    message: str
    imported_count: int = 0
    document_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "imported_count": self.imported_count,
            "document_ids": list(self.document_ids),
        }


@dataclass
class Session:
    """
    Caller-owned state for the active document.

    ``title`` and ``url`` are the host context written into the record on
    every persist. ``last_known`` is the label sequence last read from or
    written to the substrate; the change watcher compares against it.
    """
    document_id: str
    title: str = DEFAULT_TITLE
    url: str = ""
    record: LabelRecord = field(default_factory=LabelRecord)
    last_known: Optional[list[str]] = None

    @property
    def labels(self) -> list[str]:
        return self.record.labels
