"""
Document addressing for the host application.

The engine never invents document IDs; it extracts them from document URLs
with the same rule the host page uses, and rebuilds a canonical URL for
records stored without one.
"""

import re
from dataclasses import dataclass
from typing import Optional

# Google Docs: https://docs.google.com/document/d/<id>/edit
DEFAULT_ID_PATTERN = r"/document/d/([a-zA-Z0-9_-]+)"
DEFAULT_URL_TEMPLATE = "https://docs.google.com/document/d/{id}/edit"


@dataclass(frozen=True)
class DocumentUrlScheme:
    """How document IDs map to and from URLs."""
    id_pattern: str = DEFAULT_ID_PATTERN
    url_template: str = DEFAULT_URL_TEMPLATE

    def __post_init__(self):
        compiled = re.compile(self.id_pattern)
        if compiled.groups < 1:
            raise ValueError(
                f"Document ID pattern needs a capture group: {self.id_pattern!r}"
            )
        if "{id}" not in self.url_template:
            raise ValueError(
                f"Document URL template must contain '{{id}}': {self.url_template!r}"
            )

    def extract_document_id(self, url: str) -> Optional[str]:
        """Return the document ID in a URL, or None if it isn't a document URL."""
        if not isinstance(url, str):
            return None
        match = re.search(self.id_pattern, url)
        return match.group(1) if match else None

    def document_url(self, doc_id: str) -> str:
        """Canonical URL for a document ID."""
        return self.url_template.format(id=doc_id)
