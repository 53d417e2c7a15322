"""
Serialization of label records.

Two stored shapes are accepted for the same key:

    ["a", "b"]                                        legacy array
    {"labels": ["a", "b"], "title": "...", "url": "..."}   current record

parse() tells them apart once, at the boundary; decode() normalizes either
into a LabelRecord so nothing downstream re-checks the shape.
"""

import json
import logging
from typing import NamedTuple, Optional, Union

from .errors import DecodeDegraded
from .types import DEFAULT_TITLE, LabelRecord

logger = logging.getLogger(__name__)


class LegacyArray(NamedTuple):
    labels: list[str]


class CurrentRecord(NamedTuple):
    labels: list[str]
    title: str
    url: str


StoredValue = Union[LegacyArray, CurrentRecord]


def _check_labels(labels) -> list[str]:
    if labels is None:
        return []
    if not isinstance(labels, list):
        raise DecodeDegraded(f"'labels' must be a list, got {type(labels).__name__}")
    for label in labels:
        if not isinstance(label, str):
            raise DecodeDegraded(f"Label must be a string, got {label!r}")
    return labels


def _check_text(data: dict, name: str, default: str) -> str:
    value = data.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise DecodeDegraded(f"'{name}' must be a string, got {type(value).__name__}")
    return value


def parse(raw: Optional[str]) -> Optional[StoredValue]:
    """
    Parse a stored value into its tagged shape.

    Returns None when nothing is stored.

    Raises:
        DecodeDegraded: If the value is not valid JSON or has the wrong shape
    """
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DecodeDegraded(f"Stored value is not valid JSON: {e}") from e

    if isinstance(data, list):
        return LegacyArray(labels=_check_labels(data))
    if isinstance(data, dict):
        return CurrentRecord(
            labels=_check_labels(data.get("labels")),
            title=_check_text(data, "title", DEFAULT_TITLE),
            url=_check_text(data, "url", ""),
        )
    raise DecodeDegraded(f"Stored value must be a list or object, got {type(data).__name__}")


def normalize(value: Optional[StoredValue]) -> LabelRecord:
    """Convert a parsed value into a LabelRecord."""
    if value is None:
        return LabelRecord()
    if isinstance(value, LegacyArray):
        return LabelRecord(labels=list(value.labels))
    return LabelRecord(labels=list(value.labels), title=value.title, url=value.url)


def decode(raw: Optional[str]) -> LabelRecord:
    """
    Decode a stored value into a LabelRecord. Never raises.

    Malformed data degrades to an empty record.
    """
    try:
        return normalize(parse(raw))
    except DecodeDegraded as e:
        logger.warning("Ignoring malformed label record: %s", e)
        return LabelRecord()


def encode(record: LabelRecord) -> str:
    """Serialize a record in the current (object) shape."""
    return json.dumps(record.to_dict(), ensure_ascii=False)
