"""
File: mapper.py
Purpose: Convert arbitrary JSON documents into Graph connector external items.
Notes:
- Total function: malformed documents still produce an item, never an error.
- Every item carries the single "everyone can read" ACL entry.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1

EVERYONE_ACL: Dict[str, str] = {"type": "everyone", "value": "everyone", "accessType": "grant"}


@dataclass(frozen=True)
class MappedItem:
    """External item ready for an upsert (PUT) into a connection."""
    id: str
    properties: Dict[str, Any]
    raw_content: str
    acl: List[Dict[str, str]] = field(default_factory=lambda: [dict(EVERYONE_ACL)])

    def to_graph(self) -> Dict[str, Any]:
        """Serialize as the Graph externalItem JSON body."""
        return {
            "id": self.id,
            "acl": [dict(entry) for entry in self.acl],
            "properties": self.properties,
            "content": {"type": "text", "value": self.raw_content},
        }


def extract_value(value: Any) -> Any:
    """Flatten one JSON value into a property value."""
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, int):
        return value if _INT32_MIN <= value <= _INT32_MAX else float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, (list, tuple)):
        return [extract_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): extract_value(v) for k, v in value.items()}
    return str(value)


def _item_id(document: Any, index: int) -> str:
    # raw value: flattening would turn ids beyond int32 into floats
    candidate = document.get("id") if isinstance(document, dict) else None
    # bool before int: True is an int in Python
    if isinstance(candidate, bool):
        return "true" if candidate else "false"
    if isinstance(candidate, (str, int, float)) and str(candidate):
        return str(candidate)
    return f"item_{index}_{uuid.uuid4()}"


def map_document(document: Any, index: int) -> MappedItem:
    """Build the external item for the document at absolute position `index`."""
    properties: Dict[str, Any] = {}
    if isinstance(document, dict):
        properties = {str(k): extract_value(v) for k, v in document.items()}

    return MappedItem(
        id=_item_id(document, index),
        properties=properties,
        raw_content=json.dumps(document, ensure_ascii=False, separators=(",", ":")),
    )
