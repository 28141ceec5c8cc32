"""Slot text codec: FileRecord lists <-> compact JSON arrays.

Slot text is the compact form JSON.stringify produces:

    [{"name":"a.txt","data":"data:text/plain;base64,aGk=","group":"g-1a2b3c4d"}]

Because the form is compact, the serialized length of a list is additive:

    len(serialize(records)) == 2 + sum(record_length(r)) + max(0, n - 1)

so the partitioner keeps a running length per slot from record_length alone
instead of re-encoding megabytes of payload for every candidate layout.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from slotstore.errors import ParseError
from slotstore.models import FileRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

_SEPARATORS = (",", ":")


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=_SEPARATORS, ensure_ascii=False)


def record_length(record: FileRecord) -> int:
    """Serialized length of a single record object."""
    return len(_dumps(record.to_dict()))


def serialize(records: Iterable[FileRecord]) -> str:
    return _dumps([r.to_dict() for r in records])


def parse_slot(text: str | None, slot: str = "main") -> list[FileRecord]:
    """Parse one slot's text into records. Absent or blank text is an empty slot.

    Raises ParseError on malformed JSON, a non-array, or an element that is
    not a {name, data} object with string values.
    """
    if text is None or not text.strip():
        return []
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(slot, f"invalid JSON ({exc.msg} at char {exc.pos})") from exc
    if not isinstance(raw, list):
        raise ParseError(slot, f"expected a JSON array, got {type(raw).__name__}")

    records: list[FileRecord] = []
    for i, obj in enumerate(raw):
        if not isinstance(obj, dict):
            raise ParseError(slot, f"item {i} is not an object")
        if not isinstance(obj.get("name"), str) or not isinstance(obj.get("data"), str):
            raise ParseError(slot, f"item {i} needs string 'name' and 'data'")
        group = obj.get("group")
        if group is not None and not isinstance(group, str):
            raise ParseError(slot, f"item {i} has a non-string 'group'")
        records.append(FileRecord.from_dict(obj))
    return records
