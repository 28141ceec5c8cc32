"""Record builders shared across tests."""

import base64

from slotstore.codec import record_length
from slotstore.models import FileRecord

# Fixed-width group id so record lengths are predictable in tests
FIXED_GROUP = "g-00000000"


def text_payload(text: str) -> str:
    """A data URL as readAsDataURL would produce for a text/plain file."""
    return "data:text/plain;base64," + base64.b64encode(text.encode("utf-8")).decode("ascii")


def sized_record(name: str, total_length: int, group: str | None = FIXED_GROUP) -> FileRecord:
    """Record whose own serialized length is exactly total_length."""
    base = record_length(FileRecord(name=name, data="", group=group))
    assert total_length >= base
    return FileRecord(name=name, data="A" * (total_length - base), group=group)


def data_record(name: str, data_chars: int, group: str | None = FIXED_GROUP) -> FileRecord:
    """Record carrying data_chars characters of payload."""
    return FileRecord(name=name, data="A" * data_chars, group=group)
