"""In-memory record store assembled from the main and overflow slots.

RecordStore is the public API:
    store = RecordStore()
    store.load(main_text, overflow_text)   # main records first, then overflow
    store.append(FileRecord(name="a.txt", data="data:text/plain;base64,aGk="))
    store.remove_by_name("a.txt")          # drops the whole split group

A malformed slot never raises out of load(): the store resets to empty and
the failure is logged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from slotstore.codec import parse_slot
from slotstore.errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from slotstore.models import FileRecord

logger = logging.getLogger("slotstore.store")


def group_records(records: Iterable[FileRecord]) -> list[list[FileRecord]]:
    """Group by split-group key: first-seen group order, storage order within."""
    grouped: dict[str, list[FileRecord]] = {}
    for r in records:
        grouped.setdefault(r.group_key, []).append(r)
    return list(grouped.values())


class RecordStore:
    """Ordered sequence of FileRecords. Names are not unique."""

    def __init__(self, records: list[FileRecord] | None = None) -> None:
        self.records: list[FileRecord] = list(records or [])

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, main_text: str | None, overflow_text: str | None = None) -> bool:
        """Replace contents with main records followed by overflow records.

        Returns False (and leaves the store empty) if either slot fails to parse.
        """
        try:
            main = parse_slot(main_text, "main")
            overflow = parse_slot(overflow_text, "overflow")
        except ParseError as exc:
            logger.warning("discarding stored files: %s", exc)
            self.records = []
            return False
        self.records = main + overflow
        logger.info("loaded %d records (%d main, %d overflow)", len(self.records), len(main), len(overflow))
        return True

    # ------------------------------------------------------------------
    # Mutate
    # ------------------------------------------------------------------

    def append(self, record: FileRecord) -> None:
        self.records.append(record)

    def extend(self, records: list[FileRecord]) -> None:
        self.records.extend(records)

    def remove_by_name(self, name: str) -> int:
        """Delete every record with this name. Returns the number removed."""
        kept = [r for r in self.records if r.name != name]
        removed = len(self.records) - len(kept)
        self.records = kept
        if removed:
            logger.info("removed %s (%d records)", name, removed)
        return removed

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def find(self, name: str) -> list[FileRecord]:
        """All records with this name, in storage order."""
        return [r for r in self.records if r.name == name]

    def groups(self) -> list[list[FileRecord]]:
        return group_records(self.records)

    def reassemble(self, name: str) -> str | None:
        """Full payload of the first file with this name, or None if absent."""
        matches = self.find(name)
        if not matches:
            return None
        key = matches[0].group_key
        return "".join(r.data for r in matches if r.group_key == key)
