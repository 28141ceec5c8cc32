"""Partitioner: admit new records into two bounded slots, and consolidate on save.

Admission (one call per uploaded file):
    1. whole record fits main                      -> append it
    2. headroom = capacity - len(main); <= 0       -> reject
    3. cut the payload at headroom * split_ratio;
       prefix fits main and suffix fits overflow   -> append both parts
    4. otherwise                                   -> CapacityExceeded, store untouched

Consolidation (every save):
    group by split group -> merge each group into one record while the merged
    list fits one slot -> pack merged records, then still-split records in
    storage order, into main; the rest spills to overflow.

A group that has spilled one record to overflow keeps all later records in
overflow, so concatenating main then overflow always yields each group's parts
in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from slotstore.codec import record_length, serialize
from slotstore.errors import CapacityExceeded
from slotstore.models import FileRecord, new_group_id
from slotstore.store import group_records

if TYPE_CHECKING:
    from collections.abc import Iterable

    from slotstore.store import RecordStore

logger = logging.getLogger("slotstore.partitioner")

DEFAULT_CAPACITY = 1_000_000
DEFAULT_SPLIT_RATIO = 0.5


@dataclass
class Slot:
    """Records bound for one slot, with their running serialized length."""

    capacity: int
    records: list[FileRecord] = field(default_factory=list)
    length: int = 2                # "[]"

    def length_with(self, rec_len: int) -> int:
        """Serialized length after appending a record of rec_len chars."""
        return self.length + rec_len + (1 if self.records else 0)

    def fits(self, rec_len: int) -> bool:
        return self.length_with(rec_len) <= self.capacity

    def add(self, record: FileRecord, rec_len: int | None = None) -> None:
        if rec_len is None:
            rec_len = record_length(record)
        self.length = self.length_with(rec_len)
        self.records.append(record)

    @property
    def headroom(self) -> int:
        return self.capacity - self.length

    @property
    def over_capacity(self) -> bool:
        return self.length > self.capacity


@dataclass
class SlotLayout:
    """Main/overflow assignment produced by consolidation."""

    main: Slot
    overflow: Slot
    merged: list[str] = field(default_factory=list)     # group keys reunited in this pass

    @property
    def records(self) -> list[FileRecord]:
        """Storage order as a later load will see it: main then overflow."""
        return self.main.records + self.overflow.records

    @property
    def valid(self) -> bool:
        return not self.main.over_capacity and not self.overflow.over_capacity

    def main_text(self) -> str:
        return serialize(self.main.records)

    def overflow_text(self) -> str | None:
        """Overflow slot text, or None when nothing spilled (slot is cleared)."""
        if not self.overflow.records:
            return None
        return serialize(self.overflow.records)


class Partitioner:
    """Capacity-aware splitter/merger for a main and an overflow slot."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, split_ratio: float = DEFAULT_SPLIT_RATIO) -> None:
        if capacity < 2:
            msg = f"capacity must hold at least an empty array, got {capacity}"
            raise ValueError(msg)
        if not 0.0 < split_ratio < 1.0:
            msg = f"split_ratio must be in (0, 1), got {split_ratio}"
            raise ValueError(msg)
        self.capacity = capacity
        self.split_ratio = split_ratio

    def _slot(self) -> Slot:
        return Slot(capacity=self.capacity)

    # ------------------------------------------------------------------
    # Consolidation
    # ------------------------------------------------------------------

    def consolidate(self, records: Iterable[FileRecord]) -> SlotLayout:
        """Merge split groups where they fit, then pack into main and overflow.

        Never fails; an overflow slot that ends up over capacity (only possible
        when the loaded slots were already oversized) is logged.
        """
        layout = self._pack(list(records))
        for key in layout.merged:
            logger.info("merged split group %s", key)
        if layout.overflow.over_capacity:
            logger.warning(
                "overflow slot over capacity: %d/%d chars", layout.overflow.length, self.capacity,
            )
        return layout

    def _pack(self, records: list[FileRecord]) -> SlotLayout:
        merged = self._slot()
        merged_keys: list[str] = []
        split_keys: set[str] = set()

        for members in group_records(records):
            key = members[0].group_key
            if len(members) == 1:
                candidate = members[0]
            else:
                candidate = members[0].with_data("".join(m.data for m in members))
            rec_len = record_length(candidate)
            if merged.fits(rec_len):
                merged.add(candidate, rec_len)
                if len(members) > 1:
                    merged_keys.append(key)
            else:
                split_keys.add(key)

        main = merged
        overflow = self._slot()
        spilled: set[str] = set()
        for r in records:
            if r.group_key not in split_keys:
                continue
            rec_len = record_length(r)
            if r.group_key not in spilled and main.fits(rec_len):
                main.add(r, rec_len)
            else:
                spilled.add(r.group_key)
                overflow.add(r, rec_len)

        return SlotLayout(main=main, overflow=overflow, merged=merged_keys)

    def serialize(self, store: RecordStore) -> tuple[str, str | None]:
        """Slot texts to persist: (main, overflow or None)."""
        layout = self.consolidate(store.records)
        return layout.main_text(), layout.overflow_text()

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def admit(self, store: RecordStore, record: FileRecord) -> list[FileRecord]:
        """Add record to the store, splitting it across the slots if needed.

        Returns the records actually appended (one, or two parts).
        Raises CapacityExceeded and leaves the store untouched if neither a
        whole fit nor a single split fits.
        """
        if record.group is None:
            record = FileRecord(name=record.name, data=record.data, group=new_group_id())

        layout = self._pack(store.records)
        rec_len = record_length(record)

        # 1. Whole record into main
        if layout.main.fits(rec_len) and self._layout_fits(store.records, [record]):
            store.append(record)
            logger.info("admitted %s whole (%d chars)", record.name, rec_len)
            return [record]

        # 2-3. One split: prefix to main, suffix to overflow
        parts = self._split(record, layout)
        if parts is not None and self._layout_fits(store.records, parts):
            store.extend(parts)
            logger.info(
                "admitted %s split at %d of %d chars", record.name, len(parts[0].data), len(record.data),
            )
            return parts

        # 4. No room. A split that fit both slots can still be refused when
        # consolidation would push older split parts past overflow capacity.
        projected = self._pack(store.records + parts) if parts is not None else None
        raise CapacityExceeded(
            record.name,
            record_length=rec_len,
            main_length=layout.main.length,
            overflow_length=layout.overflow.length,
            capacity=self.capacity,
            projected_overflow_length=projected.overflow.length if projected is not None else None,
        )

    def _split(self, record: FileRecord, layout: SlotLayout) -> list[FileRecord] | None:
        headroom = layout.main.headroom
        if headroom <= 0:
            return None
        cut = int(headroom * self.split_ratio)
        if not 0 < cut < len(record.data):
            return None
        part1 = record.with_data(record.data[:cut])
        part2 = record.with_data(record.data[cut:])
        if not layout.main.fits(record_length(part1)):
            return None
        if not layout.overflow.fits(record_length(part2)):
            return None
        return [part1, part2]

    def _layout_fits(self, current: list[FileRecord], added: list[FileRecord]) -> bool:
        """Would the store still consolidate into two in-capacity slots?"""
        return self._pack(current + added).valid
