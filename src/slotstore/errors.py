"""Exceptions raised by slotstore."""

from __future__ import annotations


class SlotStoreError(Exception):
    """Base class for slotstore errors."""


class ParseError(SlotStoreError):
    """Persisted slot text is not a JSON array of {name, data} objects."""

    def __init__(self, slot: str, reason: str) -> None:
        super().__init__(f"{slot} slot: {reason}")
        self.slot = slot
        self.reason = reason


class ValidationError(SlotStoreError):
    """An upload was rejected before it became a FileRecord."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class CapacityExceeded(SlotStoreError):
    """Neither a whole-record fit nor a two-way split fits the slots.

    projected_overflow_length is set when the split parts fit the current
    slots but the consolidated layout would overrun overflow.
    """

    def __init__(
        self,
        name: str,
        *,
        record_length: int,
        main_length: int,
        overflow_length: int,
        capacity: int,
        projected_overflow_length: int | None = None,
    ) -> None:
        msg = (
            f"No room for {name!r} ({record_length} chars serialized; "
            f"main {main_length}/{capacity}, overflow {overflow_length}/{capacity}"
        )
        if projected_overflow_length is not None:
            msg += f"; overflow after consolidation {projected_overflow_length}/{capacity}"
        super().__init__(msg + ")")
        self.name = name
        self.record_length = record_length
        self.main_length = main_length
        self.overflow_length = overflow_length
        self.capacity = capacity
        self.projected_overflow_length = projected_overflow_length
