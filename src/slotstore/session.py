"""AttachmentSession: the load -> mutate -> save cycle around one RecordStore.

The host hands in the two persisted slot texts, then every add or remove
re-serializes the store and, if an on_change callback is set, passes it the
new (main, overflow) texts to persist:

    session = AttachmentSession(Partitioner(capacity=1_000_000), on_change=save)
    session.load(main_text, overflow_text)
    session.add_file("notes.txt", b"hello", "text/plain")
    session.remove("notes.txt")

Uploads are validated (size ceiling, media-type allow-list) before encoding;
a rejected file raises ValidationError and never reaches the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from slotstore.models import FileRecord
from slotstore.partitioner import Partitioner, SlotLayout
from slotstore.payload import (
    ACCEPTED_TYPES,
    MAX_FILE_SIZE_MB,
    decode_bytes,
    decode_text,
    encode_data_url,
    guess_media_type,
    parse_data_url,
    payload_category,
    validate_upload,
)
from slotstore.store import RecordStore

if TYPE_CHECKING:
    from collections.abc import Callable

    from slotstore.config import SlotConfig
    from slotstore.payload import PayloadCategory


SlotTexts = tuple[str, str | None]


@dataclass
class FileSummary:
    """One logical file as the store holds it."""

    name: str
    parts: int
    chars: int                       # length of the reassembled payload
    category: PayloadCategory
    media_type: str
    group: str | None = None

    @property
    def split(self) -> bool:
        return self.parts > 1


class AttachmentSession:
    """Owns a RecordStore and keeps its two-slot serialization current."""

    def __init__(
        self,
        partitioner: Partitioner | None = None,
        *,
        max_file_size_mb: float = MAX_FILE_SIZE_MB,
        accepted_types: tuple[str, ...] | list[str] = ACCEPTED_TYPES,
        on_change: Callable[[str, str | None], None] | None = None,
    ) -> None:
        self.partitioner = partitioner or Partitioner()
        self.max_file_size_mb = max_file_size_mb
        self.accepted_types = tuple(accepted_types)
        self.on_change = on_change
        self.store = RecordStore()

    @classmethod
    def from_config(
        cls,
        cfg: SlotConfig,
        on_change: Callable[[str, str | None], None] | None = None,
    ) -> AttachmentSession:
        return cls(
            cfg.partitioner(),
            max_file_size_mb=cfg.uploads.max_file_size_mb,
            accepted_types=cfg.uploads.accepted_types,
            on_change=on_change,
        )

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self, main_text: str | None, overflow_text: str | None = None) -> bool:
        """Populate the store from persisted slots. False if they were discarded."""
        return self.store.load(main_text, overflow_text)

    def layout(self) -> SlotLayout:
        return self.partitioner.consolidate(self.store.records)

    def outputs(self) -> SlotTexts:
        """Current (main, overflow) texts; overflow is None when unused."""
        return self.partitioner.serialize(self.store)

    def _changed(self) -> SlotTexts:
        """Re-serialize after a mutation; the store adopts the merged/packed records."""
        layout = self.partitioner.consolidate(self.store.records)
        self.store.records = layout.records
        texts = layout.main_text(), layout.overflow_text()
        if self.on_change is not None:
            self.on_change(*texts)
        return texts

    # ------------------------------------------------------------------
    # Mutate
    # ------------------------------------------------------------------

    def add_file(self, name: str, content: bytes, media_type: str | None = None) -> list[FileRecord]:
        """Validate, encode and admit one uploaded file.

        Raises ValidationError or CapacityExceeded; the store is unchanged on either.
        """
        media_type = media_type or guess_media_type(name)
        validate_upload(
            name,
            len(content),
            media_type,
            max_file_size_mb=self.max_file_size_mb,
            accepted_types=self.accepted_types,
        )
        return self.add_encoded(name, encode_data_url(content, media_type))

    def add_path(self, path: Path | str, media_type: str | None = None) -> list[FileRecord]:
        """Read a file from disk and admit it under its base name."""
        path = Path(path)
        media_type = media_type or guess_media_type(path.name)
        # Size check before reading the whole file into memory
        validate_upload(
            path.name,
            path.stat().st_size,
            media_type,
            max_file_size_mb=self.max_file_size_mb,
            accepted_types=self.accepted_types,
        )
        return self.add_file(path.name, path.read_bytes(), media_type)

    def add_encoded(self, name: str, data: str) -> list[FileRecord]:
        """Admit an already-encoded payload. Raises CapacityExceeded if it cannot fit."""
        added = self.partitioner.admit(self.store, FileRecord(name=name, data=data))
        self._changed()
        return added

    def remove(self, name: str) -> int:
        """Remove a file (every record with this name). Returns records removed."""
        removed = self.store.remove_by_name(name)
        if removed:
            self._changed()
        return removed

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def payload(self, name: str) -> str | None:
        """Reassembled data URL for a file, or None if absent."""
        return self.store.reassemble(name)

    def text(self, name: str) -> str:
        """Plain text of a text/* file. KeyError if absent, ValueError if not decodable text."""
        return decode_text(self._require(name))

    def extract(self, name: str) -> bytes:
        """Original bytes of a file. KeyError if absent."""
        return decode_bytes(self._require(name))

    def files(self) -> list[FileSummary]:
        """One summary per split group, in storage order."""
        summaries: list[FileSummary] = []
        for members in self.store.groups():
            data = "".join(m.data for m in members)
            try:
                media_type = parse_data_url(data).media_type
            except ValueError:
                media_type = ""
            summaries.append(FileSummary(
                name=members[0].name,
                parts=len(members),
                chars=len(data),
                category=payload_category(data),
                media_type=media_type,
                group=members[0].group,
            ))
        return summaries

    def _require(self, name: str) -> str:
        data = self.payload(name)
        if data is None:
            raise KeyError(name)
        return data
