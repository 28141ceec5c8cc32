"""Data models for the two-slot record store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any


def new_group_id() -> str:
    """Generate a compact split-group ID: g-<8 hex chars>."""
    return "g-" + uuid.uuid4().hex[:8]


@dataclass
class FileRecord:
    """One stored unit: a file name plus its data-URL payload (or a slice of it)."""

    name: str
    data: str
    group: str | None = None           # set at admission; absent in legacy slot text

    @property
    def group_key(self) -> str:
        """Key used to reunite split parts. Legacy records fall back to the name."""
        return self.group or self.name

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> FileRecord:
        return cls(
            name=d["name"],
            data=d["data"],
            group=d.get("group"),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "name": self.name,
            "data": self.data,
        }
        if self.group:
            d["group"] = self.group
        return d

    def with_data(self, data: str) -> FileRecord:
        """Copy of this record carrying a different payload (same name and group)."""
        return FileRecord(name=self.name, data=data, group=self.group)
