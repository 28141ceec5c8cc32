"""SlotConfig: project-local config for a two-slot attachment store.

Default layout (all relative to the project root):

    slotstore.toml        # project config
    .slotstore/
        main.json         # main slot text
        overflow.json     # overflow slot text (absent when nothing spilled)

slotstore.toml example:

    [slots]
    capacity = 1000000      # max serialized chars per slot
    dir = ".slotstore"
    split_ratio = 0.5       # where to cut a record that needs splitting, as a share of main headroom

    [uploads]
    max_file_size_mb = 5
    accepted_types = ["image/", "application/pdf", "text/"]
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from slotstore.partitioner import DEFAULT_CAPACITY, DEFAULT_SPLIT_RATIO, Partitioner
from slotstore.payload import ACCEPTED_TYPES, MAX_FILE_SIZE_MB

_CONFIG_FILENAME = "slotstore.toml"
_DEFAULT_SLOT_DIR = ".slotstore"
_MAIN_FILENAME = "main.json"
_OVERFLOW_FILENAME = "overflow.json"


@dataclass
class SlotsConfig:
    capacity: int = DEFAULT_CAPACITY
    split_ratio: float = DEFAULT_SPLIT_RATIO


@dataclass
class UploadsConfig:
    max_file_size_mb: float = MAX_FILE_SIZE_MB
    accepted_types: list[str] = field(default_factory=lambda: list(ACCEPTED_TYPES))


@dataclass
class SlotConfig:
    """Resolved configuration for a slot store project."""

    root: Path                      # directory that contains slotstore.toml
    slot_dir: Path = field(default_factory=Path)
    slots: SlotsConfig = field(default_factory=SlotsConfig)
    uploads: UploadsConfig = field(default_factory=UploadsConfig)

    @property
    def main_path(self) -> Path:
        return self.slot_dir / _MAIN_FILENAME

    @property
    def overflow_path(self) -> Path:
        return self.slot_dir / _OVERFLOW_FILENAME

    def partitioner(self) -> Partitioner:
        return Partitioner(capacity=self.slots.capacity, split_ratio=self.slots.split_ratio)

    def ensure_dirs(self) -> None:
        self.slot_dir.mkdir(parents=True, exist_ok=True)


def load_config(root: Path | str | None = None) -> SlotConfig:
    """Load slotstore.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    slots_section = raw.get("slots", {})
    uploads_section = raw.get("uploads", {})

    slots = SlotsConfig(
        capacity=int(slots_section.get("capacity", DEFAULT_CAPACITY)),
        split_ratio=float(slots_section.get("split_ratio", DEFAULT_SPLIT_RATIO)),
    )
    uploads = UploadsConfig(
        max_file_size_mb=float(uploads_section.get("max_file_size_mb", MAX_FILE_SIZE_MB)),
        accepted_types=[str(t) for t in uploads_section.get("accepted_types", ACCEPTED_TYPES)],
    )

    return SlotConfig(
        root=root_path,
        slot_dir=root_path / slots_section.get("dir", _DEFAULT_SLOT_DIR),
        slots=slots,
        uploads=uploads,
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for slotstore.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, capacity: int | None = None) -> Path:
    """Write a default slotstore.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"slotstore.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[slots]
capacity = {capacity or DEFAULT_CAPACITY}   # max serialized chars per slot
# dir = ".slotstore"      # default
# split_ratio = 0.5       # cut point for a split record, as a share of main headroom

# [uploads]
# max_file_size_mb = 5
# accepted_types = ["image/", "application/pdf", "text/"]
"""
    config_path.write_text(content)
    return config_path
