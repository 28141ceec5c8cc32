"""Read and write the two slot files.

SlotFiles plays the host's part for the CLI: it holds the main and overflow
slot texts on disk.

    files = SlotFiles(cfg.main_path, cfg.overflow_path)
    main_text, overflow_text = files.read()
    files.write(main_text, None)       # None removes overflow.json

Writes go to a tmp file under an exclusive flock, then rename into place.
"""

from __future__ import annotations

import contextlib
import fcntl
from pathlib import Path


class SlotFiles:
    """File-backed main/overflow slot pair."""

    def __init__(self, main_path: Path | str, overflow_path: Path | str) -> None:
        self.main_path = Path(main_path)
        self.overflow_path = Path(overflow_path)

    def read(self) -> tuple[str | None, str | None]:
        """Return (main_text, overflow_text); a missing file reads as None."""
        return self._read(self.main_path), self._read(self.overflow_path)

    def write(self, main_text: str, overflow_text: str | None) -> None:
        """Persist both slots. An absent overflow deletes the overflow file."""
        self._write(self.main_path, main_text)
        if overflow_text is None:
            with contextlib.suppress(FileNotFoundError):
                self.overflow_path.unlink()
        else:
            self._write(self.overflow_path, overflow_text)

    def sizes(self) -> tuple[int, int | None]:
        """Character length of each stored slot (None for an absent overflow)."""
        main_text, overflow_text = self.read()
        return len(main_text or ""), (len(overflow_text) if overflow_text is not None else None)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> str | None:
        if not path.exists():
            return None
        with path.open(encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            return f.read()

    @staticmethod
    def _write(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(text)
        tmp.replace(path)
