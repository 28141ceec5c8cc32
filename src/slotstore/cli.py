"""slotstore CLI — file attachments packed into a main and an overflow slot.

Commands:
    slotstore init                 create slotstore.toml + slot dir
    slotstore add PATH...          validate, encode and admit files
    slotstore remove NAME          remove a file (all of its parts)
    slotstore list                 files, part counts and slot placement
    slotstore show NAME            print a text file / summarize others
    slotstore extract NAME         write a file's original bytes
    slotstore status               slot sizes vs capacity
    slotstore pack                 re-merge split files and rewrite slots
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from slotstore.config import SlotConfig, init_config, load_config
from slotstore.errors import CapacityExceeded, ValidationError
from slotstore.session import AttachmentSession
from slotstore.slots import SlotFiles

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> SlotConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


def _open_session(cfg: SlotConfig) -> AttachmentSession:
    """Session loaded from the slot files, writing back on every change."""
    files = SlotFiles(cfg.main_path, cfg.overflow_path)
    try:
        session = AttachmentSession.from_config(cfg, on_change=files.write)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    main_text, overflow_text = files.read()
    if not session.load(main_text, overflow_text):
        click.echo("Warning: stored slots were unreadable — starting empty", err=True)
    return session


def _fmt_chars(n: int) -> str:
    if n >= 1_000_000:
        return f"{n / 1_000_000:.2f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}k"
    return str(n)


def _bar(used: int, capacity: int, width: int = 30) -> str:
    filled = min(width, round(width * used / capacity)) if capacity else width
    return "█" * filled + "░" * (width - filled)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="slotstore")
@click.option("--verbose", "-v", is_flag=True, help="Log admissions, splits and merges")
def cli(verbose: bool) -> None:
    """slotstore — two-slot file attachment store."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            stream=sys.stderr,
        )


# ---------------------------------------------------------------------------
# slotstore init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
@click.option("--capacity", type=int, default=None, help="Max serialized chars per slot")
def init(root: str, capacity: int | None) -> None:
    """Create slotstore.toml and the slot directory."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, capacity=capacity)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("slotstore.toml already exists — skipping init")

    cfg = load_config(root_path)
    cfg.ensure_dirs()
    click.echo(f"Slot dir  : {cfg.slot_dir}")
    click.echo(f"Capacity  : {cfg.slots.capacity} chars per slot")


# ---------------------------------------------------------------------------
# slotstore add / remove
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--type", "media_type", default=None, help="Override the media type (default: from extension)")
def add(paths: tuple[str, ...], media_type: str | None) -> None:
    """Add one or more files. Rejected files are reported; the rest are kept."""
    cfg = _load_cfg()
    cfg.ensure_dirs()
    session = _open_session(cfg)

    failed = 0
    for p in paths:
        try:
            added = session.add_path(p, media_type=media_type)
        except (ValidationError, CapacityExceeded) as exc:
            click.echo(f"  ✗ {exc}", err=True)
            failed += 1
            continue
        if len(added) > 1:
            click.echo(f"  ✓ {added[0].name}  (split across main + overflow)")
        else:
            click.echo(f"  ✓ {added[0].name}")

    if failed:
        raise SystemExit(1)


@cli.command()
@click.argument("name")
def remove(name: str) -> None:
    """Remove a file and all of its parts."""
    cfg = _load_cfg()
    session = _open_session(cfg)
    removed = session.remove(name)
    if not removed:
        raise click.ClickException(f"File not found: {name}")
    click.echo(f"Removed {name} ({removed} record{'s' if removed != 1 else ''})")


@cli.command()
def pack() -> None:
    """Re-merge split files where capacity allows and rewrite both slots."""
    cfg = _load_cfg()
    cfg.ensure_dirs()
    session = _open_session(cfg)
    layout = session.layout()
    SlotFiles(cfg.main_path, cfg.overflow_path).write(layout.main_text(), layout.overflow_text())
    if layout.merged:
        click.echo(f"Merged {len(layout.merged)} split file(s)")
    click.echo(f"main {_fmt_chars(layout.main.length)}, overflow "
               f"{_fmt_chars(layout.overflow.length) if layout.overflow.records else '—'}")


# ---------------------------------------------------------------------------
# slotstore list / show / extract
# ---------------------------------------------------------------------------


@cli.command("list")
def list_cmd() -> None:
    """List stored files with part counts and slot placement."""
    cfg = _load_cfg()
    session = _open_session(cfg)
    summaries = session.files()
    if not summaries:
        click.echo("No files stored.")
        return

    layout = session.layout()
    in_main = {r.group_key for r in layout.main.records}
    in_overflow = {r.group_key for r in layout.overflow.records}
    for i, s in enumerate(summaries, 1):
        key = s.group or s.name
        slots = [label for label, keys in (("main", in_main), ("overflow", in_overflow)) if key in keys]
        parts = f"{s.parts} parts" if s.split else "whole"
        click.echo(
            f"{i:3}. {s.name:<40} {s.media_type or '?':<24} {_fmt_chars(s.chars):>8}  "
            f"{parts:<8} {'+'.join(slots)}"
        )


@cli.command()
@click.argument("name")
def show(name: str) -> None:
    """Print a text file's contents, or summarize an image/PDF."""
    cfg = _load_cfg()
    session = _open_session(cfg)
    summary = next((s for s in session.files() if s.name == name), None)
    if summary is None:
        raise click.ClickException(f"File not found: {name}")

    try:
        if summary.category == "text":
            click.echo(session.text(name), nl=False)
            return
        size = len(session.extract(name))
    except ValueError as exc:
        raise click.ClickException(f"{name}: {exc}") from exc
    click.echo(f"{summary.name}: {summary.category} ({summary.media_type}), {size} bytes, {summary.parts} part(s)")


@cli.command()
@click.argument("name")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Output path (default: NAME)")
def extract(name: str, output: str | None) -> None:
    """Reassemble a file and write its original bytes."""
    cfg = _load_cfg()
    session = _open_session(cfg)
    try:
        content = session.extract(name)
    except KeyError:
        raise click.ClickException(f"File not found: {name}") from None
    except ValueError as exc:
        raise click.ClickException(f"{name}: {exc}") from exc
    out = Path(output or Path(name).name)
    out.write_bytes(content)
    click.echo(f"Wrote {len(content)} bytes to {out}")


# ---------------------------------------------------------------------------
# slotstore status
# ---------------------------------------------------------------------------


@cli.command()
def status() -> None:
    """Show slot sizes against capacity."""
    cfg = _load_cfg()
    files = SlotFiles(cfg.main_path, cfg.overflow_path)
    main_len, overflow_len = files.sizes()
    cap = cfg.slots.capacity
    click.echo(f"Root      : {cfg.root}")
    click.echo(f"Main      : {_bar(main_len, cap)} {_fmt_chars(main_len)}/{_fmt_chars(cap)}")
    if overflow_len is None:
        click.echo("Overflow  : —")
    else:
        click.echo(f"Overflow  : {_bar(overflow_len, cap)} {_fmt_chars(overflow_len)}/{_fmt_chars(cap)}")
    summaries = _open_session(cfg).files()
    split = sum(1 for s in summaries if s.split)
    click.echo(f"Files     : {len(summaries)} ({split} split)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
