"""Voxshelf CLI entry point."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from voxshelf.config import DEFAULT_CONFIG_PATH, RootFolder, VoxshelfConfig, get_config, write_default_config
from voxshelf.discovery import match_work_code
from voxshelf.errors import VoxshelfError
from voxshelf.logging_config import make_log_callback, setup_logging
from voxshelf.scanner import Scanner, WorkScan


__version__ = "0.1.0"

app = typer.Typer(add_completion=False, help="Voxshelf media library scanner")
logger = logging.getLogger("voxshelf")


def _ensure_config() -> VoxshelfConfig:
    try:
        return get_config()
    except FileNotFoundError:
        typer.echo("[ERROR] config.ini not found. Run: voxshelf init --root NAME=/path/to/works")
        raise typer.Exit(code=1)
    except VoxshelfError as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)


def _parse_root(value: str) -> RootFolder:
    name, sep, path = value.partition("=")
    if not sep or not name.strip() or not path.strip():
        raise typer.BadParameter(f"expected NAME=PATH, got {value!r}")
    return RootFolder(name=name.strip(), path=Path(path.strip()).expanduser().resolve())


def _work_id(work_dir: Path, work_id: Optional[str]) -> str:
    if work_id:
        return work_id
    found = match_work_code(work_dir.name)
    if found is None:
        raise typer.BadParameter(f"no RJ code in {work_dir.name!r}, pass --id")
    return found


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


@app.command()
def init(
    root: List[str] = typer.Option(..., "--root", help="Root folder as NAME=PATH (repeatable)"),
) -> None:
    """Initialize config.ini with default settings."""
    roots = [_parse_root(value) for value in root]
    path = write_default_config(roots, DEFAULT_CONFIG_PATH)
    typer.echo(f"[OK] Config created at {path}")


@app.command()
def scan(
    root: Optional[str] = typer.Option(None, "--root", help="Only scan the root with this name"),
) -> None:
    """Discover works and list their tracks."""
    setup_logging()

    config = _ensure_config()
    try:
        roots = [config.get_root(root)] if root else config.roots
    except VoxshelfError as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)

    def _print_work(result: WorkScan) -> None:
        typer.echo(
            f"RJ{result.record.id}  {result.record.relative_path}  "
            f"{len(result.tracks)} tracks  {_format_duration(result.duration)}"
        )

    async def _run() -> dict:
        async with Scanner(config) as scanner:
            return await scanner.scan_library(
                roots, on_work=_print_work, log=make_log_callback(logger)
            )

    stats = asyncio.run(_run())
    typer.echo(
        "✓ Scan completed: "
        f"{stats['works']} works, "
        f"{stats['tracks']} tracks, "
        f"{stats['failed']} failed."
    )


@app.command()
def tracks(
    work_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Work directory"),
    work_id: Optional[str] = typer.Option(None, "--id", help="Work id (defaults to the RJ code in the folder name)"),
    tree: bool = typer.Option(False, "--tree", help="Print the folder tree instead of the flat list"),
    root: Optional[str] = typer.Option(None, "--root", help="Root folder the work belongs to (for offload URLs)"),
) -> None:
    """Print a work's tracks (or folder tree) as JSON."""
    setup_logging("WARNING")

    config = _ensure_config()
    work_dir = work_dir.resolve()
    work_id = _work_id(work_dir, work_id)

    try:
        root_folder = config.get_root(root) if root else RootFolder(name="", path=work_dir.parent)
    except VoxshelfError as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)
    if not work_dir.is_relative_to(root_folder.path):
        typer.echo(f"[ERROR] {work_dir} is not inside root '{root_folder.name}'")
        raise typer.Exit(code=1)

    async def _run() -> list[dict]:
        async with Scanner(config) as scanner:
            found = await scanner.list_tracks(work_id, work_dir)
            if not tree:
                return [track.to_wire() for track in found]
            nodes = scanner.build_tree(
                found, work_dir.name, work_dir.relative_to(root_folder.path), root_folder
            )
            return [node.to_wire() for node in nodes]

    try:
        payload = asyncio.run(_run())
    except VoxshelfError as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command()
def duration(
    work_dir: Path = typer.Argument(..., exists=True, file_okay=False, help="Work directory"),
    work_id: Optional[str] = typer.Option(None, "--id", help="Work id (defaults to the RJ code in the folder name)"),
) -> None:
    """Print a work's total duration in seconds."""
    setup_logging("WARNING")

    config = _ensure_config()
    work_dir = work_dir.resolve()
    work_id = _work_id(work_dir, work_id)

    async def _run() -> float:
        async with Scanner(config) as scanner:
            return await scanner.work_duration(work_id, work_dir)

    try:
        total = asyncio.run(_run())
    except VoxshelfError as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)
    typer.echo(f"{total:.3f} ({_format_duration(total)})")


if __name__ == "__main__":
    app()
