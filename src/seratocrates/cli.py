"""CLI interface for reading Serato libraries."""

from __future__ import annotations

import io
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from seratocrates.codec.records import RecordReader, iter_records
from seratocrates.codec.strings import decode_utf16be
from seratocrates.config import AppConfig, load_config
from seratocrates.errors import MalformedString, ReadError
from seratocrates.library import read_crate, read_library
from seratocrates.logging import setup_logging
from seratocrates.models import Crate, Library

app = typer.Typer(
    name="seratocrates",
    help="Read Serato DJ library databases and crate files.",
    add_completion=False,
)
console = Console()

# Populated by the app callback before any command runs.
_state: dict[str, AppConfig] = {}


def main() -> None:
    """Entry point that wraps ``app()`` with a clean KeyboardInterrupt handler."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("Interrupted.")
        raise SystemExit(130) from None


def _config() -> AppConfig:
    return _state.get("config") or load_config()


def _fail(exc: ReadError) -> typer.Exit:
    console.print(f"[red]Read failed:[/red] {escape(str(exc))}")
    return typer.Exit(1)


@app.callback()
def _main_options(
    config_path: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
    log_level: str = typer.Option("", "--log-level", help="Override the configured log level"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to stderr"),
) -> None:
    cfg = load_config(config_path)
    if log_level:
        cfg.logging.log_level = log_level
    setup_logging(cfg.logging.log_level, cfg.logging.log_dir, console=verbose)
    _state["config"] = cfg


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _add_crate(parent: Tree, crate: Crate, show_tracks: bool) -> None:
    branch = parent.add(f"[bold]{escape(crate.name)}[/bold] [dim]({len(crate.tracks)} tracks)[/dim]")
    if show_tracks:
        for track in crate.tracks:
            branch.add(escape(track.path))
    for sub in crate.subcrates:
        _add_crate(branch, sub, show_tracks)


def render_library(library: Library, show_tracks: bool = True) -> None:
    """Print the library's tracks and crate tree to the console."""
    console.print(f"\n[bold]Library[/bold]  version {escape(library.version) or '—'}")
    console.print(f"Library contains {len(library.tracks)} tracks")
    if show_tracks:
        for track in library.tracks:
            console.print(f"  {escape(track.path)}", highlight=False)

    console.print(f"\nLibrary contains {len(library.crates)} crates")
    tree = Tree("[bold cyan]Crates[/bold cyan]")
    for crate in library.crates:
        _add_crate(tree, crate, show_tracks)
    console.print(tree)
    console.print()


def _print_json(data: dict) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def show(
    root: Path | None = typer.Argument(None, help="Directory containing the _Serato_ folder"),
    tracks: bool = typer.Option(True, "--tracks/--no-tracks", help="List track paths"),
    as_json: bool = typer.Option(False, "--json", help="Print the library as JSON"),
) -> None:
    """Read a whole library and print its tracks and crate tree."""
    settings = _config().library
    try:
        library = read_library(root or settings.root, settings)
    except ReadError as exc:
        raise _fail(exc) from exc

    if as_json:
        _print_json(library.to_dict())
    else:
        render_library(library, show_tracks=tracks)


@app.command()
def crate(
    path: Path = typer.Argument(help="Path to a .crate file"),
    as_json: bool = typer.Option(False, "--json", help="Print the crate as JSON"),
) -> None:
    """Decode a single crate file and print the track paths it references."""
    try:
        record = read_crate(path)
    except ReadError as exc:
        raise _fail(exc) from exc

    if as_json:
        _print_json({"name": record.name, "version": record.version, "tracks": record.track_paths})
        return

    console.print(f"\n[bold]{escape(record.name)}[/bold]  version {escape(record.version) or '—'}")
    console.print(f"Crate contains {len(record.tracks)} tracks")
    for track_path in record.track_paths:
        console.print(f"  {escape(track_path)}", highlight=False)
    console.print()


def _describe_payload(tag: bytes, payload: bytes) -> str:
    """Render a payload for ``dump``: text for string-looking tags, else a byte count."""
    if tag == b"vrsn" or tag[:1] in (b"t", b"p"):
        try:
            return repr(decode_utf16be(payload))
        except MalformedString:
            pass
    return f"<{len(payload)} bytes>"


def _dump(reader: RecordReader, budget: int, depth: int, max_depth: int) -> None:
    indent = "  " * depth
    for header, payload in iter_records(reader, budget):
        tag = header.tag.decode("latin-1")
        if header.tag[:1] == b"o" and depth < max_depth:
            console.print(f"{indent}{escape(tag)} [dim]({header.length} B)[/dim]")
            nested = RecordReader(io.BytesIO(payload), offset=reader.offset - header.length)
            _dump(nested, header.length, depth + 1, max_depth)
        else:
            desc = escape(_describe_payload(header.tag, payload))
            console.print(f"{indent}{escape(tag)} [dim]({header.length} B)[/dim] {desc}", highlight=False)


@app.command()
def dump(
    path: Path = typer.Argument(help="Database or .crate file"),
    depth: int = typer.Option(1, "--depth", "-d", help="How many levels of object records to expand"),
) -> None:
    """List the raw records of a database or crate file."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        console.print(f"[red]Could not open[/red] {escape(str(path))}: {exc.strerror}")
        raise typer.Exit(1) from exc

    try:
        _dump(RecordReader(io.BytesIO(data)), len(data), 0, depth)
    except ReadError as exc:
        raise _fail(exc) from exc


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


config_app = typer.Typer(name="config", help="View configuration.", add_completion=False)
app.add_typer(config_app)


@config_app.command(name="show")
def config_show() -> None:
    """Show the effective configuration."""
    cfg = _config()

    console.print("\n[bold]Current Configuration[/bold]\n")

    console.print("[bold cyan]\\[library][/bold cyan]")
    for key, value in cfg.library.model_dump(mode="python").items():
        console.print(f"  {key:22s} = {escape(str(value))}", highlight=False)

    console.print("\n[bold cyan]\\[logging][/bold cyan]")
    log_dir = cfg.logging.log_dir
    console.print(f"  log_level = {cfg.logging.log_level}")
    console.print(f"  log_dir   = {escape(str(log_dir)) if log_dir else '[dim](not set)[/dim]'}")
    console.print()
