"""Reading Serato library files from disk.

A library root is the directory that contains the ``_Serato_`` folder (not the
``_Serato_`` folder itself)::

    <root>/_Serato_/database V2
    <root>/_Serato_/Subcrates/*.crate
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import structlog

from seratocrates.assembler import assemble_library
from seratocrates.codec.decoder import decode_stream
from seratocrates.config import LibrarySettings
from seratocrates.errors import ReadError, UnopenableSource
from seratocrates.models import CrateRecord, DatabaseRecord, Library

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LibraryPaths:
    root: Path
    serato_dir: Path
    database: Path
    subcrates: Path


def resolve_paths(root: Path | str, settings: LibrarySettings | None = None) -> LibraryPaths:
    """Compute the database and subcrates paths for a library root."""
    settings = settings or LibrarySettings()
    root = Path(root).expanduser()
    serato_dir = root / settings.serato_dir
    return LibraryPaths(
        root=root,
        serato_dir=serato_dir,
        database=serato_dir / settings.database_file,
        subcrates=serato_dir / settings.subcrates_dir,
    )


def scan_crate_files(directory: Path, extension: str = ".crate") -> list[Path]:
    """Return the crate files in *directory*, sorted by name.

    Files with any other extension are ignored.  A missing directory yields no
    crates.
    """
    if not directory.is_dir():
        log.warning("subcrates_dir_missing", path=str(directory))
        return []
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise UnopenableSource("Could not list crate directory", directory) from exc
    return sorted(p for p in entries if p.suffix == extension and p.is_file())


def _read(cls: type[T], path: Path, what: str) -> T:
    try:
        fh = open(path, "rb")  # noqa: SIM115
    except OSError as exc:
        raise UnopenableSource(f"Could not open {what}", path) from exc
    with fh:
        size = os.fstat(fh.fileno()).st_size
        return decode_stream(cls, fh, size)


def read_database(path: Path) -> DatabaseRecord:
    """Read and decode a ``database V2`` file."""
    database = _read(DatabaseRecord, path, "database file")
    log.debug("database_read", path=str(path), tracks=len(database.tracks))
    return database


def read_crate(path: Path | str) -> CrateRecord:
    """Read and decode a single ``.crate`` file; its name is the file stem."""
    path = Path(path)
    crate = _read(CrateRecord, path, ".crate file")
    crate.name = path.stem
    log.debug("crate_read", path=str(path), tracks=len(crate.tracks))
    return crate


def read_crates(paths: list[Path], *, skip_unreadable: bool = True) -> list[CrateRecord]:
    """Read several crate files independently.

    With *skip_unreadable* a file that fails to read is logged and left out;
    otherwise the first failure propagates.
    """
    records: list[CrateRecord] = []
    for path in paths:
        try:
            records.append(read_crate(path))
        except ReadError as exc:
            if not skip_unreadable:
                raise
            log.warning("crate_skipped", path=str(path), error=str(exc))
    return records


def read_library(root: Path | str, settings: LibrarySettings | None = None) -> Library:
    """Read the database and every crate file under *root* and assemble them."""
    settings = settings or LibrarySettings()
    paths = resolve_paths(root, settings)
    log.info("reading_library", root=str(paths.root))

    database = read_database(paths.database)
    crate_files = scan_crate_files(paths.subcrates, settings.crate_extension)
    records = read_crates(crate_files, skip_unreadable=settings.skip_unreadable_crates)
    return assemble_library(database, records)
