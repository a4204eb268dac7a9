"""Join crate files against the database and rebuild the crate tree.

Serato stores every crate, subcrates included, as a flat ``.crate`` file whose
name encodes its ancestry: ``Genres%%House%%Deep.crate`` is the crate ``Deep``
inside ``House`` inside ``Genres``.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from seratocrates.models import Crate, CrateRecord, DatabaseRecord, Library, Track

log = structlog.get_logger(__name__)

DELIMITER = "%%"

PiecePath = tuple[str, ...]


def split_crate_name(name: str) -> PiecePath:
    """Split a full crate name into its non-empty pieces."""
    return tuple(piece for piece in name.split(DELIMITER) if piece)


def resolve_tracks(tracks: Iterable[Track], crate_records: Iterable[CrateRecord]) -> list[Crate]:
    """Turn crate records into crates holding the database's Track objects.

    Lookup is by exact path.  References to paths missing from the database
    are left out.
    """
    by_path: dict[str, Track] = {}
    for track in tracks:
        by_path.setdefault(track.path, track)

    crates: list[Crate] = []
    for record in crate_records:
        resolved = [by_path[p] for p in record.track_paths if p in by_path]
        missing = len(record.tracks) - len(resolved)
        if missing:
            log.debug("unresolved_tracks", crate=record.name, missing=missing)
        crates.append(Crate(name=record.name, version=record.version, tracks=resolved))
    return crates


def build_hierarchy(crates: Iterable[Crate]) -> list[Crate]:
    """Nest crates under their parents and return the top-level crates.

    Every surviving crate's name is cut down to its last piece.  A crate whose
    parent is not among *crates* is dropped together with everything already
    nested inside it.
    """
    by_pieces: dict[PiecePath, Crate] = {}
    for crate in crates:
        pieces = split_crate_name(crate.name)
        if not pieces:
            log.warning("crate_unnamed", crate=crate.name)
            continue
        if pieces in by_pieces:
            log.warning("duplicate_crate", crate=crate.name)
            continue
        by_pieces[pieces] = crate

    # Children sort after their parents, so walking backwards resolves every
    # child before its parent is itself moved.
    for pieces in sorted(by_pieces, reverse=True):
        if len(pieces) == 1:
            continue
        crate = by_pieces[pieces]
        parent = by_pieces.get(pieces[:-1])
        if parent is None:
            log.info(
                "crate_orphaned",
                crate=DELIMITER.join(pieces),
                dropped=sum(1 for _ in crate.walk()),
            )
            continue
        crate.name = pieces[-1]
        parent.subcrates.insert(0, crate)

    top_level: list[Crate] = []
    for pieces in sorted(by_pieces):
        if len(pieces) == 1:
            crate = by_pieces[pieces]
            crate.name = pieces[0]
            top_level.append(crate)
    return top_level


def assemble_library(database: DatabaseRecord, crate_records: Iterable[CrateRecord]) -> Library:
    """Build the final library from a decoded database and decoded crate files."""
    crates = resolve_tracks(database.tracks, crate_records)
    top_level = build_hierarchy(crates)
    log.info(
        "library_assembled",
        tracks=len(database.tracks),
        crates=len(crates),
        top_level=len(top_level),
    )
    return Library(version=database.version, tracks=list(database.tracks), crates=top_level)
