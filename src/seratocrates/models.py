"""In-memory representation of a decoded Serato library.

Decoded objects start out default-valued and are filled in field by field as
matching records are found, so every field has a default.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(eq=False)
class Track:
    """A track from the ``database V2`` file.

    Two tracks are the same track iff their paths are equal.  The metadata
    fields are informational only.
    """

    path: str = ""
    file_type: str = ""
    title: str = ""
    artist: str = ""
    album: str = ""
    genre: str = ""
    bpm: str = ""
    key: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def to_dict(self) -> dict:
        return {k: v for k, v in vars(self).items() if v}


@dataclass
class CrateTrack:
    """A raw track reference stored inside a ``.crate`` file."""

    path: str = ""


@dataclass
class DatabaseRecord:
    """Decoded contents of the ``database V2`` file."""

    version: str = ""
    tracks: list[Track] = field(default_factory=list)


@dataclass
class CrateRecord:
    """Decoded contents of one ``.crate`` file.

    ``name`` comes from the file name; it is not stored in the payload.
    """

    name: str = ""
    version: str = ""
    tracks: list[CrateTrack] = field(default_factory=list)

    @property
    def track_paths(self) -> list[str]:
        return [t.path for t in self.tracks]


@dataclass
class Crate:
    """An assembled crate.  ``tracks`` holds the library's own Track objects."""

    name: str
    version: str = ""
    tracks: list[Track] = field(default_factory=list)
    subcrates: list[Crate] = field(default_factory=list)

    def walk(self) -> Iterator[Crate]:
        """Yield this crate and all of its descendants, depth-first."""
        yield self
        for sub in self.subcrates:
            yield from sub.walk()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "tracks": [t.path for t in self.tracks],
            "subcrates": [c.to_dict() for c in self.subcrates],
        }


@dataclass
class Library:
    """All tracks from the database plus the top-level crate tree."""

    version: str = ""
    tracks: list[Track] = field(default_factory=list)
    crates: list[Crate] = field(default_factory=list)

    def walk_crates(self) -> Iterator[Crate]:
        for crate in self.crates:
            yield from crate.walk()

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "tracks": [t.to_dict() for t in self.tracks],
            "crates": [c.to_dict() for c in self.crates],
        }
