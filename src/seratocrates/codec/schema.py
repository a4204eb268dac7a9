"""Tag-to-field tables for every composite record type.

Each composite type maps the 4-byte tags it understands to a :class:`Field`
that names the attribute to populate and how to decode the payload.  Tags that
have no entry are skipped by the decoder.

See https://www.mixxx.org/wiki/doku.php/serato_database_format for the
on-disk tag names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from seratocrates.models import CrateRecord, CrateTrack, DatabaseRecord, Track


class Strategy(StrEnum):
    PRIMITIVE_STRING = "primitive_string"
    COMPOSITE = "composite"
    REPEATED_COMPOSITE = "repeated_composite"
    REPEATED_PRIMITIVE = "repeated_primitive"


@dataclass(frozen=True)
class Field:
    """How one tag is decoded and where its value goes.

    ``element`` is the nested composite type for ``COMPOSITE`` and
    ``REPEATED_COMPOSITE`` fields and must be left unset otherwise.
    """

    attr: str
    strategy: Strategy
    element: type | None = None

    def __post_init__(self) -> None:
        composite = self.strategy in (Strategy.COMPOSITE, Strategy.REPEATED_COMPOSITE)
        if composite != (self.element is not None):
            msg = f"Field {self.attr!r}: element type must be given iff strategy is composite"
            raise ValueError(msg)

    @property
    def repeated(self) -> bool:
        return self.strategy in (Strategy.REPEATED_COMPOSITE, Strategy.REPEATED_PRIMITIVE)


Schema = Mapping[bytes, Field]


def schema(fields: dict[bytes, Field]) -> Schema:
    """Freeze a tag table after checking every tag is exactly 4 bytes."""
    for tag in fields:
        if len(tag) != 4:
            msg = f"Tag {tag!r} is not 4 bytes long"
            raise ValueError(msg)
    return MappingProxyType(dict(fields))


def _string(attr: str) -> Field:
    return Field(attr, Strategy.PRIMITIVE_STRING)


SCHEMAS: Mapping[type, Schema] = MappingProxyType(
    {
        # Database tracks store their path in "pfil", crate tracks in "ptrk".
        Track: schema(
            {
                b"pfil": _string("path"),
                b"ttyp": _string("file_type"),
                b"tsng": _string("title"),
                b"tart": _string("artist"),
                b"talb": _string("album"),
                b"tgen": _string("genre"),
                b"tbpm": _string("bpm"),
                b"tkey": _string("key"),
            }
        ),
        CrateTrack: schema({b"ptrk": _string("path")}),
        DatabaseRecord: schema(
            {
                b"vrsn": _string("version"),
                b"otrk": Field("tracks", Strategy.REPEATED_COMPOSITE, Track),
            }
        ),
        CrateRecord: schema(
            {
                b"vrsn": _string("version"),
                b"otrk": Field("tracks", Strategy.REPEATED_COMPOSITE, CrateTrack),
            }
        ),
    }
)
