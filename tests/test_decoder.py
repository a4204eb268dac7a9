"""Tests for the schema-driven composite decoder."""

from __future__ import annotations

import io
from dataclasses import dataclass, field

import pytest

from seratocrates.codec.decoder import decode, decode_crate_file, decode_database
from seratocrates.codec.records import RecordReader
from seratocrates.codec.schema import SCHEMAS, Field, Strategy, schema
from seratocrates.errors import MalformedString, TruncatedInput
from seratocrates.models import CrateRecord, DatabaseRecord, Track
from tlvdata import CRATE_VERSION, DB_VERSION, crate_bytes, database_bytes, record, text


# -- database / crate files ---------------------------------------------------


def test_decode_database():
    db = decode_database(database_bytes(["/a.mp3", "/b.mp3"]))
    assert isinstance(db, DatabaseRecord)
    assert db.version == DB_VERSION
    assert [t.path for t in db.tracks] == ["/a.mp3", "/b.mp3"]
    assert db.tracks[0].file_type == "mp3"


def test_decode_database_track_metadata():
    track = record(
        b"otrk",
        text(b"pfil", "/x.flac") + text(b"tsng", "Song") + text(b"tart", "Artist") + text(b"tbpm", "124.00"),
    )
    db = decode_database(track)
    assert db.version == ""
    assert db.tracks[0].title == "Song"
    assert db.tracks[0].artist == "Artist"
    assert db.tracks[0].bpm == "124.00"
    assert db.tracks[0].album == ""


def test_decode_empty_database():
    assert decode_database(b"") == DatabaseRecord()


def test_decode_crate_file_name_is_supplied():
    crate = decode_crate_file(crate_bytes(["/a.mp3", "/b.mp3"]), "Genres%%House")
    assert isinstance(crate, CrateRecord)
    assert crate.name == "Genres%%House"
    assert crate.version == CRATE_VERSION
    assert crate.track_paths == ["/a.mp3", "/b.mp3"]


def test_crate_track_tag_not_read_in_database():
    # "ptrk" belongs to crate files; in the database it is just an unknown tag.
    db = decode_database(record(b"otrk", text(b"ptrk", "/a.mp3")))
    assert db.tracks == [Track()]


def test_last_scalar_wins():
    db = decode_database(text(b"vrsn", "1") + text(b"vrsn", "2"))
    assert db.version == "2"


# -- unknown tags -------------------------------------------------------------


def test_unknown_tag_between_known_fields():
    data = text(b"vrsn", "1.0") + record(b"\x00\xffzz", b"\x01\x02\x03") + record(b"otrk", text(b"pfil", "/a.mp3"))
    db = decode_database(data)
    assert db.version == "1.0"
    assert [t.path for t in db.tracks] == ["/a.mp3"]


def test_unknown_nested_tag_skipped():
    data = record(b"otrk", record(b"bmis", b"\x00") + text(b"pfil", "/a.mp3") + record(b"uadd", b"\x00" * 4))
    db = decode_database(data)
    assert [t.path for t in db.tracks] == ["/a.mp3"]


def test_unknown_payload_is_never_decoded():
    # Odd-length payload would be a MalformedString if it were decoded.
    db = decode_database(record(b"tfoo", b"\x00\x41\x00") + text(b"vrsn", "1"))
    assert db.version == "1"


# -- budget -------------------------------------------------------------------


def test_consumes_exactly_budget():
    data = database_bytes(["/a.mp3"])
    trailing = text(b"vrsn", "not mine")
    reader = RecordReader(io.BytesIO(data + trailing))

    db = decode(DatabaseRecord, reader, len(data))

    assert db.version == DB_VERSION
    assert reader.offset == len(data)


def _top_level_boundaries(data: bytes) -> set[int]:
    boundaries = {0}
    pos = 0
    while pos < len(data):
        pos += 8 + int.from_bytes(data[pos + 4 : pos + 8], "big")
        boundaries.add(pos)
    return boundaries


@pytest.mark.parametrize("make", [database_bytes, crate_bytes])
def test_truncation_anywhere_but_a_record_boundary(make):
    data = make(["/a.mp3", "/b.mp3"])
    boundaries = _top_level_boundaries(data)
    decoder = decode_database if make is database_bytes else (lambda d: decode_crate_file(d, "x"))

    for cut in range(len(data)):
        if cut in boundaries:
            decoder(data[:cut])
        else:
            with pytest.raises(TruncatedInput):
                decoder(data[:cut])


def test_nested_record_overshooting_parent():
    # The pfil record claims more bytes than its otrk parent holds.
    inner = b"pfil" + (100).to_bytes(4, "big") + "/a".encode("utf-16-be")
    with pytest.raises(TruncatedInput):
        decode_database(record(b"otrk", inner))


def test_malformed_string_propagates():
    with pytest.raises(MalformedString):
        decode_database(record(b"otrk", record(b"pfil", b"\x00/\x00")))


# -- custom schemas -----------------------------------------------------------


@dataclass
class _Leaf:
    name: str = ""


@dataclass
class _Root:
    title: str = ""
    leaf: _Leaf = field(default_factory=_Leaf)
    tags: list[str] = field(default_factory=list)
    leaves: list[_Leaf] = field(default_factory=list)


_SCHEMAS = {
    _Leaf: schema({b"lnam": Field("name", Strategy.PRIMITIVE_STRING)}),
    _Root: schema(
        {
            b"ttle": Field("title", Strategy.PRIMITIVE_STRING),
            b"olef": Field("leaf", Strategy.COMPOSITE, _Leaf),
            b"ttag": Field("tags", Strategy.REPEATED_PRIMITIVE),
            b"olvs": Field("leaves", Strategy.REPEATED_COMPOSITE, _Leaf),
        }
    ),
}


def _decode_root(data: bytes) -> _Root:
    return decode(_Root, RecordReader(io.BytesIO(data)), len(data), _SCHEMAS)


def test_every_strategy():
    data = (
        text(b"ttle", "root")
        + text(b"ttag", "one")
        + record(b"olef", text(b"lnam", "single"))
        + text(b"ttag", "two")
        + record(b"olvs", text(b"lnam", "first"))
        + record(b"olvs", text(b"lnam", "second"))
    )
    root = _decode_root(data)
    assert root == _Root(
        title="root",
        leaf=_Leaf("single"),
        tags=["one", "two"],
        leaves=[_Leaf("first"), _Leaf("second")],
    )


def test_absent_fields_keep_defaults():
    assert _decode_root(text(b"ttag", "only")) == _Root(tags=["only"])


def test_empty_nested_composite():
    assert _decode_root(record(b"olvs", b"")).leaves == [_Leaf()]


# -- schema tables ------------------------------------------------------------


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        SCHEMAS[Track][b"xxxx"] = Field("path", Strategy.PRIMITIVE_STRING)  # type: ignore[index]


def test_schema_rejects_bad_tag_length():
    with pytest.raises(ValueError, match="4 bytes"):
        schema({b"abc": Field("x", Strategy.PRIMITIVE_STRING)})


def test_composite_field_needs_element_type():
    with pytest.raises(ValueError):
        Field("tracks", Strategy.REPEATED_COMPOSITE)
    with pytest.raises(ValueError):
        Field("path", Strategy.PRIMITIVE_STRING, Track)
