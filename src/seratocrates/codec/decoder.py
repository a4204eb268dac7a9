"""Schema-driven recursive decoding of composite records."""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import BinaryIO, TypeVar

import structlog

from seratocrates.codec.records import RecordReader
from seratocrates.codec.schema import SCHEMAS, Field, Schema, Strategy
from seratocrates.codec.strings import decode_utf16be
from seratocrates.models import CrateRecord, DatabaseRecord

log = structlog.get_logger(__name__)

T = TypeVar("T")


def decode(
    cls: type[T],
    reader: RecordReader,
    budget: int,
    schemas: Mapping[type, Schema] = SCHEMAS,
) -> T:
    """Decode one *cls* composite from exactly *budget* bytes of *reader*.

    Starts from ``cls()`` and patches in each field whose tag appears in the
    schema for *cls*.  Unknown tags are skipped.  Fields missing from the
    input keep their defaults.
    """
    table = schemas[cls]
    obj = cls()
    consumed = 0
    while consumed < budget:
        header = reader.read_header(budget - consumed)
        field = table.get(header.tag)
        if field is None:
            log.debug(
                "unknown_tag",
                composite=cls.__name__,
                tag=header.tag.decode("latin-1"),
                length=header.length,
            )
            reader.skip(header.length)
        else:
            _apply(field, obj, reader, header.length, schemas)
        consumed += header.size
    return obj


def _apply(
    field: Field,
    obj: object,
    reader: RecordReader,
    length: int,
    schemas: Mapping[type, Schema],
) -> None:
    if field.strategy in (Strategy.PRIMITIVE_STRING, Strategy.REPEATED_PRIMITIVE):
        value = decode_utf16be(reader.read_payload(length))
    else:
        value = decode(field.element, reader, length, schemas)

    if field.repeated:
        getattr(obj, field.attr).append(value)
    else:
        setattr(obj, field.attr, value)


def decode_stream(cls: type[T], stream: BinaryIO, size: int) -> T:
    """Decode a whole top-level file of *size* bytes from an open stream."""
    return decode(cls, RecordReader(stream), size)


def decode_database(data: bytes) -> DatabaseRecord:
    """Decode the contents of a ``database V2`` file."""
    return decode_stream(DatabaseRecord, io.BytesIO(data), len(data))


def decode_crate_file(data: bytes, name: str) -> CrateRecord:
    """Decode the contents of a ``.crate`` file.

    The crate's name is not stored in the file, so the caller supplies it
    (normally the file name without its extension).
    """
    crate = decode_stream(CrateRecord, io.BytesIO(data), len(data))
    crate.name = name
    return crate
