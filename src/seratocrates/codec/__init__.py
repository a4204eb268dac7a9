"""Serato TLV codec — record reader, string payloads, schemas and decoder."""

from seratocrates.codec.decoder import decode, decode_crate_file, decode_database, decode_stream
from seratocrates.codec.records import RecordHeader, RecordReader, iter_records
from seratocrates.codec.schema import SCHEMAS, Field, Strategy, schema
from seratocrates.codec.strings import decode_utf16be, encode_utf16be

__all__ = [
    "SCHEMAS",
    "Field",
    "RecordHeader",
    "RecordReader",
    "Strategy",
    "decode",
    "decode_crate_file",
    "decode_database",
    "decode_stream",
    "decode_utf16be",
    "encode_utf16be",
    "iter_records",
    "schema",
]
