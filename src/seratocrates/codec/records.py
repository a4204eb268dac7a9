"""Low-level TLV record reading.

Every Serato record is a 4-byte tag, a 4-byte big-endian unsigned payload
length and exactly that many payload bytes.  There is no terminator: a
composite ends when its byte budget has been consumed.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from typing import BinaryIO, NamedTuple

from seratocrates.errors import TruncatedInput

TAG_SIZE = 4
LENGTH_SIZE = 4
HEADER_SIZE = TAG_SIZE + LENGTH_SIZE

_HEADER = struct.Struct(">4sI")


class RecordHeader(NamedTuple):
    tag: bytes
    length: int

    @property
    def size(self) -> int:
        """Total bytes occupied by the record, header included."""
        return HEADER_SIZE + self.length


class RecordReader:
    """Reads records from a binary stream, keeping track of the offset."""

    def __init__(self, stream: BinaryIO, offset: int = 0) -> None:
        self._stream = stream
        self.offset = offset

    def _read_exact(self, n: int, what: str) -> bytes:
        data = self._stream.read(n)
        if len(data) != n:
            raise TruncatedInput(f"Input was truncated when reading {what}", self.offset + len(data))
        self.offset += n
        return data

    def read_header(self, budget: int) -> RecordHeader:
        """Read the next tag and length, checking both against *budget*."""
        if budget < HEADER_SIZE:
            raise TruncatedInput(
                f"{budget} bytes left in budget, too few for a record header",
                self.offset,
            )
        tag, length = _HEADER.unpack(self._read_exact(HEADER_SIZE, "record header"))
        if length > budget - HEADER_SIZE:
            raise TruncatedInput(
                f"Record {tag!r} declares {length} bytes but only {budget - HEADER_SIZE} remain",
                self.offset,
            )
        return RecordHeader(tag, length)

    def read_payload(self, length: int) -> bytes:
        return self._read_exact(length, "record payload")

    def skip(self, length: int) -> None:
        # Read rather than seek so that short input is detected.
        self._read_exact(length, "skipped record payload")


def iter_records(reader: RecordReader, budget: int) -> Iterator[tuple[RecordHeader, bytes]]:
    """Yield ``(header, payload)`` pairs until exactly *budget* bytes are consumed."""
    consumed = 0
    while consumed < budget:
        header = reader.read_header(budget - consumed)
        yield header, reader.read_payload(header.length)
        consumed += header.size
