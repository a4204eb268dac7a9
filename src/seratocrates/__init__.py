"""seratocrates — read Serato DJ library databases and crate files."""

from seratocrates.assembler import assemble_library, build_hierarchy, resolve_tracks
from seratocrates.codec import decode_crate_file, decode_database
from seratocrates.errors import MalformedString, ReadError, TruncatedInput, UnopenableSource
from seratocrates.library import read_crate, read_library
from seratocrates.models import Crate, CrateRecord, DatabaseRecord, Library, Track

__all__ = [
    "Crate",
    "CrateRecord",
    "DatabaseRecord",
    "Library",
    "MalformedString",
    "ReadError",
    "Track",
    "TruncatedInput",
    "UnopenableSource",
    "assemble_library",
    "build_hierarchy",
    "decode_crate_file",
    "decode_database",
    "read_crate",
    "read_library",
    "resolve_tracks",
]
