"""Exceptions raised while reading a Serato library."""

from __future__ import annotations

from pathlib import Path


class ReadError(Exception):
    """Base class for every failure raised while reading library files."""


class TruncatedInput(ReadError):
    """Fewer bytes were available than a tag, a length or a payload requires."""

    def __init__(self, message: str, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)
        self.offset = offset


class MalformedString(ReadError):
    """A string payload was not valid UTF-16BE."""


class UnopenableSource(ReadError):
    """A database file, crate file or directory could not be opened."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(f'{message} at path "{path}"')
        self.path = Path(path)
