"""UTF-16BE string payloads."""

from __future__ import annotations

from seratocrates.errors import MalformedString


def decode_utf16be(payload: bytes) -> str:
    """Decode a UTF-16BE payload, recombining surrogate pairs.

    Raises :class:`MalformedString` for odd-length payloads and for lone
    surrogates.  NUL characters are kept as-is.
    """
    if len(payload) % 2:
        msg = f"String payload has odd length {len(payload)}"
        raise MalformedString(msg)
    try:
        return payload.decode("utf-16-be")
    except UnicodeDecodeError as exc:
        raise MalformedString(f"Invalid UTF-16BE string: {exc.reason}") from exc


def encode_utf16be(text: str) -> bytes:
    return text.encode("utf-16-be")
