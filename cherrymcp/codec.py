"""Value codec for Chromium localStorage entries.

Cherry Studio persists its state through Chromium's localStorage, which
LevelDB stores as one marker byte followed by the string payload. Marker
0x00 means UTF-16LE. The payload is JSON text.

    raw bytes  --decode-->  text  --parse_json-->  value
    value  --stringify_json-->  text  --encode-->  raw bytes

JSON is compact and order-preserving so that re-encoding untouched data
reproduces the stored bytes exactly.
"""

from __future__ import annotations

from typing import Any

import orjson

from cherrymcp.exceptions import EncodingError, InvalidFormatError

UTF16_MARKER = 0x00


def decode(raw: bytes) -> str:
    """Strip the marker byte and decode the UTF-16LE payload."""
    if not raw:
        raise EncodingError("Empty value: missing format marker byte")
    marker = raw[0]
    if marker != UTF16_MARKER:
        raise EncodingError(f"Unsupported format marker 0x{marker:02x}")
    payload = raw[1:]
    if len(payload) % 2 != 0:
        raise EncodingError(
            f"Invalid UTF-16 data length: {len(payload)} bytes is not a multiple of 2"
        )
    try:
        return payload.decode("utf-16-le")
    except UnicodeDecodeError as e:
        raise EncodingError(f"Invalid UTF-16 data: {e.reason} at byte {e.start + 1}") from e


def encode(text: str) -> bytes:
    """Prefix the marker byte to the UTF-16LE encoding of ``text``."""
    try:
        payload = text.encode("utf-16-le")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Text is not encodable as UTF-16: {e.reason}") from e
    return bytes((UTF16_MARKER,)) + payload


def parse_json(text: str) -> Any:
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as e:
        raise InvalidFormatError(f"Invalid JSON: {e}") from e


def stringify_json(value: Any) -> str:
    try:
        return orjson.dumps(value).decode("utf-8")
    except orjson.JSONEncodeError as e:
        raise InvalidFormatError(f"Value is not JSON serializable: {e}") from e
