"""
Default record encoders.

An encoder turns a record payload into bytes for the spool. Returning
None (or b"") means "skip, nothing to write". Failures raise
EncodingError; the event loop logs and drops that record.
"""

import json
from typing import Any, Callable, Optional

from s3spool.errors import EncodingError

Encoder = Callable[[Any], Optional[bytes]]


def encode_raw(payload: Any) -> Optional[bytes]:
    """Pass bytes through unchanged and encode str as UTF-8."""
    if payload is None:
        return None
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    raise EncodingError(f"Cannot encode payload of type {type(payload).__name__}")


def encode_json_line(payload: Any) -> Optional[bytes]:
    """
    Serialize a payload as one JSON object per line.

    Strings and bytes are assumed to already hold a JSON document and are
    only newline-terminated.
    """
    if payload is None:
        return None

    if isinstance(payload, (bytes, bytearray)):
        line = bytes(payload).rstrip(b"\n")
        return line + b"\n" if line else None
    if isinstance(payload, str):
        line = payload.rstrip("\n")
        return (line + "\n").encode("utf-8") if line else None

    try:
        text = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Error encoding message: {e}") from e
    return (text + "\n").encode("utf-8")


ENCODERS = {
    "raw": encode_raw,
    "json": encode_json_line,
}
