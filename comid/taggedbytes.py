"""Variable-length opaque bytes carried under CBOR tag 560."""

from __future__ import annotations

import base64
from typing import Any

from comid.cbor import ComidError, decode_base64, register_tag

BYTES_TYPE = "bytes"


class TaggedBytes(bytes):
    """Opaque bytes value."""

    def __str__(self) -> str:
        return self.decode("utf-8", errors="replace")

    def valid(self) -> None:
        """Any byte string is valid."""
        return None

    def type_name(self) -> str:
        return BYTES_TYPE

    def cbor_value(self) -> bytes:
        return bytes(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedBytes":
        if not isinstance(value, (bytes, bytearray)):
            raise ComidError("tagged bytes must wrap a byte string")
        return cls(value)

    def json_value(self) -> str:
        return base64.b64encode(self).decode("ascii")

    @classmethod
    def from_json_value(cls, value: Any) -> "TaggedBytes":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {type(value).__name__} into bytes")
        return cls(decode_base64(value))


def new_bytes(val: Any) -> TaggedBytes:
    """Build TaggedBytes from None, str or bytes."""
    if val is None:
        return TaggedBytes(b"")
    if isinstance(val, str):
        return TaggedBytes(val.encode("utf-8"))
    if isinstance(val, (bytes, bytearray)):
        return TaggedBytes(val)
    raise ComidError(f"unexpected type for bytes: {type(val).__name__}")


register_tag(560, TaggedBytes)