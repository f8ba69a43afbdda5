"""Shared CBOR encoding and decoding with a registry of CoMID tags."""

from __future__ import annotations

import uuid
from typing import Any

import cbor2


class ComidError(ValueError):
    """Raised when a CoMID value is malformed or cannot be processed."""


_TAGS: dict[int, type] = {}
_CLASSES: dict[type, int] = {}

# Tags that the CBOR library turns into native objects before any hook runs.
_NATIVE_TAGGED: dict[int, type] = {37: uuid.UUID}

_B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_TABLE = {c: i for i, c in enumerate(_B64_ALPHABET)}


def register_tag(tag: int, cls: type) -> None:
    """Associate a CBOR tag number with a class."""
    if tag in _TAGS:
        raise ComidError(f"tag {tag} is already registered")
    _TAGS[tag] = cls
    _CLASSES[cls] = tag


def tag_for(cls: type) -> int | None:
    """Return the tag registered for ``cls``, or None."""
    return _CLASSES.get(cls)


def _to_plain(obj: Any) -> Any:
    tag = _CLASSES.get(type(obj))
    if tag is not None:
        return cbor2.CBORTag(tag, _to_plain(obj.cbor_value()))
    if hasattr(obj, "cbor_value"):
        return _to_plain(obj.cbor_value())
    if isinstance(obj, dict):
        return {_to_plain(k): _to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_plain(v) for v in obj]
    return obj


def encode(obj: Any) -> bytes:
    """Serialise ``obj`` to deterministic CBOR, tagging registered types."""
    try:
        return cbor2.dumps(_to_plain(obj), canonical=True)
    except (cbor2.CBOREncodeError, TypeError) as exc:
        raise ComidError(f"cbor encoding failure: {exc}") from exc


def _tag_hook(_decoder: Any, tag: cbor2.CBORTag) -> Any:
    cls = _TAGS.get(tag.tag)
    if cls is None:
        return tag
    return cls.from_cbor_value(tag.value)


def _convert_native(obj: Any) -> Any:
    for tag, native in _NATIVE_TAGGED.items():
        if isinstance(obj, native) and tag in _TAGS:
            return _TAGS[tag].from_cbor_value(obj.bytes)
    if isinstance(obj, dict):
        return {_convert_native(k): _convert_native(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_native(v) for v in obj]
    return obj


def decode(data: bytes) -> Any:
    """Deserialise CBOR ``data``, turning registered tags into their classes."""
    try:
        value = cbor2.loads(bytes(data), tag_hook=_tag_hook)
    except ComidError:
        raise
    except (cbor2.CBORDecodeError, ValueError, TypeError, EOFError) as exc:
        raise ComidError(f"cbor decoding failure: {exc}") from exc
    return _convert_native(value)


def decode_base64(text: str) -> bytes:
    """Decode padded standard base64, reporting the offset of bad input."""
    out = bytearray()
    n = len(text)
    si = 0

    def flush(vals: list[int]) -> None:
        acc = 0
        for v in vals:
            acc = (acc << 6) | v
        acc <<= 6 * (4 - len(vals))
        out.extend(acc.to_bytes(3, "big")[: len(vals) - 1])

    while True:
        vals: list[int] = []
        while len(vals) < 4:
            if si == n:
                if not vals:
                    return bytes(out)
                raise ComidError(f"illegal base64 data at input byte {si - len(vals)}")
            c = text[si]
            si += 1
            if c in _B64_TABLE:
                vals.append(_B64_TABLE[c])
                continue
            if c in "\r\n":
                continue
            if c != "=" or len(vals) < 2:
                raise ComidError(f"illegal base64 data at input byte {si - 1}")
            if len(vals) == 2:
                if si == n:
                    raise ComidError(f"illegal base64 data at input byte {n}")
                if text[si] != "=":
                    raise ComidError(f"illegal base64 data at input byte {si - 1}")
                si += 1
            if si < n:
                raise ComidError(f"illegal base64 data at input byte {si}")
            flush(vals)
            return bytes(out)
        flush(vals)