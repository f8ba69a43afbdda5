"""Integrity registers: digests indexed by unsigned integer or text."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from comid.cbor import ComidError, decode, encode
from comid.digests import Digests, HashEntry

UINT_TYPE = "uint"
TEXT_TYPE = "text"

_INT_RE = re.compile(r"^[+-]?[0-9]+$")


@dataclass
class IntegrityRegisters:
    """Mapping from register index to the digests recorded there."""

    index_map: dict[int | str, Digests] | None = field(default_factory=dict)

    def add_digests(self, index: int | str, digests: list[HashEntry]) -> None:
        if not digests:
            raise ComidError("no digests to add")
        for digest in digests:
            try:
                self.add_digest(index, digest)
            except ComidError as exc:
                raise ComidError(f"unable to add Digest: {exc}") from exc

    def add_digest(self, index: int | str, digest: HashEntry) -> None:
        if self.index_map is None:
            raise ComidError("no register to add digest")
        if isinstance(index, bool) or not isinstance(index, (int, str)):
            raise ComidError(f"unexpected type for index: {type(index).__name__}")
        if isinstance(index, int) and index < 0:
            raise ComidError("invalid negative integer key")
        self.index_map.setdefault(index, Digests()).append(digest)

    def cbor_value(self) -> dict:
        return {k: v.cbor_value() for k, v in (self.index_map or {}).items()}

    def to_cbor(self) -> bytes:
        return encode(self.cbor_value())

    @classmethod
    def from_cbor(cls, data: bytes) -> "IntegrityRegisters":
        value = decode(data)
        if not isinstance(value, dict):
            raise ComidError("integrity registers must be a map")
        regs = cls()
        for key, val in value.items():
            if isinstance(key, bool) or not isinstance(key, (int, str)):
                raise ComidError(f"unexpected type for index: {type(key).__name__}")
            regs.index_map[key] = Digests.from_cbor_value(val)
        return regs

    def to_json(self) -> str:
        out = {}
        for key, val in (self.index_map or {}).items():
            key_type = TEXT_TYPE if isinstance(key, str) else UINT_TYPE
            out[str(key)] = {"key-type": key_type, "value": Digests(val).json_value()}
        return json.dumps(out)

    @classmethod
    def from_json(cls, data: str | bytes) -> "IntegrityRegisters":
        try:
            jmap = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(f"register map decoding failure: {exc}") from exc
        if not isinstance(jmap, dict):
            raise ComidError("register map decoding failure: not an object")
        regs = cls()
        for key, ktv in jmap.items():
            if not isinstance(ktv, dict):
                raise ComidError("unable to unmarshal keyTypeAndValue: not an object")
            try:
                digests = Digests.from_json_value(ktv.get("value"))
            except ComidError as exc:
                raise ComidError(f"unable to unmarshal Digests: {exc}") from exc
            key_type = ktv.get("key-type")
            if key_type == UINT_TYPE:
                if not _INT_RE.match(key):
                    raise ComidError(
                        f"unable to convert key to uint: invalid integer {key!r}"
                    )
                index: int | str = int(key)
                if index < 0:
                    raise ComidError("invalid negative integer key")
            elif key_type == TEXT_TYPE:
                index = key
            else:
                raise ComidError(f"unexpected key type for index: {key_type}")
            try:
                regs.add_digests(index, digests)
            except ComidError as exc:
                raise ComidError(
                    f"unable to add digests into register set: {exc}"
                ) from exc
        return regs