"""Hash entries and lists of digests."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any

from comid.cbor import ComidError, decode, decode_base64, encode

SHA256 = 1
SHA256_128 = 2
SHA256_120 = 3
SHA256_96 = 4
SHA256_64 = 5
SHA256_32 = 6
SHA384 = 7
SHA512 = 8
SHA3_224 = 9
SHA3_256 = 10
SHA3_384 = 11
SHA3_512 = 12

_ALGORITHMS: dict[int, tuple[str, int]] = {
    SHA256: ("sha-256", 32),
    SHA256_128: ("sha-256-128", 16),
    SHA256_120: ("sha-256-120", 15),
    SHA256_96: ("sha-256-96", 12),
    SHA256_64: ("sha-256-64", 8),
    SHA256_32: ("sha-256-32", 4),
    SHA384: ("sha-384", 48),
    SHA512: ("sha-512", 64),
    SHA3_224: ("sha3-224", 28),
    SHA3_256: ("sha3-256", 32),
    SHA3_384: ("sha3-384", 48),
    SHA3_512: ("sha3-512", 64),
}
_BY_NAME = {name: alg for alg, (name, _) in _ALGORITHMS.items()}


def valid_hash_entry(alg_id: int, value: bytes) -> None:
    """Raise unless ``value`` has the length the algorithm requires."""
    if alg_id not in _ALGORITHMS:
        raise ComidError(f"unknown hash algorithm {alg_id}")
    name, size = _ALGORITHMS[alg_id]
    if len(value) != size:
        raise ComidError(
            f"length mismatch for hash algorithm {name}: "
            f"want {size} bytes, got {len(value)}"
        )


@dataclass(frozen=True)
class HashEntry:
    """A digest value together with its algorithm identifier."""

    alg_id: int
    value: bytes

    def __str__(self) -> str:
        name = _ALGORITHMS.get(self.alg_id, (str(self.alg_id), 0))[0]
        return f"{name};{base64.b64encode(self.value).decode('ascii')}"

    @classmethod
    def parse(cls, text: str) -> "HashEntry":
        name, sep, encoded = text.partition(";")
        if not sep:
            raise ComidError(f"bad hash entry format: {text!r}")
        if name not in _BY_NAME:
            raise ComidError(f"unknown hash algorithm name {name!r}")
        entry = cls(_BY_NAME[name], decode_base64(encoded))
        entry.valid()
        return entry

    def valid(self) -> None:
        valid_hash_entry(self.alg_id, self.value)

    def cbor_value(self) -> list:
        return [self.alg_id, bytes(self.value)]

    @classmethod
    def from_cbor_value(cls, value: Any) -> "HashEntry":
        if (
            not isinstance(value, list)
            or len(value) != 2
            or not isinstance(value[0], int)
            or not isinstance(value[1], (bytes, bytearray))
        ):
            raise ComidError("hash entry must be a [alg, bytes] array")
        return cls(value[0], bytes(value[1]))


def new_hash_entry(alg_id: int, value: bytes) -> HashEntry:
    """Build a validated hash entry."""
    valid_hash_entry(alg_id, value)
    return HashEntry(alg_id, bytes(value))


class Digests(list):
    """A list of hash entries."""

    def add_digest(self, alg_id: int, value: bytes) -> "Digests":
        self.append(new_hash_entry(alg_id, value))
        return self

    def valid(self) -> None:
        for i, entry in enumerate(self):
            try:
                valid_hash_entry(entry.alg_id, entry.value)
            except ComidError as exc:
                raise ComidError(f"digest at index {i}: {exc}") from exc

    def to_cbor(self) -> bytes:
        return encode(self.cbor_value())

    def cbor_value(self) -> list:
        return [e.cbor_value() for e in self]

    @classmethod
    def from_cbor_value(cls, value: Any) -> "Digests":
        if not isinstance(value, list):
            raise ComidError("digests must be an array")
        return cls(HashEntry.from_cbor_value(v) for v in value)

    @classmethod
    def from_cbor(cls, data: bytes) -> "Digests":
        return cls.from_cbor_value(decode(data))

    def json_value(self) -> list[str]:
        return [str(e) for e in self]

    @classmethod
    def from_json_value(cls, value: Any) -> "Digests":
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ComidError("digests must be an array of strings")
        return cls(HashEntry.parse(v) for v in value)

    def to_json(self) -> str:
        return json.dumps(self.json_value())

    @classmethod
    def from_json(cls, data: str | bytes) -> "Digests":
        try:
            value = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(str(exc)) from exc
        return cls.from_json_value(value)