"""Hardware (MAC / EUI) addresses."""

from __future__ import annotations

import json
import re

from comid.cbor import ComidError

_SEP_RE = re.compile(r"^[0-9A-Fa-f]{2}([:-])[0-9A-Fa-f]{2}(?:\1[0-9A-Fa-f]{2})*$")
_DOT_RE = re.compile(r"^[0-9A-Fa-f]{4}(?:\.[0-9A-Fa-f]{4})*$")
_LENGTHS = (6, 8, 20)


class MACaddr(bytes):
    """IEEE 802 MAC-48, EUI-48 or EUI-64 address."""

    def __str__(self) -> str:
        return ":".join(f"{b:02x}" for b in self)

    def to_json(self) -> str:
        return json.dumps(str(self))

    @classmethod
    def from_json(cls, data: str | bytes) -> "MACaddr":
        try:
            value = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(str(exc)) from exc
        if not isinstance(value, str):
            raise ComidError("MAC address must be a JSON string")
        try:
            return parse_mac(value)
        except ComidError as exc:
            raise ComidError(f"bad MAC address {exc}") from exc


def parse_mac(s: str) -> MACaddr:
    """Parse colon, hyphen or dot separated hexadecimal notation."""
    if _SEP_RE.match(s):
        raw = bytes.fromhex(re.sub(r"[:-]", "", s))
    elif _DOT_RE.match(s):
        raw = bytes.fromhex(s.replace(".", ""))
    else:
        raise ComidError(f"invalid MAC address: {s}")
    if len(raw) not in _LENGTHS:
        raise ComidError(f"invalid MAC address: {s}")
    return MACaddr(raw)