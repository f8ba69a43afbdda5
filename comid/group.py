"""Group identifiers of a target or attesting environment."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from comid.cbor import ComidError, decode, encode, register_tag
from comid.taggedbytes import BYTES_TYPE, new_bytes


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (bytes, bytearray)):
        return "byte string"
    if isinstance(value, str):
        return "text string"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def _is_group_value(value: Any) -> bool:
    return hasattr(value, "type_name") and hasattr(value, "valid")


@dataclass
class Group:
    """Identity of a group of environments: bytes or a registered extension type."""

    value: Any = None

    def valid(self) -> None:
        if self.value is None:
            raise ComidError("no value set")
        self.value.valid()

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    def type_name(self) -> str:
        return "" if self.value is None else self.value.type_name()

    def __bytes__(self) -> bytes:
        return b"" if self.value is None else bytes(self.value)

    def cbor_value(self) -> Any:
        return self.value

    def to_cbor(self) -> bytes:
        return encode(self.value)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "Group":
        if value is None:
            return cls()
        if not _is_group_value(value):
            raise ComidError(f"cannot unmarshal {_kind(value)} into group value")
        return cls(value)

    @classmethod
    def from_cbor(cls, data: bytes) -> "Group":
        return cls.from_cbor_value(decode(data))

    def json_value(self) -> Any:
        if self.value is None:
            return None
        return {"type": self.value.type_name(), "value": self.value.json_value()}

    def to_json(self) -> str:
        return json.dumps(self.json_value(), separators=(",", ":"))

    @classmethod
    def from_json_value(cls, obj: Any) -> "Group":
        if not isinstance(obj, dict):
            raise ComidError(
                f"group decoding failure: expected an object, got {_kind(obj)}"
            )
        typ = obj.get("type")
        if not isinstance(typ, str) or typ == "":
            raise ComidError("group decoding failure: type not set")
        if "value" not in obj:
            raise ComidError(f"group decoding failure: no value provided for {typ}")
        template = new_group(None, typ)
        try:
            value = type(template.value).from_json_value(obj["value"])
        except ComidError as exc:
            raise ComidError(f"cannot unmarshal group: {exc}") from exc
        try:
            value.valid()
        except ComidError as exc:
            raise ComidError(f"invalid {typ}: {exc}") from exc
        return cls(value)

    @classmethod
    def from_json(cls, data: str | bytes) -> "Group":
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(f"group decoding failure: {exc}") from exc
        return cls.from_json_value(obj)


GroupFactory = Callable[[Any], Group]


def new_bytes_group(val: Any) -> Group:
    """Build a group holding opaque bytes from bytes or text."""
    return Group(new_bytes(val))


_GROUP_FACTORIES: dict[str, GroupFactory] = {
    BYTES_TYPE: new_bytes_group,
}


def new_group(val: Any, typ: str) -> Group:
    """Build a group of the named type from ``val``."""
    factory = _GROUP_FACTORIES.get(typ)
    if factory is None:
        raise ComidError(f"unknown group type: {typ}")
    return factory(val)


def register_group_type(tag: int, factory: GroupFactory) -> None:
    """Register a new group value type produced by ``factory`` under ``tag``."""
    nil_val = factory(None)
    typ = nil_val.value.type_name()
    if typ in _GROUP_FACTORIES:
        raise ComidError(f'Group type with name "{typ}" already exists')
    register_tag(tag, type(nil_val.value))
    _GROUP_FACTORIES[typ] = factory