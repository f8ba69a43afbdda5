"""Instance identifiers of a target or attesting environment."""

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


def _is_instance_value(value: Any) -> bool:
    return hasattr(value, "type_name") and hasattr(value, "valid")


@dataclass
class Instance:
    """Identity of an environment instance: bytes or a registered extension type."""

    value: Any = None

    def valid(self) -> None:
        if str(self) == "":
            raise ComidError("invalid instance id")

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
    def from_cbor_value(cls, value: Any) -> "Instance":
        if value is None:
            return cls()
        if not _is_instance_value(value):
            raise ComidError(f"cannot unmarshal {_kind(value)} into instance value")
        return cls(value)

    @classmethod
    def from_cbor(cls, data: bytes) -> "Instance":
        return cls.from_cbor_value(decode(data))

    def json_value(self) -> Any:
        if self.value is None:
            return None
        return {"type": self.value.type_name(), "value": self.value.json_value()}

    def to_json(self) -> str:
        return json.dumps(self.json_value(), separators=(",", ":"))

    @classmethod
    def from_json_value(cls, obj: Any) -> "Instance":
        if not isinstance(obj, dict):
            raise ComidError(
                f"instance decoding failure: expected an object, got {_kind(obj)}"
            )
        typ = obj.get("type")
        if not isinstance(typ, str) or typ == "":
            raise ComidError("instance decoding failure: type not set")
        if "value" not in obj:
            raise ComidError(f"instance decoding failure: no value provided for {typ}")
        template = new_instance(None, typ)
        try:
            value = type(template.value).from_json_value(obj["value"])
        except ComidError as exc:
            raise ComidError(f"cannot unmarshal instance: {exc}") from exc
        try:
            value.valid()
        except ComidError as exc:
            raise ComidError(f"invalid {typ}: {exc}") from exc
        return cls(value)

    @classmethod
    def from_json(cls, data: str | bytes) -> "Instance":
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(f"instance decoding failure: {exc}") from exc
        return cls.from_json_value(obj)


InstanceFactory = Callable[[Any], Instance]


def new_bytes_instance(val: Any) -> Instance:
    """Build an instance holding opaque bytes from bytes or text."""
    return Instance(new_bytes(val))


_INSTANCE_FACTORIES: dict[str, InstanceFactory] = {
    BYTES_TYPE: new_bytes_instance,
}


def new_instance(val: Any, typ: str) -> Instance:
    """Build an instance of the named type from ``val``."""
    factory = _INSTANCE_FACTORIES.get(typ)
    if factory is None:
        raise ComidError(f"unknown instance type: {typ}")
    return factory(val)


def register_instance_type(tag: int, factory: InstanceFactory) -> None:
    """Register a new instance value type produced by ``factory`` under ``tag``."""
    nil_val = factory(None)
    typ = nil_val.type_name()
    if typ in _INSTANCE_FACTORIES:
        raise ComidError(f'class ID type with name "{typ}" already exists')
    register_tag(tag, type(nil_val.value))
    _INSTANCE_FACTORIES[typ] = factory