"""Entity names and registration URIs used by CoMID entities."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlsplit

from comid.cbor import ComidError, decode, encode, register_tag

STRING_TYPE = "string"


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
    if isinstance(value, float):
        return "float"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


class TaggedURI(str):
    """A URI carried under CBOR tag 32."""

    def is_empty(self) -> bool:
        return self == ""

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedURI":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {_kind(value)} into URI")
        return cls(value)

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "TaggedURI":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {_kind(value)} into URI")
        return cls(value)


class StringEntityName(str):
    """An entity name given as plain text; encoded untagged."""

    def type_name(self) -> str:
        return STRING_TYPE

    def valid(self) -> None:
        if self == "":
            raise ComidError("empty entity-name")

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "StringEntityName":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {_kind(value)} into entity name")
        return cls(value)

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "StringEntityName":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {_kind(value)} into entity name")
        return cls(value)


def _is_entity_name_value(value: Any) -> bool:
    return hasattr(value, "type_name") and hasattr(value, "valid")


@dataclass
class EntityName:
    """Name of an entity: text, or a registered extension type."""

    value: Any = None

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    def type_name(self) -> str:
        return "" if self.value is None else self.value.type_name()

    def valid(self) -> None:
        if self.value is None:
            raise ComidError("empty entity name")
        self.value.valid()

    def cbor_value(self) -> Any:
        return self.value

    def to_cbor(self) -> bytes:
        self.valid()
        return encode(self.value)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "EntityName":
        if type(value) is str:
            return cls(StringEntityName(value))
        if isinstance(value, StringEntityName):
            return cls(value)
        if not _is_entity_name_value(value) or isinstance(value, TaggedURI):
            raise ComidError(f"cannot unmarshal {_kind(value)} into entity name value")
        return cls(value)

    @classmethod
    def from_cbor(cls, data: bytes) -> "EntityName":
        if not data:
            raise ComidError("empty")
        return cls.from_cbor_value(decode(data))

    def json_value(self) -> Any:
        self.valid()
        if self.value.type_name() == STRING_TYPE:
            return str(self.value)
        return {"type": self.value.type_name(), "value": self.value.json_value()}

    def to_json(self) -> str:
        return json.dumps(self.json_value(), separators=(",", ":"))

    @classmethod
    def from_json_value(cls, obj: Any) -> "EntityName":
        if isinstance(obj, str):
            return cls(StringEntityName(obj))
        if not isinstance(obj, dict):
            raise ComidError(
                f"entity name decoding failure: expected an object, got {_kind(obj)}"
            )
        typ = obj.get("type")
        if not isinstance(typ, str) or typ == "":
            raise ComidError("entity name decoding failure: type not set")
        if "value" not in obj:
            raise ComidError(
                f"entity name decoding failure: no value provided for {typ}"
            )
        template = new_entity_name(None, typ)
        try:
            value = type(template.value).from_json_value(obj["value"])
        except ComidError as exc:
            raise ComidError(f"cannot unmarshal entity name: {exc}") from exc
        try:
            value.valid()
        except ComidError as exc:
            raise ComidError(f"invalid {typ}: {exc}") from exc
        return cls(value)

    @classmethod
    def from_json(cls, data: str | bytes) -> "EntityName":
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(f"entity name decoding failure: {exc}") from exc
        return cls.from_json_value(obj)


EntityNameFactory = Callable[[Any], EntityName]


def new_string_entity_name(val: Any) -> EntityName:
    """Build a text entity name from a string or UTF-8 bytes."""
    if val is None:
        return EntityName(StringEntityName(""))
    if isinstance(val, str):
        return EntityName(StringEntityName(val))
    if isinstance(val, (bytes, bytearray)):
        try:
            text = bytes(val).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ComidError("bytes do not form a valid UTF-8 string") from exc
        return EntityName(StringEntityName(text))
    raise ComidError(
        f"unexpected type for string entity name: {type(val).__name__}"
    )


_ENTITY_NAME_FACTORIES: dict[str, EntityNameFactory] = {
    STRING_TYPE: new_string_entity_name,
}


def new_entity_name(val: Any, typ: str) -> EntityName:
    """Build an entity name of the named type from ``val``."""
    factory = _ENTITY_NAME_FACTORIES.get(typ)
    if factory is None:
        raise ComidError(f"unexpected entity name type: {typ}")
    return factory(val)


def register_entity_name_type(tag: int, factory: EntityNameFactory) -> None:
    """Register a new entity name value type produced by ``factory`` under ``tag``."""
    nil_val = factory(None)
    typ = nil_val.value.type_name()
    if typ in _ENTITY_NAME_FACTORIES:
        raise ComidError(f'entity name type with name "{typ}" already exists')
    register_tag(tag, type(nil_val.value))
    _ENTITY_NAME_FACTORIES[typ] = factory


def _scheme(s: str) -> str:
    for i, c in enumerate(s):
        if c.isascii() and c.isalpha():
            continue
        if c.isascii() and (c.isdigit() or c in "+-."):
            if i == 0:
                return ""
            continue
        if c == ":":
            if i == 0:
                raise ValueError("missing protocol scheme")
            return s[:i]
        return ""
    return ""


def is_absolute_uri(s: str) -> None:
    """Raise unless ``s`` parses as a URI with a scheme."""
    try:
        if any(ord(c) < 0x20 or ord(c) == 0x7F for c in s):
            raise ValueError("invalid control character in URL")
        scheme = _scheme(s)
        urlsplit(s)
    except ValueError as exc:
        raise ComidError(f"{_quote(s)} failed to parse as URI: {exc}") from exc
    if not scheme:
        raise ComidError(f"{_quote(s)} is not an absolute URI")


def string_to_uri(s: str | None) -> TaggedURI | None:
    """Turn an absolute URI string into a TaggedURI; None stays None."""
    if s is None:
        return None
    try:
        is_absolute_uri(s)
    except ComidError as exc:
        raise ComidError(f"expecting an absolute URI: {exc}") from exc
    return TaggedURI(s)


register_tag(32, TaggedURI)