from typing import Any

import pytest

from comid.cbor import ComidError, encode
from comid.entity import (
    EntityName,
    StringEntityName,
    TaggedURI,
    is_absolute_uri,
    new_entity_name,
    new_string_entity_name,
    register_entity_name_type,
    string_to_uri,
)


class _TestEntityName(int):
    def type_name(self) -> str:
        return "test"

    def __str__(self) -> str:
        return str(int(self))

    def valid(self) -> None:
        return None

    def cbor_value(self) -> int:
        return int(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "_TestEntityName":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ComidError("must be uint64")
        return cls(value)

    def json_value(self) -> int:
        return int(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "_TestEntityName":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ComidError("must be uint64")
        return cls(value)


def _new_test_entity_name(val: Any) -> EntityName:
    if val is None:
        return EntityName(_TestEntityName(0))
    if isinstance(val, bool) or not isinstance(val, int):
        raise ComidError("must be uint64")
    return EntityName(_TestEntityName(val))


class _TestEntityNameBadType(_TestEntityName):
    def type_name(self) -> str:
        return "string"


def _new_test_entity_name_bad_type(_val: Any) -> EntityName:
    return EntityName(_TestEntityNameBadType(7))


_registered = False


def _ensure_registered() -> None:
    global _registered
    if not _registered:
        register_entity_name_type(99994, _new_test_entity_name)
        _registered = True


def test_register_entity_name_type_errors():
    with pytest.raises(ComidError, match="^tag 32 is already registered$"):
        register_entity_name_type(32, _new_test_entity_name)
    with pytest.raises(
        ComidError, match='^entity name type with name "string" already exists$'
    ):
        register_entity_name_type(99994, _new_test_entity_name_bad_type)
    _ensure_registered()
    assert str(new_entity_name(3, "test")) == "3"


@pytest.mark.parametrize(
    "value,typ,expected_bytes,expected_string",
    [
        ("test", "string", bytes([0x64, 0x74, 0x65, 0x73, 0x74]), "test"),
        (7, "test", bytes([0xDA, 0x00, 0x01, 0x86, 0x9A, 0x07]), "7"),
    ],
)
def test_entity_name_cbor(value, typ, expected_bytes, expected_string):
    _ensure_registered()
    en = new_entity_name(value, typ)
    data = en.to_cbor()
    assert data == expected_bytes
    out = EntityName.from_cbor(data)
    assert str(out) == expected_string
    assert out.type_name() == typ


@pytest.mark.parametrize(
    "value,typ,expected_json,expected_string",
    [
        ("test", "string", '"test"', "test"),
        (7, "test", '{"type":"test","value":7}', "7"),
    ],
)
def test_entity_name_json(value, typ, expected_json, expected_string):
    _ensure_registered()
    en = new_entity_name(value, typ)
    data = en.to_json()
    assert data == expected_json
    out = EntityName.from_json(data)
    assert str(out) == expected_string
    assert out.type_name() == typ


def test_new_string_entity_name():
    out = new_string_entity_name(None)
    with pytest.raises(ComidError, match="^empty entity-name$"):
        out.valid()

    out = new_string_entity_name(b"test")
    assert str(out) == "test"

    with pytest.raises(
        ComidError, match="^unexpected type for string entity name: int$"
    ):
        new_string_entity_name(7)


def test_new_string_entity_name_bad_utf8():
    with pytest.raises(ComidError, match="^bytes do not form a valid UTF-8 string$"):
        new_string_entity_name(b"\x80est")


def test_new_entity_name_unknown_type():
    assert str(new_entity_name("test", "string")) == "test"
    with pytest.raises(ComidError, match="^unexpected entity name type: int$"):
        new_entity_name(7, "int")


def test_entity_name_empty_invalid():
    with pytest.raises(ComidError, match="^empty entity name$"):
        EntityName().valid()
    with pytest.raises(ComidError, match="^empty entity name$"):
        EntityName().to_cbor()
    with pytest.raises(ComidError, match="^empty entity-name$"):
        EntityName(StringEntityName("")).to_json()


def test_entity_name_from_cbor_empty():
    with pytest.raises(ComidError, match="^empty$"):
        EntityName.from_cbor(b"")


def test_entity_name_from_json_unknown_type():
    with pytest.raises(ComidError, match="^unexpected entity name type: foo$"):
        EntityName.from_json('{"type":"foo","value":1}')


def test_entity_name_from_json_bad_value():
    _ensure_registered()
    with pytest.raises(ComidError, match="^cannot unmarshal entity name: must be uint64$"):
        EntityName.from_json('{"type":"test","value":"x"}')


def test_entity_name_from_json_missing_value():
    with pytest.raises(
        ComidError, match="^entity name decoding failure: no value provided for test$"
    ):
        EntityName.from_json('{"type":"test"}')


def test_string_to_uri_nok():
    with pytest.raises(ComidError) as exc:
        string_to_uri("@@@")
    assert str(exc.value) == 'expecting an absolute URI: "@@@" is not an absolute URI'


def test_string_to_uri_ok():
    assert string_to_uri(None) is None
    uri = string_to_uri("https://acme.example")
    assert isinstance(uri, TaggedURI)
    assert uri == "https://acme.example"
    assert uri.is_empty() is False


def test_is_absolute_uri_parse_failure():
    with pytest.raises(ComidError, match="failed to parse as URI"):
        is_absolute_uri(":foo")


def test_tagged_uri_cbor_encoding():
    data = encode(TaggedURI("https://a.example"))
    assert data == b"\xd8\x20\x71" + b"https://a.example"
    assert TaggedURI("").is_empty() is True