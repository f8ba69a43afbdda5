import pytest

from comid.cbor import ComidError, decode, encode
from comid.taggedbytes import TaggedBytes, new_bytes


def test_new_bytes_inputs_agree():
    raw = bytes([1, 2, 3, 4])
    for v in (raw, bytearray(raw), raw.decode("latin-1") if False else "\x01\x02\x03\x04"):
        assert bytes(new_bytes(v)) == raw


def test_new_bytes_none_is_empty():
    assert new_bytes(None) == b""


@pytest.mark.parametrize("val,name", [(7, "int"), ((1, 2, 3), "tuple")])
def test_new_bytes_bad(val, name):
    with pytest.raises(ComidError, match=f"unexpected type for bytes: {name}"):
        new_bytes(val)


def test_type_name_and_valid():
    tb = new_bytes(b"x")
    assert tb.type_name() == "bytes"
    assert tb.valid() is None


def test_cbor_wire():
    tb = new_bytes(bytes.fromhex("458999786556")[1:])
    assert encode(tb) == bytes.fromhex("d90230458999786556")


def test_cbor_round_trip():
    out = decode(encode(new_bytes(b"abc")))
    assert isinstance(out, TaggedBytes)
    assert out == b"abc"


def test_json_value():
    assert new_bytes(b"\x01\x02\x03").json_value() == "AQID"
    assert TaggedBytes.from_json_value("AQID") == b"\x01\x02\x03"


def test_json_bad_base64():
    with pytest.raises(ComidError, match="illegal base64 data at input byte 0"):
        TaggedBytes.from_json_value("/0")