import pytest

from comid.cbor import ComidError
from comid.macaddr import MACaddr, parse_mac


def test_colon_and_hyphen_agree():
    assert parse_mac("00:00:5e:00:53:01") == parse_mac("00-00-5e-00-53-01")


def test_eui64_length():
    assert len(parse_mac("02:00:5e:10:00:00:00:01")) == 8


def test_dotted_agrees():
    assert parse_mac("0000.5e00.5301") == parse_mac("00:00:5e:00:53:01")


def test_to_json_canonical():
    assert MACaddr(bytes.fromhex("00005e005301")).to_json() == '"00:00:5e:00:53:01"'


def test_json_round_trip():
    mac = parse_mac("02-00-5E-10-00-00-00-01")
    assert MACaddr.from_json(mac.to_json()) == mac


@pytest.mark.parametrize("text", ["00:00:5e", "zz:00:5e:00:53:01", "00:00-5e:00:53:01"])
def test_parse_bad(text):
    with pytest.raises(ComidError, match="invalid MAC address"):
        parse_mac(text)


def test_from_json_bad():
    with pytest.raises(ComidError, match="^bad MAC address"):
        MACaddr.from_json('"nope"')