import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from comid.cbor import ComidError, decode, encode
from comid.pkix import (
    TaggedPKIXBase64Cert,
    TaggedPKIXBase64CertPath,
    TaggedPKIXBase64Key,
)


def _make_ec_key():
    return ec.generate_private_key(ec.SECP256R1())


def _public_pem(signing_key) -> str:
    return (
        signing_key.public_key()
        .public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


def _cert_pem(signing_key, common_name: str) -> str:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(1)
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=365))
        .sign(signing_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


def _numbers(public_key):
    return public_key.public_numbers()


def test_key_public_key_matches():
    signing_key = _make_ec_key()
    key = TaggedPKIXBase64Key(_public_pem(signing_key))
    key.valid()
    assert _numbers(key.public_key()) == _numbers(signing_key.public_key())
    assert key.type_name() == "pkix-base64-key"


def test_key_empty():
    with pytest.raises(ComidError, match="^key value not set$"):
        TaggedPKIXBase64Key("").valid()


def test_key_not_pem():
    with pytest.raises(ComidError, match="^could not decode PEM block$"):
        TaggedPKIXBase64Key("lol, nope!").public_key()


def test_key_trailing_data():
    pem = _public_pem(_make_ec_key()) + "junk"
    with pytest.raises(ComidError, match="^trailing data found after PEM block$"):
        TaggedPKIXBase64Key(pem).public_key()


def test_key_wrong_block_type():
    cert = _cert_pem(_make_ec_key(), "test.example.com")
    with pytest.raises(ComidError) as info:
        TaggedPKIXBase64Key(cert).public_key()
    assert str(info.value) == (
        'unexpected PEM block type: "CERTIFICATE", expected "PUBLIC KEY"'
    )


def test_key_bad_der():
    pem = "-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----\n"
    with pytest.raises(ComidError, match="^unable to parse public key"):
        TaggedPKIXBase64Key(pem).public_key()


def test_cert_public_key():
    signing_key = _make_ec_key()
    cert = TaggedPKIXBase64Cert(_cert_pem(signing_key, "test.example.com"))
    cert.valid()
    assert _numbers(cert.public_key()) == _numbers(signing_key.public_key())
    assert cert.type_name() == "pkix-base64-cert"


def test_cert_errors():
    with pytest.raises(ComidError, match="^cert value not set$"):
        TaggedPKIXBase64Cert("").valid()
    with pytest.raises(ComidError, match="^could not decode PEM block$"):
        TaggedPKIXBase64Cert("lol, nope!").valid()
    with pytest.raises(ComidError) as info:
        TaggedPKIXBase64Cert(_public_pem(_make_ec_key())).valid()
    assert str(info.value) == (
        'unexpected PEM block type: "PUBLIC KEY", expected "CERTIFICATE"'
    )


def test_cert_path_leaf_key():
    leaf_key = _make_ec_key()
    other_key = _make_ec_key()
    path = TaggedPKIXBase64CertPath(
        _cert_pem(leaf_key, "leaf.example.com")
        + _cert_pem(other_key, "ca.example.com")
    )
    path.valid()
    assert _numbers(path.public_key()) == _numbers(leaf_key.public_key())
    assert path.type_name() == "pkix-base64-cert-path"


def test_cert_path_errors():
    with pytest.raises(ComidError, match="^cert value not set$"):
        TaggedPKIXBase64CertPath("").valid()
    good = _cert_pem(_make_ec_key(), "leaf.example.com")
    with pytest.raises(ComidError, match="^could not decode PEM block 1$"):
        TaggedPKIXBase64CertPath(good + "garbage").valid()
    with pytest.raises(ComidError, match="^unexpected type for PEM block 1"):
        TaggedPKIXBase64CertPath(good + _public_pem(_make_ec_key())).valid()


@pytest.mark.parametrize(
    "cls,prefix",
    [
        (TaggedPKIXBase64Key, bytes([0xD9, 0x02, 0x2A])),
        (TaggedPKIXBase64Cert, bytes([0xD9, 0x02, 0x2B])),
        (TaggedPKIXBase64CertPath, bytes([0xD9, 0x02, 0x2C])),
    ],
)
def test_cbor_round_trip(cls, prefix):
    value = cls(_public_pem(_make_ec_key()))
    data = encode(value)
    assert data.startswith(prefix)
    out = decode(data)
    assert type(out) is cls
    assert out == value


def test_json_value_round_trip():
    pem = _public_pem(_make_ec_key())
    key = TaggedPKIXBase64Key(pem)
    assert TaggedPKIXBase64Key.from_json_value(key.json_value()) == key
    with pytest.raises(ComidError):
        TaggedPKIXBase64Key.from_json_value(7)