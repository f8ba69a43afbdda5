"""Cryptographic keys: PEM keys and certificates, COSE keys and thumbprints."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any, Callable

import cbor2
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, x448, x25519

from comid.cbor import ComidError, decode, decode_base64, encode, register_tag
from comid.digests import HashEntry
from comid.pkix import (
    PKIX_BASE64_CERT_PATH_TYPE,
    PKIX_BASE64_CERT_TYPE,
    PKIX_BASE64_KEY_TYPE,
    TaggedPKIXBase64Cert,
    TaggedPKIXBase64CertPath,
    TaggedPKIXBase64Key,
)

COSE_KEY_TYPE = "cose-key"
THUMBPRINT_TYPE = "thumbprint"
CERT_THUMBPRINT_TYPE = "cert-thumbprint"
CERT_PATH_THUMBPRINT_TYPE = "cert-path-thumbprint"

_KTY_OKP = 1
_KTY_EC2 = 2
_KTY_SYMMETRIC = 4

_EC2_CURVES: dict[int, tuple[type, int]] = {
    1: (ec.SECP256R1, 32),
    2: (ec.SECP384R1, 48),
    3: (ec.SECP521R1, 66),
}
_OKP_CURVES: dict[int, tuple[Any, Any]] = {
    4: (x25519.X25519PublicKey, x25519.X25519PrivateKey),
    5: (x448.X448PublicKey, x448.X448PrivateKey),
    6: (ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey),
    7: (ed448.Ed448PublicKey, ed448.Ed448PrivateKey),
}


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (bytes, bytearray)):
        return "byte string"
    if isinstance(value, str):
        return "text string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__


def _load_cbor(data: bytes) -> Any:
    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, TypeError, EOFError) as exc:
        raise ComidError(f"cbor decoding failure: {exc}") from exc


def _optional_bytes(obj: dict, label: int, what: str) -> bytes | None:
    value = obj.get(label)
    if value is not None and not isinstance(value, (bytes, bytearray)):
        raise ComidError(f"COSE_Key {what} must be a byte string")
    return None if value is None else bytes(value)


def _check_cose_key(obj: Any) -> dict:
    """Check the shape of a decoded COSE_Key map and return it."""
    if not isinstance(obj, dict):
        raise ComidError(f"COSE_Key must be a map, got {_kind(obj)}")
    kty = obj.get(1)
    if kty is None:
        raise ComidError("COSE_Key kty not set")
    if kty == _KTY_EC2:
        crv = obj.get(-1)
        if crv not in _EC2_CURVES:
            raise ComidError(f"unsupported EC2 curve: {crv}")
        size = _EC2_CURVES[crv][1]
        x = _optional_bytes(obj, -2, "x")
        y = _optional_bytes(obj, -3, "y")
        d = _optional_bytes(obj, -4, "d")
        if x is None or y is None:
            if d is None:
                raise ComidError("EC2 key requires x and y, or d")
        elif len(x) != size or len(y) != size:
            raise ComidError(f"invalid EC2 coordinate length for curve {crv}")
    elif kty == _KTY_OKP:
        crv = obj.get(-1)
        if crv not in _OKP_CURVES:
            raise ComidError(f"unsupported OKP curve: {crv}")
        x = _optional_bytes(obj, -2, "x")
        d = _optional_bytes(obj, -4, "d")
        if x is None and d is None:
            raise ComidError("OKP key requires x or d")
    elif kty == _KTY_SYMMETRIC:
        k = _optional_bytes(obj, -1, "k")
        if not k:
            raise ComidError("symmetric key requires k")
    else:
        raise ComidError(f"unsupported COSE key type: {kty}")
    return obj


def _cose_public_key(obj: dict) -> Any:
    kty = obj[1]
    try:
        if kty == _KTY_EC2:
            curve = _EC2_CURVES[obj[-1]][0]()
            x, y = obj.get(-2), obj.get(-3)
            if x is not None and y is not None:
                return ec.EllipticCurvePublicNumbers(
                    int.from_bytes(x, "big"), int.from_bytes(y, "big"), curve
                ).public_key()
            d = int.from_bytes(obj[-4], "big")
            return ec.derive_private_key(d, curve).public_key()
        if kty == _KTY_OKP:
            public_cls, private_cls = _OKP_CURVES[obj[-1]]
            x = obj.get(-2)
            if x is not None:
                return public_cls.from_public_bytes(bytes(x))
            return private_cls.from_private_bytes(bytes(obj[-4])).public_key()
    except (ValueError, TypeError) as exc:
        raise ComidError(f"invalid COSE_Key: {exc}") from exc
    raise ComidError("symmetric COSE_Key has no public key")


class TaggedCOSEKey(bytes):
    """CBOR-encoded COSE_Key or COSE_KeySet, CBOR tag 558."""

    def __str__(self) -> str:
        return base64.b64encode(self).decode("ascii")

    def _is_key_set(self) -> bool:
        return (self[0] & 0xE0) >> 5 == 4

    def _key(self) -> dict:
        return _check_cose_key(_load_cbor(bytes(self)))

    def _key_set(self) -> list[dict]:
        obj = _load_cbor(bytes(self))
        if not isinstance(obj, list):
            raise ComidError("COSE_KeySet must be an array")
        return [_check_cose_key(k) for k in obj]

    def valid(self) -> None:
        if not self:
            raise ComidError("empty COSE_Key bytes")
        if self._is_key_set():
            self._key_set()
        else:
            self._key()

    def type_name(self) -> str:
        return COSE_KEY_TYPE

    def public_key(self) -> Any:
        if not self:
            raise ComidError("empty COSE_Key value")
        if self._is_key_set():
            keys = self._key_set()
            if not keys:
                raise ComidError("empty COSE_KeySet")
            if len(keys) > 1:
                raise ComidError("COSE_KeySet contains more than one key")
            return _cose_public_key(keys[0])
        return _cose_public_key(self._key())

    def cbor_value(self) -> Any:
        return _load_cbor(bytes(self))

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedCOSEKey":
        return cls(encode(value))


class _Digest(HashEntry):
    """A digest used in place of a key."""

    def public_key(self) -> Any:
        raise ComidError("cannot get PublicKey from a digest")

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "_Digest":
        if not isinstance(value, str):
            raise ComidError(f"cannot unmarshal {_kind(value)} into digest")
        return cls.parse(value)


class TaggedThumbprint(_Digest):
    """Digest of a raw public key, CBOR tag 557."""

    def type_name(self) -> str:
        return THUMBPRINT_TYPE


class TaggedCertThumbprint(_Digest):
    """Digest of a certificate, CBOR tag 559."""

    def type_name(self) -> str:
        return CERT_THUMBPRINT_TYPE


class TaggedCertPathThumbprint(_Digest):
    """Digest of a certification path, CBOR tag 561."""

    def type_name(self) -> str:
        return CERT_PATH_THUMBPRINT_TYPE


@dataclass
class CryptoKey:
    """A key of one of the crypto-key type choices."""

    value: Any = None

    def __str__(self) -> str:
        return "" if self.value is None else str(self.value)

    def _require_value(self) -> Any:
        if self.value is None:
            raise ComidError("crypto key value not set")
        return self.value

    def valid(self) -> None:
        self._require_value().valid()

    def type_name(self) -> str:
        return "" if self.value is None else self.value.type_name()

    def public_key(self) -> Any:
        return self._require_value().public_key()

    def json_value(self) -> dict:
        value = self._require_value()
        return {"type": value.type_name(), "value": str(value)}

    def to_json(self) -> str:
        return json.dumps(self.json_value(), separators=(",", ":"))

    @classmethod
    def from_json_value(cls, obj: Any) -> "CryptoKey":
        if not isinstance(obj, dict):
            raise ComidError(
                f"crypto key decoding failure: expected an object, got {_kind(obj)}"
            )
        typ = obj.get("type")
        if typ is None or typ == "":
            raise ComidError("key type not set")
        if not isinstance(typ, str):
            raise ComidError("key type must be a string")
        if "value" not in obj:
            raise ComidError(f"no value provided for {typ}")
        factory = _CRYPTO_KEY_FACTORIES.get(typ)
        if factory is None:
            raise ComidError(f'unexpected crypto key type: "{typ}"')
        text = obj["value"]
        if not isinstance(text, str):
            raise ComidError("crypto key value must be a JSON string")
        key = factory(text)
        ret = cls(key.value)
        ret.valid()
        return ret

    @classmethod
    def from_json(cls, data: str | bytes) -> "CryptoKey":
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(str(exc)) from exc
        return cls.from_json_value(obj)

    def cbor_value(self) -> Any:
        return self.value

    def to_cbor(self) -> bytes:
        return encode(self.value)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "CryptoKey":
        if not isinstance(value, tuple(_KEY_VALUE_TYPES)):
            raise ComidError(f"cannot unmarshal {_kind(value)} into crypto key value")
        return cls(value)

    @classmethod
    def from_cbor(cls, data: bytes) -> "CryptoKey":
        return cls.from_cbor_value(decode(data))


CryptoKeyFactory = Callable[[Any], CryptoKey]


def _new_pem(k: Any, kind: type) -> CryptoKey:
    if not isinstance(k, str):
        raise ComidError(f"value must be a string; found {type(k).__name__}")
    value = kind(k)
    value.valid()
    return CryptoKey(value)


def new_pkix_base64_key(k: Any) -> CryptoKey:
    """Build a key from a PEM-encoded SubjectPublicKeyInfo."""
    return _new_pem(k, TaggedPKIXBase64Key)


def new_pkix_base64_cert(k: Any) -> CryptoKey:
    """Build a key from a PEM-encoded X.509 certificate."""
    return _new_pem(k, TaggedPKIXBase64Cert)


def new_pkix_base64_cert_path(k: Any) -> CryptoKey:
    """Build a key from concatenated PEM-encoded certificates."""
    return _new_pem(k, TaggedPKIXBase64CertPath)


def new_cose_key(k: Any) -> CryptoKey:
    """Build a key from COSE_Key bytes or their base64 encoding."""
    if isinstance(k, (bytes, bytearray)):
        raw = bytes(k)
    elif isinstance(k, str):
        try:
            raw = decode_base64(k)
        except ComidError as exc:
            raise ComidError(f"base64 decode error: {exc}") from exc
    else:
        raise ComidError(f"value must be bytes or a string; found {type(k).__name__}")
    value = TaggedCOSEKey(raw)
    value.valid()
    return CryptoKey(value)


def _new_digest(k: Any, kind: type) -> CryptoKey:
    if isinstance(k, str):
        try:
            entry = HashEntry.parse(k)
        except ComidError as exc:
            raise ComidError(f"hash entry decode error: {exc}") from exc
    elif isinstance(k, HashEntry):
        entry = k
    else:
        raise ComidError(
            f"value must be a HashEntry or a string; found {type(k).__name__}"
        )
    key = CryptoKey(kind(entry.alg_id, bytes(entry.value)))
    key.valid()
    return key


def new_thumbprint(k: Any) -> CryptoKey:
    """Build a raw public key thumbprint from a hash entry or its text form."""
    return _new_digest(k, TaggedThumbprint)


def new_cert_thumbprint(k: Any) -> CryptoKey:
    """Build a certificate thumbprint from a hash entry or its text form."""
    return _new_digest(k, TaggedCertThumbprint)


def new_cert_path_thumbprint(k: Any) -> CryptoKey:
    """Build a certification path thumbprint from a hash entry or its text form."""
    return _new_digest(k, TaggedCertPathThumbprint)


_CRYPTO_KEY_FACTORIES: dict[str, CryptoKeyFactory] = {
    PKIX_BASE64_KEY_TYPE: new_pkix_base64_key,
    PKIX_BASE64_CERT_TYPE: new_pkix_base64_cert,
    PKIX_BASE64_CERT_PATH_TYPE: new_pkix_base64_cert_path,
    COSE_KEY_TYPE: new_cose_key,
    THUMBPRINT_TYPE: new_thumbprint,
    CERT_THUMBPRINT_TYPE: new_cert_thumbprint,
    CERT_PATH_THUMBPRINT_TYPE: new_cert_path_thumbprint,
}

_KEY_VALUE_TYPES: list[type] = [
    TaggedPKIXBase64Key,
    TaggedPKIXBase64Cert,
    TaggedPKIXBase64CertPath,
    TaggedCOSEKey,
    TaggedThumbprint,
    TaggedCertThumbprint,
    TaggedCertPathThumbprint,
]


def new_crypto_key(k: Any, typ: str) -> CryptoKey:
    """Build a crypto key of the named type from ``k``."""
    factory = _CRYPTO_KEY_FACTORIES.get(typ)
    if factory is None:
        raise ComidError(f"unexpected CryptoKey type: {typ}")
    return factory(k)


def register_crypto_key_type(tag: int, factory: CryptoKeyFactory) -> None:
    """Register a new crypto key value type produced by ``factory`` under ``tag``."""
    nil_val = factory(None)
    typ = nil_val.type_name()
    if typ in _CRYPTO_KEY_FACTORIES:
        raise ComidError(f'crypto key type with name "{typ}" already exists')
    value_type = type(nil_val.value)
    register_tag(tag, value_type)
    _CRYPTO_KEY_FACTORIES[typ] = factory
    _KEY_VALUE_TYPES.append(value_type)


register_tag(557, TaggedThumbprint)
register_tag(558, TaggedCOSEKey)
register_tag(559, TaggedCertThumbprint)
register_tag(561, TaggedCertPathThumbprint)