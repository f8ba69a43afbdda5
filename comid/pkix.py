"""PEM-encoded public keys, certificates and certificate paths."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from comid.cbor import ComidError, register_tag

PKIX_BASE64_KEY_TYPE = "pkix-base64-key"
PKIX_BASE64_CERT_TYPE = "pkix-base64-cert"
PKIX_BASE64_CERT_PATH_TYPE = "pkix-base64-cert-path"

_BEGIN = "-----BEGIN "
_DASHES = "-----"


@dataclass(frozen=True)
class _PemBlock:
    type: str
    data: bytes


def _pem_decode(text: str) -> tuple[_PemBlock | None, str]:
    """Find the next PEM block; return it with the text that follows it."""
    rest = text
    while True:
        start = rest.find(_BEGIN)
        if start < 0:
            return None, text
        after = rest[start + len(_BEGIN):]
        nl = after.find("\n")
        header = (after if nl < 0 else after[:nl]).rstrip("\r \t")
        if nl < 0 or not header.endswith(_DASHES):
            rest = after
            continue
        typ = header[: -len(_DASHES)]
        body = after[nl + 1:]
        end_marker = f"-----END {typ}{_DASHES}"
        end = body.find(end_marker)
        if end < 0:
            rest = after
            continue
        lines = [
            line.strip()
            for line in body[:end].splitlines()
            if line.strip() and ":" not in line
        ]
        try:
            data = base64.b64decode("".join(lines), validate=True)
        except (binascii.Error, ValueError):
            rest = after
            continue
        trailer = body[end + len(end_marker):]
        nl = trailer.find("\n")
        end_line, remainder = (
            (trailer, "") if nl < 0 else (trailer[:nl], trailer[nl + 1:])
        )
        if end_line.strip():
            rest = after
            continue
        return _PemBlock(typ, data), remainder


def _expect_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ComidError(f"{what} must be a text string")
    return value


class TaggedPKIXBase64Key(str):
    """PEM-encoded SubjectPublicKeyInfo, CBOR tag 554."""

    def valid(self) -> None:
        self.public_key()

    def type_name(self) -> str:
        return PKIX_BASE64_KEY_TYPE

    def public_key(self) -> Any:
        if self == "":
            raise ComidError("key value not set")
        block, rest = _pem_decode(str(self))
        if block is None:
            raise ComidError("could not decode PEM block")
        if rest:
            raise ComidError("trailing data found after PEM block")
        if block.type != "PUBLIC KEY":
            raise ComidError(
                f'unexpected PEM block type: "{block.type}", expected "PUBLIC KEY"'
            )
        try:
            return serialization.load_der_public_key(block.data)
        except (ValueError, TypeError) as exc:
            raise ComidError(f"unable to parse public key: {exc}") from exc

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedPKIXBase64Key":
        return cls(_expect_str(value, PKIX_BASE64_KEY_TYPE))

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "TaggedPKIXBase64Key":
        return cls(_expect_str(value, PKIX_BASE64_KEY_TYPE))


class TaggedPKIXBase64Cert(str):
    """PEM-encoded X.509 certificate, CBOR tag 555."""

    def valid(self) -> None:
        self._cert()

    def type_name(self) -> str:
        return PKIX_BASE64_CERT_TYPE

    def public_key(self) -> Any:
        cert = self._cert()
        try:
            return cert.public_key()
        except (ValueError, TypeError) as exc:
            raise ComidError("cert does not contain a crypto.PublicKey") from exc

    def _cert(self) -> x509.Certificate:
        if self == "":
            raise ComidError("cert value not set")
        block, rest = _pem_decode(str(self))
        if block is None:
            raise ComidError("could not decode PEM block")
        if rest:
            raise ComidError("trailing data found after PEM block")
        if block.type != "CERTIFICATE":
            raise ComidError(
                f'unexpected PEM block type: "{block.type}", expected "CERTIFICATE"'
            )
        try:
            return x509.load_der_x509_certificate(block.data)
        except (ValueError, TypeError) as exc:
            raise ComidError(f"could not parse x509 cert: {exc}") from exc

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedPKIXBase64Cert":
        return cls(_expect_str(value, PKIX_BASE64_CERT_TYPE))

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "TaggedPKIXBase64Cert":
        return cls(_expect_str(value, PKIX_BASE64_CERT_TYPE))


class TaggedPKIXBase64CertPath(str):
    """Concatenated PEM certificates, each certifying the one before; tag 556."""

    def valid(self) -> None:
        self._cert_path()

    def type_name(self) -> str:
        return PKIX_BASE64_CERT_PATH_TYPE

    def public_key(self) -> Any:
        certs = self._cert_path()
        if not certs:
            raise ComidError("empty cert path")
        try:
            return certs[0].public_key()
        except (ValueError, TypeError) as exc:
            raise ComidError("leaf cert does not contain a crypto.PublicKey") from exc

    def _cert_path(self) -> list[x509.Certificate]:
        if self == "":
            raise ComidError("cert value not set")
        certs: list[x509.Certificate] = []
        rest = str(self)
        while rest:
            i = len(certs)
            block, rest = _pem_decode(rest)
            if block is None:
                raise ComidError(f"could not decode PEM block {i}")
            if block.type != "CERTIFICATE":
                raise ComidError(
                    f'unexpected type for PEM block {i}: "{block.type}", '
                    'expected "CERTIFICATE"'
                )
            try:
                certs.append(x509.load_der_x509_certificate(block.data))
            except (ValueError, TypeError) as exc:
                raise ComidError(
                    f"could not parse x509 cert in PEM block {i}: {exc}"
                ) from exc
        return certs

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedPKIXBase64CertPath":
        return cls(_expect_str(value, PKIX_BASE64_CERT_PATH_TYPE))

    def json_value(self) -> str:
        return str(self)

    @classmethod
    def from_json_value(cls, value: Any) -> "TaggedPKIXBase64CertPath":
        return cls(_expect_str(value, PKIX_BASE64_CERT_PATH_TYPE))


register_tag(554, TaggedPKIXBase64Key)
register_tag(555, TaggedPKIXBase64Cert)
register_tag(556, TaggedPKIXBase64CertPath)