# comid

Value types from the Concise Module Identifier (CoMID) data model: instance
and group identities, digests, integrity registers, cryptographic keys,
entity names and a few smaller values. Each type can be validated and
serialized to and from CBOR and JSON. Problems are reported by raising
`comid.cbor.ComidError`, a subclass of `ValueError`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `comid.cbor`: the CBOR tag registry (`register_tag`, `tag_for`) and
  `encode` / `decode`, which produce deterministic CBOR and turn registered
  tags into their classes. Also `ComidError`.
- `comid.taggedbytes`: `TaggedBytes` (CBOR tag 560) and `new_bytes`, which
  accepts `None`, `str` or `bytes`.
- `comid.ccaplatformconfigid`: `CCAPlatformConfigID` and
  `TaggedCCAPlatformConfigID` (tag 602), built with
  `new_tagged_cca_platform_config_id`.
- `comid.digests`: `HashEntry` (algorithm identifier plus value, text form
  `"<alg-name>;<base64>"`), `Digests`, `valid_hash_entry`, `new_hash_entry`,
  and algorithm constants such as `SHA256` and `SHA256_32`.
- `comid.integrityregisters`: `IntegrityRegisters`, digests indexed by an
  unsigned integer or a text key.
- `comid.macaddr`: `MACaddr` and `parse_mac` for MAC-48, EUI-48 and EUI-64
  addresses in colon, hyphen or dot notation.
- `comid.instance`: `Instance`, `new_instance`, `new_bytes_instance` and
  `register_instance_type`.
- `comid.group`: `Group`, `new_group`, `new_bytes_group` and
  `register_group_type`.
- `comid.pkix`: PEM-encoded `TaggedPKIXBase64Key` (tag 554),
  `TaggedPKIXBase64Cert` (tag 555) and `TaggedPKIXBase64CertPath` (tag 556),
  each able to return its public key.
- `comid.cryptokey`: `CryptoKey`, `new_crypto_key`, the constructors
  `new_pkix_base64_key`, `new_pkix_base64_cert`, `new_pkix_base64_cert_path`,
  `new_cose_key`, `new_thumbprint`, `new_cert_thumbprint`,
  `new_cert_path_thumbprint`, the value types `TaggedCOSEKey` (tag 558),
  `TaggedThumbprint` (557), `TaggedCertThumbprint` (559),
  `TaggedCertPathThumbprint` (561), and `register_crypto_key_type`.
- `comid.entity`: `EntityName`, `StringEntityName`, `TaggedURI` (tag 32),
  `new_entity_name`, `new_string_entity_name`, `register_entity_name_type`,
  `is_absolute_uri` and `string_to_uri`.

## Example

```python
from comid.digests import SHA256_32, Digests
from comid.instance import Instance, new_bytes_instance
from comid.cryptokey import new_thumbprint
from comid.entity import new_string_entity_name, string_to_uri

inst = new_bytes_instance(b"\x01\x02\x03")
print(inst.to_json())                  # {"type":"bytes","value":"AQID"}
again = Instance.from_cbor(inst.to_cbor())

digests = Digests().add_digest(SHA256_32, bytes.fromhex("e45b72ab"))
print(digests.to_json())               # ["sha-256-32;5Ftyqw=="]

key = new_thumbprint("sha-256-32;5Ftyqw==")
print(key.to_json())                   # {"type":"thumbprint","value":"sha-256-32;5Ftyqw=="}

name = new_string_entity_name("ACME Ltd.")
uri = string_to_uri("https://acme.example")
```

## Adding value types

`register_instance_type`, `register_group_type`, `register_crypto_key_type`
and `register_entity_name_type` take a CBOR tag and a factory. The factory
must accept `None` and return a wrapper whose value has `type_name()`,
`valid()`, `cbor_value()` / `from_cbor_value()` and `json_value()` /
`from_json_value()`. Registering a tag or type name that is already taken
raises `ComidError`.

## What the package does not do

The package holds the value types only. It has no class identifiers or class
descriptions, no environment that combines class, instance and group, no
operational flags, no key triples or reference/endorsed value triples, no
extension points, and no top-level CoMID document to build, validate or
serialize. Instances and groups have only the bytes type built in; UUID and
UEID identities are not provided. There is no command-line tool.