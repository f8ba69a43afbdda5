"""CoMID value types (identities, digests, keys, entity names) with CBOR and JSON serialization."""

__version__ = "0.1.0"