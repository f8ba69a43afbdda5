"""CCA platform configuration identifier."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from comid.cbor import ComidError, register_tag

CCA_PLATFORM_CONFIG_ID_TYPE = "cca.platform-config-id"


@dataclass
class CCAPlatformConfigID:
    """Untagged platform configuration identifier."""

    value: str = ""

    @property
    def empty(self) -> bool:
        return self.value == ""

    def set(self, v: str) -> None:
        if v == "":
            raise ComidError("empty input string")
        self.value = v

    def get(self) -> "CCAPlatformConfigID":
        if self.value == "":
            raise ComidError("empty CCA platform config ID")
        return self


class TaggedCCAPlatformConfigID(str):
    """Platform configuration identifier carried under CBOR tag 602."""

    def valid(self) -> None:
        if self == "":
            raise ComidError("empty value")

    def type_name(self) -> str:
        return CCA_PLATFORM_CONFIG_ID_TYPE

    def is_zero(self) -> bool:
        return len(self) == 0

    def cbor_value(self) -> str:
        return str(self)

    @classmethod
    def from_cbor_value(cls, value: Any) -> "TaggedCCAPlatformConfigID":
        if not isinstance(value, str):
            raise ComidError("platform config id must be a text string")
        return cls(value)

    @classmethod
    def from_json(cls, data: str | bytes) -> "TaggedCCAPlatformConfigID":
        try:
            value = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ComidError(str(exc)) from exc
        if not isinstance(value, str):
            raise ComidError("platform config id must be a JSON string")
        return cls(value)


def new_tagged_cca_platform_config_id(val: Any) -> TaggedCCAPlatformConfigID:
    """Build a tagged identifier from any supported input."""
    if val is None:
        return TaggedCCAPlatformConfigID("")
    if isinstance(val, TaggedCCAPlatformConfigID):
        return val
    if isinstance(val, CCAPlatformConfigID):
        return TaggedCCAPlatformConfigID(val.value)
    if isinstance(val, str):
        return TaggedCCAPlatformConfigID(val)
    if isinstance(val, (bytes, bytearray)):
        try:
            return TaggedCCAPlatformConfigID(bytes(val).decode("utf-8"))
        except UnicodeDecodeError:
            raise ComidError("bytes do not form a valid UTF-8 string") from None
    raise ComidError(
        f"unexpected type for CCA platform-config-id: {type(val).__name__}"
    )


register_tag(602, TaggedCCAPlatformConfigID)