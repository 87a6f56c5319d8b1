"""Object identifiers and push classification."""

from __future__ import annotations

import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Union

__all__ = ["ObjectId", "PushKind", "PushRef"]

_SHA1_LEN = 20


@dataclass(frozen=True, order=True)
class ObjectId:
    """A SHA-1 git object id."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != _SHA1_LEN:
            raise ValueError(
                f"object id must be {_SHA1_LEN} bytes, got {len(self.raw)}"
            )

    @classmethod
    def from_hex(cls, value: Union[str, bytes, bytearray]) -> "ObjectId":
        """Parse a 40-character hexadecimal object id."""
        text = value.decode("ascii", "replace") if isinstance(value, (bytes, bytearray)) else value
        if len(text) != _SHA1_LEN * 2:
            raise ValueError(f"invalid object id {text!r}: expected 40 hex characters")
        try:
            raw = binascii.unhexlify(text)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"invalid object id {text!r}: not hexadecimal") from exc
        return cls(raw)

    @classmethod
    def null(cls) -> "ObjectId":
        """The all-zero object id used for absent refs."""
        return cls(bytes(_SHA1_LEN))

    def is_null(self) -> bool:
        return not any(self.raw)

    def to_hex(self) -> str:
        return self.raw.hex()

    def __str__(self) -> str:
        return self.to_hex()


class PushKind(Enum):
    """How a push changes a ref."""

    CREATE = "Create"
    DELETE = "Delete"
    FAST_FORWARD = "FastForward"
    FORCE_PUSH = "ForcePush"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PushRef:
    """A single ref update within a push."""

    refname: str
    kind: PushKind