"""Partial clone filter specifications."""

from __future__ import annotations

from enum import Enum

from mizzle.limits import ProtocolError

__all__ = ["Filter"]


class Filter(Enum):
    """A supported partial clone filter."""

    BLOB_NONE = "blob:none"
    TREE_NONE = "tree:0"

    @classmethod
    def parse(cls, spec: str) -> "Filter":
        """Parse a filter spec as sent by the git client."""
        try:
            return cls(spec)
        except ValueError:
            raise ProtocolError(f"unsupported filter: {spec}") from None