"""Safety limits applied while parsing client requests."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ProtocolError", "ProtocolLimits", "check_limit"]


class ProtocolError(ValueError):
    """Raised when a client request is malformed or exceeds a limit."""


@dataclass(frozen=True)
class ProtocolLimits:
    """Caps on how many items a client may send in a single request.

    Every field has a generous default that no legitimate client should hit.
    Use :func:`dataclasses.replace` or keyword arguments to tighten them.
    """

    max_ref_updates: int = 10_000
    max_wants: int = 100_000
    max_haves: int = 100_000
    max_want_refs: int = 10_000
    max_ref_prefixes: int = 1_000


def check_limit(count: int, maximum: int, name: str) -> None:
    """Raise :class:`ProtocolError` if ``count`` exceeds ``maximum``."""
    if count > maximum:
        raise ProtocolError(f"too many {name} ({count} exceeds limit of {maximum})")