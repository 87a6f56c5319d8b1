"""Parsers and types for serving the Git smart protocol."""

__version__ = "0.1.0"

__all__ = [
    "auth_types",
    "command",
    "fetch",
    "limits",
    "ls_refs",
    "pack",
    "pktline",
    "receive",
    "types",
]