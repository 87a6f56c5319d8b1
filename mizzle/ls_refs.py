"""Parsing of ls-refs command arguments."""

from __future__ import annotations

from dataclasses import dataclass, field

from mizzle.limits import ProtocolError, ProtocolLimits, check_limit
from mizzle.pktline import PacketKind, PacketLineReader, skip_till_delimiter

__all__ = ["ListRefsArgs", "read_lsrefs_args"]

_REF_PREFIX = b"ref-prefix "


@dataclass
class ListRefsArgs:
    """Arguments of an ls-refs request.

    ``prefixes`` is purely an optimisation hint: a server may return refs
    that match none of them.
    """

    symrefs: bool = False
    peel: bool = False
    prefixes: list[bytes] = field(default_factory=list)
    unborn: bool = False


_FLAGS = {b"peel": "peel", b"symrefs": "symrefs", b"unborn": "unborn"}


def read_lsrefs_args(
    reader: PacketLineReader, limits: ProtocolLimits | None = None
) -> ListRefsArgs:
    """Skip the capability section, then read arguments up to a flush."""
    limits = limits or ProtocolLimits()
    skip_till_delimiter(reader)
    args = ListRefsArgs()
    while True:
        line = reader.read_line()
        if line is None:
            raise ProtocolError("unexpected eof (missing flush packet?)")
        if line.kind in (PacketKind.FLUSH, PacketKind.RESPONSE_END):
            return args
        if line.kind is PacketKind.DELIMITER:
            raise ProtocolError("unexpected delimiter")
        arg = line.data.removesuffix(b"\n")
        if arg.startswith(_REF_PREFIX):
            args.prefixes.append(arg[len(_REF_PREFIX):])
            check_limit(len(args.prefixes), limits.max_ref_prefixes, "ref-prefix lines")
        elif arg in _FLAGS:
            setattr(args, _FLAGS[arg], True)
        else:
            raise ProtocolError("unrecognised lsrefs argument")