"""Parsing of fetch request arguments (protocol v2 and v1)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Union

from mizzle.limits import ProtocolError, ProtocolLimits, check_limit
from mizzle.pktline import PacketKind, PacketLineReader, skip_till_delimiter
from mizzle.types import ObjectId

__all__ = ["FetchArgs", "read_fetch_args", "read_fetch_args_v1"]

_U32_MAX = 2**32 - 1

_WANT = b"want "
_HAVE = b"have "
_WANT_REF = b"want-ref "
_DEEPEN = b"deepen "
_FILTER = b"filter "
_UNSUPPORTED_PREFIXES = (b"deepen-since ", b"deepen-not ", b"deepen-relative")

_V2_FLAGS = {
    b"done": "done",
    b"thin-pack": "thin_pack",
    b"no-progress": "no_progress",
    b"include-tag": "include_tag",
    b"ofs-delta": "ofs_delta",
    b"wait-for-done": "wait_for_done",
}

_V1_CAPABILITIES = {
    b"ofs-delta": "ofs_delta",
    b"thin-pack": "thin_pack",
    b"no-progress": "no_progress",
    b"include-tag": "include_tag",
}


@dataclass
class FetchArgs:
    """Arguments of a fetch request.

    ``want`` lists object ids the client wants, ``want_refs`` ref names to be
    resolved by the server, and ``have`` objects the client already has.
    ``done`` ends negotiation; ``wait_for_done`` forbids the server from
    declaring ``ready`` on its own. ``deepen`` cuts shallow history at a
    depth and ``filter`` holds a partial clone filter spec.
    """

    want: list[ObjectId] = field(default_factory=list)
    want_refs: list[str] = field(default_factory=list)
    have: list[ObjectId] = field(default_factory=list)
    done: bool = False
    thin_pack: bool = False
    no_progress: bool = False
    include_tag: bool = False
    ofs_delta: bool = False
    wait_for_done: bool = False
    deepen: int | None = None
    filter: str | None = None


def _oid(value: bytes) -> ObjectId:
    try:
        return ObjectId.from_hex(value)
    except ValueError as exc:
        raise ProtocolError(str(exc)) from exc


def _utf8(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProtocolError(f"invalid UTF-8 in request: {value!r}") from exc


def _parse_deepen(value: bytes) -> int:
    text = _utf8(value)
    digits = text[1:] if text.startswith("+") else text
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ProtocolError(f"invalid deepen value: {text!r}")
    depth = int(digits)
    if depth > _U32_MAX:
        raise ProtocolError(f"invalid deepen value: {text!r} is too large")
    if depth == 0:
        raise ProtocolError("deepen 0 is not valid")
    return depth


def read_fetch_args(
    reader: PacketLineReader, limits: ProtocolLimits | None = None
) -> FetchArgs:
    """Skip the capability section, then read v2 fetch arguments up to a flush."""
    limits = limits or ProtocolLimits()
    skip_till_delimiter(reader)
    args = FetchArgs()
    while True:
        line = reader.read_line()
        if line is None:
            raise ProtocolError("unexpected eof (missing flush packet?)")
        if line.kind in (PacketKind.FLUSH, PacketKind.RESPONSE_END):
            return args
        if line.kind is PacketKind.DELIMITER:
            raise ProtocolError("unexpected delimiter")
        arg = line.data.removesuffix(b"\n")
        if arg.startswith(_WANT):
            args.want.append(_oid(arg[len(_WANT):]))
            check_limit(len(args.want), limits.max_wants, "want lines")
        elif arg.startswith(_HAVE):
            args.have.append(_oid(arg[len(_HAVE):]))
            check_limit(len(args.have), limits.max_haves, "have lines")
        elif arg.startswith(_WANT_REF):
            args.want_refs.append(_utf8(arg[len(_WANT_REF):]))
            check_limit(len(args.want_refs), limits.max_want_refs, "want-ref lines")
        elif arg.startswith(_DEEPEN):
            args.deepen = _parse_deepen(arg[len(_DEEPEN):])
        elif arg.startswith(_FILTER):
            args.filter = _utf8(arg[len(_FILTER):])
        elif arg.startswith(_UNSUPPORTED_PREFIXES):
            raise ProtocolError(
                "unsupported fetch argument: " + arg.decode("utf-8", "replace")
            )
        elif arg in _V2_FLAGS:
            setattr(args, _V2_FLAGS[arg], True)
        else:
            raise ProtocolError("unrecognised fetch argument")


def read_fetch_args_v1(
    body: Union[bytes, bytearray, BinaryIO, PacketLineReader],
    limits: ProtocolLimits | None = None,
) -> FetchArgs:
    """Parse a protocol v1 upload-pack request body.

    The first ``want`` line may carry space-separated capabilities after the
    object id. Wants and haves run up to a flush packet, which may be
    followed by a ``done`` line. Unknown lines are ignored.
    """
    limits = limits or ProtocolLimits()
    reader = body if isinstance(body, PacketLineReader) else PacketLineReader(body)
    args = FetchArgs()
    while True:
        line = reader.read_line()
        if line is None:
            raise ProtocolError("unexpected eof in v1 request body")
        if line.kind is PacketKind.FLUSH:
            break
        if line.kind is not PacketKind.DATA:
            continue
        data = line.data.removesuffix(b"\n")
        if data.startswith(_WANT):
            oid_bytes, _, caps = data[len(_WANT):].partition(b" ")
            args.want.append(_oid(oid_bytes))
            check_limit(len(args.want), limits.max_wants, "want lines")
            for cap in caps.split(b" "):
                name = _V1_CAPABILITIES.get(cap)
                if name is not None:
                    setattr(args, name, True)
        elif data.startswith(_HAVE):
            args.have.append(_oid(data[len(_HAVE):]))
            check_limit(len(args.have), limits.max_haves, "have lines")
        elif data.startswith(_DEEPEN):
            args.deepen = _parse_deepen(data[len(_DEEPEN):])
        elif data.startswith(_FILTER):
            args.filter = _utf8(data[len(_FILTER):])

    try:
        trailer = reader.read_line()
    except ProtocolError:
        trailer = None
    if (
        trailer is not None
        and trailer.kind is PacketKind.DATA
        and trailer.data.removesuffix(b"\n") == b"done"
    ):
        args.done = True
    return args