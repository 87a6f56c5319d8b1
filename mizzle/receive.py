"""Parsing of receive-pack (push) request bodies."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, Union

from mizzle.limits import ProtocolError, ProtocolLimits, check_limit
from mizzle.types import ObjectId, PushKind

__all__ = [
    "RefUpdate",
    "preliminary_push_kind",
    "read_receive_request",
    "pack_object_count",
]

_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


@dataclass(frozen=True)
class RefUpdate:
    """One ``<old-oid> <new-oid> <refname>`` command from a push."""

    old_oid: ObjectId
    new_oid: ObjectId
    refname: str


def preliminary_push_kind(update: RefUpdate) -> PushKind:
    """Classify an update without looking at the object database.

    Create and delete are definitive; fast-forward is optimistic and may
    later turn out to be a force push.
    """
    if update.old_oid.is_null():
        return PushKind.CREATE
    if update.new_oid.is_null():
        return PushKind.DELETE
    return PushKind.FAST_FORWARD


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise ProtocolError("unexpected end of receive-pack request")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _oid(value: bytes) -> ObjectId:
    try:
        return ObjectId.from_hex(value)
    except ValueError as exc:
        raise ProtocolError(str(exc)) from exc


def read_receive_request(
    body: Union[bytes, bytearray, BinaryIO], limits: ProtocolLimits | None = None
) -> tuple[list[RefUpdate], BinaryIO]:
    """Read ref-update commands up to the flush packet.

    Returns the updates and the stream positioned at the start of the pack.
    """
    limits = limits or ProtocolLimits()
    if isinstance(body, (bytes, bytearray, memoryview)):
        body = io.BytesIO(bytes(body))
    updates: list[RefUpdate] = []
    first_line = True
    while True:
        header = _read_exact(body, 4)
        if not all(byte in _HEX_DIGITS for byte in header):
            raise ProtocolError(f"invalid pkt-line length header: {header!r}")
        length = int(header, 16)
        if length == 0:
            break
        if length < 4:
            raise ProtocolError(f"invalid pkt-line length: {length}")
        data = _read_exact(body, length - 4).removesuffix(b"\n")
        if first_line:
            first_line = False
            data = data.split(b"\0", 1)[0]
        parts = data.split(b" ", 2)
        if len(parts) < 3:
            continue
        old_hex, new_hex, name = parts
        old_oid, new_oid = _oid(old_hex), _oid(new_hex)
        try:
            refname = name.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ProtocolError(f"ref name is not valid UTF-8: {name!r}") from exc
        updates.append(RefUpdate(old_oid, new_oid, refname))
        check_limit(len(updates), limits.max_ref_updates, "ref updates")
    return updates, body


def pack_object_count(data: bytes) -> int | None:
    """Return the object count from a pack header, or ``None`` if not a pack."""
    if len(data) >= 12 and data[:4] == b"PACK":
        return struct.unpack(">I", data[8:12])[0]
    return None