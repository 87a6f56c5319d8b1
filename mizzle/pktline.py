"""Reading and writing git pkt-line framed data."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterator, Union

from mizzle.limits import ProtocolError

__all__ = [
    "FLUSH_PKT",
    "DELIMITER_PKT",
    "RESPONSE_END_PKT",
    "MAX_DATA_LEN",
    "PacketKind",
    "PacketLine",
    "PacketLineReader",
    "encode_pkt_line",
    "skip_till_delimiter",
]

FLUSH_PKT = b"0000"
DELIMITER_PKT = b"0001"
RESPONSE_END_PKT = b"0002"

_HEADER_LEN = 4
MAX_LINE_LEN = 65520
MAX_DATA_LEN = MAX_LINE_LEN - _HEADER_LEN
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


class PacketKind(Enum):
    """The kind of a single pkt-line."""

    DATA = "data"
    FLUSH = "flush"
    DELIMITER = "delimiter"
    RESPONSE_END = "response-end"


@dataclass(frozen=True)
class PacketLine:
    """One decoded pkt-line; ``data`` is set only for data lines."""

    kind: PacketKind
    data: bytes | None = None


_SPECIAL = {
    0: PacketLine(PacketKind.FLUSH),
    1: PacketLine(PacketKind.DELIMITER),
    2: PacketLine(PacketKind.RESPONSE_END),
}


def encode_pkt_line(data: bytes) -> bytes:
    """Frame ``data`` as a data pkt-line."""
    if not data:
        raise ProtocolError("pkt-line data must not be empty")
    if len(data) > MAX_DATA_LEN:
        raise ProtocolError(
            f"pkt-line data of {len(data)} bytes exceeds limit of {MAX_DATA_LEN}"
        )
    return b"%04x" % (len(data) + _HEADER_LEN) + bytes(data)


class PacketLineReader:
    """Pulls pkt-lines one at a time from a binary stream or a bytes object."""

    def __init__(self, source: Union[bytes, bytearray, memoryview, BinaryIO]) -> None:
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self.stream = source

    def _read(self, size: int) -> bytes:
        chunks = []
        remaining = size
        while remaining:
            chunk = self.stream.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def read_line(self) -> PacketLine | None:
        """Return the next pkt-line, or ``None`` at a clean end of stream."""
        header = self._read(_HEADER_LEN)
        if not header:
            return None
        if len(header) < _HEADER_LEN:
            raise ProtocolError("unexpected end of stream inside pkt-line header")
        if not all(byte in _HEX_DIGITS for byte in header):
            raise ProtocolError(f"invalid pkt-line length header: {header!r}")
        length = int(header, 16)
        special = _SPECIAL.get(length)
        if special is not None:
            return special
        if length < _HEADER_LEN:
            raise ProtocolError(f"invalid pkt-line length: {length}")
        if length == _HEADER_LEN:
            raise ProtocolError("pkt-line data is empty")
        if length > MAX_LINE_LEN:
            raise ProtocolError(
                f"pkt-line length {length} exceeds limit of {MAX_LINE_LEN}"
            )
        payload = self._read(length - _HEADER_LEN)
        if len(payload) < length - _HEADER_LEN:
            raise ProtocolError("unexpected end of stream inside pkt-line data")
        return PacketLine(PacketKind.DATA, payload)

    def __iter__(self) -> Iterator[PacketLine]:
        while (line := self.read_line()) is not None:
            yield line


def skip_till_delimiter(reader: PacketLineReader) -> None:
    """Consume data lines up to and including the next delimiter packet."""
    while True:
        line = reader.read_line()
        if line is None:
            raise ProtocolError("expected delimiter")
        if line.kind is PacketKind.DELIMITER:
            return
        if line.kind in (PacketKind.FLUSH, PacketKind.RESPONSE_END):
            raise ProtocolError("found end of response expected delimiter")