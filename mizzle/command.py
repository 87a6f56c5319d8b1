"""Reading the command line that opens a protocol v2 request."""

from __future__ import annotations

from enum import Enum

from mizzle.limits import ProtocolError
from mizzle.pktline import PacketKind, PacketLineReader

__all__ = ["Command", "read_command"]


class Command(Enum):
    """A protocol v2 command requested by the client."""

    FETCH = "fetch"
    LIST_REFS = "ls-refs"
    EMPTY = "empty"


_COMMANDS = {
    b"ls-refs": Command.LIST_REFS,
    b"fetch": Command.FETCH,
}


def read_command(reader: PacketLineReader) -> Command:
    """Read the ``command=<name>`` line; a flush packet means no command."""
    line = reader.read_line()
    if line is None:
        raise ProtocolError("no line when expecting command")
    if line.kind is PacketKind.FLUSH:
        return Command.EMPTY
    if line.data is None:
        raise ProtocolError("no data when expecting command")
    data = line.data.removesuffix(b"\n")
    if not data.startswith(b"command="):
        raise ProtocolError("expected command")
    name = data[len(b"command="):]
    try:
        return _COMMANDS[name]
    except KeyError:
        raise ProtocolError(f"unrecognised command: {name!r}") from None