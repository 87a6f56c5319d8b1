import io

import pytest

from mizzle.fetch import FetchArgs, read_fetch_args, read_fetch_args_v1
from mizzle.limits import ProtocolError, ProtocolLimits
from mizzle.pktline import DELIMITER_PKT, FLUSH_PKT, PacketLineReader, encode_pkt_line
from mizzle.types import ObjectId

OID_A = "a" * 40
OID_B = "b" * 40


def oid_hex(n):
    return format(n, "x").rjust(40, "0")


def v2_request(*lines, end=FLUSH_PKT):
    body = encode_pkt_line(b"agent=test/1.0\n") + DELIMITER_PKT
    body += b"".join(encode_pkt_line(line) for line in lines)
    return PacketLineReader(body + end)


def v1_body(*lines, trailer=b""):
    return b"".join(encode_pkt_line(line) for line in lines) + FLUSH_PKT + trailer


# --- protocol v2 -----------------------------------------------------------


def test_want_ref_parsed():
    args = read_fetch_args(v2_request(b"want-ref refs/heads/main\n"), ProtocolLimits())
    assert args.want_refs == ["refs/heads/main"]
    assert args.want == []
    assert args.wait_for_done is False


def test_wait_for_done_parsed():
    args = read_fetch_args(v2_request(b"wait-for-done\n"), ProtocolLimits())
    assert args.wait_for_done is True


def test_want_ref_and_wait_for_done_together():
    args = read_fetch_args(
        v2_request(
            b"want-ref refs/heads/main\n",
            b"want-ref refs/heads/dev\n",
            b"wait-for-done\n",
        ),
        ProtocolLimits(),
    )
    assert args.want_refs == ["refs/heads/main", "refs/heads/dev"]
    assert args.wait_for_done is True


def test_deepen_parsed():
    args = read_fetch_args(v2_request(b"deepen 3\n", b"done\n"), ProtocolLimits())
    assert args.deepen == 3
    assert args.done is True


def test_filter_parsed():
    args = read_fetch_args(v2_request(b"filter blob:none\n", b"done\n"), ProtocolLimits())
    assert args.filter == "blob:none"


def test_rejects_too_many_wants():
    limits = ProtocolLimits(max_wants=2)
    lines = [f"want {oid_hex(i + 1)}\n".encode() for i in range(3)]
    with pytest.raises(ProtocolError, match="too many want lines"):
        read_fetch_args(v2_request(*lines), limits)


def test_rejects_too_many_haves():
    limits = ProtocolLimits(max_haves=1)
    lines = [f"have {oid_hex(i + 1)}\n".encode() for i in range(2)]
    with pytest.raises(ProtocolError, match="too many have lines"):
        read_fetch_args(v2_request(*lines), limits)


def test_rejects_too_many_want_refs():
    limits = ProtocolLimits(max_want_refs=1)
    with pytest.raises(ProtocolError, match="too many want-ref lines"):
        read_fetch_args(
            v2_request(b"want-ref refs/heads/a\n", b"want-ref refs/heads/b\n"), limits
        )


def test_wants_haves_and_flags():
    args = read_fetch_args(
        v2_request(
            f"want {OID_A}\n".encode(),
            f"have {OID_B}\n".encode(),
            b"thin-pack\n",
            b"no-progress\n",
            b"include-tag\n",
            b"ofs-delta\n",
        )
    )
    assert args.want == [ObjectId.from_hex(OID_A)]
    assert args.have == [ObjectId.from_hex(OID_B)]
    assert (args.thin_pack, args.no_progress, args.include_tag, args.ofs_delta) == (
        True,
        True,
        True,
        True,
    )
    assert args.done is False
    assert args.deepen is None and args.filter is None


def test_response_end_terminates():
    args = read_fetch_args(v2_request(b"done\n", end=b"0002"))
    assert args.done is True


def test_defaults():
    args = FetchArgs()
    assert args.want == [] and args.have == [] and args.want_refs == []
    assert args.deepen is None
    assert args.done is False


def test_deepen_zero_rejected():
    with pytest.raises(ProtocolError, match="deepen 0 is not valid"):
        read_fetch_args(v2_request(b"deepen 0\n"))


@pytest.mark.parametrize("value", [b"abc", b"-1", b" 3", b"4294967296", b""])
def test_invalid_deepen_rejected(value):
    with pytest.raises(ProtocolError, match="invalid deepen value"):
        read_fetch_args(v2_request(b"deepen " + value + b"\n"))


def test_deepen_max_u32_accepted():
    args = read_fetch_args(v2_request(b"deepen 4294967295\n"))
    assert args.deepen == 4294967295


@pytest.mark.parametrize(
    "line",
    [b"deepen-since 1700000000\n", b"deepen-not refs/heads/x\n", b"deepen-relative\n"],
)
def test_unsupported_arguments(line):
    with pytest.raises(ProtocolError, match="unsupported fetch argument"):
        read_fetch_args(v2_request(line))


def test_unrecognised_argument():
    with pytest.raises(ProtocolError, match="unrecognised fetch argument"):
        read_fetch_args(v2_request(b"sideband-all\n"))


def test_unexpected_delimiter():
    with pytest.raises(ProtocolError, match="unexpected delimiter"):
        read_fetch_args(v2_request(b"done\n", end=DELIMITER_PKT + FLUSH_PKT))


def test_missing_flush():
    with pytest.raises(ProtocolError, match="missing flush packet"):
        read_fetch_args(v2_request(b"done\n", end=b""))


def test_invalid_object_id():
    with pytest.raises(ProtocolError):
        read_fetch_args(v2_request(b"want nothex\n"))


def test_missing_delimiter_before_arguments():
    reader = PacketLineReader(encode_pkt_line(b"agent=test/1.0\n") + FLUSH_PKT)
    with pytest.raises(ProtocolError, match="expected delimiter"):
        read_fetch_args(reader)


# --- protocol v1 -----------------------------------------------------------


def test_v1_wants_with_capabilities_and_done():
    body = v1_body(
        f"want {OID_A} ofs-delta thin-pack side-band-64k agent=git/2.40\n".encode(),
        f"want {OID_B}\n".encode(),
        trailer=encode_pkt_line(b"done\n"),
    )
    args = read_fetch_args_v1(body, ProtocolLimits())
    assert args.want == [ObjectId.from_hex(OID_A), ObjectId.from_hex(OID_B)]
    assert args.ofs_delta is True
    assert args.thin_pack is True
    assert args.no_progress is False
    assert args.include_tag is False
    assert args.done is True


def test_v1_haves_deepen_filter_and_unknown_lines():
    body = v1_body(
        f"want {OID_A}\n".encode(),
        f"have {OID_B}\n".encode(),
        b"deepen 2\n",
        b"filter tree:0\n",
        f"shallow {OID_B}\n".encode(),
    )
    args = read_fetch_args_v1(io.BytesIO(body))
    assert args.have == [ObjectId.from_hex(OID_B)]
    assert args.deepen == 2
    assert args.filter == "tree:0"
    assert args.done is False


def test_v1_no_done_when_trailer_differs():
    body = v1_body(f"want {OID_A}\n".encode(), trailer=encode_pkt_line(b"not-done\n"))
    assert read_fetch_args_v1(body).done is False


def test_v1_bad_trailer_is_ignored():
    body = v1_body(f"want {OID_A}\n".encode(), trailer=b"zz")
    args = read_fetch_args_v1(body)
    assert args.want == [ObjectId.from_hex(OID_A)]
    assert args.done is False


def test_v1_eof_without_flush():
    body = encode_pkt_line(f"want {OID_A}\n".encode())
    with pytest.raises(ProtocolError, match="unexpected eof in v1 request body"):
        read_fetch_args_v1(body)


def test_v1_deepen_zero_rejected():
    with pytest.raises(ProtocolError, match="deepen 0 is not valid"):
        read_fetch_args_v1(v1_body(b"deepen 0\n"))


def test_v1_rejects_too_many_wants():
    lines = [f"want {oid_hex(i + 1)}\n".encode() for i in range(3)]
    with pytest.raises(ProtocolError, match="too many want lines"):
        read_fetch_args_v1(v1_body(*lines), ProtocolLimits(max_wants=2))


def test_v1_rejects_too_many_haves():
    lines = [f"have {oid_hex(i + 1)}\n".encode() for i in range(2)]
    with pytest.raises(ProtocolError, match="too many have lines"):
        read_fetch_args_v1(v1_body(*lines), ProtocolLimits(max_haves=1))


def test_v1_invalid_want_oid():
    with pytest.raises(ProtocolError):
        read_fetch_args_v1(v1_body(b"want 1234\n"))