# mizzle

Building blocks for a Git server that speaks the smart protocol. The package
reads what a Git client sends and turns it into plain Python objects. It has
no dependencies outside the standard library.

## Modules

- `mizzle.pktline`: pkt-line framing. `PacketLineReader` reads from a binary
  stream or a bytes object; `read_line()` returns a `PacketLine` (with a
  `PacketKind` of `DATA`, `FLUSH`, `DELIMITER` or `RESPONSE_END`) or `None` at
  a clean end of stream, and the reader can also be iterated.
  `encode_pkt_line` frames data as a data line, and `skip_till_delimiter`
  consumes lines up to and including the next delimiter packet.
- `mizzle.command`: `read_command` reads the `command=<name>` line of a
  protocol v2 request and returns a `Command` (`FETCH`, `LIST_REFS`, or
  `EMPTY` for a flush packet).
- `mizzle.ls_refs`: `read_lsrefs_args` skips the capability section and reads
  `peel`, `symrefs`, `unborn` and `ref-prefix` arguments into `ListRefsArgs`.
- `mizzle.fetch`: `read_fetch_args` reads protocol v2 fetch arguments and
  `read_fetch_args_v1` reads a stateless v1 upload-pack body (capabilities on
  the first `want` line, then a flush and an optional `done`). Both return
  `FetchArgs`. `deepen 0` and `deepen-since` / `deepen-not` /
  `deepen-relative` are rejected.
- `mizzle.receive`: `read_receive_request` reads the ref-update commands of a
  push, `RefUpdate` holds one of them, `preliminary_push_kind` classifies it,
  and `pack_object_count` reads the object count from a pack header.
- `mizzle.pack`: `Filter.parse` accepts the partial clone filters `blob:none`
  and `tree:0`.
- `mizzle.types`: `ObjectId` (SHA-1 only, with `from_hex`, `null`,
  `is_null` and `to_hex`), `PushKind` and `PushRef`.
- `mizzle.auth_types`: the data a push authoriser works with. `PushRef` with
  old and new object ids, `Identity`, `CommitInfo`, `TagInfo`,
  `RefDiff` / `RefDiffEntry` / `RefDiffChange`, `SignatureFormat.detect`,
  the `SignedIdentity` family (`PgpIdentity`, `SshIdentity`, `X509Identity`,
  `OtherIdentity`) with `matches_email`, `VerificationStatus` and
  `VerificationOutcome`, `Signer` / `SignerKey`, `VerificationKey`,
  `ExternalSig`, and the errors `ComparisonError`, `CapExceededError` and
  `BackendError`.

## Limits

Every parser takes an optional `ProtocolLimits` (from `mizzle.limits`); when
none is given the defaults apply. They are generous; tighten individual
fields for your deployment:

| field              | default |
|--------------------|---------|
| `max_ref_updates`  | 10,000  |
| `max_wants`        | 100,000 |
| `max_haves`        | 100,000 |
| `max_want_refs`    | 10,000  |
| `max_ref_prefixes` | 1,000   |

When a request goes over a limit, or is malformed in any other way, the
parser raises `ProtocolError` (a subclass of `ValueError`) with a message such
as `too many want lines (3 exceeds limit of 2)`.

## Examples

Reading a protocol v2 fetch request:

```python
import io

from mizzle.fetch import read_fetch_args
from mizzle.limits import ProtocolLimits
from mizzle.pktline import PacketLineReader, encode_pkt_line

body = (
    encode_pkt_line(b"agent=example/1.0\n")
    + b"0001"
    + encode_pkt_line(b"want-ref refs/heads/main\n")
    + encode_pkt_line(b"deepen 1\n")
    + encode_pkt_line(b"done\n")
    + b"0000"
)

args = read_fetch_args(PacketLineReader(io.BytesIO(body)), ProtocolLimits())
print(args.want_refs)  # ['refs/heads/main']
print(args.deepen)     # 1
print(args.done)       # True
```

Reading a push. `read_receive_request` reads only the ref-update commands
(dropping the capabilities after the NUL on the first line) and returns the
stream positioned at the start of the pack, so the pack is never buffered by
the parser:

```python
from mizzle.pktline import encode_pkt_line
from mizzle.receive import pack_object_count, preliminary_push_kind, read_receive_request

null = "0" * 40
new = "a" * 40
body = (
    encode_pkt_line(f"{null} {new} refs/heads/main\0report-status\n".encode())
    + b"0000"
    + b"PACK" + (2).to_bytes(4, "big") + (3).to_bytes(4, "big")
)

updates, stream = read_receive_request(body)
print(updates[0].refname)                # refs/heads/main
print(preliminary_push_kind(updates[0])) # Create
print(pack_object_count(stream.read()))  # 3
```

`preliminary_push_kind` looks only at the object ids: a null old id is a
create, a null new id a delete, and anything else is reported as a
fast-forward.

## What this package does not do

It parses requests and defines data types; it stops there. It has no HTTP or
SSH server, no storage backend or object database access, does not write
ref updates, advertise refs, build or send packfiles, walk history, compute
tree diffs, or verify signatures. `VerificationStatus`, `RefDiff`,
`CommitInfo` and the other types in `mizzle.auth_types` are containers for
results that code outside this package has to produce.

## Tests

The test suite uses pytest, which the `test` extra installs.