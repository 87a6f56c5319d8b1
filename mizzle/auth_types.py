"""Types for push authorisation: commit and tag metadata, diffs, and signatures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from mizzle.types import ObjectId, PushKind

__all__ = [
    "PushKind",
    "PushRef",
    "Identity",
    "SignatureFormat",
    "SignatureBlob",
    "CommitInfo",
    "TagInfo",
    "ComparisonError",
    "CapExceededError",
    "BackendError",
    "RefDiffChange",
    "RefDiffEntry",
    "RefDiff",
    "SignedIdentity",
    "PgpIdentity",
    "SshIdentity",
    "X509Identity",
    "OtherIdentity",
    "VerificationOutcome",
    "VerificationStatus",
    "SignerKey",
    "Signer",
    "VerificationKey",
    "VerificationKeys",
    "ExternalSig",
]


@dataclass(frozen=True)
class PushRef:
    """A single ref update within a push, with its classification and oids."""

    refname: str
    kind: PushKind
    old_oid: ObjectId
    new_oid: ObjectId


@dataclass(frozen=True)
class Identity:
    """Author, committer or tagger identity as raw header bytes.

    ``time`` is the raw header field, e.g. ``b"1700000000 +0000"``.
    """

    name: bytes
    email: bytes
    time: bytes


class SignatureFormat(Enum):
    """Signature format sniffed from the signature bytes."""

    OPENPGP = "OpenPgp"
    SSH = "Ssh"
    X509_CMS = "X509Cms"
    UNKNOWN = "Unknown"

    @classmethod
    def detect(cls, data: bytes) -> "SignatureFormat":
        """Detect the format from the leading bytes of a signature blob."""
        if data.startswith(b"-----BEGIN PGP SIGNATURE-----"):
            return cls.OPENPGP
        if data.startswith(b"-----BEGIN SSH SIGNATURE-----"):
            return cls.SSH
        if data.startswith((b"-----BEGIN SIGNED MESSAGE-----", b"-----BEGIN CMS-----")):
            return cls.X509_CMS
        return cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SignatureBlob:
    """Raw signature recovered from a commit or tag header."""

    format: SignatureFormat
    data: bytes


@dataclass(frozen=True)
class CommitInfo:
    """Metadata extracted from a commit object."""

    oid: ObjectId
    tree: ObjectId
    parents: List[ObjectId]
    author: Identity
    committer: Identity
    message: bytes
    encoding: Optional[bytes] = None
    signature: Optional[SignatureBlob] = field(default=None, repr=False)


@dataclass(frozen=True)
class TagInfo:
    """Metadata extracted from an annotated tag object."""

    oid: ObjectId
    target: ObjectId
    name: bytes
    tagger: Optional[Identity]
    message: bytes
    signature: Optional[SignatureBlob] = field(default=None, repr=False)


class ComparisonError(Exception):
    """Raised by comparison accessors when a view cannot be computed."""


class CapExceededError(ComparisonError):
    """A bounded walk or iteration exceeded its configured cap."""

    def __init__(self, what: str, limit: int) -> None:
        super().__init__(f"{what} exceeded the configured limit of {limit}")
        self.what = what
        self.limit = limit


class BackendError(ComparisonError):
    """The storage backend failed while computing a view."""

    def __init__(self, message: str) -> None:
        super().__init__(f"backend error: {message}")
        self.message = message


class RefDiffChange(Enum):
    """How a path changed between two trees."""

    ADDED = "Added"
    MODIFIED = "Modified"
    REMOVED = "Removed"


@dataclass(frozen=True)
class RefDiffEntry:
    """One path in a :class:`RefDiff`.

    ``mode`` is the git tree-entry mode (e.g. ``0o100644``). ``oid`` is the new
    blob for added or modified paths and the previous one for removed paths.
    """

    path: bytes
    change: RefDiffChange
    mode: int
    oid: ObjectId


@dataclass
class RefDiff:
    """A path-level diff between two trees."""

    entries: List[RefDiffEntry] = field(default_factory=list)

    def touched_paths(self) -> Iterator[bytes]:
        """All paths added, modified or removed."""
        return (entry.path for entry in self.entries)

    def added_or_modified(self) -> Iterator[RefDiffEntry]:
        """Entries that carry a new oid."""
        return (e for e in self.entries if e.change is not RefDiffChange.REMOVED)

    def removed(self) -> Iterator[RefDiffEntry]:
        """Entries that were removed."""
        return (e for e in self.entries if e.change is RefDiffChange.REMOVED)


class SignedIdentity:
    """Identity material recovered from a verified signature."""

    def matches_email(self, email: str) -> bool:
        """Whether this identity is bound to ``email``."""
        return False


@dataclass(frozen=True)
class PgpIdentity(SignedIdentity):
    key_id: str
    email: bytes

    def matches_email(self, email: str) -> bool:
        return self.email == email.encode("utf-8")


@dataclass(frozen=True)
class SshIdentity(SignedIdentity):
    fingerprint: str
    principal: Optional[bytes] = None

    def matches_email(self, email: str) -> bool:
        return self.principal is not None and self.principal == email.encode("utf-8")


@dataclass(frozen=True)
class X509Identity(SignedIdentity):
    subject: str
    san: Optional[str] = None

    def matches_email(self, email: str) -> bool:
        return self.san is not None and self.san == email


@dataclass(frozen=True)
class OtherIdentity(SignedIdentity):
    """Identity material outside the natively supported formats."""

    description: str


class VerificationOutcome(Enum):
    """Result category of a signature check."""

    VERIFIED = "Verified"
    BAD_SIGNATURE = "BadSignature"
    UNKNOWN_KEY = "UnknownKey"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    UNSIGNED = "Unsigned"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VerificationStatus:
    """Status of a signature check; verified results carry identity and format."""

    outcome: VerificationOutcome
    identity: Optional[SignedIdentity] = None
    format: Optional[SignatureFormat] = None

    def __post_init__(self) -> None:
        if self.outcome is VerificationOutcome.VERIFIED:
            if self.identity is None or self.format is None:
                raise ValueError("a verified status needs an identity and a format")
        elif self.identity is not None or self.format is not None:
            raise ValueError(f"a {self.outcome} status carries no identity or format")

    @classmethod
    def verified(
        cls, identity: SignedIdentity, format: SignatureFormat
    ) -> "VerificationStatus":
        return cls(VerificationOutcome.VERIFIED, identity, format)

    @property
    def is_verified(self) -> bool:
        return self.outcome is VerificationOutcome.VERIFIED


@dataclass(frozen=True)
class SignerKey:
    """Hashable signer key used to index verification keys."""

    email: bytes
    format: SignatureFormat
    identifier: Optional[bytes] = None


@dataclass(frozen=True)
class Signer:
    """Identifying material for a signer, batched for key lookup.

    ``identifier`` is a format-specific id (PGP key id, SSH fingerprint,
    X.509 subject) where one could be extracted cheaply.
    """

    email: bytes
    format: SignatureFormat
    identifier: Optional[bytes] = None

    def key(self) -> SignerKey:
        """Key suitable for the mapping returned by a key lookup."""
        return SignerKey(bytes(self.email), self.format, self.identifier)


@dataclass(frozen=True)
class VerificationKey:
    """A candidate verification key supplied by the forge."""

    format: SignatureFormat
    key_data: bytes


@dataclass(frozen=True)
class ExternalSig:
    """A signature handed to an external verifier."""

    format: SignatureFormat
    signature: bytes
    signed_payload: bytes
    signer_email: bytes


VerificationKeys = Dict[SignerKey, List[VerificationKey]]