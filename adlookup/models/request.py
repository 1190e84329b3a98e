# Query request data model.
#
# A QueryRequest is built once per invocation by the CLI layer and consumed by
# the QueryOrchestrator. All types here are immutable.

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

# Global Catalog port (forest-wide partial replica)
GLOBAL_CATALOG_PORT = 3268


class IdentifierKind(str, Enum):
    """Shape of a loosely-typed identifier."""

    DISTINGUISHED_NAME = "distinguishedName"
    ACCOUNT_NAME = "sAMAccountName"
    SECURITY_IDENTIFIER = "objectSid"
    EMAIL = "mail"


class DirectoryProtocol(str, Enum):
    """Protocol variant, derived from the port."""

    STANDARD = "LDAP"
    GLOBAL_CATALOG = "GC"

    @classmethod
    def from_port(cls, port: Optional[int]) -> "DirectoryProtocol":
        return cls.GLOBAL_CATALOG if port == GLOBAL_CATALOG_PORT else cls.STANDARD


@dataclass(frozen=True)
class Identifier:
    """A classified identifier: exactly one kind plus its trimmed value."""

    kind: IdentifierKind
    value: str


@dataclass(frozen=True)
class Credentials:
    """Bind credentials handed to the transport (never acquired here)."""

    username: str
    password: Optional[str] = field(default=None, repr=False)
    domain: Optional[str] = None
    hashes: Optional[str] = field(default=None, repr=False)
    kerberos: bool = False


@dataclass(frozen=True)
class ExplicitFilter:
    """Caller-supplied filter expression, used verbatim."""

    filter: str


@dataclass(frozen=True)
class ExplicitDn:
    """A single distinguished name resolved through the DN fallback chain."""

    dn: str


@dataclass(frozen=True)
class BatchDn:
    """Distinguished names from a batch file, resolved one by one in order."""

    dns: Tuple[str, ...]


@dataclass(frozen=True)
class IdentifierBatch:
    """Homogeneous batch of account names, SIDs or emails (one OR-filter search)."""

    kind: IdentifierKind
    values: Tuple[str, ...]


Target = Union[ExplicitFilter, ExplicitDn, BatchDn, Identifier, IdentifierBatch]


@dataclass(frozen=True)
class QueryRequest:
    """
    One lookup invocation.

    Attributes:
        target: What to look up
        server: Directory server host; None lets the orchestrator locate one
            for `domain`. A given server counts as explicitly pinned.
        port: Explicit port (3268 selects the Global Catalog)
        domain: DNS domain used to locate a server when none is given
        credentials: Optional bind credentials
        attributes: Attribute projection; None requests the default set
        base: Explicit search root for filter and identifier searches
        dc_ip: KDC address for Kerberos binds; None uses the directory server
    """

    target: Target
    server: Optional[str] = None
    port: Optional[int] = None
    domain: Optional[str] = None
    credentials: Optional[Credentials] = None
    attributes: Optional[Tuple[str, ...]] = None
    base: Optional[str] = None
    dc_ip: Optional[str] = None

    @property
    def protocol(self) -> DirectoryProtocol:
        return DirectoryProtocol.from_port(self.port)

    @property
    def server_pinned(self) -> bool:
        return bool(self.server)
