# Data models for adlookup.
#
# Immutable request types consumed by the query core and the result
# types it produces for the rendering layer.

from .request import (
    GLOBAL_CATALOG_PORT,
    BatchDn,
    Credentials,
    DirectoryProtocol,
    ExplicitDn,
    ExplicitFilter,
    Identifier,
    IdentifierBatch,
    IdentifierKind,
    QueryRequest,
    Target,
)
from .result import AttributeValue, DirectoryEntry, ResultSet

__all__ = [
    "GLOBAL_CATALOG_PORT",
    "AttributeValue",
    "BatchDn",
    "Credentials",
    "DirectoryEntry",
    "DirectoryProtocol",
    "ExplicitDn",
    "ExplicitFilter",
    "Identifier",
    "IdentifierBatch",
    "IdentifierKind",
    "QueryRequest",
    "ResultSet",
    "Target",
]
