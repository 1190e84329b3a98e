# Directory lookup core for adlookup
#
# This package resolves classified identifiers to directory entries:
#   - Filter synthesis with value escaping and binary SID matching
#   - Attribute decoding (SIDs, GUIDs, FILETIME / Generalized Time)
#   - Filter searches through a swappable DirectoryService (impacket by default)
#   - Three-stage distinguished-name resolution
#   - Query orchestration with Global Catalog auto-selection

from .client import PAGE_SIZE, DirectoryClient, DirectoryService, DirectorySession, RawEntry, normalize_entry
from .codec import NEVER, decode, decode_filetime, decode_values, to_native
from .exceptions import (
    ERRORS,
    ADLookupError,
    ClassificationError,
    DirectoryConnectionError,
    DirectorySearchError,
)
from .filters import (
    account_name_filter,
    attribute_filter,
    batch_filter,
    distinguished_name_filter,
    email_filter,
    escape_value,
    identifier_filter,
    or_filter,
    sid_filter,
)
from .orchestrator import QueryOrchestrator, wants_global_catalog
from .resolver import DnResolver, Resolution, ResolutionStage, extract_base_dn, parse_dn_components
from .transport import ImpacketDirectoryService, ImpacketSession, build_ldap_url

__all__ = [
    # Exceptions
    "ERRORS",
    "ADLookupError",
    "ClassificationError",
    "DirectoryConnectionError",
    "DirectorySearchError",
    # Codec
    "NEVER",
    "decode",
    "decode_filetime",
    "decode_values",
    "to_native",
    # Filters
    "account_name_filter",
    "attribute_filter",
    "batch_filter",
    "distinguished_name_filter",
    "email_filter",
    "escape_value",
    "identifier_filter",
    "or_filter",
    "sid_filter",
    # Client and transport
    "PAGE_SIZE",
    "DirectoryClient",
    "DirectoryService",
    "DirectorySession",
    "RawEntry",
    "normalize_entry",
    "ImpacketDirectoryService",
    "ImpacketSession",
    "build_ldap_url",
    # Resolution
    "DnResolver",
    "Resolution",
    "ResolutionStage",
    "extract_base_dn",
    "parse_dn_components",
    "QueryOrchestrator",
    "wants_global_catalog",
]
