# Directory lookup exceptions and error messages

from typing import Optional

# =============================================================================
# Exceptions
# =============================================================================


class ADLookupError(Exception):
    """Base exception for directory lookups"""

    pass


class ClassificationError(ADLookupError):
    """Input matches no identifier shape, or a batch file mixes shapes"""

    pass


class DirectoryConnectionError(ADLookupError):
    """Could not reach or bind to the directory server"""

    def __init__(self, message: str, server: Optional[str] = None):
        super().__init__(message)
        self.server = server


class DirectorySearchError(ADLookupError):
    """The directory server rejected or failed a search"""

    def __init__(self, message: str, server: Optional[str] = None):
        super().__init__(message)
        self.server = server


# =============================================================================
# Error Messages
# =============================================================================

ERRORS = {
    "connect": (
        "Failed to connect to server '{server}'. Please check the server and credentials and try again.\n"
        "Error: {error}"
    ),
    "search": "Unexpected error during LDAP search for server '{server}': {error}",
    "unclassifiable": (
        "The argument '{value}' is neither a valid samAccountName, Distinguished Name, SID, nor email."
    ),
    "mixed_batch": (
        "The file '{path}' contains invalid or mixed entries. Use either all samAccountNames, "
        "all Distinguished Names, all SIDs, or all emails."
    ),
    "empty_batch": "No entries found in file '{path}'.",
    "no_server": (
        "Could not determine the default server. Specify --server (-s) or --domain."
    ),
    "dn_no_results": "No results for DN: {dn}",
    "dn_failed": "Failed to search DN '{dn}': {error}",
    "input_unreadable": "Could not read input file '{path}': {error}",
    "no_target": (
        "No lookup target given. Specify an identifier, --filter, --distinguishedname, --sid, --email or --input."
    ),
    "filter_and_dn": "--filter and --distinguishedname cannot be used together.",
    "extra_argument": "Unknown argument '{value}'",
}
