# LDAP filter synthesis.
#
# Builds equality filters for each identifier kind. Every user-supplied value
# is escaped; SIDs are matched on their binary form whenever they parse.

from typing import Iterable

from ..models.request import Identifier, IdentifierKind
from ..utils.logging import debug
from ..utils.sid import sid_to_binary

# Characters that must be escaped inside a filter value (backslash first)
_FILTER_ESCAPES = {
    "\\": "\\5C",
    "*": "\\2A",
    "(": "\\28",
    ")": "\\29",
    "\x00": "\\00",
}


def escape_value(value: str) -> str:
    """Escape a filter assertion value (backslash + two uppercase hex digits)."""
    return "".join(_FILTER_ESCAPES.get(ch, ch) for ch in value)


def escape_bytes(data: bytes) -> str:
    """Escape every octet of a binary value (e.g. \\01\\05\\00...)."""
    return "".join(f"\\{b:02X}" for b in data)


def account_name_filter(name: str) -> str:
    return f"(sAMAccountName={escape_value(name)})"


def email_filter(address: str) -> str:
    return f"(mail={escape_value(address)})"


def distinguished_name_filter(dn: str) -> str:
    return f"(distinguishedName={escape_value(dn)})"


def attribute_filter(attribute: str, value: str) -> str:
    """Equality filter on an arbitrary attribute."""
    return f"({attribute}={escape_value(value)})"


def sid_filter(sid: str) -> str:
    """
    Build an objectSid equality filter.

    The SID is matched on its binary form. A SID string that cannot be
    encoded falls back to a string-equality match, which AD also accepts.
    """
    binary_sid = sid_to_binary(sid)
    if binary_sid is None:
        debug(f"SID '{sid}' could not be encoded, matching on its string form")
        return f"(objectSid={escape_value(sid)})"
    return f"(objectSid={escape_bytes(binary_sid)})"


def or_filter(terms: Iterable[str]) -> str:
    """Wrap parenthesized filter terms in an OR group."""
    return "(|" + "".join(terms) + ")"


_BUILDERS = {
    IdentifierKind.ACCOUNT_NAME: account_name_filter,
    IdentifierKind.SECURITY_IDENTIFIER: sid_filter,
    IdentifierKind.EMAIL: email_filter,
    IdentifierKind.DISTINGUISHED_NAME: distinguished_name_filter,
}


def identifier_filter(identifier: Identifier) -> str:
    """Build the equality filter matching a classified identifier."""
    return _BUILDERS[identifier.kind](identifier.value)


def batch_filter(kind: IdentifierKind, values: Iterable[str]) -> str:
    """Build one OR-filter resolving a homogeneous batch in a single round trip."""
    return or_filter(_BUILDERS[kind](value) for value in values)
