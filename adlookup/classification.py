# Identifier classification for loosely-typed lookup input.
#
# Decides whether a raw string is a distinguished name, a SID, an account
# name or an email address. The patterns are deliberately permissive: they
# route input to the right filter, they do not validate it against the RFCs.

import re
from typing import Callable, Iterable, List, Tuple

from .directory.exceptions import ERRORS, ClassificationError
from .models.request import Identifier, IdentifierKind
from .utils.logging import debug
from .utils.sid import is_sid

# CN=, OU= or DC= with an optional space before '='
_DN_MARKER = re.compile(r"(?:CN|OU|DC)\s?=", re.IGNORECASE)

# 1-20 chars: word characters, dot, dash, dollar sign
_ACCOUNT_NAME = re.compile(r"[\w.\-$]{1,20}")

# local@domain.tld, no whitespace and exactly one '@'
_EMAIL = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def is_distinguished_name(value: str) -> bool:
    """Lightweight DN heuristic: contains '=' and a CN/OU/DC component."""
    if not value or "=" not in value:
        return False
    return _DN_MARKER.search(value) is not None


def is_account_name(value: str) -> bool:
    return _ACCOUNT_NAME.fullmatch(value) is not None


def is_email(value: str) -> bool:
    return _EMAIL.fullmatch(value) is not None


# Evaluation order: first match wins. SIDs are tested before account names
# because short SIDs (S-1-5-32-544) also fit the account-name pattern.
_MATCHERS: List[Tuple[IdentifierKind, Callable[[str], bool]]] = [
    (IdentifierKind.DISTINGUISHED_NAME, is_distinguished_name),
    (IdentifierKind.SECURITY_IDENTIFIER, is_sid),
    (IdentifierKind.ACCOUNT_NAME, is_account_name),
    (IdentifierKind.EMAIL, is_email),
]


def classify(raw: str) -> Identifier:
    """
    Classify a single raw identifier.

    Args:
        raw: User input (surrounding whitespace is ignored)

    Returns:
        Identifier of exactly one kind

    Raises:
        ClassificationError: If the input matches no identifier shape
    """
    value = (raw or "").strip()
    if value:
        for kind, matches in _MATCHERS:
            if matches(value):
                debug(f"Classified '{value}' as {kind.name}")
                return Identifier(kind, value)

    raise ClassificationError(ERRORS["unclassifiable"].format(value=value))


def classify_batch(lines: Iterable[str], source: str = "<input>") -> Tuple[IdentifierKind, List[str]]:
    """
    Classify the lines of a batch file, requiring every line to be of one kind.

    Blank lines are skipped. Kinds are tried in evaluation order and the first
    kind that every line satisfies is chosen.

    Args:
        lines: Raw lines of the batch file
        source: Name of the batch source, used in error messages

    Returns:
        Tuple of (kind, trimmed non-blank values)

    Raises:
        ClassificationError: If the batch is empty or mixes kinds
    """
    values = [line.strip() for line in lines if line and line.strip()]
    if not values:
        raise ClassificationError(ERRORS["empty_batch"].format(path=source))

    for kind, matches in _MATCHERS:
        if all(matches(value) for value in values):
            debug(f"Batch '{source}': {len(values)} entries classified as {kind.name}")
            return kind, values

    raise ClassificationError(ERRORS["mixed_batch"].format(path=source))
