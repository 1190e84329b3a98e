# Small helpers used across the codebase.
#
# Server/port parsing, credential splitting and input-file reading.

from pathlib import Path
from typing import List, Optional, Tuple


def parse_ntlm_hashes(hashes: Optional[str]) -> Tuple[str, str]:
    """
    Parse NTLM hashes from string format.

    Args:
        hashes: Hash string in "LM:NT" or "NT" format, or None/empty

    Returns:
        Tuple of (lmhash, nthash) - empty strings if not provided
    """
    if not hashes:
        return "", ""

    if ":" in hashes:
        lmhash, nthash = hashes.split(":", 1)
        return lmhash, nthash
    else:
        return "", hashes


def parse_host_port(value: str) -> Tuple[str, Optional[int]]:
    """
    Split "host[:port]" into its parts.

    Only a trailing numeric segment after the last colon is taken as the port,
    so values without a valid port are returned unchanged.
    """
    value = value.strip()
    idx = value.rfind(":")
    if 0 < idx < len(value) - 1:
        port = value[idx + 1 :]
        if port.isdigit():
            return value[:idx], int(port)
    return value, None


def split_account(username: str) -> Tuple[Optional[str], str]:
    """
    Split a logon name into (domain, user).

    Accepts DOMAIN\\user and user@domain forms; a bare name has no domain.
    """
    if "\\" in username:
        domain, user = username.split("\\", 1)
        return domain or None, user
    if "@" in username:
        user, domain = username.rsplit("@", 1)
        return domain or None, user
    return None, username


def domain_to_base_dn(domain: str) -> str:
    """Build a naming context DN from a DNS domain name (corp.local -> DC=corp,DC=local)."""
    return ",".join(f"DC={part}" for part in domain.split(".") if part)


def read_nonempty_lines(path: str) -> List[str]:
    """Read a text file and return its trimmed, non-blank lines."""
    with Path(path).open(encoding="utf-8-sig") as f:
        return [line.strip() for line in f if line.strip()]
