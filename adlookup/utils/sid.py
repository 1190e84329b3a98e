# SID conversion utilities
#
# Converts between the textual SDDL form of a security identifier
# (S-1-5-21-...) and the binary layout stored in objectSid.

import re
import struct
from typing import Optional

from .logging import debug

# Binary SID layout limits
SID_REVISION = 1
MAX_SUB_AUTHORITIES = 15
_MAX_AUTHORITY = 1 << 48
_MAX_SUB_AUTHORITY = 1 << 32

_SID_PATTERN = re.compile(r"S-[0-9](-[0-9]+)+", re.IGNORECASE)


def is_sid(value: Optional[str]) -> bool:
    """Check if a string looks like a textual SID (S-<digit>-<digits>...)."""
    if not value:
        return False
    return _SID_PATTERN.fullmatch(value.strip()) is not None


def sid_to_binary(sid_string: str) -> Optional[bytes]:
    """
    Convert a SID string (S-1-5-21-...) to its binary form.

    Layout: Revision (1 byte) + SubAuthorityCount (1 byte) +
    IdentifierAuthority (6 bytes, big-endian) + SubAuthorities (4 bytes each,
    little-endian).

    Args:
        sid_string: String representation of SID

    Returns:
        Binary representation of SID, None if the string is not a valid SID
    """
    try:
        sid_string = sid_string.strip().upper()
        if not sid_string.startswith("S-"):
            return None

        parts = sid_string[2:].split("-")
        if len(parts) < 2:
            return None

        revision = int(parts[0])
        authority = int(parts[1])
        subauthorities = [int(x) for x in parts[2:]]

        if revision != SID_REVISION:
            debug(f"SID {sid_string}: unsupported revision {revision}")
            return None
        if not 0 <= authority < _MAX_AUTHORITY:
            debug(f"SID {sid_string}: identifier authority out of range")
            return None
        if len(subauthorities) > MAX_SUB_AUTHORITIES:
            debug(f"SID {sid_string}: too many sub-authorities ({len(subauthorities)})")
            return None

        binary_sid = struct.pack("B", revision)
        binary_sid += struct.pack("B", len(subauthorities))
        binary_sid += struct.pack(">Q", authority)[2:]

        for subauth in subauthorities:
            if not 0 <= subauth < _MAX_SUB_AUTHORITY:
                debug(f"SID {sid_string}: sub-authority {subauth} out of range")
                return None
            binary_sid += struct.pack("<I", subauth)

        return binary_sid

    except (ValueError, struct.error) as e:
        debug(f"Error converting SID {sid_string} to binary: {e}")
        return None


def binary_to_sid(binary_sid: bytes) -> Optional[str]:
    """
    Convert a binary SID (from the objectSid attribute) to string format.

    Args:
        binary_sid: Binary representation of SID

    Returns:
        String representation like "S-1-5-21-...", None if invalid
    """
    try:
        if not binary_sid or len(binary_sid) < 8:
            return None

        revision = struct.unpack("B", binary_sid[0:1])[0]
        subauth_count = struct.unpack("B", binary_sid[1:2])[0]

        if revision != SID_REVISION or subauth_count > MAX_SUB_AUTHORITIES:
            return None

        # 6-byte authority, padded to 8 for unpacking as Q
        authority = struct.unpack(">Q", b"\x00\x00" + binary_sid[2:8])[0]

        # Trailing bytes mean this is not a single well-formed SID
        if len(binary_sid) != 8 + 4 * subauth_count:
            debug("Binary SID length does not match sub-authority count")
            return None

        sid_parts = [f"S-{revision}-{authority}"]
        for offset in range(8, 8 + 4 * subauth_count, 4):
            subauth = struct.unpack("<I", binary_sid[offset : offset + 4])[0]
            sid_parts.append(str(subauth))

        return "-".join(sid_parts)

    except (ValueError, struct.error) as e:
        debug(f"Error converting binary SID to string: {e}")
        return None
