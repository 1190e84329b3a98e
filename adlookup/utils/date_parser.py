"""
Date parsing utilities for adlookup.

Active Directory stores timestamps either as FILETIME integers
(100-nanosecond intervals since 1601-01-01 UTC) or as LDAP Generalized Time
strings (whenCreated, whenChanged). Both are rendered as local-time ISO-8601
strings with a UTC offset.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

# Windows FILETIME epoch: January 1, 1601 00:00:00 UTC
_FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

# FILETIME values that mean "never" (not set / never expires)
FILETIME_NEVER = (0, 0x7FFFFFFFFFFFFFFF)

_GENERALIZED_TIME = re.compile(
    r"(?P<stamp>\d{14})(?:[.,](?P<fraction>\d+))?(?P<tz>Z|[+-]\d{4})?", re.IGNORECASE
)


def filetime_to_datetime(filetime: int) -> Optional[datetime]:
    """
    Convert a FILETIME tick count to a timezone-aware local datetime.

    Args:
        filetime: 100-nanosecond intervals since January 1, 1601 (UTC)

    Returns:
        Local datetime, or None if the value is negative or out of range
    """
    if filetime < 0:
        return None
    try:
        utc = _FILETIME_EPOCH + timedelta(microseconds=filetime // 10)
        return utc.astimezone()
    except (ValueError, OverflowError, OSError):
        return None


def parse_generalized_time(value: str) -> Optional[datetime]:
    """
    Parse an LDAP Generalized Time string (e.g. "20240427123000.0Z").

    A missing timezone designator is treated as UTC.

    Returns:
        Timezone-aware local datetime, or None if the string is not a
        Generalized Time value
    """
    match = _GENERALIZED_TIME.fullmatch(value.strip())
    if not match:
        return None

    try:
        dt = datetime.strptime(match.group("stamp"), "%Y%m%d%H%M%S")
        fraction = match.group("fraction")
        if fraction:
            dt = dt.replace(microsecond=int(fraction[:6].ljust(6, "0")))

        tz = (match.group("tz") or "Z").upper()
        if tz == "Z":
            offset = timezone.utc
        else:
            sign = -1 if tz[0] == "-" else 1
            offset = timezone(sign * timedelta(hours=int(tz[1:3]), minutes=int(tz[3:5])))

        return dt.replace(tzinfo=offset).astimezone()
    except (ValueError, OverflowError, OSError):
        return None


def format_timestamp(dt: datetime) -> str:
    """Render a datetime in round-trip ISO-8601 form with its UTC offset."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc).astimezone()
    return dt.isoformat()
