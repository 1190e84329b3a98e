# Attribute value decoding.
#
# Turns raw protocol values into presentation strings: binary SIDs to SDDL
# form, GUIDs to their dashed form, FILETIME integers to local ISO-8601
# timestamps. Values that cannot be decoded into their richer form degrade
# to hexadecimal or decimal text; decoding never raises.

import re
import uuid
from datetime import datetime
from typing import Iterable, Optional, Union

from ..models.result import AttributeValue
from ..utils.date_parser import (
    FILETIME_NEVER,
    filetime_to_datetime,
    format_timestamp,
    parse_generalized_time,
)
from ..utils.logging import debug
from ..utils.sid import binary_to_sid

NEVER = "Never"

# Synthetic entry-locator attribute; transport metadata, never directory data
ENTRY_LOCATOR_ATTRIBUTE = "adspath"

# Timestamp attributes (compared lowercase)
FILETIME_ATTRIBUTES = frozenset(
    {
        "lastlogon",
        "lastlogontimestamp",
        "pwdlastset",
        "accountexpires",
        "badpasswordtime",
        "lastlogoff",
        "lockouttime",
        "whencreated",
        "whenchanged",
    }
)

SID_ATTRIBUTES = frozenset({"objectsid", "sidhistory", "securityidentifier", "tokengroups"})

GUID_ATTRIBUTES = frozenset(
    {
        "objectguid",
        "msexchmailboxguid",
        "schemaidguid",
        "attributesecurityguid",
        "ms-ds-consistencyguid",
    }
)

# Attributes whose values are octet strings and must never be text-decoded
BINARY_ATTRIBUTES = SID_ATTRIBUTES | GUID_ATTRIBUTES | frozenset(
    {
        "thumbnailphoto",
        "jpegphoto",
        "usercertificate",
        "cacertificate",
        "ntsecuritydescriptor",
        "msds-allowedtoactonbehalfofotheridentity",
        "logonhours",
        "msds-generationid",
        "msexchblockedsendershash",
        "msexchsafesendershash",
        "msds-managedpasswordid",
        "msds-keycredentiallink",
    }
)

RawValue = Union[bytes, bytearray, int, datetime, str]

# Canonical decimal that fits a signed 64-bit LDAP integer
_INTEGER = re.compile(r"-?[0-9]{1,19}")


def _is_printable_text(text: str) -> bool:
    return not any(ord(ch) < 32 and ch not in "\t\r\n" for ch in text)


def to_native(attribute_name: str, raw: bytes) -> RawValue:
    """
    Interpret a raw octet value from the wire.

    Known binary attributes stay bytes. Everything else is UTF-8 decoded;
    undecodable or control-character data is treated as binary, canonical
    decimal text becomes an int and Generalized Time on timestamp attributes
    becomes a datetime.
    """
    name = attribute_name.lower()
    if name in BINARY_ATTRIBUTES:
        return bytes(raw)

    try:
        text = bytes(raw).decode("utf-8")
    except UnicodeDecodeError:
        return bytes(raw)

    if not _is_printable_text(text):
        return bytes(raw)

    if _INTEGER.fullmatch(text) and str(int(text)) == text:
        return int(text)

    if name in FILETIME_ATTRIBUTES:
        parsed = parse_generalized_time(text)
        if parsed is not None:
            return parsed

    return text


def to_hex(data: bytes) -> str:
    """Uppercase hexadecimal, two digits per byte, no separators."""
    return bytes(data).hex().upper()


def decode_filetime(value: int) -> str:
    """Render a FILETIME tick count; 0 and the maximum int64 mean 'Never'."""
    if value in FILETIME_NEVER:
        return NEVER
    dt = filetime_to_datetime(value)
    if dt is None:
        debug(f"FILETIME {value} is out of range, keeping the raw value")
        return str(value)
    return format_timestamp(dt)


def decode(attribute_name: str, value: RawValue) -> str:
    """
    Decode one attribute value into its presentation string.

    First match wins:
      16-byte binary GUID attribute  -> dashed GUID
      binary SID attribute           -> S-1-... (hex if malformed)
      any other binary               -> uppercase hex
      int on a timestamp attribute   -> local ISO-8601 / Never
      other int                      -> decimal
      datetime                       -> local ISO-8601
      anything else                  -> str()
    """
    name = attribute_name.lower()

    if isinstance(value, (bytes, bytearray)):
        if name in GUID_ATTRIBUTES and len(value) == 16:
            return str(uuid.UUID(bytes_le=bytes(value)))
        if name in SID_ATTRIBUTES:
            sid = binary_to_sid(bytes(value))
            if sid is None:
                debug(f"{attribute_name}: malformed binary SID, rendering as hex")
                return to_hex(value)
            return sid
        return to_hex(value)

    if isinstance(value, int) and not isinstance(value, bool):
        if name in FILETIME_ATTRIBUTES:
            return decode_filetime(value)
        return str(value)

    if isinstance(value, datetime):
        return format_timestamp(value)

    return str(value)


def decode_values(attribute_name: str, raw_values: Iterable[RawValue]) -> Optional[AttributeValue]:
    """
    Decode every value of an attribute, preserving order.

    Returns:
        A single string for one value, a list for several, None for none
    """
    decoded = [decode(attribute_name, value) for value in raw_values]
    if not decoded:
        return None
    if len(decoded) == 1:
        return decoded[0]
    return decoded
