"""adlookup - Active Directory object lookup by account name, DN, SID or email."""

__version__ = "1.0.0"
