"""Utility modules for adlookup.

Modules:
    console: Rich console output
    date_parser: FILETIME and Generalized Time conversion
    dns: Domain controller / Global Catalog discovery
    helpers: General helper functions
    logging: Logging front-end
    sid: SID string/binary conversion
"""
