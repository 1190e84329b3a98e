# Logging utilities - delegates to the rich console.
#
# Every module logs through these functions so verbosity is decided in one
# place. Messages go to stderr; stdout is reserved for query results.

import os

from .console import (
    debug as _debug,
)
from .console import (
    error as _error,
)
from .console import (
    good as _good,
)
from .console import (
    info as _info,
)
from .console import (
    set_verbosity as _set_verbosity,
)
from .console import (
    status as _status,
)
from .console import (
    warn as _warn,
)

_VERBOSE = False
_DEBUG = False


def set_verbosity(verbose: bool, debug_flag: bool):
    """Set verbosity levels for the module and the console."""
    global _VERBOSE, _DEBUG
    _VERBOSE = verbose
    _DEBUG = debug_flag
    _set_verbosity(verbose, debug_flag)

    if debug_flag:
        os.environ["ADLOOKUP_DEBUG"] = "1"


def status(msg: str):
    """Always print status message."""
    _status(msg)


def good(msg: str):
    """Print success message (verbose/debug only)."""
    if _VERBOSE or _DEBUG:
        _good(msg)


def warn(msg: str, verbose_only: bool = False):
    """Print warning message.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    _warn(msg, verbose_only=verbose_only)


def error(msg: str):
    """Print error message."""
    _error(msg)


def info(msg: str):
    """Print info message (verbose/debug only)."""
    if _VERBOSE or _DEBUG:
        _info(msg)


def debug(msg: str, exc_info: bool = False):
    """Debug logging - only prints if DEBUG flag is enabled."""
    if _DEBUG or os.getenv("DEBUG") or os.getenv("ADLOOKUP_DEBUG"):
        if not _DEBUG:
            _set_verbosity(_VERBOSE, True)
        _debug(msg, exc_info=exc_info)
