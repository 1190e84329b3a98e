# Rich-based console for colored terminal output.
#
# Two consoles are kept: `console` renders query results on stdout, while
# `err_console` carries every status/diagnostic message on stderr so that
# JSON/CSV output can be piped without noise.

from rich.console import Console
from rich.markup import escape

# Result output (stdout). Color is dropped automatically when redirected.
console = Console(highlight=False)

# Status and diagnostic messages (stderr)
err_console = Console(stderr=True, highlight=False)


# =============================================================================
# Status Messages
# =============================================================================

def status(msg: str):
    """Print a status message (always visible)."""
    err_console.print(escape(msg))


def good(msg: str, verbose_only: bool = False):
    """Print a success message in green."""
    if verbose_only and not _is_verbose():
        return
    err_console.print(f"[green][+][/] {escape(msg)}")


def warn(msg: str, verbose_only: bool = False):
    """Print a warning message in yellow.

    Args:
        msg: Message to print
        verbose_only: If True, only print in verbose mode
    """
    if verbose_only and not _is_verbose():
        return
    err_console.print(f"[yellow][!][/] {escape(msg)}")


def error(msg: str):
    """Print an error message in red."""
    err_console.print(f"[red][-][/] {escape(msg)}")


def info(msg: str, verbose_only: bool = False):
    """Print an info message in blue."""
    if verbose_only and not _is_verbose():
        return
    err_console.print(f"[blue][*][/] {escape(msg)}")


def debug(msg: str, exc_info: bool = False):
    """Print a debug message in dim text."""
    if not _is_debug():
        return
    err_console.print(f"[dim][DEBUG][/] {escape(msg)}")
    if exc_info:
        err_console.print_exception()


# =============================================================================
# Verbosity Control
# =============================================================================

_VERBOSE = False
_DEBUG = False


def set_verbosity(verbose: bool, debug: bool):
    """Set verbosity levels."""
    global _VERBOSE, _DEBUG
    _VERBOSE = verbose
    _DEBUG = debug


def _is_verbose() -> bool:
    return _VERBOSE or _DEBUG


def _is_debug() -> bool:
    return _DEBUG
