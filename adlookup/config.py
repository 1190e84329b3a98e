import argparse
import getpass
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

from rich.table import Table
from rich_argparse import RichHelpFormatter

try:
    import tomllib
except ImportError:
    # Python < 3.11
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from . import __version__
from .classification import classify, classify_batch
from .directory.exceptions import ERRORS, ADLookupError
from .models.request import (
    BatchDn,
    Credentials,
    ExplicitDn,
    ExplicitFilter,
    Identifier,
    IdentifierBatch,
    IdentifierKind,
    QueryRequest,
    Target,
)
from .output import OUTPUT_FORMATS
from .utils.console import console
from .utils.helpers import parse_host_port, read_nonempty_lines, split_account
from .utils.logging import debug, error, warn

CONFIG_PATHS = ["adlookup.toml", "config/adlookup.toml", os.path.expanduser("~/.config/adlookup/adlookup.toml")]

# Switches that name the lookup target on their own
_TARGET_SWITCHES = ("filter", "distinguishedname", "input", "sid", "email")


class TableRichHelpFormatter(RichHelpFormatter):
    """
    Help formatter with Rich styling.
    Uses uppercase group names and custom color scheme.
    """

    styles = {
        **RichHelpFormatter.styles,
        "argparse.groups": "bold cyan",
        "argparse.args": "green",
        "argparse.metavar": "yellow",
        "argparse.help": "white",
    }

    group_name_formatter = str.upper


class TableHelpAction(argparse.Action):
    """
    Custom help action that displays arguments in Rich tables.
    """

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(
            option_strings=option_strings,
            dest=dest,
            default=default,
            nargs=0,
            help=help,
        )

    def __call__(self, parser, namespace, values, option_string=None):
        if parser.description:
            console.print(f"\n[bold white]{parser.description}[/]\n")

        console.print(f"[dim]Usage:[/] [bold]{parser.prog}[/] [OPTIONS] [TARGET] [PROPERTIES]\n")

        for group in parser._action_groups:
            actions = [a for a in group._group_actions if not isinstance(a, (argparse._HelpAction, TableHelpAction))]
            if not actions:
                continue

            console.print(f"[bold cyan]{group.title.upper()}[/]")
            if group.description:
                console.print(f"[dim]{group.description}[/]")

            table = Table(
                border_style="dim",
                show_header=True,
                header_style="bold white",
                padding=(0, 1),
                expand=False,
            )
            table.add_column("Option", style="green", no_wrap=True)
            table.add_column("Description", style="white")

            for action in actions:
                opts = ", ".join(action.option_strings) if action.option_strings else action.metavar or action.dest
                if action.option_strings and action.metavar:
                    opts += f" [yellow]{action.metavar}[/]"

                help_text = action.help or ""
                if action.default not in (None, False, True, argparse.SUPPRESS):
                    if "default:" not in help_text.lower():
                        help_text += f" [dim](default: {action.default})[/]"

                table.add_row(opts, help_text)

            console.print(table)
            console.print()

        parser.exit()


class OnceOnly(argparse.Action):
    """
    Argparse Action that rejects an option given more than once on the command line.
    Values coming from the config file (parser defaults) may be overridden once.
    """

    def __call__(self, parser, namespace, values, option_string=None):
        seen = getattr(namespace, "_once_seen", set())
        if self.dest in seen:
            raise argparse.ArgumentError(self, f"Argument {option_string} can only be specified once.")
        seen.add(self.dest)
        setattr(namespace, "_once_seen", seen)
        setattr(namespace, self.dest, values)


def load_config(paths: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Load configuration from TOML files.

    Priority:
    1. ./adlookup.toml
    2. ./config/adlookup.toml
    3. ~/.config/adlookup/adlookup.toml

    Returns:
        Mapping of argparse destinations to default values
    """
    if not tomllib:
        return {}

    config_data = {}
    loaded_path = None

    for path in paths or CONFIG_PATHS:
        if os.path.exists(path):
            try:
                with open(path, "rb") as f:
                    config_data = tomllib.load(f)
                loaded_path = path
                break
            except (OSError, tomllib.TOMLDecodeError) as e:
                warn(f"Error loading config file {path}: {e}")

    if not config_data:
        return {}

    debug(f"Loaded configuration from {loaded_path}")

    defaults = {}

    # Connection
    connection = config_data.get("connection", {})
    for key in ("server", "domain", "dc_ip", "username", "password", "hashes", "kerberos", "base"):
        if key in connection:
            defaults[key] = connection[key]

    if "password" in connection:
        warn(f"Password stored in {loaded_path}, consider restricting its permissions", verbose_only=True)

    # Output
    output = config_data.get("output", {})
    if "format" in output:
        defaults["output"] = output["format"]
    if "verbose" in output:
        defaults["verbose"] = output["verbose"]
    if "debug" in output:
        defaults["debug"] = output["debug"]

    return defaults


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="adlookup",
        description="Look up Active Directory objects by account name, DN, SID or email.",
        formatter_class=TableRichHelpFormatter,
        add_help=False,
    )
    ap.add_argument("-h", "--help", action=TableHelpAction, help="Show this help message")
    ap.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")

    # Positionals
    ap.add_argument(
        "target",
        nargs="?",
        metavar="TARGET",
        help="Account name, DN, SID or email, or a file with one entry per line",
    )
    ap.add_argument(
        "positional_properties",
        nargs="?",
        metavar="PROPERTIES",
        help="Comma-separated properties to return",
    )

    # Query
    query = ap.add_argument_group("Query options")
    query.add_argument("-f", "--filter", action=OnceOnly, metavar="FILTER", help="Raw LDAP filter, e.g. (objectClass=user)")
    query.add_argument(
        "-dn", "--distinguishedname", "--distinguished-name",
        dest="distinguishedname", action=OnceOnly, metavar="DN",
        help="Distinguished name to resolve",
    )
    query.add_argument("-sid", "--sid", action=OnceOnly, metavar="SID", help="Security identifier to look up")
    query.add_argument("-e", "--email", action=OnceOnly, metavar="EMAIL", help="Email address to look up")
    query.add_argument(
        "-i", "--input", action=OnceOnly, metavar="FILE",
        help="File of account names, DNs, SIDs or emails (one kind per file)",
    )
    query.add_argument(
        "-p", "--properties", action=OnceOnly, metavar="PROPS",
        help="Comma-separated properties to return ('*' for all)",
    )
    query.add_argument("--base", metavar="DN", help="Search root for filter and identifier lookups")

    # Connection
    conn = ap.add_argument_group("Connection options")
    conn.add_argument(
        "-s", "--server", action=OnceOnly, metavar="HOST[:PORT]",
        help="Directory server (port 3268 selects the Global Catalog). Discovered via DNS if omitted",
    )
    conn.add_argument("--domain", metavar="DOMAIN", help="Domain used for server discovery and bind")
    conn.add_argument("--dc-ip", metavar="IP", help="KDC address for Kerberos binds (defaults to the server)")

    # Authentication
    auth = ap.add_argument_group("Authentication options")
    auth.add_argument("-u", "--username", action=OnceOnly, metavar="USER", help="Username (DOMAIN\\user or user@domain)")
    auth.add_argument("-pw", "--password", action=OnceOnly, metavar="PASSWORD", help="Password (prompted if omitted)")
    auth.add_argument("--hashes", metavar="LM:NT", help="NTLM hashes in LM:NT format (or NT-only) instead of password")
    auth.add_argument("-k", "--kerberos", action="store_true", help="Use Kerberos authentication (supports ccache)")

    # Output
    out = ap.add_argument_group("Output options")
    out.add_argument("-o", "--output", type=str.lower, choices=OUTPUT_FORMATS, default="default", help="Output format")

    # Misc
    misc = ap.add_argument_group("Misc")
    misc.add_argument("--verbose", action="store_true", help="Enable verbose output")
    misc.add_argument("--debug", action="store_true", help="Enable debug output (print full stack traces)")

    # Load defaults from config file
    defaults = load_config()
    if defaults:
        ap.set_defaults(**defaults)

    return ap


def _fail(msg: str):
    error(msg)
    sys.exit(1)


def validate_args(args):
    """
    Normalize positionals and reject invalid option combinations.

    The first positional is an input file when it exists on disk; otherwise
    it is the lookup target, or the property list when a switch already named
    the target. The second positional is the property list.
    """
    first = args.target
    second = args.positional_properties
    args.target = None
    positional_properties = None

    if first is not None:
        if not args.input and os.path.isfile(first):
            args.input = first
            positional_properties = second
        elif any(getattr(args, name) for name in _TARGET_SWITCHES):
            positional_properties = first
            if second is not None:
                _fail(ERRORS["extra_argument"].format(value=second))
        else:
            args.target = first
            positional_properties = second

    if not args.properties and positional_properties:
        args.properties = positional_properties

    if args.filter and args.distinguishedname:
        _fail(ERRORS["filter_and_dn"])

    if not args.target and not any(getattr(args, name) for name in _TARGET_SWITCHES):
        _fail(ERRORS["no_target"])

    if args.output:
        args.output = args.output.lower()
        if args.output not in OUTPUT_FORMATS:
            _fail(f"Unknown output format '{args.output}'. Use one of: {', '.join(OUTPUT_FORMATS)}")


def parse_properties(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Split a comma-separated property list; None or '*' requests all properties."""
    if not value:
        return None
    names = tuple(name.strip() for name in value.split(",") if name.strip())
    if not names or names == ("*",):
        return None
    return names


def build_credentials(args) -> Optional[Credentials]:
    """
    Build bind credentials from the parsed arguments.

    No username and no Kerberos means an anonymous search. A username without
    password, hashes or Kerberos prompts for the password.
    """
    if not args.username:
        if args.kerberos:
            return Credentials(username="", domain=args.domain, kerberos=True)
        return None

    domain, user = split_account(args.username)
    domain = args.domain or domain

    password = args.password
    if password is None and not args.hashes and not args.kerberos:
        account = f"{domain}\\{user}" if domain else user
        password = getpass.getpass(f"Password for {account}: ")

    return Credentials(
        username=user,
        password=password,
        domain=domain,
        hashes=args.hashes,
        kerberos=args.kerberos,
    )


def build_target(args) -> Target:
    """
    Turn the parsed arguments into a lookup target.

    Precedence: --filter, --sid, --email, --distinguishedname, --input, then
    the positional identifier.

    Raises:
        ClassificationError: Unrecognized identifier or mixed batch file
        ADLookupError: Unreadable input file
    """
    if args.filter:
        return ExplicitFilter(args.filter)
    if args.sid:
        return Identifier(IdentifierKind.SECURITY_IDENTIFIER, args.sid.strip())
    if args.email:
        return Identifier(IdentifierKind.EMAIL, args.email.strip())
    if args.distinguishedname:
        return ExplicitDn(args.distinguishedname.strip())

    if args.input:
        try:
            lines = read_nonempty_lines(args.input)
        except (OSError, UnicodeDecodeError) as e:
            raise ADLookupError(ERRORS["input_unreadable"].format(path=args.input, error=e)) from e
        kind, values = classify_batch(lines, source=args.input)
        if kind == IdentifierKind.DISTINGUISHED_NAME:
            return BatchDn(tuple(values))
        return IdentifierBatch(kind, tuple(values))

    identifier = classify(args.target)
    if identifier.kind == IdentifierKind.DISTINGUISHED_NAME:
        return ExplicitDn(identifier.value)
    return identifier


def build_request(args) -> QueryRequest:
    """Build the QueryRequest for a validated argument namespace."""
    target = build_target(args)
    credentials = build_credentials(args)

    server, port = (None, None)
    if args.server:
        server, port = parse_host_port(args.server)

    domain = args.domain or (credentials.domain if credentials else None)

    return QueryRequest(
        target=target,
        server=server or None,
        port=port,
        domain=domain,
        credentials=credentials,
        attributes=parse_properties(args.properties),
        base=args.base,
        dc_ip=args.dc_ip,
    )
