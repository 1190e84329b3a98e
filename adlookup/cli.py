import sys
from typing import List, Optional

from .config import build_parser, build_request, parse_properties, validate_args
from .directory import (
    ADLookupError,
    DirectoryConnectionError,
    DirectorySearchError,
    QueryOrchestrator,
)
from .output.writer import render
from .utils.logging import debug, error, good, set_verbosity, warn

# Exit codes
EXIT_USAGE = 1
EXIT_QUERY_FAILED = 2


def main(argv: Optional[List[str]] = None):
    ap = build_parser()
    args = ap.parse_intermixed_args(argv)

    # Set verbosity early
    set_verbosity(args.verbose, args.debug)

    validate_args(args)

    try:
        request = build_request(args)
    except ADLookupError as e:
        error(str(e))
        sys.exit(EXIT_USAGE)

    debug(f"Request: {request}")

    try:
        results = QueryOrchestrator().execute(request)
    except (DirectoryConnectionError, DirectorySearchError) as e:
        error(str(e))
        debug("Query failed", exc_info=True)
        sys.exit(EXIT_QUERY_FAILED)
    except ADLookupError as e:
        error(str(e))
        sys.exit(EXIT_USAGE)

    # Batch notes go to stderr, never into the rendered results
    for note in results.diagnostics:
        warn(note)

    good(f"{len(results)} entries found")
    render(results.entries, args.output, parse_properties(args.properties))


if __name__ == "__main__":
    main()
