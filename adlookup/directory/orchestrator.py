# Query orchestration: request in, ResultSet out.

import re
from typing import Callable, List, Optional

from ..models.request import (
    GLOBAL_CATALOG_PORT,
    BatchDn,
    ExplicitDn,
    ExplicitFilter,
    Identifier,
    IdentifierBatch,
    IdentifierKind,
    QueryRequest,
)
from ..models.result import DirectoryEntry, ResultSet
from ..utils.dns import find_default_server
from ..utils.logging import debug, info
from .client import DirectoryClient, DirectoryService
from .exceptions import ERRORS, ADLookupError
from .filters import batch_filter, identifier_filter
from .resolver import DnResolver
from .transport import ImpacketDirectoryService

# Identifier kinds that are unique forest-wide
_FOREST_WIDE_KINDS = (IdentifierKind.SECURITY_IDENTIFIER, IdentifierKind.EMAIL)

# Filter terms on forest-wide attributes
_FOREST_WIDE_FILTER = re.compile(r"\((?:objectSid|mail)\s*=", re.IGNORECASE)


def wants_global_catalog(request: QueryRequest) -> bool:
    """
    True when the Global Catalog should be used automatically.

    Only applies when neither server nor port was given, and the target is a
    SID or email (single or batch) or a filter matching on one.
    """
    if request.server_pinned or request.port is not None:
        return False

    target = request.target
    if isinstance(target, Identifier):
        return target.kind in _FOREST_WIDE_KINDS
    if isinstance(target, IdentifierBatch):
        return target.kind in _FOREST_WIDE_KINDS
    if isinstance(target, ExplicitFilter):
        return bool(_FOREST_WIDE_FILTER.search(target.filter))
    return False


class QueryOrchestrator:
    """
    Top-level entry point for lookups.

    Args:
        service: DirectoryService to search with; None builds an impacket
            service from each request's credentials
        locate_server: Callable(domain, global_catalog) returning a server
            name, used when the request does not name one
    """

    def __init__(
        self,
        service: Optional[DirectoryService] = None,
        locate_server: Callable[[str, bool], str] = find_default_server,
    ):
        self.service = service
        self.locate_server = locate_server

    def execute(self, request: QueryRequest) -> ResultSet:
        """
        Run one request.

        Raises:
            ADLookupError: No server could be determined
            DirectoryConnectionError: Server unreachable or bind rejected
            DirectorySearchError: Search failed (not raised for batch DN lines)
        """
        port = request.port
        use_gc = wants_global_catalog(request)
        if use_gc:
            port = GLOBAL_CATALOG_PORT
            info(f"Using the Global Catalog (port {GLOBAL_CATALOG_PORT}) for a forest-wide lookup")

        client = DirectoryClient(self._service_for(request), self._server_for(request, use_gc), port)
        target = request.target
        attributes = list(request.attributes) if request.attributes else None

        if isinstance(target, ExplicitFilter):
            return client.search(target.filter, attributes, base=request.base)

        if isinstance(target, ExplicitDn):
            resolution = DnResolver(client, attributes).resolve(target.dn)
            debug(f"DN: {target.dn} resolved at stage {resolution.stage.value}")
            return resolution.entries

        if isinstance(target, BatchDn):
            return self._resolve_batch(client, attributes, target.dns)

        if isinstance(target, Identifier):
            return client.search(identifier_filter(target), attributes, base=request.base)

        if isinstance(target, IdentifierBatch):
            return client.search(batch_filter(target.kind, target.values), attributes, base=request.base)

        raise TypeError(f"Unsupported query target: {type(target).__name__}")

    def _service_for(self, request: QueryRequest) -> DirectoryService:
        if self.service is not None:
            return self.service
        return ImpacketDirectoryService(request.credentials, kdc_host=request.dc_ip)

    def _server_for(self, request: QueryRequest, use_gc: bool) -> str:
        if request.server:
            return request.server

        domain = request.domain or (request.credentials.domain if request.credentials else None)
        if not domain:
            raise ADLookupError(ERRORS["no_server"])

        server = self.locate_server(domain, use_gc)
        debug(f"Located server {server} for domain {domain}")
        return server

    def _resolve_batch(self, client: DirectoryClient, attributes, dn_list) -> ResultSet:
        """Resolve each DN on its own; misses and failures become diagnostics."""
        resolver = DnResolver(client, attributes)
        entries: List[DirectoryEntry] = []
        diagnostics: List[str] = []

        for dn in dn_list:
            try:
                resolution = resolver.resolve(dn)
            except ADLookupError as e:
                diagnostics.append(ERRORS["dn_failed"].format(dn=dn, error=e))
                continue
            if not resolution.entries:
                diagnostics.append(ERRORS["dn_no_results"].format(dn=dn))
                continue
            entries.extend(resolution.entries)

        return ResultSet.of(entries, diagnostics)
