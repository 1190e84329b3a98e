# Directory client: filter search against one server.
#
# The transport is a swappable capability (DirectoryService). A session is
# opened per search call and released as soon as that call's results or
# failure are in hand.

from dataclasses import dataclass
from typing import ContextManager, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..models.request import DirectoryProtocol
from ..models.result import DirectoryEntry, ResultSet
from ..utils.logging import debug
from .codec import ENTRY_LOCATOR_ATTRIBUTE, decode_values, to_native
from .exceptions import ERRORS, ADLookupError, DirectorySearchError

# Fixed page size for the simple-paged-results control
PAGE_SIZE = 1000


@dataclass(frozen=True)
class RawEntry:
    """One search result as it came off the wire: DN plus raw octet values."""

    dn: str
    attributes: Sequence[Tuple[str, Sequence[bytes]]]


class DirectorySession(Protocol):
    """An open, bound connection scoped to a search root."""

    def search(
        self,
        search_filter: str,
        attributes: Optional[Sequence[str]] = None,
        page_size: int = PAGE_SIZE,
    ) -> Iterable[RawEntry]:
        ...


class DirectoryService(Protocol):
    """Capability: open a session against a server/port rooted at `base`."""

    def session(
        self,
        server: str,
        port: Optional[int] = None,
        base: Optional[str] = None,
    ) -> ContextManager[DirectorySession]:
        ...


class DirectoryClient:
    """
    Executes filter searches against one server and normalizes the results.

    Port 3268 selects the Global Catalog; any other port (or none) the
    standard protocol. Every value passes through the attribute codec and the
    entry-locator attribute is dropped from every entry.
    """

    def __init__(self, service: DirectoryService, server: str, port: Optional[int] = None):
        self.service = service
        self.server = server
        self.port = port

    @property
    def protocol(self) -> DirectoryProtocol:
        return DirectoryProtocol.from_port(self.port)

    def search(
        self,
        search_filter: str,
        attributes: Optional[Sequence[str]] = None,
        base: Optional[str] = None,
    ) -> ResultSet:
        """
        Run one subtree search.

        Args:
            search_filter: Filter expression
            attributes: Attribute projection; None requests the default set
            base: Search root; None uses the session's default root

        Returns:
            ResultSet of decoded entries, in server order

        Raises:
            DirectoryConnectionError: Server unreachable or bind rejected
            DirectorySearchError: Any other search failure
        """
        debug(
            f"{self.protocol.value}: search on {self.server}"
            f"{':' + str(self.port) if self.port else ''} base={base!r} page_size={PAGE_SIZE} filter={search_filter}"
        )
        try:
            with self.service.session(self.server, self.port, base) as session:
                raw_entries = list(session.search(search_filter, attributes, PAGE_SIZE))
        except ADLookupError:
            raise
        except Exception as e:
            raise DirectorySearchError(
                ERRORS["search"].format(server=self.server, error=e), server=self.server
            ) from e

        entries = [normalize_entry(raw) for raw in raw_entries]
        debug(f"{self.protocol.value}: {len(entries)} entries returned")
        return ResultSet.of(entries)


def normalize_entry(raw: RawEntry) -> DirectoryEntry:
    """Decode a raw entry into a DirectoryEntry, dropping the entry locator."""
    attributes: List[Tuple[str, object]] = []
    for name, values in raw.attributes:
        if name.lower() == ENTRY_LOCATOR_ATTRIBUTE:
            continue
        decoded = decode_values(name, (to_native(name, value) for value in values))
        if decoded is None:
            continue
        attributes.append((name, decoded))
    return DirectoryEntry(attributes, dn=raw.dn)
