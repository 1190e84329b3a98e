# Distinguished-name resolution.
#
# A DN is resolved in up to three stages, each one only entered when the
# previous stage failed outright:
#   DIRECT     subtree search rooted at the DN's DC= path, exact DN filter
#   FILTER     exact DN filter against the session's default root
#   COMPONENT  re-derive the object from its most identifying RDN and keep
#              only exact (case-insensitive) DN matches
# An empty result from any stage is a valid answer, not a failure.

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..models.result import DirectoryEntry, ResultSet
from ..utils.logging import debug
from .client import DirectoryClient
from .exceptions import ADLookupError
from .filters import attribute_filter, distinguished_name_filter

# RDN keys never searched on in the component stage
_CONTAINER_KEYS = ("dc", "ou")


class ResolutionStage(str, Enum):
    DIRECT = "direct"
    FILTER = "filter"
    COMPONENT = "component"
    DONE = "done"


@dataclass(frozen=True)
class Resolution:
    """Outcome of a DN resolution and the stage that produced it."""

    entries: ResultSet
    stage: ResolutionStage


def extract_base_dn(dn: str) -> str:
    """Comma-joined DC= components of a DN, or the DN itself when it has none."""
    parts = [part.strip() for part in dn.split(",")]
    dc_parts = [part for part in parts if part.lower().startswith("dc=")]
    return ",".join(dc_parts) if dc_parts else dn


def parse_dn_components(dn: str) -> Dict[str, str]:
    """
    Split a DN into attribute/value pairs.

    Keys are lowercased and keep parse order; only the first value seen per
    key is kept. Parts without a key or a value are ignored.
    """
    components: Dict[str, str] = {}
    for part in dn.split(","):
        part = part.strip()
        idx = part.find("=")
        if idx <= 0 or idx >= len(part) - 1:
            continue
        key = part[:idx].strip().lower()
        value = part[idx + 1 :].strip()
        if key and value and key not in components:
            components[key] = value
    return components


def _matching_dn(entries: ResultSet, dn: str) -> List[DirectoryEntry]:
    target = dn.strip().lower()
    return [
        entry
        for entry in entries
        if entry.distinguished_name and entry.distinguished_name.strip().lower() == target
    ]


class DnResolver:
    """
    Resolves a distinguished name through the three-stage fallback chain.

    Args:
        client: DirectoryClient bound to the target server
        attributes: Attribute projection applied to every stage
    """

    def __init__(self, client: DirectoryClient, attributes: Optional[Sequence[str]] = None):
        self.client = client
        self.attributes = attributes

    def resolve(self, dn: str) -> Resolution:
        """
        Resolve `dn`, returning the entries and the stage that produced them.

        Raises:
            ADLookupError: Only from the component stage, when its searches fail
        """
        dn = dn.strip()

        entries = self.direct_attempt(dn)
        if entries is not None:
            return Resolution(entries, ResolutionStage.DIRECT)

        entries = self.filter_fallback(dn)
        if entries is not None:
            return Resolution(entries, ResolutionStage.FILTER)

        return Resolution(self.component_fallback(dn), ResolutionStage.COMPONENT)

    def direct_attempt(self, dn: str) -> Optional[ResultSet]:
        """Exact DN search rooted at the DN's domain path; None on failure."""
        base = extract_base_dn(dn)
        debug(f"DN: direct search for {dn} rooted at {base}")
        try:
            return self.client.search(distinguished_name_filter(dn), self.attributes, base=base)
        except ADLookupError as e:
            debug(f"DN: direct search failed: {e}")
            return None

    def filter_fallback(self, dn: str) -> Optional[ResultSet]:
        """Exact DN search from the default root; None on failure."""
        debug(f"DN: filter search for {dn}")
        try:
            return self.client.search(distinguished_name_filter(dn), self.attributes)
        except ADLookupError as e:
            debug(f"DN: filter search failed: {e}")
            return None

    def component_fallback(self, dn: str) -> ResultSet:
        """
        Search on the DN's RDN values and keep exact DN matches.

        With a CN component, its filtered result is final. Otherwise each
        non-container component is tried in order until one yields a match.
        """
        components = parse_dn_components(dn)
        debug(f"DN: component search for {dn} using {list(components)}")

        if "cn" in components:
            found = self.client.search(attribute_filter("cn", components["cn"]), self.attributes)
            return ResultSet.of(_matching_dn(found, dn))

        for key, value in components.items():
            if key in _CONTAINER_KEYS:
                continue
            found = self.client.search(attribute_filter(key, value), self.attributes)
            matches = _matching_dn(found, dn)
            if matches:
                return ResultSet.of(matches)

        return ResultSet.of([])
