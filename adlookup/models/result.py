# Result data model: directory entries and result sets.

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

# A decoded attribute value: a scalar, or a list when multi-valued
AttributeValue = Union[str, List[str]]


class DirectoryEntry(dict):
    """
    Attribute map for one directory object.

    Keys are attribute names exactly as returned by the server. The object's
    DN as reported by the transport is kept in `dn`, outside the map.
    """

    def __init__(self, attributes=(), dn: Optional[str] = None):
        super().__init__(attributes)
        self.dn = dn

    def get_ci(self, name: str, default=None):
        """Case-insensitive attribute lookup."""
        lowered = name.lower()
        for key, value in self.items():
            if key.lower() == lowered:
                return value
        return default

    @property
    def distinguished_name(self) -> Optional[str]:
        if self.dn:
            return self.dn
        value = self.get_ci("distinguishedName")
        if isinstance(value, list):
            return value[0] if value else None
        return value

    def __repr__(self) -> str:
        return f"DirectoryEntry(dn={self.dn!r}, {dict.__repr__(self)})"


@dataclass(frozen=True)
class ResultSet:
    """
    Ordered, immutable query result.

    `diagnostics` carries per-item notes (e.g. unresolved DNs in a batch);
    they are never entries.
    """

    entries: Tuple[DirectoryEntry, ...] = ()
    diagnostics: Tuple[str, ...] = ()

    @classmethod
    def of(cls, entries: Iterable[DirectoryEntry], diagnostics: Iterable[str] = ()) -> "ResultSet":
        return cls(tuple(entries), tuple(diagnostics))

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> DirectoryEntry:
        return self.entries[index]
