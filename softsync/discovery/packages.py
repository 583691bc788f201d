"""Package records and deduplication across sources.

The same installed application is usually reported more than once: by the
Uninstall registry keys (native and WOW6432Node views, machine and user
hives) and by Win32_Product for MSI installs. Each report becomes a
RawPackageEntry; merge() collapses them into one Package per identity key.

Identity key:
    (name, version, publisher), compared exactly as the sources report them.

Representative selection:
    The first entry, in source order, that carries a path. When no entry of
    the group has a path, the first entry of the group.
"""

from dataclasses import dataclass, field
from itertools import chain
from typing import Any, Iterable, Optional, Sequence


class ResolutionInputError(ValueError):
    """Raised when a package or hint set cannot identify anything.

    Absence of data (no path, no match) is a normal outcome and never
    raises. This is reserved for calls that make no sense, such as resolving
    a blank display name without any hints.
    """
    pass


def has_required_fields(
    name: Optional[str],
    version: Optional[str],
    publisher: Optional[str]
) -> bool:
    """Check that the identity fields of a raw record are all present.

    Sources call this before building a RawPackageEntry; records that fail
    are dropped at the source.

    Args:
        name: Display name
        version: Display version
        publisher: Publisher or vendor

    Returns:
        True if all three are non-blank strings
    """
    return all(
        isinstance(value, str) and value.strip()
        for value in (name, version, publisher)
    )


@dataclass(frozen=True)
class RawPackageEntry:
    """An unmerged package record reported by a single source.

    Attributes:
        name: Display name
        version: Display version
        publisher: Publisher or vendor
        install_date: ISO-8601 install date, or None
        path: Primary executable if the source resolved one, or None
        source: Which source produced the entry ('registry', 'wmi', ...)
    """
    name: str
    version: str
    publisher: str
    install_date: Optional[str] = None
    path: Optional[str] = None
    source: str = 'unknown'

    @property
    def identity_key(self) -> tuple[str, str, str]:
        return (self.name, self.version, self.publisher)

    def has_path(self) -> bool:
        return bool(self.path and self.path.strip())


@dataclass
class Package:
    """A canonical installed application, enriched with running processes.

    Attributes:
        name: Display name
        version: Display version
        publisher: Publisher or vendor
        install_date: ISO-8601 install date, or None
        path: Primary executable, or None if unresolved
        process_ids: Ids of running processes matched to this package, in
            discovery order. Appended to by reconciliation, never reset.
        source: Source of the entry chosen during merge
    """
    name: str
    version: str
    publisher: str
    install_date: Optional[str] = None
    path: Optional[str] = None
    process_ids: list[int] = field(default_factory=list)
    source: str = 'unknown'

    @property
    def identity_key(self) -> tuple[str, str, str]:
        return (self.name, self.version, self.publisher)

    @classmethod
    def from_entry(cls, entry: RawPackageEntry) -> 'Package':
        """Create a fresh Package (no process ids) from a raw entry."""
        return cls(
            name=entry.name,
            version=entry.version,
            publisher=entry.publisher,
            install_date=entry.install_date,
            path=entry.path,
            source=entry.source,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'name': self.name,
            'version': self.version,
            'publisher': self.publisher,
            'install_date': self.install_date,
            'path': self.path,
            'process_ids': list(self.process_ids),
        }


def group_by_identity(
    entries: Iterable[RawPackageEntry]
) -> dict[tuple[str, str, str], list[RawPackageEntry]]:
    """Group entries by identity key, keeping first-appearance order.

    Args:
        entries: Raw entries in source order

    Returns:
        Ordered mapping of identity key to the entries sharing it
    """
    groups: dict[tuple[str, str, str], list[RawPackageEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.identity_key, []).append(entry)
    return groups


def select_representative(entries: Sequence[RawPackageEntry]) -> RawPackageEntry:
    """Pick the entry that stands for its group.

    Args:
        entries: Non-empty group of duplicates, in source order

    Returns:
        The first entry with a path, else the first entry
    """
    for entry in entries:
        if entry.has_path():
            return entry
    return entries[0]


def merge(sources: Iterable[Iterable[RawPackageEntry]]) -> list[Package]:
    """Merge raw entries from several sources into canonical packages.

    Sources are concatenated in the order given; that order is also the
    tie-break order, so the result depends only on the input order.

    Args:
        sources: Sequences of raw entries, one per source

    Returns:
        One Package per identity key, ordered by first appearance, each with
        an empty process_ids list

    Example:
        >>> merged = merge([
        ...     [RawPackageEntry("A", "1.0", "P")],
        ...     [RawPackageEntry("A", "1.0", "P", path="C:\\\\a.exe")],
        ... ])
        >>> [(p.name, p.path) for p in merged]
        [('A', 'C:\\\\a.exe')]
    """
    groups = group_by_identity(chain.from_iterable(sources))
    return [
        Package.from_entry(select_representative(entries))
        for entries in groups.values()
    ]
