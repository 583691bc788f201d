"""Association of running processes with installed packages.

Running processes arrive grouped by executable path (lower-cased, see
scanners.processes). Each package is matched against those groups with a
three-tier fallback, stopping at the first tier that finds a group:

    Tier 1 (exact): the package's executable path is a group key
    Tier 2 (directory): a group key contains the executable's folder
    Tier 3 (name): a group key contains the package name

Tiers 2 and 3 take the first qualifying key in the mapping's iteration
order, so the process group mapping must iterate in a stable order.
"""

from typing import Any, Mapping, Optional, Sequence

from .matching import contains_ignore_case, find_first_key, normalize_path_key, parent_directory
from .packages import Package, ResolutionInputError


ProcessGroups = Mapping[str, Sequence[int]]

MATCH_TIERS = ('exact', 'directory', 'name')


def find_exact_group(package: Package, process_groups: ProcessGroups) -> Optional[str]:
    if not package.path:
        return None
    key = normalize_path_key(package.path)
    return key if key in process_groups else None


def find_directory_group(package: Package, process_groups: ProcessGroups) -> Optional[str]:
    if not package.path:
        return None
    parent = parent_directory(package.path)
    if not parent:
        return None
    return find_first_key(process_groups, lambda key: contains_ignore_case(key, parent))


def find_name_group(package: Package, process_groups: ProcessGroups) -> Optional[str]:
    if not package.name or not package.name.strip():
        if not package.path:
            raise ResolutionInputError(
                "Package has neither a name nor a path to match processes against"
            )
        return None
    return find_first_key(process_groups, lambda key: contains_ignore_case(key, package.name))


def match_package(
    package: Package,
    process_groups: ProcessGroups
) -> tuple[Optional[str], Optional[str]]:
    """Find the process group belonging to a package.

    Args:
        package: Package to match
        process_groups: Lower-cased executable path -> process ids

    Returns:
        Tuple of (tier, key) - both None when nothing matched

    Raises:
        ResolutionInputError: If the package has a blank name and no path
    """
    for tier, finder in (
        ('exact', find_exact_group),
        ('directory', find_directory_group),
        ('name', find_name_group),
    ):
        key = finder(package, process_groups)
        if key is not None:
            return tier, key
    return None, None


class ReconciliationEngine:
    """Enriches packages with the ids of the processes running them.

    Example:
        >>> engine = ReconciliationEngine()
        >>> packages = [Package("App", "1.0", "Acme", path="C:\\\\App\\\\app.exe")]
        >>> engine.reconcile(packages, {"c:\\\\app\\\\app.exe": [10, 11]})[0].process_ids
        [10, 11]
        >>> engine.get_statistics()['by_tier']['exact']
        1

    Attributes:
        matches: One record per package processed, with the matched tier
            and group key (None when unmatched)
    """

    def __init__(self):
        self.matches: list[dict[str, Any]] = []

    def reconcile(
        self,
        packages: Sequence[Package],
        process_groups: ProcessGroups
    ) -> Sequence[Package]:
        """Append matching process ids to every package, in place.

        Process ids are appended, not assigned: reconciling the same
        packages twice duplicates them unless process_ids is reset first.

        Args:
            packages: Merged packages
            process_groups: Lower-cased executable path -> process ids

        Returns:
            The same ``packages`` sequence
        """
        for package in packages:
            tier, key = match_package(package, process_groups)
            if key is not None:
                package.process_ids.extend(process_groups[key])

            self.matches.append({
                'name': package.name,
                'tier': tier,
                'key': key,
            })

        return packages

    def get_statistics(self) -> dict[str, Any]:
        """Get reconciliation statistics.

        Returns:
            Statistics dict with the number of packages matched per tier
        """
        by_tier = {tier: 0 for tier in MATCH_TIERS}
        unmatched = 0
        for match in self.matches:
            if match['tier'] is None:
                unmatched += 1
            else:
                by_tier[match['tier']] += 1

        return {
            'total_packages': len(self.matches),
            'matched': len(self.matches) - unmatched,
            'unmatched': unmatched,
            'by_tier': by_tier,
        }


def reconcile(packages: Sequence[Package], process_groups: ProcessGroups) -> Sequence[Package]:
    """Enrich packages with process ids using a fresh engine."""
    return ReconciliationEngine().reconcile(packages, process_groups)
