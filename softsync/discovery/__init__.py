"""Package resolution and process reconciliation.

Implements the three stages between raw inventory and the final record set:
    merge: Deduplicate package records reported by several sources
    resolve: Find a package's primary executable (directory, launcher, icon)
    reconcile: Attach running process ids (exact path, directory, name)

Modules:
    packages: Package and RawPackageEntry records, merge()
    resolver: PathResolver, the executable resolution chain
    reconcile: ReconciliationEngine, the process matching chain
    matching: Case-insensitive comparison helpers

Usage:
    from softsync.discovery import PathResolver, merge, reconcile

    resolver = PathResolver(launcher_index=StartMenuIndex())
    packages = merge([registry_entries, wmi_entries])
    reconcile(packages, process_groups)
"""

from .packages import (
    Package,
    RawPackageEntry,
    ResolutionInputError,
    group_by_identity,
    has_required_fields,
    merge,
    select_representative,
)
from .resolver import (
    PathResolver,
    clean_hint,
    describe_metadata,
    list_executables,
    resolve,
)
from .reconcile import (
    MATCH_TIERS,
    ReconciliationEngine,
    match_package,
    reconcile,
)

__all__ = [
    # packages.py
    'Package',
    'RawPackageEntry',
    'ResolutionInputError',
    'group_by_identity',
    'has_required_fields',
    'merge',
    'select_representative',
    # resolver.py
    'PathResolver',
    'clean_hint',
    'describe_metadata',
    'list_executables',
    'resolve',
    # reconcile.py
    'MATCH_TIERS',
    'ReconciliationEngine',
    'match_package',
    'reconcile',
]
