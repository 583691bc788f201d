"""Result files for an inventory run.

Writes two files into the run's output directory:

    softwares.json: The enriched package list, one object per package with
        name, version, publisher, install_date, path and process_ids.
    state.yaml: Machine-readable summary of the run: system information,
        package counts per source, how packages were matched to processes,
        and any errors collected along the way.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

import yaml

from softsync.discovery.packages import Package


SOFTSYNC_VERSION = "1.0.0"


def write_packages(packages: Sequence[Package], packages_path: Path) -> Path:
    """Write the package list as indented JSON.

    Args:
        packages: Reconciled packages
        packages_path: Destination file

    Returns:
        Path to the written file
    """
    packages_path.parent.mkdir(parents=True, exist_ok=True)
    with open(packages_path, "w", encoding="utf-8") as f:
        json.dump([p.to_dict() for p in packages], f, indent=2, ensure_ascii=False)
    return packages_path


def build_system_section(system_info: dict[str, Any]) -> dict[str, Any]:
    return {
        "hostname": system_info.get("hostname", "unknown"),
        "os": {
            "name": system_info.get("os"),
            "release": system_info.get("os_release"),
            "version": system_info.get("os_version"),
        },
        "architecture": system_info.get("architecture"),
        "username": system_info.get("username"),
    }


def build_summary_section(
    packages: Sequence[Package],
    scan_results: dict[str, Any]
) -> dict[str, Any]:
    """Build the package summary section for state.yaml.

    Args:
        packages: Reconciled packages
        scan_results: Results of the registry, wmi, shortcuts and
            processes scanners

    Returns:
        Counts of merged packages, raw entries per source, resolved paths
        and running packages
    """
    by_source: dict[str, int] = {}
    for package in packages:
        by_source[package.source] = by_source.get(package.source, 0) + 1

    processes = scan_results.get("processes", {})

    return {
        "total_packages": len(packages),
        "raw_entries": {
            "registry": scan_results.get("registry", {}).get("count", 0),
            "wmi": scan_results.get("wmi", {}).get("count", 0),
        },
        "merged_by_source": by_source,
        "with_path": sum(1 for p in packages if p.path),
        "running": sum(1 for p in packages if p.process_ids),
        "start_menu_shortcuts": scan_results.get("shortcuts", {}).get("count", 0),
        "process_groups": processes.get("group_count", 0),
        "processes": processes.get("process_count", 0),
    }


def build_reconciliation_section(stats: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Build the reconciliation section from ReconciliationEngine statistics."""
    stats = stats or {}
    return {
        "matched": stats.get("matched", 0),
        "unmatched": stats.get("unmatched", 0),
        "by_tier": dict(stats.get("by_tier", {})),
    }


def generate_state(
    state_path: Path,
    system_info: dict[str, Any],
    packages: Sequence[Package],
    scan_results: dict[str, Any],
    reconcile_stats: Optional[dict[str, Any]] = None,
    errors: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Generate the state.yaml file.

    Args:
        state_path: Destination file (OutputStructure.paths["state_file"])
        system_info: System information
        packages: Reconciled packages
        scan_results: Combined results from all scanners
        reconcile_stats: ReconciliationEngine.get_statistics() output
        errors: Errors collected during the run

    Returns:
        The complete state dictionary (also written to file)
    """
    state: dict[str, Any] = {
        "softsync": {
            "version": SOFTSYNC_VERSION,
            "capture_timestamp": datetime.now().isoformat(),
            "output_directory": str(state_path.parent),
        },
        "system": build_system_section(system_info),
        "summary": build_summary_section(packages, scan_results),
        "reconciliation": build_reconciliation_section(reconcile_stats),
        "errors": list(errors or []),
    }

    state_path.parent.mkdir(parents=True, exist_ok=True)
    with open(state_path, "w", encoding="utf-8") as f:
        yaml.dump(state, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return state

