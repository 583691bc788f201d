#!/usr/bin/env python3
"""softsync main entry point.

Builds the inventory of installed software on a Windows machine and
annotates every package with the ids of the processes currently running it.

Usage:
    softsync [/path/to/config.json]
    python -m softsync.main [/path/to/config.json]

The optional config.json file may contain:
    {
        "output_dir": "~/software-monitor",
        "include_wmi": true,
        "write_state": true
    }

This script:
    1. Indexes Start Menu shortcuts (used to resolve executables)
    2. Scans the Uninstall registry keys
    3. Scans MSI products through WMI (unless include_wmi is false)
    4. Merges duplicate package records
    5. Collects running processes grouped by executable
    6. Matches processes to packages
    7. Writes softwares.json and state.yaml
    8. Prints a JSON summary of the run
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional


DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "~/software-monitor",
    "include_wmi": True,
    "write_state": True,
}


def load_config(config_path: Optional[Path]) -> dict[str, Any]:
    """Read the JSON config file and fill in defaults.

    Args:
        config_path: Path to config.json, or None for defaults only

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the file does not hold a JSON object
    """
    config = dict(DEFAULT_CONFIG)
    if config_path is None:
        return config

    with open(config_path, encoding="utf-8") as f:
        loaded = json.load(f)

    if not isinstance(loaded, dict):
        raise ValueError("Config file must contain a JSON object")

    config.update(loaded)
    return config


def _collect_warnings(source: str, scan_result: dict[str, Any], warnings: list[str]) -> None:
    for error in scan_result.get("errors", []):
        message = error.get("error") if isinstance(error, dict) else str(error)
        path = error.get("path") if isinstance(error, dict) else None
        warnings.append(f"{source}: {message}" + (f" ({path})" if path else ""))


def run_inventory(config: dict[str, Any]) -> dict[str, Any]:
    """Run the complete inventory process.

    Args:
        config: Configuration dictionary with:
            - output_dir: Base directory for output
            - include_wmi: Whether to query Win32_Product
            - write_state: Whether to write state.yaml

    Returns:
        Results dictionary printed as JSON by main()
    """
    from softsync.discovery.packages import merge
    from softsync.discovery.reconcile import ReconciliationEngine
    from softsync.discovery.resolver import PathResolver
    from softsync.output.state import generate_state, write_packages
    from softsync.output.structure import OutputStructure
    from softsync.scanners import processes, registry, shortcuts, wmi
    from softsync.utils.platform_info import is_windows

    results: dict[str, Any] = {
        "status": "success",
        "errors": [],
        "warnings": [],
    }

    if not is_windows():
        results["status"] = "error"
        results["errors"].append(
            f"softsync reads the Windows registry and WMI; unsupported platform: {sys.platform}"
        )
        return results

    scan_results: dict[str, Any] = {}

    # =================================================================
    # Phase 1: Index Start Menu shortcuts
    # =================================================================
    print("Indexing Start Menu shortcuts...", flush=True)
    launcher_index = None
    try:
        launcher_index = shortcuts.StartMenuIndex()
        scan_results["shortcuts"] = {
            "count": len(launcher_index),
            "shortcut_files": launcher_index.shortcut_count,
        }
    except Exception as e:
        scan_results["shortcuts"] = {"count": 0, "shortcut_files": 0}
        results["errors"].append(f"Shortcut indexing failed: {e}")

    resolver = PathResolver(launcher_index=launcher_index)

    # =================================================================
    # Phase 2: Scan package sources
    # =================================================================
    print("Scanning registry...", flush=True)
    try:
        scan_results["registry"] = registry.scan(resolver)
    except Exception as e:
        scan_results["registry"] = {"packages": [], "count": 0, "errors": []}
        results["errors"].append(f"Registry scan failed: {e}")

    if config.get("include_wmi", True):
        print("Scanning MSI products (WMI)...", flush=True)
        try:
            scan_results["wmi"] = wmi.scan(resolver)
        except Exception as e:
            scan_results["wmi"] = {"packages": [], "count": 0, "errors": []}
            results["errors"].append(f"WMI scan failed: {e}")
    else:
        scan_results["wmi"] = {"packages": [], "count": 0, "errors": []}

    _collect_warnings("registry", scan_results["registry"], results["warnings"])
    _collect_warnings("wmi", scan_results["wmi"], results["warnings"])
    if resolver.errors:
        results["warnings"].append(
            f"resolver: {len(resolver.errors)} file(s) could not be inspected"
        )

    # =================================================================
    # Phase 3: Merge package records
    # =================================================================
    print("Merging package records...", flush=True)
    packages = merge([
        scan_results["registry"]["packages"],
        scan_results["wmi"]["packages"],
    ])

    # =================================================================
    # Phase 4: Collect processes and reconcile
    # =================================================================
    print("Collecting running processes...", flush=True)
    try:
        scan_results["processes"] = processes.scan()
    except Exception as e:
        scan_results["processes"] = {"groups": {}, "group_count": 0, "process_count": 0, "errors": []}
        results["errors"].append(f"Process collection failed: {e}")
    _collect_warnings("processes", scan_results["processes"], results["warnings"])

    print("Matching processes to packages...", flush=True)
    engine = ReconciliationEngine()
    try:
        engine.reconcile(packages, scan_results["processes"]["groups"])
    except Exception as e:
        results["errors"].append(f"Reconciliation failed: {e}")

    reconcile_stats = engine.get_statistics()
    results["packages"] = len(packages)
    results["reconciliation"] = reconcile_stats

    # =================================================================
    # Phase 5: Write output files
    # =================================================================
    print("Writing output files...", flush=True)
    written = False
    try:
        output_base = Path(config.get("output_dir") or DEFAULT_CONFIG["output_dir"]).expanduser()
        output = OutputStructure(base_dir=output_base)
        write_packages(packages, output.paths["packages_file"])
        written = True

        if config.get("write_state", True):
            state = generate_state(
                state_path=output.paths["state_file"],
                system_info=output.system_info,
                packages=packages,
                scan_results=scan_results,
                reconcile_stats=reconcile_stats,
                errors=results["errors"],
            )
            results["state_summary"] = state.get("summary", {})

        results["output_structure"] = output.to_dict()
    except Exception as e:
        results["errors"].append(f"Writing output failed: {e}")

    # =================================================================
    # Final Status
    # =================================================================
    if results["errors"]:
        results["status"] = "partial" if written else "error"

    return results


def main() -> None:
    """Main entry point for softsync."""
    config_path = Path(sys.argv[1]).expanduser() if len(sys.argv) > 1 else None

    try:
        config = load_config(config_path)
    except FileNotFoundError:
        print(json.dumps({
            "status": "error",
            "error": f"Config file not found: {config_path}"
        }))
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(json.dumps({
            "status": "error",
            "error": f"Invalid JSON in config file: {e}"
        }))
        sys.exit(1)
    except ValueError as e:
        print(json.dumps({
            "status": "error",
            "error": f"Invalid config file: {e}"
        }))
        sys.exit(1)

    try:
        results = run_inventory(config)
        print(json.dumps(results, indent=2, default=str))
    except Exception as e:
        print(json.dumps({
            "status": "error",
            "error": f"Inventory failed: {e}",
            "exception_type": type(e).__name__,
        }))
        sys.exit(1)

    if results["status"] == "error":
        sys.exit(1)


if __name__ == "__main__":
    main()
