"""Scanner for running processes, grouped by executable.

Each running process with a known executable path is added to the group of
its lower-cased path. The returned dict keeps insertion order (the order in
which psutil enumerates processes), which reconciliation relies on for
reproducible first-match scans.
"""

import psutil


def collect() -> dict[str, list[int]]:
    """Group running process ids by executable path.

    Processes without an executable path (system idle, kernel threads) and
    processes that exit or deny access during enumeration are skipped.

    Returns:
        Lower-cased executable path -> process ids, in enumeration order
    """
    groups: dict[str, list[int]] = {}

    for proc in psutil.process_iter(["pid", "exe"]):
        try:
            info = proc.info
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue

        exe = info.get("exe")
        pid = info.get("pid")
        if not exe or not exe.strip() or pid is None:
            continue

        groups.setdefault(exe.lower(), []).append(int(pid))

    return groups


def scan() -> dict:
    """Collect process groups with summary counts.

    Returns:
        Dictionary with 'groups', 'group_count', 'process_count' and
        'errors' list
    """
    errors = []
    try:
        groups = collect()
    except psutil.Error as e:
        groups = {}
        errors.append({"error": f"Process enumeration failed: {e}"})

    return {
        "groups": groups,
        "group_count": len(groups),
        "process_count": sum(len(pids) for pids in groups.values()),
        "errors": errors,
    }
