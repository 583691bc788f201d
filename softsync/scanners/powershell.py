"""PowerShell invocation for the WMI scanner."""

import json
import subprocess
from typing import Any, Optional


def run_powershell(
    script: str,
    timeout: int
) -> Optional[str]:
    """Run a PowerShell script and return its stdout, or None on failure.

    Args:
        script: Script passed to -Command
        timeout: Timeout in seconds

    Returns:
        stdout as string, or None if the command failed
    """
    try:
        result = subprocess.run(
            ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
        if result.returncode == 0:
            return result.stdout.strip()
        return None
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return None


def parse_json_records(output: str) -> list[dict[str, Any]]:
    """Parse ConvertTo-Json output into a list of records.

    ConvertTo-Json emits a bare object when there is a single result and
    nothing at all when there are none.

    Args:
        output: Raw JSON text

    Returns:
        List of dictionaries

    Raises:
        ValueError: If the output is not valid JSON
    """
    if not output or not output.strip():
        return []

    data = json.loads(output)
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [item for item in data if isinstance(item, dict)]
    return []
