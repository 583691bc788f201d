"""Output directory structure creation.

Every run writes into its own timestamped folder:

    ~/software-monitor/YYYY-MM-DD-HHMMSS/
    ├── softwares.json    # Packages with their process ids
    └── state.yaml        # Summary, statistics and errors of the run
"""

import platform
import socket
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


def get_timestamp() -> str:
    """Get a timestamp string for directory naming.

    Returns:
        Timestamp in YYYY-MM-DD-HHMMSS format
    """
    return datetime.now().strftime("%Y-%m-%d-%H%M%S")


def get_default_output_base() -> Path:
    """Get the default base directory for output.

    Returns:
        Path to ~/software-monitor/
    """
    return Path.home() / "software-monitor"


def create_output_directory(
    base_dir: Optional[Path] = None,
    timestamp: Optional[str] = None
) -> Path:
    """Create a timestamped output directory.

    Args:
        base_dir: Base directory (default: ~/software-monitor/)
        timestamp: Timestamp string (default: current time)

    Returns:
        Path to the created output directory

    Raises:
        OSError: If directory creation fails
    """
    if base_dir is None:
        base_dir = get_default_output_base()
    if timestamp is None:
        timestamp = get_timestamp()

    output_dir = base_dir / timestamp
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def get_output_paths(output_dir: Path) -> dict[str, Path]:
    """Get paths to all output files (which may not exist yet)."""
    return {
        "packages_file": output_dir / "softwares.json",
        "state_file": output_dir / "state.yaml",
    }


def get_system_info() -> dict[str, Any]:
    """Gather system information for the state file.

    Returns:
        Dictionary with hostname, OS name/release/version, architecture,
        user name and capture timestamp
    """
    return {
        "hostname": socket.gethostname(),
        "os": platform.system(),
        "os_release": platform.release(),
        "os_version": platform.version(),
        "architecture": platform.machine(),
        "username": Path.home().name,
        "capture_timestamp": datetime.now().isoformat(),
    }


class OutputStructure:
    """Manages the output directory of a run.

    Example:
        >>> output = OutputStructure()
        >>> print(f"Packages file: {output.paths['packages_file']}")
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        timestamp: Optional[str] = None
    ):
        """Initialize output structure.

        Args:
            base_dir: Base directory for output (default: ~/software-monitor/)
            timestamp: Timestamp for directory name (default: current time)
        """
        self.base_dir = base_dir or get_default_output_base()
        self.timestamp = timestamp or get_timestamp()
        self.output_dir = create_output_directory(self.base_dir, self.timestamp)
        self.paths = get_output_paths(self.output_dir)
        self.system_info = get_system_info()

    def to_dict(self) -> dict[str, Any]:
        """Convert output structure info to dictionary."""
        return {
            "base_dir": str(self.base_dir),
            "timestamp": self.timestamp,
            "output_dir": str(self.output_dir),
            "paths": {k: str(v) for k, v in self.paths.items()},
        }
