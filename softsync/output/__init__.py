"""Output generation modules for inventory artifacts.

Modules:
    structure: Create the timestamped output directory
    state: Write softwares.json and state.yaml
"""

from .structure import (
    OutputStructure,
    create_output_directory,
    get_output_paths,
    get_system_info,
)
from .state import (
    SOFTSYNC_VERSION,
    generate_state,
    write_packages,
)

__all__ = [
    # structure
    "OutputStructure",
    "create_output_directory",
    "get_output_paths",
    "get_system_info",
    # state
    "SOFTSYNC_VERSION",
    "generate_state",
    "write_packages",
]
