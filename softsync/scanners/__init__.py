"""Scanner modules for installed software and running processes.

Modules:
    registry: Scan the Uninstall registry keys (HKLM/HKCU, native and WOW64)
    wmi: Scan MSI products through Win32_Product
    shortcuts: Index Start Menu shortcuts by name
    processes: Group running processes by executable path
    powershell: PowerShell invocation for the WMI query
"""

from . import registry
from . import wmi
from . import shortcuts
from . import processes

__all__ = [
    "registry",
    "wmi",
    "shortcuts",
    "processes",
]
