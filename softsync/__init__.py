"""softsync - installed software inventory reconciled with running processes.

Subpackages:
    scanners: Registry, WMI, Start Menu and process collection
    discovery: Package merging, executable resolution, process matching
    output: Output directory, softwares.json and state.yaml
    utils: Constants, dates, platform checks, PE version info
"""

__version__ = "1.0.0"
