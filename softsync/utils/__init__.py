"""Utility modules for common operations.

Modules:
    constants: Timeouts, registry locations and file suffixes
    dates: Install date normalization to ISO-8601
    platform_info: Host detection
    version_info: ProductName/FileDescription from PE version resources
"""

from .dates import to_iso_string

from .platform_info import is_windows

from .version_info import (
    VersionInfoError,
    read_version_info,
)

__all__ = [
    # dates
    'to_iso_string',
    # platform_info
    'is_windows',
    # version_info
    'VersionInfoError',
    'read_version_info',
]
