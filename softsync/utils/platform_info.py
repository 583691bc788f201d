"""Host platform detection."""

import platform


def is_windows() -> bool:
    """Check if running on Windows.

    Registry, WMI, version resources and shortcut resolution are only
    available there; scanners report an error elsewhere.

    Returns:
        True if running on Windows
    """
    return platform.system() == "Windows"
