"""Install date normalization.

Uninstall registry entries and Win32_Product both record the install date
as a bare ``yyyyMMdd`` string. Packages carry it as ISO-8601 instead.
"""

from datetime import datetime
from typing import Optional


INSTALL_DATE_FORMAT = "%Y%m%d"


def to_iso_string(value: Optional[str]) -> Optional[str]:
    """Convert a ``yyyyMMdd`` date to ISO-8601 in local time.

    Args:
        value: Raw install date (e.g. "20250523"), or None

    Returns:
        ISO-8601 timestamp with the local UTC offset
        (e.g. "2025-05-23T00:00:00-03:00"), or None if the value is
        missing or does not match the expected format

    Examples:
        >>> to_iso_string("2025-05-23") is None
        True
    """
    if not value:
        return None

    value = value.strip()
    if len(value) != 8 or not value.isdigit():
        return None

    try:
        parsed = datetime.strptime(value, INSTALL_DATE_FORMAT)
        return parsed.astimezone().isoformat()
    except (ValueError, OverflowError, OSError):
        return None
