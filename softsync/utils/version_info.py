"""Embedded product metadata for Windows executables.

Reads the VERSIONINFO resource of a PE file with pywin32's
``win32api.GetFileVersionInfo``, the same data Explorer shows on the
"Details" tab of a file's properties. Only the two strings used to identify
a package's executable are extracted:

- ProductName: the product the file ships with (e.g. "Mozilla Firefox")
- FileDescription: the file's own description (e.g. "Firefox")

String tables are looked up for every language/codepage pair listed in
\\VarFileInfo\\Translation, then for the common US-English fallbacks.
"""

from pathlib import Path
from typing import Optional, Union

from .platform_info import is_windows


# US English with Unicode and Windows-1252 codepages
FALLBACK_TRANSLATIONS = [(0x0409, 0x04B0), (0x0409, 0x04E4)]


class VersionInfoError(OSError):
    """Raised when a file's version resource cannot be read."""
    pass


def _query_string(path: str, language: int, codepage: int, name: str) -> Optional[str]:
    """Read one entry of a StringFileInfo table, or None if absent/blank."""
    import pywintypes
    import win32api

    sub_block = f"\\StringFileInfo\\{language:04x}{codepage:04x}\\{name}"
    try:
        value = win32api.GetFileVersionInfo(path, sub_block)
    except pywintypes.error:
        return None

    if not isinstance(value, str):
        return None
    return value.strip() or None


def read_version_info(file_path: Union[str, Path]) -> dict[str, Optional[str]]:
    """Read ProductName and FileDescription from an executable.

    Args:
        file_path: Path to a PE file (.exe, .dll)

    Returns:
        Dictionary with 'product_name' and 'file_description' keys; either
        value is None when the resource does not define it

    Raises:
        VersionInfoError: If not running on Windows, or the file has no
            readable version resource
    """
    if not is_windows():
        raise VersionInfoError("Version resources can only be read on Windows")

    import pywintypes
    import win32api

    path = str(file_path)
    try:
        translations = win32api.GetFileVersionInfo(path, "\\VarFileInfo\\Translation")
    except pywintypes.error as e:
        raise VersionInfoError(e.winerror, f"No version resource in {path}: {e.strerror}") from e

    product_name = None
    file_description = None
    for language, codepage in list(translations or []) + FALLBACK_TRANSLATIONS:
        product_name = product_name or _query_string(path, language, codepage, "ProductName")
        file_description = file_description or _query_string(
            path, language, codepage, "FileDescription"
        )
        if product_name and file_description:
            break

    return {
        "product_name": product_name,
        "file_description": file_description,
    }
