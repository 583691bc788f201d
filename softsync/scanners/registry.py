"""Scanner for software registered in the Windows Uninstall keys.

Reads the four Uninstall locations (machine and user hives, native and
WOW6432Node views). Every subkey with a DisplayName, DisplayVersion and
Publisher becomes a RawPackageEntry; its executable is resolved from
InstallLocation, Start Menu shortcuts and DisplayIcon.
"""

from typing import Any, Optional

from softsync.discovery.packages import RawPackageEntry, has_required_fields
from softsync.discovery.resolver import PathResolver
from softsync.utils.constants import UNINSTALL_KEY, UNINSTALL_KEY_WOW64
from softsync.utils.dates import to_iso_string
from softsync.utils.platform_info import is_windows


SOURCE = "registry"

# Values read from each Uninstall subkey
VALUE_NAMES = (
    "DisplayName",
    "DisplayVersion",
    "Publisher",
    "InstallDate",
    "DisplayIcon",
    "InstallLocation",
)


def _uninstall_keys() -> list[tuple[Any, str]]:
    """(hive, subkey) pairs to enumerate."""
    import winreg

    return [
        (winreg.HKEY_LOCAL_MACHINE, UNINSTALL_KEY),
        (winreg.HKEY_LOCAL_MACHINE, UNINSTALL_KEY_WOW64),
        (winreg.HKEY_CURRENT_USER, UNINSTALL_KEY),
        (winreg.HKEY_CURRENT_USER, UNINSTALL_KEY_WOW64),
    ]


def _read_string_values(key) -> dict[str, Optional[str]]:
    """Read the string values of interest from an open subkey.

    Missing values and non-string values (e.g. DWORD) read as None.
    """
    import winreg

    values: dict[str, Optional[str]] = {}
    for value_name in VALUE_NAMES:
        try:
            value, _ = winreg.QueryValueEx(key, value_name)
        except OSError:
            value = None
        values[value_name] = value if isinstance(value, str) else None
    return values


def _iter_subkey_values(hive, path: str, errors: list[dict[str, str]]):
    """Yield the values of every subkey under an Uninstall key."""
    import winreg

    try:
        key = winreg.OpenKey(hive, path)
    except OSError:
        # Absent view (e.g. WOW6432Node under HKCU on most machines)
        return

    with key:
        index = 0
        while True:
            try:
                subkey_name = winreg.EnumKey(key, index)
            except OSError:
                break
            index += 1

            try:
                with winreg.OpenKey(key, subkey_name) as subkey:
                    yield _read_string_values(subkey)
            except OSError as e:
                errors.append({"path": f"{path}\\{subkey_name}", "error": str(e)})


def entry_from_values(
    values: dict[str, Optional[str]],
    resolver: PathResolver
) -> Optional[RawPackageEntry]:
    """Build a raw entry from the values of one Uninstall subkey.

    Args:
        values: Registry value name -> string value (or None)
        resolver: Resolver used to find the primary executable

    Returns:
        RawPackageEntry, or None if name, version or publisher is missing
    """
    name = values.get("DisplayName")
    version = values.get("DisplayVersion")
    publisher = values.get("Publisher")

    if not has_required_fields(name, version, publisher):
        return None

    path = resolver.resolve(
        values.get("DisplayIcon"),
        values.get("InstallLocation"),
        name,
    )

    return RawPackageEntry(
        name=name,
        version=version,
        publisher=publisher,
        install_date=to_iso_string(values.get("InstallDate")),
        path=path,
        source=SOURCE,
    )


def scan(resolver: PathResolver) -> dict:
    """Scan the Uninstall registry keys.

    Args:
        resolver: Resolver used to fill each entry's executable path

    Returns:
        Dictionary with 'packages' (RawPackageEntry list), 'count' and
        'errors' list
    """
    if not is_windows():
        return {
            "packages": [],
            "count": 0,
            "errors": [{"error": "Windows registry not available on this platform"}],
        }

    packages = []
    errors: list[dict[str, str]] = []

    for hive, path in _uninstall_keys():
        for values in _iter_subkey_values(hive, path, errors):
            entry = entry_from_values(values, resolver)
            if entry is not None:
                packages.append(entry)

    return {
        "packages": packages,
        "count": len(packages),
        "errors": errors,
    }
