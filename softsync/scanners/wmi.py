"""Scanner for MSI products reported by WMI (Win32_Product).

Queries Win32_Product through PowerShell's Get-CimInstance and converts the
JSON output into RawPackageEntry records. Win32_Product has no icon value,
so executables are resolved from InstallLocation and shortcuts only.

Enumerating Win32_Product is slow (it validates every MSI package); the
call carries a generous timeout and can be disabled with the
``include_wmi`` setting.
"""

from typing import Any, Optional

from softsync.discovery.packages import RawPackageEntry, has_required_fields
from softsync.discovery.resolver import PathResolver
from softsync.utils.constants import TIMEOUT_PACKAGE_LIST
from softsync.utils.dates import to_iso_string
from softsync.utils.platform_info import is_windows

from .powershell import parse_json_records, run_powershell


SOURCE = "wmi"

QUERY_SCRIPT = (
    "Get-CimInstance -ClassName Win32_Product "
    "-Filter \"Name IS NOT NULL AND Name <> '' AND Version IS NOT NULL AND Version <> '' "
    "AND Vendor IS NOT NULL AND Vendor <> ''\" "
    "| Select-Object Name, Version, Vendor, InstallDate, InstallLocation "
    "| ConvertTo-Json -Compress"
)


def parse_products(output: str) -> list[dict[str, Any]]:
    """Parse Get-CimInstance JSON output into product dicts.

    Raises:
        ValueError: If the output is not valid JSON
    """
    return parse_json_records(output)


def entry_from_product(
    product: dict[str, Any],
    resolver: PathResolver
) -> Optional[RawPackageEntry]:
    """Build a raw entry from one Win32_Product record.

    Args:
        product: Dictionary with Name, Version, Vendor, InstallDate and
            InstallLocation keys
        resolver: Resolver used to find the primary executable

    Returns:
        RawPackageEntry, or None if name, version or vendor is missing
    """
    name = product.get("Name")
    version = product.get("Version")
    publisher = product.get("Vendor")

    if not has_required_fields(name, version, publisher):
        return None

    path = resolver.resolve(None, product.get("InstallLocation"), name)

    return RawPackageEntry(
        name=name,
        version=version,
        publisher=publisher,
        install_date=to_iso_string(product.get("InstallDate")),
        path=path,
        source=SOURCE,
    )


def scan(resolver: PathResolver) -> dict:
    """Scan MSI products through WMI.

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
            "errors": [{"error": "WMI not available on this platform"}],
        }

    packages = []
    errors = []

    output = run_powershell(QUERY_SCRIPT, timeout=TIMEOUT_PACKAGE_LIST)
    if output is None:
        errors.append({"error": "Failed to query Win32_Product"})
    else:
        try:
            products = parse_products(output)
        except ValueError as e:
            products = []
            errors.append({"error": f"Invalid Win32_Product output: {e}"})

        for product in products:
            entry = entry_from_product(product, resolver)
            if entry is not None:
                packages.append(entry)

    return {
        "packages": packages,
        "count": len(packages),
        "errors": errors,
    }
