"""Primary executable resolution for installed packages.

Most Uninstall entries do not record the application's executable. It is
recovered from three hints, strongest first:

    Tier 1 (directory): InstallLocation declared by the installer
        a. an executable whose file name equals the display name
        b. an executable whose ProductName/FileDescription matches it
        c. the largest executable in the folder
    Tier 2 (launcher): Start Menu shortcut named like the package
    Tier 3 (icon): DisplayIcon, when it points straight at a file

Resolution stops at the first tier that produces a path. Not finding one is
an expected outcome and yields None.
"""

from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from softsync.utils.constants import EXECUTABLE_SUFFIXES
from softsync.utils.version_info import read_version_info

from .matching import either_contains_ignore_case, equals_ignore_case, first_or_none
from .packages import ResolutionInputError


MetadataReader = Callable[[Path], Optional[Mapping[str, Optional[str]]]]


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def clean_hint(value: Optional[str]) -> Optional[str]:
    """Strip whitespace and surrounding quotes from a registry path value."""
    if value is None:
        return None
    cleaned = value.strip().strip('"').strip()
    return cleaned or None


def list_executables(directory: Path) -> list[Path]:
    """List executables directly inside a directory, in name order.

    Args:
        directory: Folder to list (not recursed)

    Returns:
        Executable files sorted case-insensitively by name

    Raises:
        OSError: If the directory cannot be listed
    """
    entries = sorted(directory.iterdir(), key=lambda p: p.name.lower())
    return [
        entry for entry in entries
        if entry.suffix.lower() in EXECUTABLE_SUFFIXES and entry.is_file()
    ]


def describe_metadata(metadata: Optional[Mapping[str, Optional[str]]]) -> Optional[str]:
    """Pick the identifying string from version metadata.

    ProductName is preferred; FileDescription is used when it is missing.
    """
    if not metadata:
        return None
    product_name = metadata.get('product_name')
    if not _is_blank(product_name):
        return product_name.strip()
    file_description = metadata.get('file_description')
    if not _is_blank(file_description):
        return file_description.strip()
    return None


class PathResolver:
    """Resolves the primary executable of a package from its hints.

    Attributes:
        launcher_index: Object with ``lookup(display_name) -> list[str]``
            (typically a StartMenuIndex), or None to skip tier 2
        metadata_reader: Callable returning the version metadata of an
            executable; raises OSError/ValueError when it cannot be read
        errors: Path -> message of the files and folders that could not be
            read while resolving; each path is recorded once
    """

    def __init__(
        self,
        launcher_index: Optional[Any] = None,
        metadata_reader: MetadataReader = read_version_info
    ):
        self.launcher_index = launcher_index
        self.metadata_reader = metadata_reader
        self.errors: dict[str, str] = {}

    def resolve(
        self,
        icon_hint: Optional[str],
        install_dir_hint: Optional[str],
        display_name: str
    ) -> Optional[str]:
        """Resolve a package's primary executable.

        Args:
            icon_hint: DisplayIcon value, possibly "path,index" and quoted
            install_dir_hint: InstallLocation value
            display_name: Package display name

        Returns:
            Absolute path of the executable, or None if no tier succeeds

        Raises:
            ResolutionInputError: If the display name is blank and no hint
                was given
        """
        if _is_blank(display_name) and _is_blank(icon_hint) and _is_blank(install_dir_hint):
            raise ResolutionInputError(
                "Cannot resolve an executable without a display name or hints"
            )

        path = self.resolve_from_directory(install_dir_hint, display_name)
        if path is not None:
            return path

        path = self.resolve_from_launcher(display_name)
        if path is not None:
            return path

        return self.resolve_from_icon(icon_hint)

    # =========================================================================
    # Tier 1: install directory
    # =========================================================================

    def resolve_from_directory(
        self,
        install_dir_hint: Optional[str],
        display_name: str
    ) -> Optional[str]:
        """Pick an executable from the install directory.

        Args:
            install_dir_hint: InstallLocation value
            display_name: Package display name

        Returns:
            Path of the chosen executable, or None if the directory does not
            exist, cannot be listed or holds no executables
        """
        directory_str = clean_hint(install_dir_hint)
        if directory_str is None:
            return None

        directory = Path(directory_str)
        try:
            if not directory.is_dir():
                return None
            candidates = list_executables(directory)
        except OSError as e:
            self.errors[directory_str] = str(e)
            return None

        if not candidates:
            return None

        if not _is_blank(display_name):
            for candidate in candidates:
                if equals_ignore_case(candidate.stem, display_name):
                    return str(candidate)

            for candidate in candidates:
                description = self._read_description(candidate)
                if description and either_contains_ignore_case(description, display_name):
                    return str(candidate)

        return self._largest(candidates)

    def _read_description(self, candidate: Path) -> Optional[str]:
        """Read a candidate's product description; failures yield None.

        A file that already failed is not read again.
        """
        if str(candidate) in self.errors:
            return None
        try:
            metadata = self.metadata_reader(candidate)
        except (OSError, ValueError) as e:
            self.errors[str(candidate)] = str(e)
            return None
        return describe_metadata(metadata)

    def _largest(self, candidates: list[Path]) -> Optional[str]:
        """Largest candidate by size; the first one wins ties."""
        largest = None
        largest_size = -1
        for candidate in candidates:
            try:
                size = candidate.stat().st_size
            except OSError as e:
                self.errors[str(candidate)] = str(e)
                continue
            if size > largest_size:
                largest = candidate
                largest_size = size
        return str(largest) if largest is not None else None

    # =========================================================================
    # Tier 2: launcher index
    # =========================================================================

    def resolve_from_launcher(self, display_name: str) -> Optional[str]:
        if self.launcher_index is None or _is_blank(display_name):
            return None
        return first_or_none(self.launcher_index.lookup(display_name))

    # =========================================================================
    # Tier 3: icon hint
    # =========================================================================

    def resolve_from_icon(self, icon_hint: Optional[str]) -> Optional[str]:
        """Use DisplayIcon when it names an existing file.

        DisplayIcon is often "C:\\App\\app.exe,0"; everything from the
        first comma on is the icon index.
        """
        if _is_blank(icon_hint):
            return None

        icon_path = clean_hint(icon_hint.split(',')[0])
        if icon_path is None:
            return None

        try:
            if Path(icon_path).is_file():
                return icon_path
        except (OSError, ValueError):
            pass
        return None


def resolve(
    icon_hint: Optional[str],
    install_dir_hint: Optional[str],
    display_name: str,
    launcher_index: Optional[Any] = None
) -> Optional[str]:
    """Resolve a package's executable with the default metadata reader.

    Convenience wrapper around PathResolver for one-off calls.
    """
    resolver = PathResolver(launcher_index=launcher_index)
    return resolver.resolve(icon_hint, install_dir_hint, display_name)
