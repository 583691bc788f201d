"""Start Menu shortcut index.

Maps shortcut names to the executables they launch, e.g. the shortcut
"Visual Studio Code.lnk" to "C:\\...\\Code.exe". Start Menu entries are
maintained by the shell independently of the Uninstall keys, which makes
them a good second opinion when an installer did not record its location.

The index is built once (every .lnk target is read through the
WScript.Shell COM object) and then serves lookups from memory.
"""

import os
from pathlib import Path
from typing import Callable, Iterable, Optional

from softsync.utils.constants import (
    EXECUTABLE_SUFFIXES,
    SHORTCUT_SUFFIX,
    START_MENU_BASE_VARS,
    START_MENU_PARTS,
)
from softsync.utils.platform_info import is_windows


TargetResolver = Callable[[list[Path]], dict[str, str]]


def get_start_menu_dirs() -> list[Path]:
    """Start Menu folders for all users and for the current user.

    Returns:
        Existing-or-not folder paths derived from %ProgramData% and
        %APPDATA%; variables that are unset are skipped
    """
    dirs = []
    for var in START_MENU_BASE_VARS:
        base = os.environ.get(var)
        if base:
            dirs.append(Path(base, *START_MENU_PARTS))
    return dirs


def find_shortcuts(directory: Path) -> list[Path]:
    """Recursively list shortcut files, skipping inaccessible folders.

    Args:
        directory: Folder to walk

    Returns:
        Shortcut paths sorted case-insensitively
    """
    shortcuts = []
    for root, _dirs, files in os.walk(directory):
        for file_name in files:
            if file_name.lower().endswith(SHORTCUT_SUFFIX):
                shortcuts.append(Path(root) / file_name)
    return sorted(shortcuts, key=lambda p: str(p).lower())


def resolve_shortcut_targets(shortcuts: list[Path]) -> dict[str, str]:
    """Resolve shortcut targets with WScript.Shell.

    Args:
        shortcuts: Shortcut files to resolve

    Returns:
        Shortcut path (as given) -> target path; shortcuts that could not
        be read or have no target are omitted
    """
    if not shortcuts or not is_windows():
        return {}

    import pywintypes
    import win32com.client

    shell = win32com.client.Dispatch("WScript.Shell")

    targets = {}
    for shortcut in shortcuts:
        try:
            target = shell.CreateShortcut(str(shortcut)).TargetPath
        except pywintypes.com_error:
            continue
        if target:
            targets[str(shortcut)] = target
    return targets


def _is_executable_target(target: str) -> bool:
    if not target.lower().endswith(EXECUTABLE_SUFFIXES):
        return False
    try:
        return Path(target).is_file()
    except (OSError, ValueError):
        return False


class StartMenuIndex:
    """Name -> executable lookup built from Start Menu shortcuts.

    Shortcut names are compared case-insensitively. When two shortcuts share
    a name, the one found last wins.

    Attributes:
        directories: Folders scanned for shortcuts
        shortcut_count: Number of shortcut files found
    """

    def __init__(
        self,
        directories: Optional[Iterable[Path]] = None,
        target_resolver: TargetResolver = resolve_shortcut_targets
    ):
        """Build the index.

        Args:
            directories: Folders to scan (default: Start Menu folders)
            target_resolver: Callable resolving shortcut files to targets
        """
        self.directories = list(directories) if directories is not None else get_start_menu_dirs()
        self.target_resolver = target_resolver
        self.shortcut_count = 0
        self._cache: dict[str, str] = {}
        self._populate()

    def _populate(self) -> None:
        shortcuts: list[Path] = []
        for directory in self.directories:
            if directory.is_dir():
                shortcuts.extend(find_shortcuts(directory))
        self.shortcut_count = len(shortcuts)

        targets = self.target_resolver(shortcuts)
        for shortcut in shortcuts:
            target = targets.get(str(shortcut))
            if not target or not _is_executable_target(target):
                continue
            self._cache[shortcut.stem.lower()] = target

    def lookup(self, display_name: str) -> list[str]:
        """Find the executable of the shortcut named ``display_name``.

        Returns:
            A one-element list with the target path, or an empty list
        """
        target = self._cache.get(display_name.lower())
        return [target] if target else []

    def __len__(self) -> int:
        return len(self._cache)
