"""Case-insensitive matching helpers shared by resolution and reconciliation.

Windows paths and display names are compared without regard to case.
Paths are handled with ntpath so that Windows-style paths behave the same
whatever the host running the code.
"""

import ntpath
from typing import Callable, Mapping, Optional, Sequence, TypeVar


T = TypeVar('T')


def normalize_path_key(path: str) -> str:
    """Normalize an executable path the way process groups are keyed."""
    return path.lower()


def equals_ignore_case(left: str, right: str) -> bool:
    return left.lower() == right.lower()


def contains_ignore_case(haystack: str, needle: str) -> bool:
    """Check whether ``needle`` occurs in ``haystack``, ignoring case."""
    return needle.lower() in haystack.lower()


def either_contains_ignore_case(left: str, right: str) -> bool:
    """Substring match in either direction, ignoring case.

    Examples:
        >>> either_contains_ignore_case("Mozilla Firefox", "firefox")
        True
        >>> either_contains_ignore_case("Git", "Git for Windows")
        True
    """
    return contains_ignore_case(left, right) or contains_ignore_case(right, left)


def file_stem(path: str) -> str:
    """File name without its extension (Windows or POSIX separators)."""
    return ntpath.splitext(ntpath.basename(path))[0]


def parent_directory(path: str) -> str:
    """Parent directory of a path, or '' when it has none.

    Examples:
        >>> parent_directory("C:\\\\App\\\\app.exe")
        'C:\\\\App'
        >>> parent_directory("app.exe")
        ''
    """
    return ntpath.dirname(path)


def find_first_key(
    groups: Mapping[str, T],
    predicate: Callable[[str], bool]
) -> Optional[str]:
    """Return the first key, in mapping order, satisfying ``predicate``.

    Args:
        groups: Mapping whose iteration order is stable (insertion order)
        predicate: Test applied to each key

    Returns:
        The first matching key, or None
    """
    for key in groups:
        if predicate(key):
            return key
    return None


def first_or_none(values: Optional[Sequence[T]]) -> Optional[T]:
    if not values:
        return None
    return values[0]
