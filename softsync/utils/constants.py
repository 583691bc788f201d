"""Centralized constants for softsync.

Provides standardized timeout values and other constants used throughout
the codebase. Centralizing these values makes them easier to tune and
ensures consistency.
"""

# =============================================================================
# SUBPROCESS TIMEOUTS (in seconds)
# =============================================================================

# Win32_Product enumeration, which is slow on machines with many MSI packages
TIMEOUT_PACKAGE_LIST = 300

# =============================================================================
# WINDOWS LOCATIONS
# =============================================================================

# Uninstall keys under HKLM and HKCU, native and 32-bit views
UNINSTALL_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall"
UNINSTALL_KEY_WOW64 = r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall"

# Start Menu folder relative to %ProgramData% (all users) and %APPDATA% (current user)
START_MENU_PARTS = ("Microsoft", "Windows", "Start Menu")
START_MENU_BASE_VARS = ("ProgramData", "APPDATA")

# =============================================================================
# FILE MATCHING
# =============================================================================

# Suffixes treated as executables when listing an install directory
EXECUTABLE_SUFFIXES = (".exe",)

# Suffix of shell shortcut files
SHORTCUT_SUFFIX = ".lnk"
