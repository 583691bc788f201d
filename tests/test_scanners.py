"""
Tests for the package, shortcut and process scanners.

Windows-only calls (winreg, PowerShell, the WScript.Shell COM object) are
replaced with monkeypatch so these tests run on any platform.
"""

import sys
import types

import psutil
import pytest

from softsync.scanners import processes, registry, shortcuts, wmi
from softsync.scanners.powershell import parse_json_records


# =============================================================================
# TEST DOUBLES
# =============================================================================

class RecordingResolver:
    """Resolver double returning a fixed path and recording its calls."""

    def __init__(self, path="C:\\App\\app.exe"):
        self.path = path
        self.calls = []

    def resolve(self, icon_hint, install_dir_hint, display_name):
        self.calls.append((icon_hint, install_dir_hint, display_name))
        return self.path


class FakeProcess:
    """Stand-in for psutil.Process as yielded by process_iter(attrs)."""

    def __init__(self, pid, exe):
        self.info = {"pid": pid, "exe": exe}


class FakeComError(Exception):
    """Stand-in for pywintypes.com_error."""


class FakeWScriptShell:
    """WScript.Shell double whose CreateShortcut answers from a dict."""

    def __init__(self, targets, broken=()):
        self.targets = targets
        self.broken = set(broken)
        self.opened = []

    def CreateShortcut(self, path):
        self.opened.append(path)
        if path in self.broken:
            raise FakeComError(path)
        return types.SimpleNamespace(TargetPath=self.targets.get(path, ""))


def install_fake_com(monkeypatch, shell):
    """Make ``import win32com.client`` and ``import pywintypes`` return doubles."""
    client = types.ModuleType("win32com.client")
    client.Dispatch = lambda prog_id: shell if prog_id == "WScript.Shell" else None
    win32com = types.ModuleType("win32com")
    win32com.client = client
    pywintypes = types.ModuleType("pywintypes")
    pywintypes.com_error = FakeComError

    monkeypatch.setitem(sys.modules, "win32com", win32com)
    monkeypatch.setitem(sys.modules, "win32com.client", client)
    monkeypatch.setitem(sys.modules, "pywintypes", pywintypes)
    monkeypatch.setattr(shortcuts, "is_windows", lambda: True)


# =============================================================================
# POWERSHELL OUTPUT
# =============================================================================

class TestParseJsonRecords:
    """Test ConvertTo-Json output parsing."""

    def test_list(self):
        assert parse_json_records('[{"Name": "A"}, {"Name": "B"}]') == [{"Name": "A"}, {"Name": "B"}]

    def test_single_object(self):
        assert parse_json_records('{"Name": "A"}') == [{"Name": "A"}]

    def test_empty_output(self):
        assert parse_json_records("") == []
        assert parse_json_records("  \n") == []

    def test_non_dict_items_dropped(self):
        assert parse_json_records('[{"Name": "A"}, 3, null]') == [{"Name": "A"}]

    def test_invalid_json(self):
        with pytest.raises(ValueError):
            parse_json_records("not json")


# =============================================================================
# REGISTRY
# =============================================================================

class TestRegistryEntries:
    """Test conversion of Uninstall subkey values."""

    def test_complete_values(self):
        resolver = RecordingResolver()
        values = {
            "DisplayName": "App",
            "DisplayVersion": "2.1",
            "Publisher": "Acme",
            "InstallDate": "20250523",
            "DisplayIcon": "C:\\App\\app.exe,0",
            "InstallLocation": "C:\\App",
        }

        entry = registry.entry_from_values(values, resolver)

        assert entry.identity_key == ("App", "2.1", "Acme")
        assert entry.path == "C:\\App\\app.exe"
        assert entry.source == "registry"
        assert entry.install_date.startswith("2025-05-23T00:00:00")
        assert resolver.calls == [("C:\\App\\app.exe,0", "C:\\App", "App")]

    def test_missing_publisher_is_dropped(self):
        resolver = RecordingResolver()
        values = {"DisplayName": "App", "DisplayVersion": "2.1", "Publisher": None}

        assert registry.entry_from_values(values, resolver) is None
        assert resolver.calls == []

    def test_unparseable_date(self):
        values = {
            "DisplayName": "App",
            "DisplayVersion": "2.1",
            "Publisher": "Acme",
            "InstallDate": "5/23/2025",
        }

        entry = registry.entry_from_values(values, RecordingResolver(path=None))

        assert entry.install_date is None
        assert entry.path is None

    def test_scan_off_windows(self, monkeypatch):
        monkeypatch.setattr(registry, "is_windows", lambda: False)

        result = registry.scan(RecordingResolver())

        assert result["packages"] == []
        assert result["count"] == 0
        assert result["errors"]


# =============================================================================
# WMI
# =============================================================================

class TestWmi:
    """Test Win32_Product handling."""

    def test_entry_from_product(self):
        resolver = RecordingResolver()
        product = {
            "Name": "Tool",
            "Version": "1.0.0",
            "Vendor": "Acme",
            "InstallDate": "20240101",
            "InstallLocation": "C:\\Tool\\",
        }

        entry = wmi.entry_from_product(product, resolver)

        assert entry.identity_key == ("Tool", "1.0.0", "Acme")
        assert entry.source == "wmi"
        assert entry.install_date.startswith("2024-01-01T00:00:00")
        assert resolver.calls == [(None, "C:\\Tool\\", "Tool")]

    def test_entry_without_vendor(self):
        product = {"Name": "Tool", "Version": "1.0.0", "Vendor": ""}

        assert wmi.entry_from_product(product, RecordingResolver()) is None

    def test_scan_parses_output(self, monkeypatch):
        output = (
            '[{"Name": "Tool", "Version": "1.0", "Vendor": "Acme", '
            '"InstallDate": null, "InstallLocation": null}, '
            '{"Name": "NoVendor", "Version": "1.0", "Vendor": null}]'
        )
        monkeypatch.setattr(wmi, "is_windows", lambda: True)
        monkeypatch.setattr(wmi, "run_powershell", lambda script, timeout: output)

        result = wmi.scan(RecordingResolver(path=None))

        assert result["count"] == 1
        assert result["packages"][0].name == "Tool"
        assert result["errors"] == []

    def test_scan_single_product(self, monkeypatch):
        monkeypatch.setattr(wmi, "is_windows", lambda: True)
        monkeypatch.setattr(
            wmi, "run_powershell",
            lambda script, timeout: '{"Name": "Solo", "Version": "3", "Vendor": "V"}',
        )

        result = wmi.scan(RecordingResolver())

        assert [p.name for p in result["packages"]] == ["Solo"]

    def test_scan_command_failure(self, monkeypatch):
        monkeypatch.setattr(wmi, "is_windows", lambda: True)
        monkeypatch.setattr(wmi, "run_powershell", lambda script, timeout: None)

        result = wmi.scan(RecordingResolver())

        assert result["packages"] == []
        assert len(result["errors"]) == 1

    def test_scan_invalid_output(self, monkeypatch):
        monkeypatch.setattr(wmi, "is_windows", lambda: True)
        monkeypatch.setattr(wmi, "run_powershell", lambda script, timeout: "garbage")

        result = wmi.scan(RecordingResolver())

        assert result["packages"] == []
        assert "Invalid Win32_Product output" in result["errors"][0]["error"]


# =============================================================================
# START MENU SHORTCUTS
# =============================================================================

class TestStartMenuIndex:
    """Test the shortcut name index."""

    def _make_menu(self, tmp_path):
        menu = tmp_path / "Start Menu"
        (menu / "Programs" / "Tools").mkdir(parents=True)
        targets = tmp_path / "targets"
        targets.mkdir()

        app_exe = targets / "app.exe"
        app_exe.write_bytes(b"x")
        notes = targets / "notes.txt"
        notes.write_text("x")

        app_lnk = menu / "Programs" / "My App.lnk"
        notes_lnk = menu / "Programs" / "Tools" / "Notes.LNK"
        gone_lnk = menu / "Programs" / "Gone.lnk"
        for lnk in (app_lnk, notes_lnk, gone_lnk):
            lnk.write_bytes(b"")
        (menu / "Programs" / "readme.txt").write_text("x")

        mapping = {
            str(app_lnk): str(app_exe),
            str(notes_lnk): str(notes),
            str(gone_lnk): str(targets / "gone.exe"),
        }
        return menu, mapping, app_exe

    def test_lookup_is_case_insensitive(self, tmp_path):
        menu, mapping, app_exe = self._make_menu(tmp_path)

        index = shortcuts.StartMenuIndex([menu], target_resolver=lambda lnks: mapping)

        assert index.lookup("my app") == [str(app_exe)]
        assert index.lookup("MY APP") == [str(app_exe)]

    def test_non_executable_and_missing_targets_skipped(self, tmp_path):
        menu, mapping, _ = self._make_menu(tmp_path)

        index = shortcuts.StartMenuIndex([menu], target_resolver=lambda lnks: mapping)

        assert index.shortcut_count == 3
        assert len(index) == 1
        assert index.lookup("Notes") == []
        assert index.lookup("Gone") == []

    def test_later_shortcut_wins_on_name_clash(self, tmp_path):
        menu = tmp_path / "menu"
        (menu / "a").mkdir(parents=True)
        (menu / "b").mkdir()
        first = tmp_path / "first.exe"
        second = tmp_path / "second.exe"
        first.write_bytes(b"x")
        second.write_bytes(b"x")
        (menu / "a" / "Dup.lnk").write_bytes(b"")
        (menu / "b" / "Dup.lnk").write_bytes(b"")
        mapping = {
            str(menu / "a" / "Dup.lnk"): str(first),
            str(menu / "b" / "Dup.lnk"): str(second),
        }

        index = shortcuts.StartMenuIndex([menu], target_resolver=lambda lnks: mapping)

        assert index.lookup("dup") == [str(second)]

    def test_missing_directories_are_ignored(self, tmp_path):
        seen = []

        def resolver(lnks):
            seen.append(list(lnks))
            return {}

        index = shortcuts.StartMenuIndex([tmp_path / "nope"], target_resolver=resolver)

        assert len(index) == 0
        assert index.shortcut_count == 0
        assert seen == [[]]

    def test_find_shortcuts_sorted(self, tmp_path):
        (tmp_path / "B.lnk").write_bytes(b"")
        (tmp_path / "a.lnk").write_bytes(b"")
        (tmp_path / "c.url").write_bytes(b"")

        found = shortcuts.find_shortcuts(tmp_path)

        assert [p.name for p in found] == ["a.lnk", "B.lnk"]

    def test_get_start_menu_dirs(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ProgramData", str(tmp_path / "pd"))
        monkeypatch.setenv("APPDATA", str(tmp_path / "ad"))

        dirs = shortcuts.get_start_menu_dirs()

        assert dirs == [
            tmp_path / "pd" / "Microsoft" / "Windows" / "Start Menu",
            tmp_path / "ad" / "Microsoft" / "Windows" / "Start Menu",
        ]

    def test_get_start_menu_dirs_unset(self, monkeypatch):
        monkeypatch.delenv("ProgramData", raising=False)
        monkeypatch.delenv("APPDATA", raising=False)

        assert shortcuts.get_start_menu_dirs() == []

    def test_resolve_targets_empty(self):
        assert shortcuts.resolve_shortcut_targets([]) == {}

    def test_resolve_targets_off_windows(self, monkeypatch, tmp_path):
        monkeypatch.setattr(shortcuts, "is_windows", lambda: False)

        assert shortcuts.resolve_shortcut_targets([tmp_path / "a.lnk"]) == {}

    def test_resolve_targets_through_wscript_shell(self, monkeypatch, tmp_path):
        """Unreadable shortcuts and empty targets are left out."""
        good = tmp_path / "Good.lnk"
        broken = tmp_path / "Broken.lnk"
        empty = tmp_path / "Empty.lnk"
        shell = FakeWScriptShell(
            targets={str(good): "C:\\App\\app.exe", str(empty): ""},
            broken={str(broken)},
        )
        install_fake_com(monkeypatch, shell)

        targets = shortcuts.resolve_shortcut_targets([good, broken, empty])

        assert targets == {str(good): "C:\\App\\app.exe"}
        assert shell.opened == [str(good), str(broken), str(empty)]


# =============================================================================
# PROCESSES
# =============================================================================

class TestProcesses:
    """Test process grouping."""

    def test_groups_by_lowercased_exe(self, monkeypatch):
        fake = [
            FakeProcess(1, "C:\\App\\App.exe"),
            FakeProcess(4, None),
            FakeProcess(2, "C:\\Other\\o.exe"),
            FakeProcess(3, "c:\\app\\app.exe"),
            FakeProcess(5, "  "),
        ]
        monkeypatch.setattr(processes.psutil, "process_iter", lambda attrs: iter(fake))

        groups = processes.collect()

        assert list(groups) == ["c:\\app\\app.exe", "c:\\other\\o.exe"]
        assert groups["c:\\app\\app.exe"] == [1, 3]

    def test_scan_counts(self, monkeypatch):
        fake = [FakeProcess(1, "C:\\a.exe"), FakeProcess(2, "C:\\a.exe"), FakeProcess(3, "C:\\b.exe")]
        monkeypatch.setattr(processes.psutil, "process_iter", lambda attrs: iter(fake))

        result = processes.scan()

        assert result["group_count"] == 2
        assert result["process_count"] == 3
        assert result["errors"] == []

    def test_scan_enumeration_failure(self, monkeypatch):
        def failing(attrs):
            raise psutil.AccessDenied()

        monkeypatch.setattr(processes.psutil, "process_iter", failing)

        result = processes.scan()

        assert result["groups"] == {}
        assert result["process_count"] == 0
        assert len(result["errors"]) == 1
