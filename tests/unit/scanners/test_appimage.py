"""Unit tests for AppImageScanner.

Tests for the filesystem-based AppImage discovery.
"""

from pathlib import Path

import pytest
from pkgscope.core.config import ScopeConfig
from pkgscope.models.package import AppType, Package, PackageSource
from pkgscope.scanners.appimage import AppImageScanner, extract_name, extract_version
from pkgscope.scanners.base import MutationError

_APPIMAGE_HEADER = b"\x7fELF\x02\x01\x01\x00AI\x02" + b"\x00" * 5
_PLAIN_ELF_HEADER = b"\x7fELF\x02\x01\x01\x00" + b"\x00" * 8


def _scanner(root: Path, max_depth: int = 3) -> AppImageScanner:
    return AppImageScanner(
        ScopeConfig(appimage_dirs=[str(root)], appimage_max_depth=max_depth)
    )


class TestFilenameParsing:
    """Tests for extract_name and extract_version."""

    @pytest.mark.parametrize(
        ("filename", "name", "version"),
        [
            ("Obsidian-1.5.3-x86_64.AppImage", "Obsidian", "1.5.3"),
            ("Kdenlive_v23.08.AppImage", "Kdenlive", "23.08"),
            ("MyApp-x86_64.AppImage", "MyApp", "unknown"),
            ("tool.appimage", "tool", "unknown"),
            ("Cura-5.7-linux.AppImage", "Cura", "5.7"),
        ],
    )
    def test_name_and_version(self, filename: str, name: str, version: str) -> None:
        """Version and architecture tails are stripped from the name."""
        assert extract_name(filename) == name
        assert extract_version(filename) == version


class TestAppImageDetection:
    """Tests for AppImageScanner.is_appimage."""

    def test_extension_is_case_insensitive(self, tmp_path: Path) -> None:
        path = tmp_path / "app.APPIMAGE"
        path.write_bytes(b"")
        assert AppImageScanner.is_appimage(path) is True

    def test_magic_bytes_without_extension(self, tmp_path: Path) -> None:
        """A type 2 AppImage is recognized by its ELF header."""
        path = tmp_path / "runner"
        path.write_bytes(_APPIMAGE_HEADER)
        assert AppImageScanner.is_appimage(path) is True

    def test_plain_elf_is_not_appimage(self, tmp_path: Path) -> None:
        path = tmp_path / "ls"
        path.write_bytes(_PLAIN_ELF_HEADER)
        assert AppImageScanner.is_appimage(path) is False

    def test_unreadable_file_is_not_appimage(self, tmp_path: Path) -> None:
        """A path that cannot be opened is not an AppImage."""
        assert AppImageScanner.is_appimage(tmp_path / "missing") is False


class TestAppImageScanner:
    """Tests for AppImageScanner.scan."""

    def test_source_and_capabilities(self) -> None:
        """AppImage is always available and has no update channel."""
        scanner = AppImageScanner()
        assert scanner.source == PackageSource.APPIMAGE
        assert scanner.is_available() is True
        assert scanner.supports_updates is False
        assert scanner.get_updates() == []

    def test_scan_finds_appimages(self, tmp_path: Path) -> None:
        """AppImages are found by extension and by magic bytes."""
        (tmp_path / "Obsidian-1.5.3-x86_64.AppImage").write_bytes(b"x" * 2048)
        (tmp_path / "runner").write_bytes(_APPIMAGE_HEADER)
        (tmp_path / "notes.txt").write_text("not an app")

        packages = _scanner(tmp_path).scan()

        assert sorted(p.name for p in packages) == ["Obsidian", "runner"]
        obsidian = next(p for p in packages if p.name == "Obsidian")
        assert obsidian.version == "1.5.3"
        assert obsidian.size_bytes == 2048
        assert obsidian.app_type == AppType.GUI
        assert obsidian.install_path == str(tmp_path / "Obsidian-1.5.3-x86_64.AppImage")
        assert obsidian.description.startswith("AppImage at ")

    def test_scan_respects_max_depth(self, tmp_path: Path) -> None:
        """Files deeper than the maximum depth are not found."""
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "b").mkdir()
        (tmp_path / "Top.AppImage").write_bytes(b"")
        (tmp_path / "a" / "Mid.AppImage").write_bytes(b"")
        (tmp_path / "a" / "b" / "Deep.AppImage").write_bytes(b"")

        names = sorted(p.name for p in _scanner(tmp_path, max_depth=1).scan())

        assert names == ["Mid", "Top"]

    def test_scan_depth_zero_only_lists_root(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "Top.AppImage").write_bytes(b"")
        (tmp_path / "sub" / "Nested.AppImage").write_bytes(b"")

        names = [p.name for p in _scanner(tmp_path, max_depth=0).scan()]

        assert names == ["Top"]

    def test_scan_deduplicates_symlinks(self, tmp_path: Path) -> None:
        """A symlink to an already seen AppImage is reported once."""
        target = tmp_path / "Tool-2.0.AppImage"
        target.write_bytes(b"")
        (tmp_path / "Tool-latest.AppImage").symlink_to(target)

        packages = _scanner(tmp_path).scan()

        assert len(packages) == 1

    def test_scan_does_not_follow_directory_symlinks(self, tmp_path: Path) -> None:
        """Symlinked directories are not descended into."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "Hidden.AppImage").write_bytes(b"")
        root = tmp_path / "root"
        root.mkdir()
        (root / "link").symlink_to(outside, target_is_directory=True)

        assert _scanner(root).scan() == []

    def test_scan_skips_nameless_appimage(self, tmp_path: Path) -> None:
        """A file named only by the extension yields no package."""
        (tmp_path / ".AppImage").write_bytes(b"")
        (tmp_path / "Tool-2.0.AppImage").write_bytes(b"")

        assert [p.name for p in _scanner(tmp_path).scan()] == ["Tool"]

    def test_scan_skips_missing_directories(self, tmp_path: Path) -> None:
        """Configured directories that do not exist are ignored."""
        assert _scanner(tmp_path / "nope").scan() == []


class TestAppImageMutations:
    """Tests for AppImage uninstall and unsupported mutations."""

    def test_uninstall_deletes_file_and_desktop_entry(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The file and launchers that point at it are removed."""
        app = tmp_path / "Tool.AppImage"
        app.write_bytes(b"")
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "share"))
        desktop_dir = tmp_path / "share" / "applications"
        desktop_dir.mkdir(parents=True)
        own = desktop_dir / "tool.desktop"
        own.write_text(f"[Desktop Entry]\nExec={app}\n")
        other = desktop_dir / "other.desktop"
        other.write_text("[Desktop Entry]\nExec=/usr/bin/other\n")

        package = Package(name="Tool", source=PackageSource.APPIMAGE, install_path=str(app))
        AppImageScanner().uninstall(package)

        assert not app.exists()
        assert not own.exists()
        assert other.exists()

    def test_uninstall_missing_file_raises(self, tmp_path: Path) -> None:
        package = Package(
            name="Gone", source=PackageSource.APPIMAGE, install_path=str(tmp_path / "Gone.AppImage")
        )
        with pytest.raises(MutationError, match="Failed to delete"):
            AppImageScanner().uninstall(package)

    def test_uninstall_without_path_raises(self) -> None:
        package = Package(name="Ghost", source=PackageSource.APPIMAGE)
        with pytest.raises(MutationError, match="No path recorded"):
            AppImageScanner().uninstall(package)

    def test_update_and_install_are_unsupported(self) -> None:
        """AppImages cannot be updated or installed through the scanner."""
        scanner = AppImageScanner()
        package = Package(name="Tool", source=PackageSource.APPIMAGE, install_path="/x")

        with pytest.raises(MutationError, match="not supported"):
            scanner.update(package)
        with pytest.raises(MutationError, match="not supported"):
            scanner.install("Tool")
