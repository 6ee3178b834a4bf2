"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import dataclasses
from pathlib import Path

import pytest
from pkgscope.core.config import ScopeConfig
from pkgscope.models.package import Package, PackageSource
from pkgscope.scanners.base import MutationError, Scanner


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config, state and data dirs into tmp_path for every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


@pytest.fixture
def config() -> ScopeConfig:
    """Default configuration without a privilege prefix."""
    return ScopeConfig(privilege_command=[])


@pytest.fixture
def mock_dpkg_output() -> str:
    """Sample dpkg-query output for testing."""
    return (
        "firefox\t128.0\t204800\tMozilla Firefox web browser\tlibgtk-3-0, libx11-6\n"
        "neovim\t0.9.5\t51200\tVim-based text editor\tlibc6, libluajit-5.1-2\n"
        "libssl3\t3.0.13\t5120\tSecure Sockets Layer toolkit\tlibc6\n"
        "python3\t3.11.4\t25600\tInteractive high-level object-oriented language\t\n"
        "curl\t8.5.0\t512\tCommand line tool for transferring data\tlibcurl4\n"
    )


@pytest.fixture
def mock_apt_mark_output() -> str:
    """Sample apt-mark showmanual output for testing."""
    return "firefox\nneovim\ncurl\n"


@pytest.fixture
def mock_apt_upgradable_output() -> str:
    """Sample apt list --upgradable output for testing."""
    return (
        "Listing... Done\n"
        "firefox/jammy-updates 129.0+build1-0ubuntu1 amd64 [upgradable from: 128.0]\n"
        "curl/jammy-security 8.5.0-2ubuntu1 amd64 [upgradable from: 8.5.0]\n"
    )


@pytest.fixture
def mock_empty_output() -> str:
    """Empty output for testing edge cases."""
    return ""


@pytest.fixture
def mock_malformed_output() -> str:
    """Malformed output for testing error handling."""
    return """firefox
incomplete_line\t
\t\t\t"""


@pytest.fixture
def mock_snap_list_output() -> str:
    """Sample snap list output for testing."""
    return (
        "Name               Version          Rev    Tracking         Publisher   Notes\n"
        "bare               1.0              5      latest/stable    canonical** base\n"
        "core22             20240111         1122   latest/stable    canonical** base\n"
        "firefox            128.0-2          4451   latest/stable/…  mozilla**   -\n"
        "gnome-3-platform   0+git.ff35a6c    176    latest/stable    canonical** -\n"
        "snapd              2.61.2           21184  latest/stable    canonical** snapd\n"
        "spotify            1.2.31.1205      75     latest/stable    spotify**   -\n"
    )


@pytest.fixture
def mock_snap_info_output() -> str:
    """Sample snap info output for two snaps."""
    return (
        "name:      firefox\n"
        "summary:   Mozilla Firefox web browser\n"
        "publisher: Mozilla**\n"
        "---\n"
        "name:      spotify\n"
        "summary:   Music for everyone\n"
        "publisher: Spotify**\n"
    )


@pytest.fixture
def mock_du_output() -> str:
    """Sample du -sbD output for the snap current revisions."""
    return "268435456\t/snap/firefox/current\n183500800\t/snap/spotify/current\n"


@pytest.fixture
def mock_flatpak_output() -> str:
    """Sample flatpak list output for testing."""
    return (
        "Spotify\tcom.spotify.Client\t1.2.31.1205\t1.2 GB\tMusic streaming service\n"
        "Firefox\torg.mozilla.firefox\t128.0\t500 MB\tMozilla Firefox web browser\n"
        "Calculator\torg.gnome.Calculator\t46.1\t50,5 MB\tGNOME Calculator\n"
        "\tio.github.celluloid_player.Celluloid\t0.26\t100 kB\tVideo player\n"
    )


@pytest.fixture
def mock_flatpak_updates_output() -> str:
    """Sample flatpak remote-ls --updates output for testing."""
    return "Spotify\tcom.spotify.Client\t1.2.40.599\n"


class FakeScanner(Scanner):
    """In-memory scanner with scripted packages, updates and failures."""

    def __init__(
        self,
        source: PackageSource,
        packages: list[Package] | None = None,
        updates: list[tuple[str, str]] | None = None,
        *,
        available: bool = True,
        supports_updates: bool = True,
        scan_error: Exception | None = None,
        update_error: Exception | None = None,
        failing: set[str] | None = None,
    ) -> None:
        super().__init__(ScopeConfig(privilege_command=[]))
        self._source = source
        self._packages = packages or []
        self._updates = updates or []
        self._available = available
        self.supports_updates = supports_updates
        self._scan_error = scan_error
        self._update_error = update_error
        self._failing = failing or set()
        self.calls: list[tuple[str, str]] = []

    @property
    def source(self) -> PackageSource:
        return self._source

    def is_available(self) -> bool:
        return self._available

    def scan(self) -> list[Package]:
        self.calls.append(("scan", ""))
        if self._scan_error is not None:
            raise self._scan_error
        return [dataclasses.replace(p) for p in self._packages]

    def get_updates(self) -> list[tuple[str, str]]:
        self.calls.append(("get_updates", ""))
        if self._update_error is not None:
            raise self._update_error
        return list(self._updates)

    def _record(self, action: str, name: str) -> None:
        self.calls.append((action, name))
        if name in self._failing:
            msg = f"{action} of {name} failed with exit code 1"
            raise MutationError(msg)

    def uninstall(self, package: Package) -> None:
        self._record("uninstall", package.name)

    def update(self, package: Package) -> None:
        self._record("update", package.name)

    def install(self, name: str) -> None:
        self._record("install", name)


@pytest.fixture
def make_scanner() -> type[FakeScanner]:
    """Factory for scripted in-memory scanners."""
    return FakeScanner
