"""Unit tests for update checking and reconciliation."""

from pkgscope.core.reconciler import apply_updates, check_all_updates, reconcile
from pkgscope.models.package import Package, PackageSource
from pkgscope.scanners.base import ScanError


def _packages() -> list[Package]:
    return [
        Package(name="htop", source=PackageSource.APT, version="3.2.1"),
        Package(name="vim", source=PackageSource.APT, version="9.0"),
        Package(name="spotify", source=PackageSource.SNAP, version="1.2.31"),
        Package(name="Tool", source=PackageSource.APPIMAGE, version="1.0"),
    ]


class TestCheckAllUpdates:
    """Tests for check_all_updates."""

    def test_merges_all_sources(self, make_scanner) -> None:
        scanners = [
            make_scanner(PackageSource.APT, updates=[("htop", "3.3.0")]),
            make_scanner(PackageSource.SNAP, updates=[("spotify", "1.2.40")]),
        ]

        assert check_all_updates(scanners) == {"htop": "3.3.0", "spotify": "1.2.40"}

    def test_sources_without_update_channel_are_not_asked(self, make_scanner) -> None:
        """AppImage-like scanners are skipped entirely."""
        appimage = make_scanner(
            PackageSource.APPIMAGE, updates=[("Tool", "2.0")], supports_updates=False
        )

        assert check_all_updates([appimage]) == {}
        assert appimage.calls == []

    def test_failing_source_contributes_nothing(self, make_scanner) -> None:
        scanners = [
            make_scanner(PackageSource.APT, update_error=ScanError("apt locked")),
            make_scanner(PackageSource.SNAP, updates=[("spotify", "1.2.40")]),
        ]

        assert check_all_updates(scanners) == {"spotify": "1.2.40"}

    def test_unexpected_error_contributes_nothing(self, make_scanner) -> None:
        """A crash in one source's parser does not lose the other updates."""
        scanners = [
            make_scanner(PackageSource.APT, update_error=ValueError("bad line")),
            make_scanner(PackageSource.SNAP, updates=[("spotify", "1.2.40")]),
        ]

        assert check_all_updates(scanners) == {"spotify": "1.2.40"}

    def test_unavailable_source_is_skipped(self, make_scanner) -> None:
        scanner = make_scanner(PackageSource.FLATPAK, updates=[("x", "1")], available=False)

        assert check_all_updates([scanner]) == {}
        assert scanner.calls == []

    def test_later_scanner_wins_on_name_collision(self, make_scanner) -> None:
        """A name reported by two sources keeps the later scanner's version."""
        scanners = [
            make_scanner(PackageSource.APT, updates=[("firefox", "129.0")]),
            make_scanner(PackageSource.SNAP, updates=[("firefox", "130.0-1")]),
        ]

        assert check_all_updates(scanners) == {"firefox": "130.0-1"}


class TestApplyUpdates:
    """Tests for apply_updates."""

    def test_every_package_gets_a_definite_flag(self) -> None:
        packages = _packages()

        count = apply_updates(packages, {"htop": "3.3.0"})

        assert count == 1
        assert [p.has_update for p in packages] == [True, False, False, False]
        assert packages[0].update_version == "3.3.0"
        assert packages[1].update_version is None

    def test_idempotent(self) -> None:
        """Applying the same mapping twice yields identical packages."""
        once = _packages()
        apply_updates(once, {"htop": "3.3.0", "spotify": "1.2.40"})
        twice = _packages()
        apply_updates(twice, {"htop": "3.3.0", "spotify": "1.2.40"})
        apply_updates(twice, {"htop": "3.3.0", "spotify": "1.2.40"})

        assert once == twice

    def test_clears_stale_updates(self) -> None:
        """A package no longer in the mapping loses its update."""
        packages = _packages()
        apply_updates(packages, {"vim": "9.1"})
        apply_updates(packages, {})

        assert packages[1].has_update is False
        assert packages[1].update_version is None


def test_reconcile_checks_and_applies(make_scanner) -> None:
    packages = _packages()
    scanners = [
        make_scanner(PackageSource.APT, updates=[("vim", "9.1")]),
        make_scanner(PackageSource.APPIMAGE, supports_updates=False),
    ]

    assert reconcile(packages, scanners) == 1
    assert packages[1].update_version == "9.1"
    assert packages[3].has_update is False
