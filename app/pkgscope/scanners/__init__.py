"""Package scanners for different package managers.

This module exports the scanner classes and the registry helpers used to
build the default scanner set.
"""

from pkgscope.core.config import ScopeConfig
from pkgscope.models.package import PackageSource
from pkgscope.scanners.appimage import AppImageScanner
from pkgscope.scanners.apt import AptScanner
from pkgscope.scanners.base import MutationError, Scanner, ScanError, ScannerError
from pkgscope.scanners.flatpak import FlatpakScanner
from pkgscope.scanners.snap import SnapScanner


def default_scanners(config: ScopeConfig | None = None) -> list[Scanner]:
    """Return one scanner per supported source, in display order.

    Args:
        config: Configuration handed to each scanner.

    Returns:
        APT, Snap, Flatpak and AppImage scanners.
    """
    return [
        AptScanner(config),
        SnapScanner(config),
        FlatpakScanner(config),
        AppImageScanner(config),
    ]


def scanner_for(source: PackageSource, scanners: list[Scanner]) -> Scanner | None:
    """Find the scanner responsible for ``source``.

    Standalone .deb installs are owned by dpkg, so DEB_FILE resolves to the
    APT scanner.

    Returns:
        The matching scanner, or None if it is not in ``scanners``.
    """
    wanted = PackageSource.APT if source is PackageSource.DEB_FILE else source
    for scanner in scanners:
        if scanner.source is wanted:
            return scanner
    return None


__all__ = [
    "AppImageScanner",
    "AptScanner",
    "FlatpakScanner",
    "MutationError",
    "ScanError",
    "Scanner",
    "ScannerError",
    "SnapScanner",
    "default_scanners",
    "scanner_for",
]
