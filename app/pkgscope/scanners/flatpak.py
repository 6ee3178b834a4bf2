"""Flatpak package scanner implementation.

Scans installed Flatpak applications using the flatpak CLI.
"""

import logging
import re

from pkgscope.models.package import AppType, Package, PackageSource
from pkgscope.scanners.base import Scanner, ScanError
from pkgscope.utils.shell import command_exists

logger = logging.getLogger(__name__)


class FlatpakScanner(Scanner):
    """Scanner for Flatpak applications.

    Uses `flatpak list` to enumerate installed applications (not
    runtimes). The package name is the display name; the application ID
    is kept in ``install_path`` and used for every mutation. Flatpak
    manages its own privileges through polkit, so no prefix is applied.
    """

    # Size strings like "1.2 GB", "500 MB", "100 kB", "1,2 GB" (comma locales)
    _SIZE_PATTERN = re.compile(r"^\s*([\d.,]+)\s*([KMGT]?i?B?)\s*$", re.IGNORECASE)

    # Size multipliers for converting to bytes
    _SIZE_MULTIPLIERS: dict[str, int] = {
        "": 1,
        "B": 1,
        "K": 1024,
        "M": 1024 * 1024,
        "G": 1024 * 1024 * 1024,
        "T": 1024 * 1024 * 1024 * 1024,
    }

    @property
    def source(self) -> PackageSource:
        """Return FLATPAK as the package source."""
        return PackageSource.FLATPAK

    def is_available(self) -> bool:
        """Check if flatpak CLI is available."""
        return command_exists("flatpak")

    def scan(self) -> list[Package]:
        """Scan all installed Flatpak applications.

        Raises:
            ScanError: If flatpak list fails.
        """
        result = self._query(
            [
                "flatpak",
                "list",
                "--app",
                "--columns=name,application,version,size,description",
            ],
            "flatpak list",
        )
        if not result.success:
            msg = f"flatpak list failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        packages: list[Package] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue

            package = self._parse_flatpak_line(line)
            if package is not None:
                packages.append(package)
        return packages

    def _parse_flatpak_line(self, line: str) -> Package | None:
        """Parse a single line of flatpak list output.

        Args:
            line: Tab-separated line (name, application, version, size, description).

        Returns:
            Package if parsing succeeds, None otherwise.
        """
        parts = line.split("\t")
        if len(parts) < 2:
            logger.debug("Skipping malformed flatpak line: %r", line[:100])
            return None

        display_name = parts[0].strip()
        app_id = parts[1].strip()
        if not app_id:
            return None

        version = parts[2].strip() if len(parts) >= 3 else ""
        size_bytes = self._parse_size(parts[3]) if len(parts) >= 4 else None
        description = parts[4].strip() if len(parts) >= 5 else ""

        # Flatpak apps are virtually always graphical
        return Package(
            name=display_name or app_id,
            source=PackageSource.FLATPAK,
            version=version,
            description=description,
            size_bytes=size_bytes or 0,
            app_type=AppType.GUI,
            install_path=app_id,
        )

    def _parse_size(self, size_str: str) -> int | None:
        """Parse a human-readable size string to bytes.

        Args:
            size_str: Size string like "1.2 GB", "500 MB", "100 kB".

        Returns:
            Size in bytes, or None if parsing fails.
        """
        if not size_str.strip():
            return None

        match = self._SIZE_PATTERN.match(size_str)
        if not match:
            return None

        try:
            value = float(match.group(1).replace(",", "."))
            unit = match.group(2).upper()[:1]
            multiplier = self._SIZE_MULTIPLIERS.get(unit, 1)
            return int(value * multiplier)
        except (ValueError, OverflowError):
            return None

    def get_updates(self) -> list[tuple[str, str]]:
        """List applications with updates on their remotes.

        Returns:
            (display name, new version) pairs, matching ``Package.name``.

        Raises:
            ScanError: If flatpak remote-ls fails.
        """
        result = self._query(
            ["flatpak", "remote-ls", "--updates", "--app", "--columns=name,application,version"],
            "flatpak remote-ls --updates",
        )
        if not result.success:
            msg = f"flatpak remote-ls failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        updates: list[tuple[str, str]] = []
        for line in result.stdout.splitlines():
            parts = line.split("\t")
            if len(parts) < 3:
                continue
            name = parts[0].strip() or parts[1].strip()
            if name:
                updates.append((name, parts[2].strip()))
        return updates

    @staticmethod
    def _app_id(package: Package) -> str:
        return package.install_path or package.name

    def uninstall(self, package: Package) -> None:
        """Uninstall an application by its ID."""
        self._mutate(
            ["flatpak", "uninstall", "-y", self._app_id(package)],
            f"Uninstall of {package.name}",
        )

    def update(self, package: Package) -> None:
        """Update an application by its ID."""
        self._mutate(
            ["flatpak", "update", "-y", self._app_id(package)],
            f"Update of {package.name}",
        )

    def install(self, name: str) -> None:
        """Install an application from the configured remotes."""
        self._mutate(["flatpak", "install", "-y", name], f"Install of {name}")
