"""Snap package scanner implementation.

Scans installed Snap applications using the snap CLI.
"""

import logging
from pathlib import Path

from pkgscope.models.package import AppType, Package, PackageSource
from pkgscope.scanners.base import Scanner, ScanError
from pkgscope.utils.shell import command_exists

logger = logging.getLogger(__name__)

# Notes values that indicate runtime/infrastructure snaps
_RUNTIME_NOTES: frozenset[str] = frozenset({"base", "snapd"})

# Exact snap names that are always runtime infrastructure
_RUNTIME_NAMES: frozenset[str] = frozenset({"snapd", "bare"})

# Desktop entries exported by snapd, named "<snap>_<app>.desktop"
_SNAP_DESKTOP_DIR = Path("/var/lib/snapd/desktop/applications")


class SnapScanner(Scanner):
    """Scanner for Snap packages.

    Uses ``snap list`` to enumerate installed snaps. Runtime and
    infrastructure snaps (cores, bases, snapd) are filtered out. Sizes
    and summaries are fetched with one ``du`` and one ``snap info`` call
    covering every snap, so the cost does not grow with process spawns.
    """

    requires_privilege = True

    @property
    def source(self) -> PackageSource:
        """Return SNAP as the package source."""
        return PackageSource.SNAP

    def is_available(self) -> bool:
        """Check if snap CLI is available."""
        return command_exists("snap")

    def scan(self) -> list[Package]:
        """Scan installed user-facing Snap packages.

        Raises:
            ScanError: If snap list fails.
        """
        result = self._query(["snap", "list"], "snap list")
        if not result.success:
            msg = f"snap list failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        packages: list[Package] = []
        # Skip header line ("Name  Version  Rev  Tracking  Publisher  Notes")
        for line in result.stdout.splitlines()[1:]:
            if not line.strip():
                continue

            package = self._parse_snap_line(line)
            if package is not None:
                packages.append(package)

        if packages:
            names = [p.name for p in packages]
            sizes = self._get_sizes(names)
            summaries = self._get_summaries(names)
            for package in packages:
                package.size_bytes = sizes.get(package.name, 0)
                package.description = summaries.get(package.name, "")

        return packages

    def _parse_snap_line(self, line: str) -> Package | None:
        """Parse a single line of snap list output.

        Args:
            line: Whitespace-separated line from snap list.

        Returns:
            Package if the snap is a user-facing app, None if it is a
            runtime snap or the line is malformed.
        """
        parts = line.split()
        if len(parts) < 4:
            logger.debug("Skipping malformed snap line (parts=%d): %r", len(parts), line[:100])
            return None

        name = parts[0]
        version = parts[1]
        notes = parts[5] if len(parts) >= 6 else "-"

        if self._is_runtime_snap(name, notes):
            return None

        return Package(
            name=name,
            source=PackageSource.SNAP,
            version=version,
            app_type=self._detect_app_type(name),
        )

    @staticmethod
    def _is_runtime_snap(name: str, notes: str) -> bool:
        """Check whether a snap is a runtime/infrastructure snap.

        Runtime snaps include cores, bases, snapd itself, the bare snap,
        and GNOME platform snaps.

        Args:
            name: Snap package name.
            notes: Value from the Notes column of ``snap list``.

        Returns:
            True if the snap should be filtered out.
        """
        if notes in _RUNTIME_NOTES:
            return True

        if name in _RUNTIME_NAMES:
            return True

        if name.startswith("core"):
            return True

        return name.startswith("gnome-") and name.endswith("-platform")

    @staticmethod
    def _detect_app_type(name: str) -> AppType:
        """GUI if snapd exported a desktop entry for the snap."""
        if _SNAP_DESKTOP_DIR.is_dir() and any(_SNAP_DESKTOP_DIR.glob(f"{name}_*.desktop")):
            return AppType.GUI
        return AppType.UNKNOWN

    def _get_sizes(self, names: list[str]) -> dict[str, int]:
        """Return on-disk size of each snap's current revision.

        ``du`` exits non-zero if any path is missing but still reports the
        others, so its output is parsed regardless of the exit code.
        """
        paths = [f"/snap/{name}/current" for name in names]
        try:
            result = self._query(["du", "-sbD", *paths], "du")
        except ScanError as e:
            logger.debug("Could not size snaps: %s", e)
            return {}

        sizes: dict[str, int] = {}
        for line in result.stdout.splitlines():
            size_str, _, path = line.partition("\t")
            parts = Path(path.strip()).parts
            # /snap/<name>/current
            if len(parts) >= 3 and size_str.strip().isdigit():
                sizes[parts[2]] = int(size_str.strip())
        return sizes

    def _get_summaries(self, names: list[str]) -> dict[str, str]:
        """Return the ``summary:`` field of ``snap info`` for each snap.

        ``snap info`` separates the documents of several snaps with ``---``.
        """
        try:
            result = self._query(["snap", "info", *names], "snap info")
        except ScanError as e:
            logger.debug("Could not describe snaps: %s", e)
            return {}

        summaries: dict[str, str] = {}
        current: str | None = None
        for line in result.stdout.splitlines():
            if line.startswith("---"):
                current = None
            elif line.startswith("name:"):
                current = line.removeprefix("name:").strip()
            elif line.startswith("summary:") and current is not None:
                summaries[current] = line.removeprefix("summary:").strip()
        return summaries

    def get_updates(self) -> list[tuple[str, str]]:
        """List snaps with pending refreshes.

        ``snap refresh --list`` prints "All snaps up to date." to stderr and
        nothing on stdout when there is nothing to do.

        Raises:
            ScanError: If snap refresh --list fails.
        """
        result = self._query(["snap", "refresh", "--list"], "snap refresh --list")
        if not result.success:
            msg = f"snap refresh --list failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        updates: list[tuple[str, str]] = []
        for line in result.stdout.splitlines()[1:]:
            parts = line.split()
            if len(parts) >= 2:
                updates.append((parts[0], parts[1]))
        return updates

    def uninstall(self, package: Package) -> None:
        """Remove a snap with ``snap remove``."""
        self._mutate(["snap", "remove", package.name], f"Uninstall of {package.name}")

    def update(self, package: Package) -> None:
        """Refresh a snap with ``snap refresh``."""
        self._mutate(["snap", "refresh", package.name], f"Update of {package.name}")

    def install(self, name: str) -> None:
        """Install a snap with ``snap install``."""
        self._mutate(["snap", "install", name], f"Install of {name}")
