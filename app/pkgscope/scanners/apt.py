"""APT package scanner implementation.

Scans installed packages using dpkg-query, restricts them to manually
installed ones via apt-mark, and performs mutations with apt-get.
"""

import logging
from pathlib import Path

from pkgscope.models.package import AppType, Package, PackageSource
from pkgscope.scanners.base import MutationError, Scanner, ScanError
from pkgscope.utils.shell import command_exists

logger = logging.getLogger(__name__)

# Desktop entries of system-wide GUI applications
_DESKTOP_DIR = Path("/usr/share/applications")

# Dependency substrings that indicate a graphical application
_GUI_DEPENDS: tuple[str, ...] = ("libgtk", "libqt", "libx11", "wayland", "libgl")

# Name prefixes/suffixes typical of libraries and command-line packages
_CLI_AFFIXES: tuple[str, ...] = ("lib", "dev", "doc", "data", "common", "core", "base", "utils")


class AptScanner(Scanner):
    """Scanner for APT/dpkg packages.

    Uses dpkg-query to list installed packages and apt-mark to keep only
    the ones the user installed explicitly. Mutations go through apt-get
    behind the configured privilege prefix.
    """

    requires_privilege = True

    # dpkg-query format string: Package, Version, Installed-Size (KB), Summary, Depends
    _DPKG_FORMAT = "${Package}\\t${Version}\\t${Installed-Size}\\t${binary:Summary}\\t${Depends}\\n"

    @property
    def source(self) -> PackageSource:
        """Return APT as the package source."""
        return PackageSource.APT

    def is_available(self) -> bool:
        """Check if dpkg-query is available."""
        return command_exists("dpkg-query")

    def scan(self) -> list[Package]:
        """Scan installed APT packages.

        Returns:
            Package for each installed (and, by default, manually installed) package.

        Raises:
            ScanError: If dpkg-query fails.
        """
        manual = self._get_manual_installed() if self._config.apt_manual_only else set()

        result = self._query(["dpkg-query", "-W", "-f", self._DPKG_FORMAT], "dpkg-query")
        if not result.success:
            msg = f"dpkg-query failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        packages: list[Package] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue

            package = self._parse_dpkg_line(line)
            if package is None:
                continue
            # An empty manual set means apt-mark gave us nothing to go on
            if manual and package.name not in manual:
                continue
            packages.append(package)

        return packages

    def _get_manual_installed(self) -> set[str]:
        """Get set of package names that were installed manually.

        Returns:
            Package names reported by ``apt-mark showmanual``; empty when
            apt-mark is missing or fails, which disables the filter.
        """
        if not command_exists("apt-mark"):
            return set()

        try:
            result = self._query(["apt-mark", "showmanual"], "apt-mark showmanual")
        except ScanError as e:
            logger.warning("%s; listing all packages", e)
            return set()

        if not result.success:
            logger.warning(
                "apt-mark showmanual failed (%s); listing all packages",
                result.stderr.strip() or "unknown error",
            )
            return set()

        return {line.strip() for line in result.stdout.splitlines() if line.strip()}

    def _parse_dpkg_line(self, line: str) -> Package | None:
        """Parse a single line of dpkg-query output.

        Args:
            line: Tab-separated line from dpkg-query.

        Returns:
            Package if parsing succeeds, None otherwise.
        """
        parts = line.split("\t")
        if len(parts) < 4:
            logger.debug("Skipping malformed dpkg line (parts=%d): %r", len(parts), line[:100])
            return None

        name = parts[0].strip()
        version = parts[1].strip()
        if not name or not version:
            logger.debug("Skipping dpkg line with empty name/version: %r", line[:100])
            return None

        size_str = parts[2].strip()
        # dpkg-query reports size in KB
        size_bytes = int(size_str) * 1024 if size_str.isdigit() else 0
        depends = parts[4] if len(parts) >= 5 else ""

        return Package(
            name=name,
            source=PackageSource.APT,
            version=version,
            description=parts[3].strip(),
            size_bytes=size_bytes,
            app_type=self._detect_app_type(name, depends),
        )

    @staticmethod
    def _detect_app_type(name: str, depends: str) -> AppType:
        """Guess whether a package is a GUI or CLI application.

        Args:
            name: Package name.
            depends: Raw Depends field from dpkg.

        Returns:
            GUI when a desktop entry or GUI library dependency exists, CLI for
            library-like names, UNKNOWN otherwise.
        """
        for candidate in {name, name.lower()}:
            if (_DESKTOP_DIR / f"{candidate}.desktop").exists():
                return AppType.GUI

        deps = depends.lower()
        if any(marker in deps for marker in _GUI_DEPENDS):
            return AppType.GUI

        if any(name.startswith(a) or name.endswith(a) for a in _CLI_AFFIXES):
            return AppType.CLI

        return AppType.UNKNOWN

    def get_updates(self) -> list[tuple[str, str]]:
        """List upgradable packages from the local APT index.

        The index is not refreshed here (that needs root); it is as fresh
        as the system's last ``apt update``.

        Returns:
            (name, candidate_version) pairs.

        Raises:
            ScanError: If apt cannot be run or fails.
        """
        result = self._query(["apt", "list", "--upgradable"], "apt list --upgradable")
        if not result.success:
            msg = f"apt list --upgradable failed: {result.stderr.strip() or 'unknown error'}"
            raise ScanError(msg)

        updates: list[tuple[str, str]] = []
        for line in result.stdout.splitlines():
            parsed = self._parse_upgradable_line(line)
            if parsed is not None:
                updates.append(parsed)
        return updates

    @staticmethod
    def _parse_upgradable_line(line: str) -> tuple[str, str] | None:
        """Parse ``name/suite version arch [upgradable from: old]``.

        Returns:
            (name, version), or None for headers and malformed lines.
        """
        if "/" not in line:
            # "Listing..." header, warnings, blank lines
            return None

        name, _, rest = line.partition("/")
        fields = rest.split()
        if not name.strip() or len(fields) < 2:
            return None
        return name.strip(), fields[1]

    def uninstall(self, package: Package) -> None:
        """Remove a package with ``apt-get remove``."""
        self._mutate(["apt-get", "remove", "-y", package.name], f"Uninstall of {package.name}")

    def update(self, package: Package) -> None:
        """Upgrade a single package with ``apt-get install --only-upgrade``."""
        self._mutate(
            ["apt-get", "install", "-y", "--only-upgrade", package.name],
            f"Update of {package.name}",
        )

    def install(self, name: str) -> None:
        """Install a repository package or a local ``.deb`` file.

        Raises:
            MutationError: If the .deb path does not exist or apt-get fails.
        """
        target = name
        if name.endswith(".deb"):
            deb = Path(name).expanduser().resolve()
            if not deb.is_file():
                msg = f"Deb file not found: {deb}"
                raise MutationError(msg)
            # apt-get only treats the argument as a file when it contains a slash
            target = str(deb)

        self._mutate(["apt-get", "install", "-y", target], f"Install of {name}")
