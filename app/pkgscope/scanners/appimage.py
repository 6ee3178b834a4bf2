"""AppImage scanner implementation.

AppImages are self-contained executables with no package manager behind
them, so this scanner walks the configured directories on disk instead of
calling a CLI.
"""

import logging
import os
import re
from pathlib import Path

from pkgscope.core.paths import get_applications_dir
from pkgscope.models.package import AppType, Package, PackageSource
from pkgscope.scanners.base import MutationError, Scanner

logger = logging.getLogger(__name__)

_ELF_MAGIC = b"\x7fELF"

# Type 2 AppImages carry "AI\x02" in the ELF padding at offset 8
_APPIMAGE_MAGIC = b"AI\x02"
_MAGIC_OFFSET = 8

_EXTENSION = re.compile(r"\.appimage$", re.IGNORECASE)

# Tried in order against the filename without extension
_VERSION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"-(\d+\.\d+\.?\d*)[-_]?"),
    re.compile(r"_v?(\d+\.\d+\.?\d*)[-_]?"),
    re.compile(r"[_-](\d+\.\d+\.?\d*)$"),
)

# Version and architecture tails stripped to get the app name
_NAME_SUFFIXES: tuple[re.Pattern[str], ...] = (
    re.compile(r"[-_]v?\d+\.\d+.*$"),
    re.compile(r"[-_]x86_64.*$", re.IGNORECASE),
    re.compile(r"[-_]amd64.*$", re.IGNORECASE),
    re.compile(r"[-_]linux.*$", re.IGNORECASE),
)


def extract_name(filename: str) -> str:
    """Derive the application name from an AppImage filename.

    Example:
        >>> extract_name("Obsidian-1.5.3-x86_64.AppImage")
        'Obsidian'
    """
    stem = _EXTENSION.sub("", filename)
    name = stem
    for pattern in _NAME_SUFFIXES:
        name = pattern.sub("", name)
    return name or stem


def extract_version(filename: str) -> str:
    """Derive the version from an AppImage filename, "unknown" if absent."""
    stem = _EXTENSION.sub("", filename)
    for pattern in _VERSION_PATTERNS:
        match = pattern.search(stem)
        if match:
            return match.group(1)
    return "unknown"


class AppImageScanner(Scanner):
    """Scanner for AppImage files in well-known directories.

    The search is bounded by ``appimage_max_depth`` and never follows
    symlinked directories. There is no update channel.
    """

    supports_updates = False

    @property
    def source(self) -> PackageSource:
        """Return APPIMAGE as the package source."""
        return PackageSource.APPIMAGE

    def is_available(self) -> bool:
        """Always available: the scan only reads the filesystem."""
        return True

    def scan(self) -> list[Package]:
        """Find AppImages under the configured directories.

        Unreadable directories and files are skipped.
        """
        packages: list[Package] = []
        seen: set[Path] = set()

        for root in self._config.appimage_paths():
            if not root.is_dir():
                continue
            for path in self._walk(root):
                try:
                    resolved = path.resolve()
                except OSError:
                    continue
                if resolved in seen:
                    continue
                seen.add(resolved)

                package = self._to_package(path)
                if package is not None:
                    packages.append(package)

        return packages

    def _walk(self, root: Path):
        """Yield regular files under ``root`` down to the configured depth."""
        max_depth = self._config.appimage_max_depth
        root_depth = len(root.parts)

        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            current = Path(dirpath)
            depth = len(current.parts) - root_depth
            if depth >= max_depth:
                # Files at this level still count, deeper levels do not
                dirnames.clear()
            for filename in filenames:
                path = current / filename
                if path.is_file():
                    yield path

    @staticmethod
    def is_appimage(path: Path) -> bool:
        """Check the extension, then the ELF header for the AppImage magic."""
        if _EXTENSION.search(path.name):
            return True

        try:
            with path.open("rb") as f:
                header = f.read(_MAGIC_OFFSET + len(_APPIMAGE_MAGIC))
        except OSError:
            return False

        return (
            header.startswith(_ELF_MAGIC)
            and header[_MAGIC_OFFSET : _MAGIC_OFFSET + len(_APPIMAGE_MAGIC)] == _APPIMAGE_MAGIC
        )

    def _to_package(self, path: Path) -> Package | None:
        if not self.is_appimage(path):
            return None

        name = extract_name(path.name)
        if not name:
            logger.debug("Skipping nameless AppImage %s", path)
            return None
        try:
            size_bytes = path.stat().st_size
        except OSError:
            size_bytes = 0

        # AppImages are overwhelmingly desktop applications
        return Package(
            name=name,
            source=PackageSource.APPIMAGE,
            version=extract_version(path.name),
            description=f"AppImage at {path}",
            size_bytes=size_bytes,
            app_type=AppType.GUI,
            install_path=str(path),
        )

    def get_updates(self) -> list[tuple[str, str]]:
        """AppImages have no central update channel."""
        return []

    def uninstall(self, package: Package) -> None:
        """Delete the AppImage file and any desktop entry pointing at it.

        Raises:
            MutationError: If the package has no path or the file cannot be deleted.
        """
        if not package.install_path:
            msg = f"No path recorded for AppImage {package.name}"
            raise MutationError(msg)

        path = Path(package.install_path)
        try:
            path.unlink()
        except OSError as e:
            msg = f"Failed to delete {path}: {e}"
            raise MutationError(msg) from e
        logger.info("Deleted AppImage %s", path)

        self._remove_desktop_entries(str(path))

    @staticmethod
    def _remove_desktop_entries(path: str) -> None:
        """Remove user desktop entries whose contents mention ``path``.

        Failures here are logged only: the AppImage itself is already gone.
        """
        desktop_dir = get_applications_dir()
        if not desktop_dir.is_dir():
            return

        for entry in desktop_dir.glob("*.desktop"):
            try:
                if path in entry.read_text(encoding="utf-8", errors="replace"):
                    entry.unlink()
                    logger.info("Removed desktop entry %s", entry)
            except OSError as e:
                logger.warning("Could not clean up desktop entry %s: %s", entry, e)

    def update(self, package: Package) -> None:
        """Raises MutationError: AppImages cannot be updated from here."""
        msg = f"AppImage updates are not supported ({package.name})"
        raise MutationError(msg)

    def install(self, name: str) -> None:
        """Raises MutationError: AppImages are installed by downloading them."""
        msg = f"Installing AppImages is not supported ({name})"
        raise MutationError(msg)
