"""Package models for the unified catalog.

This module defines the core data structures for representing
installed packages from every supported source (APT, Snap, Flatpak,
AppImage, standalone .deb files) together with the sort and filter
enums the catalog projects them through.
"""

from dataclasses import dataclass, field
from enum import Enum


class PackageSource(Enum):
    """Enumeration of supported package sources.

    Declaration order doubles as the sort order for SortCriteria.SOURCE_ASC.
    """

    APT = "apt"
    SNAP = "snap"
    FLATPAK = "flatpak"
    APPIMAGE = "appimage"
    DEB_FILE = "deb"

    @property
    def label(self) -> str:
        """Return the display label for this source."""
        return _SOURCE_LABELS[self]

    @property
    def rank(self) -> int:
        """Return the position of this source in declaration order."""
        return list(PackageSource).index(self)


_SOURCE_LABELS: dict[PackageSource, str] = {
    PackageSource.APT: "APT",
    PackageSource.SNAP: "Snap",
    PackageSource.FLATPAK: "Flatpak",
    PackageSource.APPIMAGE: "AppImage",
    PackageSource.DEB_FILE: "Deb",
}


class AppType(Enum):
    """Whether a package provides a graphical or command-line application."""

    GUI = "gui"
    CLI = "cli"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Return the short display label."""
        if self is AppType.UNKNOWN:
            return "???"
        return self.value.upper()


@dataclass(slots=True)
class Package:
    """Represents an installed package discovered by a scanner.

    Unlike most models this one is mutable: the update reconciler fills in
    ``has_update``/``update_version`` and the UI toggles ``selected``.

    Attributes:
        name: Package name, unique only within its source.
        source: Package manager that installed this package.
        version: Installed version string.
        description: Human-readable summary.
        size_bytes: Installed size in bytes (0 when unknown).
        app_type: GUI, CLI or UNKNOWN.
        install_path: Source-specific location (Flatpak app id, AppImage path).
        has_update: None until an update check ran, then True or False.
        update_version: Newer version offered upstream, if any.
        selected: Transient UI flag for batch selection.
    """

    name: str
    source: PackageSource
    version: str = ""
    description: str = ""
    size_bytes: int = 0
    app_type: AppType = AppType.UNKNOWN
    install_path: str | None = None
    has_update: bool | None = None
    update_version: str | None = None
    selected: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Package size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    def matches(self, query: str) -> bool:
        """Check if the name or description contains ``query`` (case-insensitive)."""
        needle = query.lower()
        return needle in self.name.lower() or needle in self.description.lower()

    @property
    def size_human(self) -> str:
        """Return human-readable size string using binary units."""
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"

        size = float(self.size_bytes)
        for unit in ("B", "KiB", "MiB", "GiB"):
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TiB"


class SortCriteria(Enum):
    """Sort order applied to the catalog."""

    SIZE_DESC = "size_desc"
    SIZE_ASC = "size_asc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    SOURCE_ASC = "source_asc"

    def next(self) -> "SortCriteria":
        """Return the next criteria in the cycle."""
        members = list(SortCriteria)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        """Return the display label."""
        return _SORT_LABELS[self]


_SORT_LABELS: dict[SortCriteria, str] = {
    SortCriteria.SIZE_DESC: "Size (largest first)",
    SortCriteria.SIZE_ASC: "Size (smallest first)",
    SortCriteria.NAME_ASC: "Name (A-Z)",
    SortCriteria.NAME_DESC: "Name (Z-A)",
    SortCriteria.SOURCE_ASC: "Source",
}


def sort_packages(packages: list[Package], criteria: SortCriteria) -> None:
    """Sort packages in place according to ``criteria``.

    Python's sort is stable, so packages that compare equal keep their
    relative order between passes.

    Args:
        packages: List to sort in place.
        criteria: Sort order to apply.
    """
    if criteria is SortCriteria.SIZE_DESC:
        packages.sort(key=lambda p: p.size_bytes, reverse=True)
    elif criteria is SortCriteria.SIZE_ASC:
        packages.sort(key=lambda p: p.size_bytes)
    elif criteria is SortCriteria.NAME_ASC:
        packages.sort(key=lambda p: p.name.lower())
    elif criteria is SortCriteria.NAME_DESC:
        packages.sort(key=lambda p: p.name.lower(), reverse=True)
    else:
        packages.sort(key=lambda p: (p.source.rank, p.name.lower()))


class AppTypeFilter(Enum):
    """Filter on application type."""

    ALL = "all"
    GUI_ONLY = "gui"
    CLI_ONLY = "cli"

    def next(self) -> "AppTypeFilter":
        """Return the next filter in the cycle."""
        members = list(AppTypeFilter)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        """Return the display label."""
        return {"all": "All", "gui": "GUI Only", "cli": "CLI Only"}[self.value]

    def matches(self, app_type: AppType) -> bool:
        """Check whether ``app_type`` passes this filter."""
        if self is AppTypeFilter.GUI_ONLY:
            return app_type is AppType.GUI
        if self is AppTypeFilter.CLI_ONLY:
            return app_type is AppType.CLI
        return True


class SourceTab(Enum):
    """Source tabs shown above the package list."""

    ALL = "all"
    APT = "apt"
    SNAP = "snap"
    FLATPAK = "flatpak"
    APPIMAGE = "appimage"

    def next(self) -> "SourceTab":
        """Return the tab to the right (wrapping)."""
        members = list(SourceTab)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "SourceTab":
        """Return the tab to the left (wrapping)."""
        members = list(SourceTab)
        return members[(members.index(self) - 1) % len(members)]

    @property
    def source(self) -> PackageSource | None:
        """Return the package source this tab shows, None for ALL."""
        if self is SourceTab.ALL:
            return None
        return PackageSource(self.value)

    @property
    def label(self) -> str:
        """Return the display label."""
        source = self.source
        return "All" if source is None else source.label

    def matches(self, source: PackageSource) -> bool:
        """Check whether a package from ``source`` belongs on this tab.

        The APT tab also lists standalone .deb installs, since dpkg owns them.
        """
        if self is SourceTab.ALL:
            return True
        if self is SourceTab.APT:
            return source in (PackageSource.APT, PackageSource.DEB_FILE)
        return source is self.source
