"""The unified package catalog and its filtered view.

The catalog holds every discovered package plus ``filtered``, the indices
of the packages that pass the current source tab, search text, and app
type filter, and a ``selected`` cursor into ``filtered``.

``filtered`` is rebuilt from scratch after every change to the package
list or to a predicate input, and ``selected`` is clamped right after, so
the cursor always points at a visible row (or is 0 when nothing is
visible).
"""

from collections import Counter
from dataclasses import dataclass

from pkgscope.core.reconciler import apply_updates
from pkgscope.models.package import (
    AppTypeFilter,
    Package,
    PackageSource,
    SortCriteria,
    SourceTab,
    sort_packages,
)


@dataclass(frozen=True, slots=True)
class CatalogStats:
    """Package counts per source; standalone .deb installs count as APT."""

    total: int = 0
    apt: int = 0
    snap: int = 0
    flatpak: int = 0
    appimage: int = 0


def _family(source: PackageSource) -> PackageSource:
    """Fold DEB_FILE into APT, the manager that owns it."""
    return PackageSource.APT if source is PackageSource.DEB_FILE else source


class Catalog:
    """In-memory package list with search, filter, tab, sort and cursor.

    Only the controller's thread mutates a Catalog.

    Attributes:
        packages: All packages, kept sorted by ``sort_criteria``.
        filtered: Indices into ``packages`` that pass every predicate.
        selected: Cursor into ``filtered``.
        search_query: Current search text.
        sort_criteria: Active sort order.
        type_filter: Active app type filter.
        source_tab: Active source tab.
    """

    def __init__(self, packages: list[Package] | None = None) -> None:
        self.packages: list[Package] = []
        self.filtered: list[int] = []
        self.selected = 0
        self.search_query = ""
        self.sort_criteria = SortCriteria.SIZE_DESC
        self.type_filter = AppTypeFilter.ALL
        self.source_tab = SourceTab.ALL
        if packages:
            self.set_packages(packages)

    # -- package list ---------------------------------------------------

    def set_packages(self, packages: list[Package]) -> None:
        """Replace the whole package list (full rescan)."""
        self.packages = list(packages)
        sort_packages(self.packages, self.sort_criteria)
        self.apply_filters()

    def add_packages(self, packages: list[Package]) -> None:
        """Append a batch of packages (streaming scan)."""
        self.packages.extend(packages)
        sort_packages(self.packages, self.sort_criteria)
        self.apply_filters()

    def remove_package(self, package: Package) -> bool:
        """Remove ``package`` from the catalog.

        The object itself is looked up first; if a rescan replaced it in
        the meantime, the first package equal to it is removed instead.

        Returns:
            True if a package was removed.
        """
        for i, candidate in enumerate(self.packages):
            if candidate is package:
                del self.packages[i]
                self.apply_filters()
                return True

        try:
            self.packages.remove(package)
        except ValueError:
            return False
        self.apply_filters()
        return True

    # -- filtered view --------------------------------------------------

    def apply_filters(self) -> None:
        """Rebuild ``filtered`` from scratch and clamp ``selected``."""
        query = self.search_query
        self.filtered = [
            i
            for i, package in enumerate(self.packages)
            if self.source_tab.matches(package.source)
            and (not query or package.matches(query))
            and self.type_filter.matches(package.app_type)
        ]
        self._clamp()

    def _clamp(self) -> None:
        last = max(len(self.filtered) - 1, 0)
        self.selected = min(max(self.selected, 0), last)

    def visible_packages(self) -> list[Package]:
        """Return the packages of the filtered view, in catalog order."""
        return [self.packages[i] for i in self.filtered]

    def selected_package(self) -> Package | None:
        """Return the package under the cursor, None if nothing is visible."""
        if not self.filtered:
            return None
        return self.packages[self.filtered[self.selected]]

    def search_input(self, char: str) -> None:
        """Append ``char`` to the search text."""
        self.search_query += char
        self.apply_filters()

    def search_backspace(self) -> None:
        """Delete the last character of the search text."""
        self.search_query = self.search_query[:-1]
        self.apply_filters()

    def clear_search(self) -> None:
        """Empty the search text."""
        self.search_query = ""
        self.apply_filters()

    def toggle_filter(self) -> None:
        """Cycle the app type filter."""
        self.type_filter = self.type_filter.next()
        self.apply_filters()

    def next_tab(self) -> None:
        """Switch to the next source tab."""
        self.source_tab = self.source_tab.next()
        self.apply_filters()

    def prev_tab(self) -> None:
        """Switch to the previous source tab."""
        self.source_tab = self.source_tab.prev()
        self.apply_filters()

    def toggle_sort(self) -> None:
        """Cycle the sort order and re-sort."""
        self.sort_criteria = self.sort_criteria.next()
        sort_packages(self.packages, self.sort_criteria)
        self.apply_filters()

    # -- cursor ---------------------------------------------------------

    def select_previous(self) -> None:
        if self.selected > 0:
            self.selected -= 1

    def select_next(self) -> None:
        if self.selected < len(self.filtered) - 1:
            self.selected += 1

    def select_first(self) -> None:
        self.selected = 0

    def select_last(self) -> None:
        self.selected = max(len(self.filtered) - 1, 0)

    def page_up(self, page_size: int) -> None:
        self.selected = max(self.selected - page_size, 0)

    def page_down(self, page_size: int) -> None:
        self.selected = min(self.selected + page_size, max(len(self.filtered) - 1, 0))

    # -- statistics and updates ------------------------------------------

    def stats(self) -> CatalogStats:
        """Count packages per source family."""
        counts = Counter(_family(p.source) for p in self.packages)
        return CatalogStats(
            total=len(self.packages),
            apt=counts[PackageSource.APT],
            snap=counts[PackageSource.SNAP],
            flatpak=counts[PackageSource.FLATPAK],
            appimage=counts[PackageSource.APPIMAGE],
        )

    def get_update_count(self) -> int:
        """Number of packages known to have an update."""
        return sum(1 for p in self.packages if p.has_update is True)

    def update_counts_by_source(self) -> dict[PackageSource, int]:
        """Number of packages with an update per source family."""
        counts: dict[PackageSource, int] = {}
        for package in self.packages:
            if package.has_update is True:
                family = _family(package.source)
                counts[family] = counts.get(family, 0) + 1
        return counts

    def packages_with_updates(self, source: PackageSource | None = None) -> list[Package]:
        """Packages with ``has_update is True``, optionally for one source family.

        Args:
            source: Restrict to this source (APT includes .deb installs);
                None means every source.
        """
        return [
            p
            for p in self.packages
            if p.has_update is True and (source is None or _family(p.source) is _family(source))
        ]

    def apply_updates(self, updates: dict[str, str]) -> int:
        """Reconcile an update mapping into every package.

        Returns:
            Number of packages with an update.
        """
        count = apply_updates(self.packages, updates)
        self.apply_filters()
        return count

    def selected_for_update(self) -> list[Package]:
        """Packages marked for the batch update, in catalog order."""
        return [p for p in self.packages if p.selected]

    def clear_selection(self) -> None:
        """Unmark every package."""
        for package in self.packages:
            package.selected = False
