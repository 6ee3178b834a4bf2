"""Progress model for batch updates."""

from dataclasses import dataclass, field

from pkgscope.models.package import PackageSource


@dataclass(slots=True)
class UpdateProgress:
    """Mutable state of one in-flight batch update.

    Only the code driving the batch writes to it; renderers read it.

    Attributes:
        source: Source being updated, or None for every source.
        total: Number of packages scheduled.
        current: Index of the next package to process.
        current_package: Name of the package being (or last) processed.
        success_count: Packages updated successfully.
        errors: Ordered (name, message) pairs for failed packages.
        cancelled: Whether the user stopped the batch early.
    """

    source: PackageSource | None = None
    total: int = 0
    current: int = 0
    current_package: str = ""
    success_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed_count(self) -> int:
        """Number of packages whose update failed."""
        return len(self.errors)

    @property
    def processed(self) -> int:
        """Number of packages attempted so far."""
        return self.success_count + self.failed_count

    @property
    def skipped(self) -> int:
        """Packages never attempted (only non-zero after a cancel)."""
        return max(self.total - self.success_count - self.failed_count, 0)

    @property
    def source_label(self) -> str:
        """Return the display label of the target source."""
        return "All" if self.source is None else self.source.label
