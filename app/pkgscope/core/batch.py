"""Sequential batch updates with cooperative cancellation."""

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable

from pkgscope.models.package import Package, PackageSource
from pkgscope.models.update import UpdateProgress
from pkgscope.scanners.base import MutationError

logger = logging.getLogger(__name__)


class BatchUpdate:
    """Update a fixed list of packages one at a time.

    The work list is copied when the batch is created and never re-read
    from the catalog, so the batch always finishes against the state it
    was scheduled with. Cancellation is only honoured between items: the
    package in flight always completes (or fails) first.

    Example:
        >>> batch = BatchUpdate(catalog.packages_with_updates(), None, scanner.update)
        >>> progress = batch.run()
        >>> progress.success_count + progress.failed_count + progress.skipped == progress.total
        True
    """

    def __init__(
        self,
        work: Iterable[Package],
        source: PackageSource | None,
        updater: Callable[[Package], None],
    ) -> None:
        """Create a batch.

        Args:
            work: Packages to update, in order.
            source: Target source for display, None for all sources.
            updater: Performs one update; raises MutationError on failure.
        """
        self.work: list[Package] = [dataclasses.replace(p) for p in work]
        self.progress = UpdateProgress(source=source, total=len(self.work))
        self._updater = updater
        self._cancel = threading.Event()

    @property
    def done(self) -> bool:
        """Whether the work list is exhausted or the batch was cancelled."""
        return self.progress.cancelled or self.progress.current >= self.progress.total

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        """Ask the batch to stop before the next item. Safe from any thread."""
        self._cancel.set()

    def step(self) -> bool:
        """Process at most one package.

        Returns:
            True if more work may remain, False once the batch is done.
        """
        if self.done:
            return False

        if self._cancel.is_set():
            self.progress.cancelled = True
            logger.info(
                "Batch update cancelled after %d of %d packages",
                self.progress.processed,
                self.progress.total,
            )
            return False

        package = self.work[self.progress.current]
        self.progress.current_package = package.name
        try:
            self._updater(package)
        except MutationError as e:
            logger.warning("Update of %s failed: %s", package.name, e)
            self.progress.errors.append((package.name, str(e)))
        else:
            self.progress.success_count += 1
        self.progress.current += 1
        return not self.done

    def run(self) -> UpdateProgress:
        """Process every remaining package (unless cancelled) and return the progress."""
        while self.step():
            pass
        return self.progress
