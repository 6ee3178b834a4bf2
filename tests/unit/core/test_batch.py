"""Unit tests for BatchUpdate."""

import pytest
from pkgscope.core.batch import BatchUpdate
from pkgscope.models.package import Package, PackageSource
from pkgscope.scanners.base import MutationError


def _work(*names: str) -> list[Package]:
    return [
        Package(name=n, source=PackageSource.APT, has_update=True, update_version="2.0")
        for n in names
    ]


class Recorder:
    """Updater that records calls and fails for selected names."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.failing = failing or set()

    def __call__(self, package: Package) -> None:
        self.calls.append(package.name)
        if package.name in self.failing:
            msg = f"Update of {package.name} failed with exit code 100"
            raise MutationError(msg)


class TestBatchUpdate:
    """Tests for sequential batch updates."""

    def test_runs_every_package_in_order(self) -> None:
        updater = Recorder()
        batch = BatchUpdate(_work("a", "b", "c"), PackageSource.APT, updater)

        progress = batch.run()

        assert updater.calls == ["a", "b", "c"]
        assert progress.success_count == 3
        assert progress.failed_count == 0
        assert progress.skipped == 0
        assert progress.current == 3
        assert progress.current_package == "c"
        assert batch.done is True

    def test_failures_are_recorded_and_batch_continues(self) -> None:
        updater = Recorder(failing={"b"})
        batch = BatchUpdate(_work("a", "b", "c"), None, updater)

        progress = batch.run()

        assert updater.calls == ["a", "b", "c"]
        assert progress.success_count == 2
        assert progress.errors == [("b", "Update of b failed with exit code 100")]

    def test_cancel_between_items(self) -> None:
        """3 successes and 1 failure out of 5, then cancel: 1 skipped."""
        updater = Recorder(failing={"d"})
        batch = BatchUpdate(_work("a", "b", "c", "d", "e"), PackageSource.APT, updater)

        for _ in range(4):
            assert batch.step() is True
        batch.cancel()
        assert batch.step() is False

        progress = batch.progress
        assert progress.cancelled is True
        assert progress.success_count == 3
        assert progress.failed_count == 1
        assert progress.skipped == 1
        assert progress.success_count + progress.failed_count + progress.skipped == 5
        assert updater.calls == ["a", "b", "c", "d"]

    def test_cancel_before_start_skips_everything(self) -> None:
        batch = BatchUpdate(_work("a", "b"), None, Recorder())
        batch.cancel()

        progress = batch.run()

        assert batch.cancel_requested is True
        assert progress.cancelled is True
        assert progress.skipped == 2

    def test_work_list_is_a_snapshot(self) -> None:
        """Changes to the original packages do not reach the batch."""
        work = _work("a", "b")
        batch = BatchUpdate(work, None, Recorder())
        work[0].name = "renamed"
        work.append(_work("c")[0])

        assert [p.name for p in batch.work] == ["a", "b"]
        assert batch.progress.total == 2

    def test_empty_batch_is_done(self) -> None:
        batch = BatchUpdate([], None, Recorder())

        assert batch.done is True
        assert batch.step() is False
        assert batch.progress.skipped == 0

    def test_unexpected_error_propagates(self) -> None:
        """Only MutationError counts as a per-package failure."""

        def broken(package: Package) -> None:
            raise KeyError(package.name)

        batch = BatchUpdate(_work("a"), None, broken)
        with pytest.raises(KeyError):
            batch.step()
