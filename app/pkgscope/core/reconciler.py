"""Update availability checks and their reconciliation into packages."""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from pkgscope.models.package import Package
from pkgscope.scanners.base import Scanner, ScannerError

logger = logging.getLogger(__name__)


def _source_updates(scanner: Scanner) -> list[tuple[str, str]]:
    if not scanner.is_available():
        return []

    try:
        updates = scanner.get_updates()
    except (ScannerError, OSError) as e:
        logger.warning("%s update check failed: %s", scanner.label, e)
        return []
    except Exception:
        logger.exception("%s update check crashed", scanner.label)
        return []

    logger.info("%s reports %d updates", scanner.label, len(updates))
    return updates


def check_all_updates(
    scanners: list[Scanner],
    executor: ThreadPoolExecutor | None = None,
) -> dict[str, str]:
    """Query every update-capable source concurrently.

    Sources without an update channel (AppImage) are not asked. A failing
    source is logged and contributes nothing.

    Args:
        scanners: Candidate scanners.
        executor: Pool to run on; a private pool is created when None.

    Returns:
        Mapping of package name to new version. When two sources report the
        same name, the later scanner in ``scanners`` wins.
    """
    candidates = [s for s in scanners if s.supports_updates]
    if not candidates:
        return {}

    pool = executor
    if pool is None:
        pool = ThreadPoolExecutor(max_workers=len(candidates), thread_name_prefix="updates")
    try:
        futures = [pool.submit(_source_updates, scanner) for scanner in candidates]
        merged: dict[str, str] = {}
        for future in futures:
            merged.update(future.result())
        return merged
    finally:
        if executor is None:
            pool.shutdown(wait=True)


def apply_updates(packages: Iterable[Package], updates: dict[str, str]) -> int:
    """Write update availability into every package.

    Each package ends with a definite ``has_update``; applying the same
    mapping twice gives the same result.

    Args:
        packages: Packages to update in place.
        updates: Mapping from check_all_updates().

    Returns:
        Number of packages with an update.
    """
    count = 0
    for package in packages:
        version = updates.get(package.name)
        if version is None:
            package.has_update = False
            package.update_version = None
        else:
            package.has_update = True
            package.update_version = version
            count += 1
    return count


def reconcile(
    packages: list[Package],
    scanners: list[Scanner],
    executor: ThreadPoolExecutor | None = None,
) -> int:
    """Check all sources for updates and apply the result to ``packages``.

    Returns:
        Number of packages with an update.
    """
    return apply_updates(packages, check_all_updates(scanners, executor))
