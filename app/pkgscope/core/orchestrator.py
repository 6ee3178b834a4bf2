"""Concurrent scanning across every package source.

Two modes share the same per-scanner task:

- ``scan_all`` blocks until every scanner finished and returns the
  concatenated packages (full refresh, CLI).
- ``scan_all_streaming`` returns a bounded queue immediately and lets the
  caller drain ScanMessage events as scanners report in (TUI startup).

A failing source contributes nothing; it never aborts the other scanners.
"""

import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from pkgscope.models.messages import ScanCompleted, ScanDone, ScanMessage, ScanPackages, ScanStarted
from pkgscope.models.package import Package
from pkgscope.scanners.base import Scanner, ScannerError

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_SIZE = 100


def scan_source(scanner: Scanner) -> list[Package]:
    """Scan one source, degrading every expected failure to an empty list.

    Args:
        scanner: Scanner to run.

    Returns:
        Installed packages, or [] if the tool is absent or the scan failed.
    """
    if not scanner.is_available():
        logger.debug("%s not available, skipping", scanner.label)
        return []

    try:
        packages = scanner.scan()
    except (ScannerError, OSError) as e:
        logger.warning("%s scan failed: %s", scanner.label, e)
        return []
    except Exception:
        # A parser bug in one source must not cost the others their results
        logger.exception("%s scan crashed", scanner.label)
        return []

    logger.info("%s scan found %d packages", scanner.label, len(packages))
    return packages


def _own_executor(scanners: list[Scanner], name: str) -> ThreadPoolExecutor:
    return ThreadPoolExecutor(max_workers=max(len(scanners), 1), thread_name_prefix=name)


def scan_all(
    scanners: list[Scanner],
    executor: ThreadPoolExecutor | None = None,
) -> list[Package]:
    """Scan every source concurrently and wait for all of them.

    Args:
        scanners: Scanners to run, one task each.
        executor: Pool to run on; a private pool is created when None.

    Returns:
        Packages of all sources, concatenated in scanner order.
    """
    if not scanners:
        return []

    pool = executor if executor is not None else _own_executor(scanners, "scan")
    try:
        futures = [pool.submit(scan_source, scanner) for scanner in scanners]
        packages: list[Package] = []
        for future in futures:
            packages.extend(future.result())
        return packages
    finally:
        if executor is None:
            pool.shutdown(wait=True)


def _stream_source(scanner: Scanner, channel: "queue.Queue[ScanMessage]") -> None:
    """Run one scanner and report Started, Packages (if any) and Completed."""
    channel.put(ScanStarted(scanner.source))
    try:
        packages = scan_source(scanner)
        if packages:
            channel.put(ScanPackages(scanner.source, tuple(packages)))
    finally:
        # Completed is sent even if the task dies, so Done is never withheld
        channel.put(ScanCompleted(scanner.source))


def _await_all(
    futures: list[Future[None]],
    channel: "queue.Queue[ScanMessage]",
    own_pool: ThreadPoolExecutor | None,
) -> None:
    """Wait for every scanner task, then send ScanDone."""
    for future in futures:
        error = future.exception()
        if error is not None:
            logger.error("Scanner task crashed", exc_info=error)

    if own_pool is not None:
        own_pool.shutdown(wait=False)
    channel.put(ScanDone())


def scan_all_streaming(
    scanners: list[Scanner],
    executor: ThreadPoolExecutor | None = None,
    channel: "queue.Queue[ScanMessage] | None" = None,
) -> "queue.Queue[ScanMessage]":
    """Start scanning every source and stream the results as messages.

    Per source the messages arrive as ScanStarted, at most one non-empty
    ScanPackages, then ScanCompleted. ScanDone follows only after every
    source completed. Nothing is ordered across sources.

    Args:
        scanners: Scanners to run, one task each.
        executor: Pool to run on; a private pool is created when None.
        channel: Queue to publish into; a bounded queue is created when None.

    Returns:
        The channel the messages are published into.
    """
    if channel is None:
        channel = queue.Queue(maxsize=DEFAULT_CHANNEL_SIZE)

    own_pool = None
    pool = executor
    if pool is None:
        pool = own_pool = _own_executor(scanners, "scan")

    futures = [pool.submit(_stream_source, scanner, channel) for scanner in scanners]
    threading.Thread(
        target=_await_all,
        args=(futures, channel, own_pool),
        name="scan-coordinator",
        daemon=True,
    ).start()
    return channel


def drain(channel: "queue.Queue[ScanMessage]") -> list[ScanMessage]:
    """Return every message currently waiting in ``channel`` without blocking."""
    messages: list[ScanMessage] = []
    while True:
        try:
            messages.append(channel.get_nowait())
        except queue.Empty:
            return messages
