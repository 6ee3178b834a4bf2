"""Application controller: the dashboard's view state machine.

The controller is driven by one thread (the event loop). Scans and update
checks run on a thread pool and report back only through ``inbox``;
``drain_messages`` applies those results to the catalog on the loop
thread. Mutations (uninstall, update) are the exception: they run
synchronously inside ``suspend()`` so the package manager can prompt for
privileges on the real terminal.
"""

import contextlib
import logging
import queue
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum

from pkgscope.core.batch import BatchUpdate
from pkgscope.core.catalog import Catalog
from pkgscope.core.config import ScopeConfig
from pkgscope.core.orchestrator import drain, scan_all, scan_all_streaming
from pkgscope.core.reconciler import check_all_updates
from pkgscope.models.messages import (
    ControllerMessage,
    JobFailed,
    RefreshFinished,
    ScanCompleted,
    ScanDone,
    ScanPackages,
    ScanStarted,
    UpdatesChecked,
)
from pkgscope.models.package import Package, PackageSource
from pkgscope.scanners import scanner_for
from pkgscope.scanners.base import MutationError, Scanner

logger = logging.getLogger(__name__)


class View(Enum):
    """Screens of the dashboard."""

    MAIN = "main"
    DETAILS = "details"
    CONFIRM = "confirm"
    UPDATE_SELECT = "update_select"
    UPDATE_BY_SOURCE = "update_by_source"
    UPDATE_PROGRESS = "update_progress"
    UPDATE_SUMMARY = "update_summary"
    CANCEL_CONFIRM = "cancel_confirm"
    LOADING = "loading"
    ERROR = "error"


class ConfirmAction(Enum):
    """Mutation awaiting confirmation."""

    UNINSTALL = "uninstall"
    UPDATE = "update"


class SidebarSection(Enum):
    """Entries of the sidebar."""

    APPS = "apps"
    UPDATE = "update"

    def next(self) -> "SidebarSection":
        members = list(SidebarSection)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> "SidebarSection":
        members = list(SidebarSection)
        return members[(members.index(self) - 1) % len(members)]

    @property
    def label(self) -> str:
        return {"apps": "Apps", "update": "Update"}[self.value]


@dataclass(frozen=True, slots=True)
class Toast:
    """Transient notification, cleared by tick() once expired."""

    message: str
    expires_at: float


#: Entries of the update-by-source screen; None stands for every source.
UPDATE_SOURCES: tuple[PackageSource | None, ...] = (
    PackageSource.APT,
    PackageSource.SNAP,
    PackageSource.FLATPAK,
    None,
)

_UP = ("up", "k")
_DOWN = ("down", "j")


class Controller:
    """Owns the catalog and every piece of UI state.

    Args:
        scanners: Scanners for every source.
        config: Application configuration.
        executor: Pool for background work; a private pool is created when None.
        suspend: Context manager factory wrapped around mutations, used by
            the TUI to hand the terminal back to the package manager.
        clock: Monotonic time source for toast expiry.
    """

    def __init__(
        self,
        scanners: list[Scanner],
        config: ScopeConfig | None = None,
        executor: ThreadPoolExecutor | None = None,
        suspend: Callable[[], AbstractContextManager[object]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.scanners = scanners
        self.config = config if config is not None else ScopeConfig()
        self.catalog = Catalog()
        self.inbox: queue.Queue[ControllerMessage] = queue.Queue(maxsize=self.config.channel_size)

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="pkgscope"
        )
        self._suspend = suspend or contextlib.nullcontext
        self._clock = clock

        self.view = View.MAIN
        self.should_quit = False
        self.search_mode = False
        self.sidebar_focused = False
        self.sidebar_section = SidebarSection.APPS
        self.details_scroll = 0

        self.confirm_action: ConfirmAction | None = None
        self.confirm_target: Package | None = None
        self._confirm_origin = View.MAIN

        self.loading_message = ""
        self.error_message = ""
        self.toast: Toast | None = None

        self.scan_complete = True
        self.scanning_sources: set[PackageSource] = set()
        self.refreshing = False
        self.checking_updates = False
        self._rescan_pending = False

        self.update_candidates: list[Package] = []
        self.update_cursor = 0
        self.source_cursor = 0
        self.batch: BatchUpdate | None = None

    # -- background work ----------------------------------------------

    @property
    def is_scanning(self) -> bool:
        """Whether a streaming scan is still reporting in."""
        return not self.scan_complete

    def scan_status(self) -> str:
        """Short status line for the streaming scan, empty when idle."""
        if self.scan_complete:
            return ""
        if not self.scanning_sources:
            return "Starting scan..."
        labels = sorted(s.label for s in self.scanning_sources)
        return f"Scanning: {', '.join(labels)}"

    def start_scan(self) -> None:
        """Start a streaming scan; packages appear as each source reports."""
        if self.is_scanning or self.refreshing:
            return
        self.scan_complete = False
        self.scanning_sources.clear()
        logger.info("Starting streaming scan of %d sources", len(self.scanners))
        scan_all_streaming(self.scanners, self._executor, self.inbox)

    def refresh(self) -> None:
        """Rescan every source in the background, showing LOADING meanwhile."""
        if self.is_scanning:
            self.show_toast("Scan already in progress")
            return
        if self.refreshing:
            return
        self.refreshing = True
        self.loading_message = "Scanning installed packages..."
        self.view = View.LOADING
        scanners = list(self.scanners)
        self._submit("Rescan", lambda: RefreshFinished(tuple(scan_all(scanners))))

    def _rescan_after_change(self) -> None:
        """Rescan now, or as soon as the running streaming scan is done."""
        if self.is_scanning:
            self._rescan_pending = True
        else:
            self.refresh()

    def check_updates(self) -> None:
        """Query update availability in the background."""
        if self.checking_updates:
            self.show_toast("Already checking for updates")
            return
        self.checking_updates = True
        self.show_toast("Checking for updates...")
        scanners = list(self.scanners)
        self._submit("Update check", lambda: UpdatesChecked(check_all_updates(scanners)))

    def _submit(self, what: str, job: Callable[[], ControllerMessage]) -> None:
        """Run ``job`` on the pool and post its message to the inbox."""

        def run() -> None:
            try:
                message = job()
            except Exception as e:
                logger.exception("%s failed", what)
                message = JobFailed(what, str(e))
            self.inbox.put(message)

        self._executor.submit(run)

    def drain_messages(self) -> int:
        """Apply every pending worker message. Returns how many were applied."""
        messages = drain(self.inbox)
        for message in messages:
            self._apply(message)
        return len(messages)

    def _apply(self, message: ControllerMessage) -> None:
        if isinstance(message, ScanStarted):
            self.scanning_sources.add(message.source)
        elif isinstance(message, ScanPackages):
            self.catalog.add_packages(list(message.packages))
        elif isinstance(message, ScanCompleted):
            self.scanning_sources.discard(message.source)
        elif isinstance(message, ScanDone):
            self.scan_complete = True
            self.scanning_sources.clear()
            self.show_toast(f"Found {len(self.catalog.packages)} packages")
            if self._rescan_pending:
                self._rescan_pending = False
                self.refresh()
        elif isinstance(message, RefreshFinished):
            self.refreshing = False
            self.catalog.set_packages(list(message.packages))
            if self.view is View.LOADING:
                self.view = View.MAIN
            self.show_toast(f"Found {len(self.catalog.packages)} packages")
        elif isinstance(message, UpdatesChecked):
            self.checking_updates = False
            count = self.catalog.apply_updates(message.updates)
            if count:
                self.show_toast(f"{count} updates available")
            else:
                self.show_toast("Everything is up to date")
        elif isinstance(message, JobFailed):
            if message.what == "Rescan":
                self.refreshing = False
            else:
                self.checking_updates = False
            self.error_message = f"{message.what} failed: {message.message}"
            self.view = View.ERROR

    def shutdown(self) -> None:
        """Stop the private pool without waiting for running scans.

        Queued jobs are cancelled. A query already running keeps its worker
        alive until it returns, and the interpreter joins pool workers at
        exit, so quitting mid-scan can take up to ``command_timeout``.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # -- time ---------------------------------------------------------

    def show_toast(self, message: str) -> None:
        self.toast = Toast(message, self._clock() + self.config.toast_seconds)

    def tick(self) -> None:
        """Expire the toast and advance a running batch update by one package."""
        if self.toast is not None and self._clock() >= self.toast.expires_at:
            self.toast = None

        if self.view is View.UPDATE_PROGRESS and self.batch is not None:
            with self._suspend():
                more = self.batch.step()
            if not more:
                self.view = View.UPDATE_SUMMARY

    # -- mutations ----------------------------------------------------

    def _scanner(self, package: Package) -> Scanner:
        scanner = scanner_for(package.source, self.scanners)
        if scanner is None:
            msg = f"No scanner handles {package.source.label} packages"
            raise MutationError(msg)
        return scanner

    def _update_package(self, package: Package) -> None:
        self._scanner(package).update(package)

    def _uninstall_package(self, package: Package) -> None:
        self._scanner(package).uninstall(package)

    def show_details(self) -> None:
        if self.catalog.selected_package() is not None:
            self.details_scroll = 0
            self.view = View.DETAILS

    def request_uninstall(self) -> None:
        package = self.catalog.selected_package()
        if package is None:
            return
        self._request_confirm(ConfirmAction.UNINSTALL, package)

    def request_update(self) -> None:
        package = self.catalog.selected_package()
        if package is None:
            return
        if package.has_update is not True:
            self.show_toast(f"No update known for {package.name}")
            return
        self._request_confirm(ConfirmAction.UPDATE, package)

    def _request_confirm(self, action: ConfirmAction, package: Package) -> None:
        self._confirm_origin = self.view
        self.confirm_action = action
        self.confirm_target = package
        self.view = View.CONFIRM

    def cancel_confirm(self) -> None:
        self.confirm_action = None
        self.confirm_target = None
        self.view = self._confirm_origin

    def confirm(self) -> None:
        """Run the confirmed mutation synchronously.

        On failure the ERROR view shows the message; nothing is retried.
        """
        action, package = self.confirm_action, self.confirm_target
        self.confirm_action = None
        self.confirm_target = None
        if action is None or package is None:
            self.view = View.MAIN
            return

        verb = "Uninstall" if action is ConfirmAction.UNINSTALL else "Update"
        self.loading_message = f"{verb} of {package.name} in progress..."
        self.view = View.LOADING
        try:
            with self._suspend():
                if action is ConfirmAction.UNINSTALL:
                    self._uninstall_package(package)
                else:
                    self._update_package(package)
        except MutationError as e:
            logger.warning("%s of %s failed: %s", verb, package.name, e)
            self.error_message = f"{verb} failed: {e}"
            self.view = View.ERROR
            return

        self.view = View.MAIN
        if action is ConfirmAction.UNINSTALL:
            self.catalog.remove_package(package)
            self.show_toast(f"Uninstalled {package.name}")
        else:
            package.has_update = False
            self._rescan_after_change()

    # -- update flows -------------------------------------------------

    def show_update_selection(self) -> None:
        """Open the multi-select update list with every candidate selected."""
        candidates = self.catalog.packages_with_updates()
        if not candidates:
            self.show_toast("No updates available (press c to check)")
            return
        for package in candidates:
            package.selected = True
        self.update_candidates = candidates
        self.update_cursor = 0
        self.view = View.UPDATE_SELECT

    def start_selected_update(self) -> None:
        work = self.catalog.selected_for_update()
        if not work:
            self.show_toast("No packages selected")
            return
        self._start_batch(work, None)

    def open_update_by_source(self) -> None:
        self.sidebar_section = SidebarSection.UPDATE
        self.sidebar_focused = False
        self.source_cursor = 0
        self.view = View.UPDATE_BY_SOURCE

    def start_source_update(self) -> None:
        """Start a batch over the chosen source's packages with updates."""
        source = UPDATE_SOURCES[self.source_cursor]
        work = self.catalog.packages_with_updates(source)
        if not work:
            label = "any source" if source is None else source.label
            self.show_toast(f"No updates available for {label}")
            return
        self._start_batch(work, source)

    def _start_batch(self, work: list[Package], source: PackageSource | None) -> None:
        self.batch = BatchUpdate(work, source, self._update_package)
        logger.info("Starting batch update of %d packages", self.batch.progress.total)
        self.view = View.UPDATE_PROGRESS

    def confirm_cancel(self) -> None:
        """Stop the batch before its next package and show the summary."""
        if self.batch is not None:
            self.batch.cancel()
            self.batch.step()
        self.view = View.UPDATE_SUMMARY

    def leave_summary(self) -> None:
        """Return to the list, rescanning if anything was updated."""
        succeeded = self.batch is not None and self.batch.progress.success_count > 0
        self.batch = None
        self.update_candidates = []
        self.catalog.clear_selection()
        self.view = View.MAIN
        if succeeded:
            self._rescan_after_change()

    # -- input --------------------------------------------------------

    def handle_key(self, key: str) -> None:
        """Dispatch one decoded key to the handler of the current view."""
        if self.view is View.MAIN:
            if self.search_mode:
                self._handle_search_key(key)
            elif self.sidebar_focused:
                self._handle_sidebar_key(key)
            else:
                self._handle_main_key(key)
            return

        handlers: dict[View, Callable[[str], None]] = {
            View.DETAILS: self._handle_details_key,
            View.CONFIRM: self._handle_confirm_key,
            View.UPDATE_SELECT: self._handle_update_select_key,
            View.UPDATE_BY_SOURCE: self._handle_update_by_source_key,
            View.UPDATE_PROGRESS: self._handle_progress_key,
            View.CANCEL_CONFIRM: self._handle_cancel_confirm_key,
            View.UPDATE_SUMMARY: self._handle_summary_key,
            View.LOADING: self._handle_loading_key,
            View.ERROR: self._handle_error_key,
        }
        handlers[self.view](key)

    def _handle_main_key(self, key: str) -> None:
        catalog = self.catalog
        if key == "q":
            self.should_quit = True
        elif key in _UP:
            catalog.select_previous()
        elif key in _DOWN:
            catalog.select_next()
        elif key in ("home", "g"):
            catalog.select_first()
        elif key in ("end", "G"):
            catalog.select_last()
        elif key == "pageup":
            catalog.page_up(self.config.page_size)
        elif key == "pagedown":
            catalog.page_down(self.config.page_size)
        elif key == "enter":
            self.show_details()
        elif key == "/":
            self.search_mode = True
        elif key == "esc":
            if catalog.search_query:
                catalog.clear_search()
        elif key == "ctrl+u":
            catalog.clear_search()
        elif key == "s":
            catalog.toggle_sort()
        elif key == "f":
            catalog.toggle_filter()
        elif key == "tab":
            catalog.next_tab()
        elif key == "backtab":
            catalog.prev_tab()
        elif key == "d":
            self.request_uninstall()
        elif key == "u":
            self.request_update()
        elif key == "c":
            self.check_updates()
        elif key == "U":
            self.show_update_selection()
        elif key == "r":
            self.refresh()
        elif key in ("left", "h"):
            self.sidebar_focused = True

    def _handle_search_key(self, key: str) -> None:
        if key in ("enter", "esc"):
            self.search_mode = False
        elif key == "backspace":
            self.catalog.search_backspace()
        elif key == "ctrl+u":
            self.catalog.clear_search()
        elif key == "up":
            self.catalog.select_previous()
        elif key == "down":
            self.catalog.select_next()
        elif len(key) == 1 and key.isprintable():
            self.catalog.search_input(key)

    def _handle_sidebar_key(self, key: str) -> None:
        if key == "q":
            self.should_quit = True
        elif key in _UP:
            self.sidebar_section = self.sidebar_section.prev()
        elif key in _DOWN:
            self.sidebar_section = self.sidebar_section.next()
        elif key in ("right", "l", "esc"):
            self.sidebar_focused = False
        elif key == "enter":
            if self.sidebar_section is SidebarSection.UPDATE:
                self.open_update_by_source()
            else:
                self.sidebar_focused = False

    def _handle_details_key(self, key: str) -> None:
        if key in ("esc", "q"):
            self.view = View.MAIN
        elif key == "d":
            self.request_uninstall()
        elif key == "u":
            self.request_update()
        elif key in _UP:
            self.details_scroll = max(self.details_scroll - 1, 0)
        elif key in _DOWN:
            self.details_scroll += 1

    def _handle_confirm_key(self, key: str) -> None:
        if key in ("y", "Y"):
            self.confirm()
        elif key in ("n", "N", "esc"):
            self.cancel_confirm()

    def _handle_update_select_key(self, key: str) -> None:
        candidates = self.update_candidates
        if key in ("esc", "q"):
            self.catalog.clear_selection()
            self.update_candidates = []
            self.view = View.MAIN
        elif key in _UP:
            self.update_cursor = max(self.update_cursor - 1, 0)
        elif key in _DOWN:
            self.update_cursor = min(self.update_cursor + 1, max(len(candidates) - 1, 0))
        elif key == " ":
            if candidates:
                package = candidates[self.update_cursor]
                package.selected = not package.selected
        elif key == "a":
            for package in candidates:
                package.selected = True
        elif key == "n":
            for package in candidates:
                package.selected = False
        elif key == "enter":
            self.start_selected_update()

    def _handle_update_by_source_key(self, key: str) -> None:
        if key in ("esc", "q"):
            self.sidebar_section = SidebarSection.APPS
            self.view = View.MAIN
        elif key in _UP:
            self.source_cursor = max(self.source_cursor - 1, 0)
        elif key in _DOWN:
            self.source_cursor = min(self.source_cursor + 1, len(UPDATE_SOURCES) - 1)
        elif key == "c":
            self.check_updates()
        elif key == "enter":
            self.start_source_update()

    def _handle_progress_key(self, key: str) -> None:
        if key == "esc" and self.batch is not None and not self.batch.done:
            self.view = View.CANCEL_CONFIRM

    def _handle_cancel_confirm_key(self, key: str) -> None:
        if key in ("y", "Y"):
            self.confirm_cancel()
        elif key in ("n", "N", "esc"):
            self.view = View.UPDATE_PROGRESS

    def _handle_summary_key(self, key: str) -> None:
        if key in ("enter", "esc", "q"):
            self.leave_summary()

    def _handle_loading_key(self, key: str) -> None:
        if key == "q":
            self.should_quit = True

    def _handle_error_key(self, key: str) -> None:
        if key == "q":
            self.should_quit = True
        elif key in ("enter", "esc"):
            self.error_message = ""
            self.view = View.MAIN
