"""Dashboard application built on textual.

textual owns the screen and the input. Every piece of state lives in the
Controller: key events are translated and handed to it, and a timer drains
worker messages and advances toasts and batch updates once per tick. The
whole screen is one widget showing the rich renderable from ``render``.
"""

import contextlib
import logging
import sys
from collections.abc import Iterator

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key, Resize
from textual.widgets import Static

from pkgscope.core.config import ScopeConfig
from pkgscope.core.controller import Controller
from pkgscope.core.theme import get_rich_theme
from pkgscope.scanners import default_scanners
from pkgscope.scanners.base import Scanner
from pkgscope.tui.keys import controller_key
from pkgscope.tui.render import render
from pkgscope.utils.formatting import print_error

logger = logging.getLogger(__name__)


class Dashboard(Static, can_focus=True):
    """Full-screen view of the controller; receives every key."""

    def __init__(self, controller: Controller) -> None:
        super().__init__(id="dashboard")
        self.controller = controller

    def redraw(self) -> None:
        self.update(render(self.controller, self.app.size.height))
        if self.controller.should_quit:
            self.app.exit(return_code=0)

    def on_key(self, event: Key) -> None:
        key = controller_key(event)
        if key is None:
            return
        # Keys never reach textual's own focus and scroll bindings
        event.stop()
        event.prevent_default()
        self.controller.handle_key(key)
        self.redraw()

    def on_resize(self, event: Resize) -> None:
        self.redraw()


class PkgscopeApp(App[None]):
    """The interactive package dashboard."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #dashboard {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=False, priority=True),
    ]

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, config: ScopeConfig, scanners: list[Scanner]) -> None:
        super().__init__()
        self.settings = config
        self.console.push_theme(get_rich_theme(config.colors))
        self.controller = Controller(scanners, config, suspend=self.terminal_released)

    def compose(self) -> ComposeResult:
        yield Dashboard(self.controller)

    def on_mount(self) -> None:
        dashboard = self.query_one(Dashboard)
        dashboard.focus()
        self.controller.start_scan()
        self.set_interval(self.settings.tick_seconds, self.poll_controller)
        dashboard.redraw()

    def poll_controller(self) -> None:
        """Apply worker results and advance timers, then redraw."""
        self.controller.drain_messages()
        self.controller.tick()
        self.query_one(Dashboard).redraw()

    def on_unmount(self) -> None:
        self.controller.shutdown()

    @contextlib.contextmanager
    def terminal_released(self) -> Iterator[None]:
        """Give the terminal to a package manager for the duration of the block.

        Without a real terminal (headless runs) there is nothing to hand
        over and the block runs in place.
        """
        if self.is_headless:
            yield
            return
        with self.suspend():
            yield


def _has_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def run(config: ScopeConfig, scanners: list[Scanner] | None = None) -> int:
    """Run the dashboard until the user quits.

    Args:
        config: Application configuration.
        scanners: Scanners to use; one per supported source when None.

    Returns:
        0 after a normal quit, 1 if there is no terminal to draw on.
    """
    if not _has_terminal():
        logger.error("Cannot start dashboard: not a terminal")
        print_error("Cannot start dashboard: stdin and stdout must be a terminal")
        return 1

    app = PkgscopeApp(config, scanners if scanners is not None else default_scanners(config))
    app.run()
    logger.info("Dashboard closed")
    return app.return_code or 0
