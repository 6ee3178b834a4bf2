"""Rich renderables for every dashboard view.

Rendering is a pure function of the controller state; nothing here
mutates the controller or the catalog.
"""

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from pkgscope import __version__
from pkgscope.core.controller import UPDATE_SOURCES, ConfirmAction, Controller, SidebarSection, View
from pkgscope.core.theme import app_type_style, source_style
from pkgscope.models.package import Package, SourceTab

# Rows taken by header, tabs, footer and table chrome
_CHROME_ROWS = 9

_MAIN_HINTS = (
    ("/", "search"),
    ("s", "sort"),
    ("f", "filter"),
    ("Tab", "source"),
    ("Enter", "details"),
    ("d", "uninstall"),
    ("u", "update"),
    ("c", "check updates"),
    ("U", "update many"),
    ("r", "rescan"),
    ("q", "quit"),
)

_SELECT_HINTS = (
    ("Space", "toggle"),
    ("a", "all"),
    ("n", "none"),
    ("Enter", "update"),
    ("Esc", "back"),
)


def window(total: int, selected: int, height: int) -> tuple[int, int]:
    """Return the [start, end) slice of rows to show so ``selected`` is visible.

    The cursor is kept centred where possible.
    """
    height = max(height, 1)
    if total <= height:
        return 0, total
    start = min(max(selected - height // 2, 0), total - height)
    return start, start + height


def _hints(pairs: tuple[tuple[str, str], ...]) -> Text:
    text = Text()
    for key, label in pairs:
        text.append(f" [{key}]", style="key")
        text.append(f" {label}", style="muted")
    return text


def _dialog(title: str, body: RenderableType, style: str = "border.focused") -> RenderableType:
    panel = Panel(body, title=title, border_style=style, box=box.ROUNDED, padding=(1, 2), width=64)
    return Align.center(panel, vertical="middle")


def _header(controller: Controller) -> Text:
    stats = controller.catalog.stats()
    text = Text()
    text.append(f" pkgscope {__version__} ", style="title")
    text.append(
        f" {stats.total} packages  APT {stats.apt}  Snap {stats.snap}  "
        f"Flatpak {stats.flatpak}  AppImage {stats.appimage}",
        style="header",
    )
    updates = controller.catalog.get_update_count()
    if updates:
        text.append(f"  {updates} updates", style="package.update")

    status = controller.scan_status()
    if controller.checking_updates:
        status = f"{status}  Checking for updates...".strip()
    if status:
        text.append(f"  {status}", style="info")
    return text


def _tabs(controller: Controller) -> Text:
    catalog = controller.catalog
    text = Text()
    for tab in SourceTab:
        style = "selection" if tab is catalog.source_tab else "muted"
        text.append(f" {tab.label} ", style=style)
        text.append(" ")
    text.append(f"  Sort: {catalog.sort_criteria.label}", style="muted")
    text.append(f"  Type: {catalog.type_filter.label}", style="muted")
    if catalog.search_query or controller.search_mode:
        cursor = "_" if controller.search_mode else ""
        text.append(f"  Search: {catalog.search_query}{cursor}", style="warning")
    return text


def _sidebar(controller: Controller) -> RenderableType:
    lines = Text()
    for section in SidebarSection:
        active = section is controller.sidebar_section
        marker = ">" if active else " "
        style = "selection" if active and controller.sidebar_focused else "text"
        lines.append(f" {marker} {section.label}\n", style=style)
    border = "border.focused" if controller.sidebar_focused else "border"
    return Panel(lines, border_style=border, box=box.ROUNDED)


def _update_cell(package: Package) -> Text:
    if package.has_update:
        return Text(package.update_version or "yes", style="package.update")
    return Text("")


def _package_table(controller: Controller, height: int) -> RenderableType:
    catalog = controller.catalog
    table = Table(
        box=box.SIMPLE_HEAD,
        header_style="bold_header",
        border_style="border",
        expand=True,
        pad_edge=False,
    )
    table.add_column("Name", no_wrap=True, ratio=3)
    table.add_column("Source", no_wrap=True, width=9)
    table.add_column("Type", no_wrap=True, width=4)
    table.add_column("Version", no_wrap=True, ratio=2, style="package.version")
    table.add_column("Update", no_wrap=True, ratio=1)
    table.add_column("Size", justify="right", width=10, style="package.size")

    visible = catalog.visible_packages()
    start, end = window(len(visible), catalog.selected, height)
    for offset, package in enumerate(visible[start:end]):
        row_style = "selection" if start + offset == catalog.selected else None
        table.add_row(
            Text(package.name, style="package.name"),
            Text(package.source.label, style=source_style(package.source)),
            Text(package.app_type.label, style=app_type_style(package.app_type)),
            Text(package.version),
            _update_cell(package),
            Text(package.size_human),
            style=row_style,
        )

    if not visible:
        empty = "Scanning..." if controller.is_scanning else "No packages match"
        return Panel(Align.center(Text(empty, style="muted"), vertical="middle"), box=box.ROUNDED)

    title = f"{catalog.source_tab.label} ({len(visible)})"
    return Panel(table, title=title, border_style="border", box=box.ROUNDED)


def _details(controller: Controller) -> RenderableType:
    package = controller.catalog.selected_package()
    if package is None:
        return Text("")

    if package.has_update is None:
        update = "not checked"
    elif package.has_update:
        update = f"available: {package.update_version or '?'}"
    else:
        update = "up to date"

    rows = [
        ("Name", package.name),
        ("Source", package.source.label),
        ("Version", package.version or "-"),
        ("Type", package.app_type.label),
        ("Size", package.size_human),
        ("Update", update),
        ("Location", package.install_path or "-"),
        ("Description", package.description or "-"),
    ]
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="header", no_wrap=True)
    grid.add_column(style="text")
    for label, value in rows[controller.details_scroll :]:
        # Package metadata is shown verbatim, never parsed as markup
        grid.add_row(label, Text(value))

    body = Group(grid, Text(""), _hints((("d", "uninstall"), ("u", "update"), ("Esc", "back"))))
    return Panel(body, title=Text(package.name), border_style="border.focused", box=box.ROUNDED)


def _confirm(controller: Controller) -> RenderableType:
    package = controller.confirm_target
    name = package.name if package is not None else "?"
    if controller.confirm_action is ConfirmAction.UNINSTALL:
        title = "Confirm Uninstall"
        message = f"Are you sure you want to uninstall '{name}'?\n\nThis action cannot be undone."
    else:
        version = package.update_version if package is not None else None
        title = "Confirm Update"
        message = f"Update '{name}' to version {version or '?'}?"
    body = Group(Text(message, style="text"), Text(""), _hints((("y", "yes"), ("n", "no"))))
    return _dialog(title, body)


def _update_select(controller: Controller, height: int) -> RenderableType:
    candidates = controller.update_candidates
    lines = Text()
    start, end = window(len(candidates), controller.update_cursor, height)
    for i in range(start, end):
        package = candidates[i]
        mark = "[x]" if package.selected else "[ ]"
        style = "selection" if i == controller.update_cursor else "text"
        lines.append(f" {mark} {package.name}", style=style)
        lines.append(f"  {package.version} -> {package.update_version or '?'}\n", style="muted")
    selected = sum(1 for p in candidates if p.selected)
    body = Group(
        lines,
        _hints(_SELECT_HINTS),
    )
    return Panel(
        body,
        title=f"Select updates ({selected}/{len(candidates)})",
        border_style="border.focused",
        box=box.ROUNDED,
    )


def _update_by_source(controller: Controller) -> RenderableType:
    counts = controller.catalog.update_counts_by_source()
    checked = any(p.has_update is not None for p in controller.catalog.packages)
    lines = Text()
    for i, source in enumerate(UPDATE_SOURCES):
        label = "All" if source is None else source.label
        count = sum(counts.values()) if source is None else counts.get(source, 0)
        marker = ">" if i == controller.source_cursor else " "
        style = "selection" if i == controller.source_cursor else "text"
        lines.append(f" {marker} {label:<10}", style=style)
        count_style = "package.update" if count else "muted"
        lines.append(f" ({count if checked else '?'})\n", style=count_style)
    if controller.checking_updates:
        lines.append("\n Checking for updates...\n", style="info")
    body = Group(lines, _hints((("c", "check"), ("Enter", "update"), ("Esc", "back"))))
    return Panel(body, title="Update by source", border_style="border.focused", box=box.ROUNDED)


def _progress(controller: Controller) -> RenderableType:
    batch = controller.batch
    if batch is None:
        return Text("")
    progress = batch.progress
    bar = ProgressBar(total=max(progress.total, 1), completed=progress.processed, width=50)
    body = Group(
        Text(f"Updating {progress.source_label} packages", style="header"),
        Text(""),
        bar,
        Text(f"{progress.processed}/{progress.total}  {progress.current_package}", style="text"),
        Text(f"{progress.success_count} succeeded, {progress.failed_count} failed", style="muted"),
        Text(""),
        _hints((("Esc", "cancel"),)),
    )
    return _dialog("Updating", body)


def _cancel_confirm(controller: Controller) -> RenderableType:
    remaining = 0
    if controller.batch is not None:
        remaining = controller.batch.progress.skipped
    body = Group(
        Text(f"Stop the batch update? {remaining} packages will be skipped.", style="text"),
        Text(""),
        _hints((("y", "stop"), ("n", "continue"))),
    )
    return _dialog("Cancel update", body, style="warning")


def _summary(controller: Controller) -> RenderableType:
    if controller.batch is None:
        return Text("")
    progress = controller.batch.progress
    lines = Text()
    if progress.cancelled:
        lines.append("Cancelled\n\n", style="warning")
    lines.append(f"Updated:  {progress.success_count}\n", style="success")
    failed_style = "error" if progress.errors else "muted"
    lines.append(f"Failed:   {progress.failed_count}\n", style=failed_style)
    lines.append(f"Skipped:  {progress.skipped}\n", style="muted")
    for name, message in progress.errors:
        lines.append(f"\n  {name}: ", style="error")
        lines.append(message, style="text")
    body = Group(lines, Text(""), _hints((("Enter", "done"),)))
    return _dialog(f"Update summary ({progress.source_label})", body)


def _loading(controller: Controller) -> RenderableType:
    message = controller.loading_message or "Working..."
    return _dialog("Loading", Spinner("dots", text=Text(message, style="text")))


def _error(controller: Controller) -> RenderableType:
    body = Group(
        Text(controller.error_message or "Unknown error", style="error"),
        Text(""),
        _hints((("Enter", "continue"), ("q", "quit"))),
    )
    return _dialog("Error", body, style="error")


def _body(controller: Controller, list_height: int) -> RenderableType:
    view = controller.view
    if view is View.DETAILS:
        return _details(controller)
    if view is View.CONFIRM:
        return _confirm(controller)
    if view is View.UPDATE_SELECT:
        return _update_select(controller, list_height)
    if view is View.UPDATE_BY_SOURCE:
        return _update_by_source(controller)
    if view is View.UPDATE_PROGRESS:
        return _progress(controller)
    if view is View.CANCEL_CONFIRM:
        return _cancel_confirm(controller)
    if view is View.UPDATE_SUMMARY:
        return _summary(controller)
    if view is View.LOADING:
        return _loading(controller)
    if view is View.ERROR:
        return _error(controller)
    return _package_table(controller, list_height)


def _footer(controller: Controller) -> Text:
    if controller.toast is not None:
        return Text(f" {controller.toast.message}", style="info")
    if controller.view is View.MAIN and controller.search_mode:
        return _hints((("Enter", "done"), ("Ctrl-U", "clear"), ("Esc", "done")))
    if controller.view is View.MAIN:
        return _hints(_MAIN_HINTS)
    return Text("")


def render(controller: Controller, height: int) -> RenderableType:
    """Build the full screen for the current controller state.

    Args:
        controller: State to draw.
        height: Terminal height in rows.
    """
    layout = Layout()
    layout.split_column(
        Layout(_header(controller), name="header", size=1),
        Layout(_tabs(controller), name="tabs", size=1),
        Layout(name="main"),
        Layout(_footer(controller), name="footer", size=1),
    )
    layout["main"].split_row(
        Layout(_sidebar(controller), name="sidebar", size=14),
        Layout(_body(controller, height - _CHROME_ROWS), name="body"),
    )
    return layout
