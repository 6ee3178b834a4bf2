"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from pkgscope.core.theme import ThemeColors, app_type_style, get_rich_theme, source_style

if TYPE_CHECKING:
    from pkgscope.models.package import Package


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances with the bundled colors; apply_theme() swaps in the user's
console = Console(theme=get_rich_theme(ThemeColors()), color_system=_detect_color_system())
err_console = Console(
    theme=get_rich_theme(ThemeColors()), stderr=True, color_system=_detect_color_system()
)


def apply_theme(colors: ThemeColors) -> None:
    """Use ``colors`` for all further output of the shared consoles."""
    theme = get_rich_theme(colors)
    console.push_theme(theme)
    err_console.push_theme(theme)


def create_package_table(title: str = "Installed Packages", show_updates: bool = False) -> Table:
    """Create a pre-configured table for displaying packages.

    The table uses zebra striping for improved readability.

    Args:
        title: Table title.
        show_updates: Add a column with the available update version.

    Returns:
        Rich Table configured for package display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("Package", no_wrap=True)  # Style set per row
    table.add_column("Source", no_wrap=True)
    table.add_column("Type", justify="center")
    table.add_column("Version", style="muted")
    if show_updates:
        table.add_column("Update", no_wrap=True)
    table.add_column("Size", style="info", justify="right")
    table.add_column("Description", style="text", overflow="ellipsis")
    return table


def format_update(pkg: Package) -> str:
    """Format the update column: new version, "-" if none, "?" if unchecked."""
    if pkg.has_update is None:
        return "[muted]?[/]"
    if pkg.has_update:
        return f"[package.update]{pkg.update_version or 'yes'}[/]"
    return "[muted]-[/]"


def format_package_row(pkg: Package, show_updates: bool = False) -> tuple[str, ...]:
    """Format a package as a table row with proper styling.

    Args:
        pkg: The package to format.
        show_updates: Include the update column.

    Returns:
        Tuple of cell strings with Rich markup, matching create_package_table().
    """
    name = f"[package.name]{pkg.name}[/]"
    source = f"[{source_style(pkg.source)}]{pkg.source.label}[/]"
    app_type = f"[{app_type_style(pkg.app_type)}]{pkg.app_type.label}[/]"
    version = f"[muted]{pkg.version or '-'}[/]"
    size = f"[info]{pkg.size_human}[/]"
    desc = f"[text]{pkg.description or '-'}[/]"

    if show_updates:
        return (name, source, app_type, version, format_update(pkg), size, desc)
    return (name, source, app_type, version, size, desc)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
