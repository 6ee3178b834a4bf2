"""Scan command implementation.

Lists installed packages from every package source without starting the
dashboard, optionally with update availability.
"""

import json
from enum import Enum
from typing import Annotated, Any

import typer

from pkgscope.cli.types import SourceChoice, get_config, get_scanners
from pkgscope.core.orchestrator import scan_all
from pkgscope.core.reconciler import reconcile
from pkgscope.models.package import Package, SortCriteria, sort_packages
from pkgscope.utils.formatting import (
    console,
    create_package_table,
    format_package_row,
    print_error,
    print_warning,
)

app = typer.Typer(
    help="Scan system for installed packages.",
    invoke_without_command=True,
)


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _get_source_title(source: SourceChoice) -> str:
    """Generate table title based on the source option."""
    if source == SourceChoice.ALL:
        return "Installed Packages"
    return f"Installed Packages ({source.value.upper()})"


def _package_to_dict(pkg: Package) -> dict[str, Any]:
    return {
        "name": pkg.name,
        "source": pkg.source.value,
        "version": pkg.version,
        "description": pkg.description,
        "size_bytes": pkg.size_bytes,
        "app_type": pkg.app_type.value,
        "install_path": pkg.install_path,
        "has_update": pkg.has_update,
        "update_version": pkg.update_version,
    }


@app.callback(invoke_without_command=True)
def scan_packages(
    ctx: typer.Context,
    source: Annotated[
        SourceChoice,
        typer.Option(
            "--source",
            "-s",
            help="Package source to scan: apt, snap, flatpak, appimage, or all.",
            case_sensitive=False,
        ),
    ] = SourceChoice.ALL,
    updates: Annotated[
        bool,
        typer.Option(
            "--updates",
            "-u",
            help="Also check which packages have updates.",
        ),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-n",
            help="Limit number of packages to display.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan and display installed packages.

    By default, scans all package sources and displays results in a table.

    Examples:
        pkgscope scan                         # Scan all sources, show table
        pkgscope scan --source snap           # Scan Snap only
        pkgscope scan --updates               # Include available updates
        pkgscope scan --format json           # Output as JSON
        pkgscope scan --limit 20              # Show first 20 packages
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = get_config(ctx)
    scanners = get_scanners(config, source)

    available = []
    for scanner in scanners:
        if scanner.is_available():
            available.append(scanner)
        else:
            print_warning(f"{scanner.label} package manager is not available.")

    if not available:
        print_error("No package managers are available on this system.")
        raise typer.Exit(code=1)

    packages = scan_all(available)
    update_count = reconcile(packages, available) if updates else 0

    # Source then name, for consistent output
    sort_packages(packages, SortCriteria.SOURCE_ASC)
    display_packages = packages[:limit] if limit else packages

    if output_format == OutputFormat.JSON:
        payload: dict[str, Any] = {
            "sources": [s.source.value for s in available],
            "total": len(packages),
            "packages": [_package_to_dict(p) for p in display_packages],
        }
        if updates:
            payload["updates"] = update_count
        console.print_json(json.dumps(payload))
        return

    # Table output format (default)
    table = create_package_table(_get_source_title(source), show_updates=updates)
    for pkg in display_packages:
        table.add_row(*format_package_row(pkg, show_updates=updates))
    console.print(table)

    # Print summary
    counts: dict[str, int] = {}
    for pkg in packages:
        counts[pkg.source.label] = counts.get(pkg.source.label, 0) + 1

    summary_parts = [f"Showing {len(display_packages)} of {len(packages)} packages"]
    if limit and len(display_packages) < len(packages):
        summary_parts.append(f"(limited to {limit})")
    if updates:
        summary_parts.append(f"({update_count} with updates)")
    if len(counts) > 1:
        source_parts = [f"{label}: {n}" for label, n in counts.items()]
        summary_parts.append(f"[{', '.join(source_parts)}]")

    console.print(f"\n[dim]{' '.join(summary_parts)}[/]")
