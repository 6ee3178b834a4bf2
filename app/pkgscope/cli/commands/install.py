"""Install command implementation.

Installs a package through one package manager, or a local .deb file
through APT.
"""

from typing import Annotated

import typer

from pkgscope.cli.types import SourceChoice, get_config
from pkgscope.models.package import PackageSource
from pkgscope.scanners import default_scanners, scanner_for
from pkgscope.scanners.base import MutationError
from pkgscope.utils.formatting import print_error, print_info, print_success


def install_package(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Package name, Flatpak application ID, or path to a .deb file."),
    ],
    source: Annotated[
        SourceChoice,
        typer.Option(
            "--source",
            "-s",
            help="Package source to install from: apt, snap, or flatpak.",
            case_sensitive=False,
        ),
    ] = SourceChoice.APT,
) -> None:
    """Install a package.

    Examples:
        pkgscope install htop                              # From APT
        pkgscope install --source snap spotify             # From Snap
        pkgscope install -s flatpak org.gnome.Calculator   # From Flatpak
        pkgscope install ./downloads/tool_1.0_amd64.deb    # Local .deb file
    """
    if name.endswith(".deb"):
        target = PackageSource.DEB_FILE
    elif source.source is None:
        print_error("Choose a single source with --source.")
        raise typer.Exit(code=1)
    else:
        target = source.source

    config = get_config(ctx)
    scanner = scanner_for(target, default_scanners(config))
    if scanner is None or not scanner.is_available():
        print_error(f"{target.label} package manager is not available.")
        raise typer.Exit(code=1)

    print_info(f"Installing {name} via {target.label}...")
    try:
        scanner.install(name)
    except MutationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Installed {name}")
