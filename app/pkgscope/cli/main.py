"""Main CLI application entry point.

Defines the Typer application and global options. Without a subcommand
the interactive dashboard is started.
"""

from pathlib import Path
from typing import Annotated

import typer

from pkgscope import __version__
from pkgscope.cli.commands import config, install, scan
from pkgscope.core.config import load_config
from pkgscope.core.logsetup import setup_logging
from pkgscope.tui import run as run_dashboard
from pkgscope.utils.formatting import apply_theme, print_error

# Create main Typer app
app = typer.Typer(
    name="pkgscope",
    help="Browse, update and remove packages from APT, Snap, Flatpak and AppImage.",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pkgscope version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Write debug messages to the log file.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Use this config file instead of ~/.config/pkgscope/config.toml.",
        ),
    ] = None,
) -> None:
    """pkgscope - one dashboard for every installed package.

    Run without a command to open the interactive dashboard.
    """
    setup_logging(verbose=verbose)

    # "config init --config PATH" is how a missing file gets created
    if config_path is not None and not config_path.is_file() and ctx.invoked_subcommand != "config":
        print_error(f"Config file not found: {config_path}")
        raise typer.Exit(code=1)

    settings = load_config(config_path)
    apply_theme(settings.colors)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = settings

    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=run_dashboard(settings))


# Register commands
app.add_typer(scan.app, name="scan")
app.add_typer(config.app, name="config")
app.command(name="install")(install.install_package)


if __name__ == "__main__":
    app()
