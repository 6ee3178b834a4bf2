"""Config commands.

Show where the configuration lives, print the effective settings, and
write a default config file to edit.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.syntax import Syntax

from pkgscope.cli.types import get_config
from pkgscope.core.config import ConfigError, ScopeConfig, save_config
from pkgscope.core.paths import get_config_path, get_log_path, get_theme_path
from pkgscope.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and initialize the configuration.",
    no_args_is_help=True,
)


def _config_path(ctx: typer.Context) -> Path:
    """Return the --config override, or the default user config path."""
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and obj.get("config_path") is not None:
        return obj["config_path"]
    return get_config_path()


@app.command()
def path(ctx: typer.Context) -> None:
    """Show the configuration, theme, and log file locations."""
    config_path = _config_path(ctx)
    theme_path = get_theme_path()

    def _state(p: Path) -> str:
        return "[success]exists[/]" if p.exists() else "[muted]not created[/]"

    console.print(f"Config: {config_path}  {_state(config_path)}")
    console.print(f"Theme:  {theme_path}  {_state(theme_path)}")
    console.print(f"Log:    {get_log_path()}")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings (defaults merged with the user config)."""
    config = get_config(ctx)
    console.print(Syntax(tomli_w.dumps(config.to_toml_dict()), "toml", background_color="default"))


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    config_path = _config_path(ctx)
    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        written = save_config(ScopeConfig(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {written}")
