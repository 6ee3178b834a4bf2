"""CLI package for pkgscope.

This package contains the Typer application and all subcommands.
"""

from pkgscope.cli.main import app

__all__ = ["app"]
