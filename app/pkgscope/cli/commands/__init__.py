"""CLI commands for pkgscope.

This package contains all subcommand implementations.
"""

from pkgscope.cli.commands import config, install, scan

__all__ = ["config", "install", "scan"]
