"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from pkgscope.core.config import ScopeConfig, load_config
from pkgscope.models.package import PackageSource
from pkgscope.scanners import default_scanners
from pkgscope.scanners.base import Scanner


class SourceChoice(str, Enum):
    """Available package sources for CLI commands."""

    APT = "apt"
    SNAP = "snap"
    FLATPAK = "flatpak"
    APPIMAGE = "appimage"
    ALL = "all"

    @property
    def source(self) -> PackageSource | None:
        """Return the matching PackageSource, None for ALL."""
        if self is SourceChoice.ALL:
            return None
        return PackageSource(self.value)


def get_config(ctx: typer.Context) -> ScopeConfig:
    """Return the configuration loaded by the main callback.

    Falls back to loading it when a command is invoked without the
    callback having run (e.g. a sub-app used on its own).
    """
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and isinstance(obj.get("config"), ScopeConfig):
        return obj["config"]
    return load_config()


def get_scanners(config: ScopeConfig, source: SourceChoice = SourceChoice.ALL) -> list[Scanner]:
    """Get scanner instances based on source selection.

    Args:
        config: Configuration handed to the scanners.
        source: The source choice (apt, snap, flatpak, appimage, or all).

    Returns:
        List of scanner instances.
    """
    scanners = default_scanners(config)
    if source is SourceChoice.ALL:
        return scanners
    return [s for s in scanners if s.source is source.source]
