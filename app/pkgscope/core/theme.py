"""Theme management for the pkgscope dashboard and CLI.

Provides color theming via TOML configuration files with user override support.
"""

import logging
import re
import sys
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from rich.theme import Theme

from pkgscope.core.paths import get_theme_path
from pkgscope.core.tomlfile import load_toml_table
from pkgscope.models.package import AppType, PackageSource

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class ThemeColors(BaseModel):
    """Color configuration for pkgscope.

    All colors must be valid hex codes (#RRGGBB or #RGB). Defaults follow a
    warm Gruvbox-like palette.
    """

    model_config = ConfigDict(extra="forbid")

    # Base colors
    text: str = "#ebdbb2"
    muted: str = "#a89984"
    header: str = "#d5c4a1"
    border: str = "#b8bb26"
    border_focused: str = "#fe8019"
    selection: str = "#3c3836"

    # Semantic colors
    success: str = "#b8bb26"
    warning: str = "#fe8019"
    error: str = "#fb4934"
    info: str = "#83a598"

    # Package sources
    source_apt: str = "#ebdbb2"
    source_snap: str = "#d3869b"
    source_flatpak: str = "#83a598"
    source_appimage: str = "#8ec07c"
    source_deb: str = "#fabd2f"

    # Application types
    app_gui: str = "#8ec07c"
    app_cli: str = "#fe8019"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        if not isinstance(v, str):
            msg = f"{info.field_name}: expected a hex color string, got {type(v).__name__}"
            raise ValueError(msg)
        color = v.strip()
        if not _HEX_COLOR.fullmatch(color):
            msg = f"{info.field_name}: expected #RGB or #RRGGBB, got '{color}'"
            raise ValueError(msg)
        return color


def get_bundled_theme_path() -> Path:
    """Get the bundled default theme path.

    Returns:
        Path to the bundled data/theme.toml
    """
    return Path(str(resources.files("pkgscope.data").joinpath("theme.toml")))


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load theme colors with user override support.

    Priority:
    1. User theme (~/.config/pkgscope/theme.toml) - partial or full override
    2. Bundled default theme (data/theme.toml)

    Args:
        user_path: Override for the user theme location (tests, --config dirs).

    Returns:
        ThemeColors instance with merged configuration.
    """
    bundled_colors = load_toml_table(get_bundled_theme_path(), "colors")
    if bundled_colors is None:
        logger.error("Failed to load bundled theme - installation may be corrupted")
        bundled_colors = {}

    path = user_path if user_path is not None else get_theme_path()
    user_colors = load_toml_table(path, "colors")

    if user_colors is not None:
        logger.debug("Loaded user theme overrides from %s", path)
        merged_colors = {**bundled_colors, **user_colors}
    else:
        merged_colors = bundled_colors

    try:
        return ThemeColors(**merged_colors)
    except ValueError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        print(f"Warning: Invalid theme configuration: {e}", file=sys.stderr)
        return ThemeColors()


_SOURCE_STYLES: dict[PackageSource, str] = {
    PackageSource.APT: "source.apt",
    PackageSource.SNAP: "source.snap",
    PackageSource.FLATPAK: "source.flatpak",
    PackageSource.APPIMAGE: "source.appimage",
    PackageSource.DEB_FILE: "source.deb",
}


def source_style(source: PackageSource) -> str:
    """Return the Rich style name used for a package source."""
    return _SOURCE_STYLES[source]


def app_type_style(app_type: AppType) -> str:
    """Return the Rich style name used for an application type."""
    if app_type is AppType.GUI:
        return "app.gui"
    if app_type is AppType.CLI:
        return "app.cli"
    return "muted"


def get_rich_theme(colors: ThemeColors) -> Theme:
    """Convert ThemeColors to a Rich Theme.

    Args:
        colors: ThemeColors instance to convert.

    Returns:
        Rich Theme instance configured with the color scheme.
    """
    styles: dict[str, str] = {
        "text": colors.text,
        "muted": colors.muted,
        "header": colors.header,
        "border": colors.border,
        "border.focused": colors.border_focused,
        "selection": f"bold on {colors.selection}",
        "success": colors.success,
        "warning": colors.warning,
        "error": f"bold {colors.error}",
        "info": colors.info,
        "bold_header": f"bold {colors.header}",
        "title": f"bold {colors.border}",
        "key": f"bold {colors.border_focused}",
        "source.apt": colors.source_apt,
        "source.snap": colors.source_snap,
        "source.flatpak": colors.source_flatpak,
        "source.appimage": colors.source_appimage,
        "source.deb": colors.source_deb,
        "app.gui": colors.app_gui,
        "app.cli": colors.app_cli,
        "package.name": f"bold {colors.text}",
        "package.version": colors.muted,
        "package.size": colors.info,
        "package.update": f"bold {colors.warning}",
    }

    return Theme(styles)
