"""Application configuration.

A single ScopeConfig is built once at startup (bundled defaults merged
with the user's config.toml and theme.toml) and handed explicitly to
every component that needs it.
"""

import logging
import os
import sys
from importlib import resources
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pkgscope.core.paths import get_config_path
from pkgscope.core.theme import ThemeColors, load_theme
from pkgscope.core.tomlfile import load_toml_table

logger = logging.getLogger(__name__)


class ScopeConfig(BaseModel):
    """Runtime settings for scanners, the controller, and the event loop.

    Attributes:
        tick_ms: Interval of the dashboard timer that applies worker results.
        toast_seconds: How long a toast notification stays visible.
        page_size: Rows skipped by PageUp/PageDown.
        max_workers: Size of the scanner thread pool.
        channel_size: Capacity of the worker -> controller message queue.
        command_timeout: Timeout for read-only package manager queries.
        privilege_command: Prefix used for privileged mutations (empty: none).
        apt_manual_only: Only list APT packages marked as manually installed.
        appimage_dirs: Directories searched for AppImages (``~`` expanded).
        appimage_max_depth: Maximum directory depth of the AppImage search.
        colors: Theme colors.
    """

    model_config = ConfigDict(extra="forbid")

    tick_ms: int = Field(default=100, ge=10, le=2000)
    toast_seconds: float = Field(default=3.0, gt=0)
    page_size: int = Field(default=10, ge=1)
    max_workers: int = Field(default=4, ge=1, le=32)
    channel_size: int = Field(default=100, ge=1)
    command_timeout: float = Field(default=120.0, gt=0)
    privilege_command: list[str] = Field(default_factory=lambda: ["pkexec"])
    apt_manual_only: bool = True
    appimage_dirs: list[str] = Field(
        default_factory=lambda: [
            "/opt",
            "/usr/local/bin",
            "~/Applications",
            "~/apps",
            "~/.local/bin",
            "~/AppImages",
            "~/Downloads",
        ]
    )
    appimage_max_depth: int = Field(default=3, ge=0, le=10)
    colors: ThemeColors = Field(default_factory=ThemeColors)

    @field_validator("privilege_command")
    @classmethod
    def validate_privilege_command(cls, v: list[str]) -> list[str]:
        """Reject blank entries in the privilege prefix."""
        if any(not part.strip() for part in v):
            msg = "privilege_command entries cannot be blank"
            raise ValueError(msg)
        return v

    @property
    def tick_seconds(self) -> float:
        """Dashboard timer interval in seconds."""
        return self.tick_ms / 1000

    def appimage_paths(self) -> list[Path]:
        """Return the AppImage search directories with ``~`` expanded."""
        return [Path(d).expanduser() for d in self.appimage_dirs]

    def to_toml_dict(self) -> dict[str, Any]:
        """Return the [general] settings as a TOML-ready dictionary."""
        return {"general": self.model_dump(exclude={"colors"})}


def get_bundled_config_path() -> Path:
    """Get the bundled default config path.

    Returns:
        Path to the bundled data/config.toml
    """
    return Path(str(resources.files("pkgscope.data").joinpath("config.toml")))


def load_config(
    config_path: Path | None = None,
    theme_path: Path | None = None,
) -> ScopeConfig:
    """Load configuration with user override support.

    Priority:
    1. User config (~/.config/pkgscope/config.toml or ``config_path``)
    2. Bundled defaults (data/config.toml)

    Invalid user values are reported and the defaults are used instead.

    Args:
        config_path: Override for the user config file.
        theme_path: Override for the user theme file.

    Returns:
        Validated ScopeConfig.
    """
    bundled = load_toml_table(get_bundled_config_path(), "general")
    if bundled is None:
        logger.error("Failed to load bundled config - installation may be corrupted")
        bundled = {}

    path = config_path if config_path is not None else get_config_path()
    user = load_toml_table(path, "general")
    if user is not None:
        logger.debug("Loaded user config overrides from %s", path)
        merged = {**bundled, **user}
    else:
        merged = bundled

    colors = load_theme(theme_path)

    try:
        return ScopeConfig(**merged, colors=colors)
    except ValidationError as e:
        logger.warning("Config validation failed, using defaults: %s", e)
        print(f"Warning: Invalid configuration in {path}: {e}", file=sys.stderr)
        return ScopeConfig(colors=colors)


class ConfigError(Exception):
    """Raised when the config file cannot be written."""


def save_config(config: ScopeConfig, path: Path | None = None) -> Path:
    """Write the [general] settings of ``config`` as TOML.

    Theme colors live in theme.toml and are not written.

    Args:
        config: Settings to write.
        path: Target file; the user config path when None.

    Returns:
        Path the config was written to.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        # Write atomically using a temporary file in the same directory
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config.to_toml_dict(), f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        msg = f"Failed to write config: {e}"
        raise ConfigError(msg) from e

    logger.info("Wrote config to %s", config_path)
    return config_path
