"""XDG base directory locations used by pkgscope.

pkgscope keeps no package state of its own: the catalog is rebuilt from the
live system on every run. What it stores is limited to

- ``$XDG_CONFIG_HOME/pkgscope/``: config.toml and theme.toml overrides
- ``$XDG_STATE_HOME/pkgscope/``: the rotating log file

and it reads ``$XDG_DATA_HOME/applications`` to clean up desktop entries
of deleted AppImages.
"""

import os
from pathlib import Path

APP_NAME = "pkgscope"


def _xdg_base(env_var: str, default_subdir: str) -> Path:
    """Return the XDG base directory, ignoring unset or empty variables."""
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def get_config_dir() -> Path:
    """Get the configuration directory (``~/.config/pkgscope``)."""
    return _xdg_base("XDG_CONFIG_HOME", ".config") / APP_NAME


def get_state_dir() -> Path:
    """Get the state directory (``~/.local/state/pkgscope``)."""
    return _xdg_base("XDG_STATE_HOME", ".local/state") / APP_NAME


def get_applications_dir() -> Path:
    """Get the user's desktop entry directory (``~/.local/share/applications``)."""
    return _xdg_base("XDG_DATA_HOME", ".local/share") / "applications"


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    return get_config_dir() / "theme.toml"


def get_log_path() -> Path:
    return get_state_dir() / "pkgscope.log"


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Returns:
        The state directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_state_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create state directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create state directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
