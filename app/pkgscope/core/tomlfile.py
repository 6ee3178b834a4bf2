"""TOML reading helpers shared by the config and theme loaders."""

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, cast

logger = logging.getLogger(__name__)


def load_toml_table(path: Path, table: str) -> dict[str, Any] | None:
    """Load one top-level table from a TOML file.

    Args:
        path: Path to the TOML file.
        table: Name of the table to extract (e.g. "colors").

    Returns:
        The table as a dictionary (empty when the table is absent), or None
        if the file is missing, unreadable, or invalid.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse TOML file %s: %s", path, e)
        print(f"Warning: Failed to parse {path}: {e}", file=sys.stderr)
        return None
    except OSError as e:
        logger.warning("Failed to read %s: %s", path, e)
        return None

    raw: object = data.get(table, {})
    if not isinstance(raw, dict):
        logger.warning("Invalid '%s' section in %s", table, path)
        return None
    return dict(cast(dict[str, Any], raw))
