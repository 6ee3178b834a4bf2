"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; this module only wires
the root ``pkgscope`` logger to a rotating file under the state directory,
since the dashboard owns the terminal while it runs.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pkgscope.core.paths import ensure_state_dir, get_log_path

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s  %(levelname)-8s  %(threadName)s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

_MAX_BYTES = 2 * 1024 * 1024
_BACKUP_COUNT = 3


def setup_logging(verbose: bool = False, log_path: Path | None = None) -> Path | None:
    """Attach a rotating file handler to the ``pkgscope`` logger.

    Calling this more than once replaces the previous handler.

    Args:
        verbose: Log at DEBUG instead of INFO.
        log_path: Override for the log file location.

    Returns:
        The log file path, or None if the file could not be opened (logging
        then stays disabled rather than writing into the dashboard).
    """
    logger = logging.getLogger("pkgscope")
    level = logging.DEBUG if verbose else logging.INFO

    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()

    try:
        if log_path is None:
            ensure_state_dir()
            log_path = get_log_path()
        else:
            log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
        )
    except (OSError, RuntimeError):
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return None

    handler.setFormatter(_FORMATTER)
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return log_path
