"""Abstract base class for package scanners.

This module defines the Scanner interface that every package source
implements: availability check, enumeration, update query, and the
install/update/uninstall mutations.
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod

from pkgscope.core.config import ScopeConfig
from pkgscope.models.package import Package, PackageSource
from pkgscope.utils.shell import CommandResult, run_command, run_interactive

logger = logging.getLogger(__name__)


class ScannerError(RuntimeError):
    """Base class for scanner failures."""


class ScanError(ScannerError):
    """Enumeration or update query failed for a source."""


class MutationError(ScannerError):
    """An install, update, or uninstall did not succeed."""


class Scanner(ABC):
    """Abstract base class for all package scanners.

    Scanners query one package manager for installed packages and
    available updates, and perform mutations through it.

    Example:
        >>> scanner = AptScanner(ScopeConfig())
        >>> if scanner.is_available():
        ...     for pkg in scanner.scan():
        ...         print(f"{pkg.name}: {pkg.version}")
    """

    #: Whether the source has an update channel that get_updates() queries.
    supports_updates: bool = True

    #: Whether mutations must run through the privilege prefix.
    requires_privilege: bool = False

    def __init__(self, config: ScopeConfig | None = None) -> None:
        """Initialize the scanner.

        Args:
            config: Application configuration; defaults are used when None.
        """
        self._config = config if config is not None else ScopeConfig()

    @property
    @abstractmethod
    def source(self) -> PackageSource:
        """Return the package source this scanner handles."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this package manager is available on the system.

        Must never raise: a missing tool simply means False.
        """

    @abstractmethod
    def scan(self) -> list[Package]:
        """Return all installed packages from this source.

        Malformed rows are skipped. An empty system yields an empty list.

        Raises:
            ScanError: If the listing command fails.
        """

    @abstractmethod
    def get_updates(self) -> list[tuple[str, str]]:
        """Return (name, new_version) pairs for packages with updates.

        Raises:
            ScanError: If the update query fails.
        """

    @abstractmethod
    def uninstall(self, package: Package) -> None:
        """Remove ``package`` from the system.

        Raises:
            MutationError: If the removal fails.
        """

    @abstractmethod
    def update(self, package: Package) -> None:
        """Upgrade ``package`` to the newest available version.

        Raises:
            MutationError: If the upgrade fails.
        """

    @abstractmethod
    def install(self, name: str) -> None:
        """Install a package by name.

        Raises:
            MutationError: If the installation fails.
        """

    @property
    def label(self) -> str:
        """Return the display label of the source."""
        return self.source.label

    def _query(self, args: list[str], what: str) -> CommandResult:
        """Run a read-only query, translating spawn failures into ScanError.

        Args:
            args: Command and arguments.
            what: Short description for error messages.

        Returns:
            The CommandResult (callers decide how to treat non-zero exits).

        Raises:
            ScanError: If the command cannot be run or times out.
        """
        try:
            return run_command(args, timeout=self._config.command_timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"{what} timed out after {e.timeout:.0f}s"
            raise ScanError(msg) from e
        except OSError as e:
            msg = f"{what} could not be run: {e}"
            raise ScanError(msg) from e

    def _privileged(self, args: list[str]) -> list[str]:
        """Prefix ``args`` with the privilege command when one is needed."""
        if not self.requires_privilege or os.geteuid() == 0:
            return args
        return [*self._config.privilege_command, *args]

    def _mutate(self, args: list[str], what: str) -> None:
        """Run a mutation attached to the terminal.

        Args:
            args: Command and arguments (without privilege prefix).
            what: Short description for log and error messages.

        Raises:
            MutationError: If the command cannot be run or exits non-zero.
        """
        full_args = self._privileged(args)
        logger.info("Running %s: %s", what, " ".join(full_args))
        try:
            returncode = run_interactive(full_args)
        except OSError as e:
            msg = f"{what} could not be run: {e}"
            raise MutationError(msg) from e

        if returncode != 0:
            msg = f"{what} failed with exit code {returncode}"
            raise MutationError(msg)
        logger.info("%s succeeded", what)
