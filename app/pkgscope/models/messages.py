"""Messages passed from worker threads to the controller.

Workers never touch the catalog directly; everything they produce crosses
into the controller's thread as one of these immutable messages.
"""

from dataclasses import dataclass, field

from pkgscope.models.package import Package, PackageSource


@dataclass(frozen=True, slots=True)
class ScanStarted:
    """A scanner began working on its source."""

    source: PackageSource


@dataclass(frozen=True, slots=True)
class ScanPackages:
    """A batch of packages produced by one scanner."""

    source: PackageSource
    packages: tuple[Package, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class ScanCompleted:
    """A scanner finished, successfully or not."""

    source: PackageSource


@dataclass(frozen=True, slots=True)
class ScanDone:
    """Every scanner of the streaming pass has completed."""


ScanMessage = ScanStarted | ScanPackages | ScanCompleted | ScanDone


@dataclass(frozen=True, slots=True)
class RefreshFinished:
    """A full (non-streaming) rescan finished."""

    packages: tuple[Package, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class UpdatesChecked:
    """Merged name -> new version mapping from every update-capable source."""

    updates: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class JobFailed:
    """A background job died with an unexpected error."""

    what: str
    message: str


ControllerMessage = ScanMessage | RefreshFinished | UpdatesChecked | JobFailed
