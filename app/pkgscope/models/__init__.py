"""Data models for pkgscope.

This module exports the core data structures used throughout the application.
"""

from pkgscope.models.messages import (
    ControllerMessage,
    JobFailed,
    RefreshFinished,
    ScanCompleted,
    ScanDone,
    ScanMessage,
    ScanPackages,
    ScanStarted,
    UpdatesChecked,
)
from pkgscope.models.package import (
    AppType,
    AppTypeFilter,
    Package,
    PackageSource,
    SortCriteria,
    SourceTab,
    sort_packages,
)
from pkgscope.models.update import UpdateProgress

__all__ = [
    "AppType",
    "AppTypeFilter",
    "ControllerMessage",
    "JobFailed",
    "Package",
    "PackageSource",
    "RefreshFinished",
    "ScanCompleted",
    "ScanDone",
    "ScanMessage",
    "ScanPackages",
    "ScanStarted",
    "SortCriteria",
    "SourceTab",
    "UpdateProgress",
    "UpdatesChecked",
    "sort_packages",
]
