"""Pydantic data models for licensebat."""

from licensebat.models.dependency import (
    Comment,
    Dependency,
    LockedDependency,
    RetrievedDependency,
    SourceKind,
)
from licensebat.models.licrc import (
    LicRc,
    LicRcBehavior,
    LicRcDependencies,
    LicRcLicenses,
)
from licensebat.models.report import CheckResult, IgnoredDependenciesSummary

__all__ = [
    "CheckResult",
    "Comment",
    "Dependency",
    "IgnoredDependenciesSummary",
    "LicRc",
    "LicRcBehavior",
    "LicRcDependencies",
    "LicRcLicenses",
    "LockedDependency",
    "RetrievedDependency",
    "SourceKind",
]
