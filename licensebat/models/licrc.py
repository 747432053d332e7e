"""Policy (.licrc) Pydantic models for licensebat."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class LicRcLicenses(BaseModel):
    """Accepted and unaccepted licenses.

    When both lists are given, accepted takes precedence and
    unaccepted is ignored.
    """

    model_config = {"extra": "forbid", "frozen": True}

    accepted: Optional[List[str]] = Field(
        default=None,
        description="SPDX identifiers allowed in the project. "
        "Any other license is flagged.",
    )
    unaccepted: Optional[List[str]] = Field(
        default=None,
        description="SPDX identifiers forbidden in the project.",
    )


class LicRcDependencies(BaseModel):
    """Dependency ignore rules."""

    model_config = {"extra": "forbid", "frozen": True}

    ignored: Optional[List[str]] = Field(
        default=None,
        description="Names of dependencies that won't be validated.",
    )
    ignore_dev_dependencies: bool = Field(
        default=False, description="Ignore dev dependencies."
    )
    ignore_optional_dependencies: bool = Field(
        default=False, description="Ignore optional dependencies."
    )


class LicRcBehavior(BaseModel):
    """Settings affecting how a check runs and is reported."""

    model_config = {"extra": "forbid", "frozen": True}

    run_only_on_dependency_modification: Optional[bool] = Field(
        default=None,
        description="Only meaningful for hosted integrations; kept for "
        "compatibility with existing .licrc files.",
    )
    do_not_block_pr: bool = Field(
        default=False,
        description="Report non-compliant dependencies without failing.",
    )
    retriever_buffer_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of retrievals in flight (default 100).",
    )
    do_not_show_ignored_dependencies: bool = Field(
        default=False, description="Hide ignored dependencies in reports."
    )
    do_not_show_dev_dependencies: bool = Field(
        default=False, description="Hide dev dependencies in reports."
    )
    do_not_show_optional_dependencies: bool = Field(
        default=False, description="Hide optional dependencies in reports."
    )


class LicRc(BaseModel):
    """The .licrc compliance policy.

    Loaded once per run and shared read-only by every validation.
    """

    model_config = {"extra": "forbid", "frozen": True}

    licenses: LicRcLicenses = Field(default_factory=LicRcLicenses)
    dependencies: LicRcDependencies = Field(default_factory=LicRcDependencies)
    behavior: LicRcBehavior = Field(default_factory=LicRcBehavior)
