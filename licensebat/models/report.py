"""Check result Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from licensebat.models.dependency import RetrievedDependency
from licensebat.models.licrc import LicRc


class IgnoredDependenciesSummary(BaseModel):
    """Dependencies skipped before retrieval because the policy ignores them."""

    model_config = {"extra": "forbid"}

    ignored_count: int = Field(
        default=0,
        description="Number of dependencies that were not retrieved",
    )
    ignored_names: Optional[list[str]] = Field(
        default=None,
        description="Names of dependencies that were not retrieved",
    )


class CheckResult(BaseModel):
    """Result of checking a dependency file against a .licrc."""

    model_config = {"extra": "forbid"}

    dependency_file: str = Field(description="Checked dependency file")
    dependency_type: str = Field(description="Ecosystem of the dependency file")
    licrc: LicRc = Field(default_factory=LicRc, description="Policy used")
    dependencies: list[RetrievedDependency] = Field(
        default_factory=list,
        description="Validated dependencies, in completion order",
    )
    ignored_summary: Optional[IgnoredDependenciesSummary] = Field(
        default=None,
        description="Dependencies filtered out before retrieval",
    )

    @property
    def total_dependencies(self) -> int:
        """Number of dependencies that went through retrieval."""
        return len(self.dependencies)

    @property
    def invalid_dependencies(self) -> list[RetrievedDependency]:
        """Dependencies that are neither valid nor ignored."""
        return [dep for dep in self.dependencies if not dep.is_compliant]

    @property
    def has_issues(self) -> bool:
        """Check if any dependency requires attention.

        Returns:
            True if at least one non-ignored dependency is invalid.
        """
        return len(self.invalid_dependencies) > 0

    @property
    def blocks(self) -> bool:
        """True if the issues found should fail the run.

        The behavior.do_not_block_pr flag reports issues without failing.
        """
        return self.has_issues and not self.licrc.behavior.do_not_block_pr

    def sorted_dependencies(self) -> list[RetrievedDependency]:
        """Dependencies sorted by name and version for presentation."""
        return sorted(
            self.dependencies, key=lambda dep: (dep.name.lower(), dep.version)
        )

    def visible_dependencies(self) -> list[RetrievedDependency]:
        """Sorted dependencies, minus the ones the behavior flags hide."""
        behavior = self.licrc.behavior
        visible: list[RetrievedDependency] = []
        for dep in self.sorted_dependencies():
            if behavior.do_not_show_ignored_dependencies and dep.is_ignored:
                continue
            if behavior.do_not_show_dev_dependencies and dep.is_dev:
                continue
            if behavior.do_not_show_optional_dependencies and dep.is_optional:
                continue
            visible.append(dep)
        return visible
