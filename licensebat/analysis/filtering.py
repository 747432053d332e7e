"""Pre-retrieval filtering of dependencies ignored by the policy."""

from __future__ import annotations

from typing import NamedTuple, Sequence, TypeVar

from licensebat.analysis.policy import get_ignore_reason
from licensebat.models.dependency import Dependency
from licensebat.models.licrc import LicRc

D = TypeVar("D", bound=Dependency)


class FilterResult(NamedTuple):
    """Result of filtering dependencies.

    Attributes:
        dependencies: Dependencies left to retrieve.
        ignored_count: Number of dependencies that were skipped.
        ignored_names: Names of dependencies that were skipped.
    """

    dependencies: list[Dependency]
    ignored_count: int
    ignored_names: list[str]


def filter_dependencies(
    dependencies: Sequence[D],
    licrc: LicRc,
) -> FilterResult:
    """Drop dependencies the policy ignores, before any network call.

    Uses get_ignore_reason, so a dependency that survives the filter is
    never ignored later by validate_dependency under the same policy.

    Args:
        dependencies: Parsed dependencies.
        licrc: The policy.

    Returns:
        FilterResult with surviving dependencies, in input order, and
        a summary of the skipped ones.
    """
    kept: list[D] = []
    ignored_names: list[str] = []

    for dep in dependencies:
        if get_ignore_reason(dep.name, dep.is_dev, dep.is_optional, licrc) is None:
            kept.append(dep)
        else:
            ignored_names.append(dep.name)

    return FilterResult(
        dependencies=kept,
        ignored_count=len(ignored_names),
        ignored_names=ignored_names,
    )
