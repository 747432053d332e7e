"""Compliance validation of retrieved dependencies against a .licrc."""
from __future__ import annotations

import logging
from typing import Optional

from licensebat.constants import NO_LICENSE, NOT_COMPLIANT_ERROR
from licensebat.models.dependency import RetrievedDependency
from licensebat.models.licrc import LicRc

logger = logging.getLogger(__name__)

# Reasons returned by get_ignore_reason
IGNORED_BY_NAME = "ignored"
IGNORED_DEV = "dev dependency"
IGNORED_OPTIONAL = "optional dependency"


def get_ignore_reason(
    name: str,
    is_dev: Optional[bool],
    is_optional: Optional[bool],
    licrc: LicRc,
) -> Optional[str]:
    """Decide whether the policy ignores a dependency.

    This is the single ignore rule set: it is used both before retrieval,
    to skip network calls, and by validate_dependency.

    Rules are evaluated in order and the first match wins:
    1. Name listed in dependencies.ignored (case-sensitive)
    2. Dev dependency while ignore_dev_dependencies is set
    3. Optional dependency while ignore_optional_dependencies is set

    Args:
        name: Dependency name.
        is_dev: Dev flag, None when unknown.
        is_optional: Optional flag, None when unknown.
        licrc: The policy.

    Returns:
        The reason the dependency is ignored, or None if it is not.
    """
    rules = licrc.dependencies
    if rules.ignored and name in rules.ignored:
        return IGNORED_BY_NAME
    if is_dev and rules.ignore_dev_dependencies:
        return IGNORED_DEV
    if is_optional and rules.ignore_optional_dependencies:
        return IGNORED_OPTIONAL
    return None


def is_license_compliant(license_id: str, licrc: LicRc) -> bool:
    """Check a single license against the accepted/unaccepted lists.

    When accepted is configured, unaccepted is not consulted.
    """
    accepted = licrc.licenses.accepted
    if accepted is not None:
        return license_id in accepted
    unaccepted = licrc.licenses.unaccepted
    if unaccepted is not None:
        return license_id not in unaccepted
    return True


def _accepts_no_license(dependency: RetrievedDependency, licrc: LicRc) -> bool:
    accepted = licrc.licenses.accepted
    return (
        dependency.licenses == [NO_LICENSE]
        and accepted is not None
        and NO_LICENSE in accepted
    )


def validate_dependency(
    dependency: RetrievedDependency,
    licrc: LicRc,
) -> RetrievedDependency:
    """Give a retrieved dependency its final compliance verdict.

    The record is updated in place and returned. A dependency is
    compliant only if every one of its licenses is acceptable; a
    pre-existing error is never overwritten.

    Args:
        dependency: Record produced by a retriever.
        licrc: The policy.

    Returns:
        The same record, with validated set.
    """
    dependency.validated = True

    if dependency.is_ignored:
        return dependency

    reason = get_ignore_reason(
        dependency.name, dependency.is_dev, dependency.is_optional, licrc
    )
    if reason is not None:
        logger.debug(
            "%s@%s ignored (%s)", dependency.name, dependency.version, reason
        )
        dependency.is_ignored = True
        return dependency

    if not dependency.is_valid:
        if _accepts_no_license(dependency, licrc):
            logger.debug(
                "%s@%s accepted as %s", dependency.name, dependency.version, NO_LICENSE
            )
            dependency.is_valid = True
            dependency.error = None
        return dependency

    for license_id in dependency.licenses or []:
        if not is_license_compliant(license_id, licrc):
            logger.debug(
                "%s@%s has non compliant license %s",
                dependency.name,
                dependency.version,
                license_id,
            )
            dependency.is_valid = False
            if dependency.error is None:
                dependency.error = NOT_COMPLIANT_ERROR

    return dependency
