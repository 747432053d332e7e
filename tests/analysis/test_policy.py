"""Tests for compliance validation."""

from typing import Any, Optional

import pytest

from licensebat.analysis.filtering import filter_dependencies
from licensebat.analysis.policy import (
    IGNORED_BY_NAME,
    IGNORED_DEV,
    IGNORED_OPTIONAL,
    get_ignore_reason,
    is_license_compliant,
    validate_dependency,
)
from licensebat.models.dependency import Dependency, RetrievedDependency
from licensebat.models.licrc import LicRc


def _licrc(**sections: Any) -> LicRc:
    return LicRc.model_validate(sections)


def _record(
    name: str = "dep",
    licenses: Optional[list[str]] = None,
    error: Optional[str] = None,
    is_dev: Optional[bool] = None,
    is_optional: Optional[bool] = None,
) -> RetrievedDependency:
    dep = RetrievedDependency.build(
        name=name,
        version="1.0.0",
        dependency_type="npm",
        licenses=licenses,
        error=error,
    )
    dep.is_dev = is_dev
    dep.is_optional = is_optional
    return dep


class TestGetIgnoreReason:
    """Tests for get_ignore_reason function."""

    def test_not_ignored_by_default(self) -> None:
        """Test that the default policy ignores nothing."""
        assert get_ignore_reason("a", True, True, LicRc()) is None

    def test_ignored_by_name(self) -> None:
        """Test that listed names are ignored."""
        licrc = _licrc(dependencies={"ignored": ["leftpad"]})
        assert get_ignore_reason("leftpad", None, None, licrc) == IGNORED_BY_NAME

    def test_name_match_is_case_sensitive(self) -> None:
        """Test that names must match exactly."""
        licrc = _licrc(dependencies={"ignored": ["leftpad"]})
        assert get_ignore_reason("LeftPad", None, None, licrc) is None

    def test_dev_dependency(self) -> None:
        """Test that dev dependencies are ignored when configured."""
        licrc = _licrc(dependencies={"ignore_dev_dependencies": True})
        assert get_ignore_reason("a", True, False, licrc) == IGNORED_DEV
        assert get_ignore_reason("a", False, False, licrc) is None

    def test_unknown_dev_flag_is_not_ignored(self) -> None:
        """Test that an unknown flag never triggers an ignore rule."""
        licrc = _licrc(
            dependencies={
                "ignore_dev_dependencies": True,
                "ignore_optional_dependencies": True,
            }
        )
        assert get_ignore_reason("a", None, None, licrc) is None

    def test_optional_dependency(self) -> None:
        """Test that optional dependencies are ignored when configured."""
        licrc = _licrc(dependencies={"ignore_optional_dependencies": True})
        assert get_ignore_reason("a", False, True, licrc) == IGNORED_OPTIONAL

    def test_name_rule_wins(self) -> None:
        """Test that the first matching rule gives the reason."""
        licrc = _licrc(
            dependencies={"ignored": ["a"], "ignore_dev_dependencies": True}
        )
        assert get_ignore_reason("a", True, None, licrc) == IGNORED_BY_NAME


class TestIsLicenseCompliant:
    """Tests for is_license_compliant function."""

    def test_no_lists_accepts_everything(self) -> None:
        """Test that an empty policy accepts any license."""
        assert is_license_compliant("GPL-3.0", LicRc()) is True

    def test_accepted(self) -> None:
        """Test the accepted list."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})
        assert is_license_compliant("MIT", licrc) is True
        assert is_license_compliant("Apache-2.0", licrc) is False

    def test_unaccepted(self) -> None:
        """Test the unaccepted list."""
        licrc = _licrc(licenses={"unaccepted": ["GPL-3.0"]})
        assert is_license_compliant("GPL-3.0", licrc) is False
        assert is_license_compliant("MIT", licrc) is True

    def test_accepted_takes_precedence(self) -> None:
        """Test that unaccepted is not consulted when accepted is set."""
        licrc = _licrc(licenses={"accepted": ["GPL-3.0"], "unaccepted": ["GPL-3.0"]})
        assert is_license_compliant("GPL-3.0", licrc) is True

    def test_empty_accepted_rejects_everything(self) -> None:
        """Test that an empty accepted list accepts nothing."""
        licrc = _licrc(licenses={"accepted": []})
        assert is_license_compliant("MIT", licrc) is False


class TestValidateDependency:
    """Tests for validate_dependency function."""

    def test_accepted_license_is_valid(self) -> None:
        """Test a license in the accepted list."""
        licrc = _licrc(licenses={"accepted": ["MIT", "BSD-3-Clause"]})
        dep = validate_dependency(_record(licenses=["MIT"]), licrc)

        assert dep.validated is True
        assert dep.is_valid is True
        assert dep.error is None

    def test_unaccepted_license_is_not_compliant(self) -> None:
        """Test a license in the unaccepted list."""
        licrc = _licrc(licenses={"unaccepted": ["GPL-3.0"]})
        dep = validate_dependency(_record(licenses=["GPL-3.0"]), licrc)

        assert dep.is_valid is False
        assert dep.error == "Not compliant"

    def test_no_license_is_left_unchanged(self) -> None:
        """Test that a record without licenses is not re-evaluated."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})
        dep = validate_dependency(_record(error="Boom"), licrc)

        assert dep.validated is True
        assert dep.is_valid is False
        assert dep.licenses is None
        assert dep.error == "Boom"

    def test_ignored_by_name_keeps_validity(self) -> None:
        """Test that ignoring a dependency does not touch is_valid."""
        licrc = _licrc(dependencies={"ignored": ["leftpad"]})
        invalid = validate_dependency(_record(name="leftpad"), licrc)
        valid = validate_dependency(_record(name="leftpad", licenses=["MIT"]), licrc)

        assert invalid.is_ignored is True
        assert invalid.is_valid is False
        assert valid.is_ignored is True
        assert valid.is_valid is True

    def test_ignored_dev_dependency(self) -> None:
        """Test that dev dependencies are ignored when configured."""
        licrc = _licrc(
            licenses={"accepted": ["MIT"]},
            dependencies={"ignore_dev_dependencies": True},
        )
        dep = validate_dependency(_record(licenses=["GPL-3.0"], is_dev=True), licrc)

        assert dep.is_ignored is True
        assert dep.error is None

    def test_ignored_optional_dependency(self) -> None:
        """Test that optional dependencies are ignored when configured."""
        licrc = _licrc(dependencies={"ignore_optional_dependencies": True})
        dep = validate_dependency(_record(is_optional=True), licrc)

        assert dep.is_ignored is True

    def test_idempotent_for_ignored_records(self) -> None:
        """Test that validating an ignored record twice changes nothing."""
        licrc = _licrc(
            licenses={"accepted": ["MIT"]},
            dependencies={"ignored": ["a"]},
        )
        dep = validate_dependency(_record(name="a", licenses=["GPL-3.0"]), licrc)
        before = dep.model_dump()

        again = validate_dependency(dep, licrc)

        assert again.model_dump() == before

    def test_already_ignored_record_is_returned_unchanged(self) -> None:
        """Test that ignored records skip every rule."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})
        dep = _record(licenses=["GPL-3.0"])
        dep.is_ignored = True

        validate_dependency(dep, licrc)

        assert dep.is_valid is True
        assert dep.error is None

    def test_compliance_is_monotonic_in_license_count(self) -> None:
        """Test that one bad license poisons the whole record."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})

        single = validate_dependency(_record(licenses=["MIT"]), licrc)
        both = validate_dependency(_record(licenses=["MIT", "GPL-3.0"]), licrc)

        assert single.is_valid is True
        assert both.is_valid is False
        assert both.error == "Not compliant"

    def test_existing_error_is_preserved(self) -> None:
        """Test that a warning set upstream is not overwritten."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})
        dep = _record(licenses=["Apache-2.0"])
        dep.error = "low confidence match"

        validate_dependency(dep, licrc)

        assert dep.is_valid is False
        assert dep.error == "low confidence match"

    def test_no_license_accepted_explicitly(self) -> None:
        """Test that accepting NO-LICENSE validates unlicensed records."""
        licrc = _licrc(licenses={"accepted": ["MIT", "NO-LICENSE"]})
        dep = _record(licenses=["NO-LICENSE"], error="No License")

        validate_dependency(dep, licrc)

        assert dep.is_valid is True
        assert dep.error is None

    def test_no_license_not_accepted(self) -> None:
        """Test that unlicensed records stay invalid by default."""
        licrc = _licrc(licenses={"accepted": ["MIT"]})
        dep = validate_dependency(
            _record(licenses=["NO-LICENSE"], error="No License"), licrc
        )

        assert dep.is_valid is False
        assert dep.error == "No License"

    def test_failed_retrieval_not_rescued_by_no_license(self) -> None:
        """Test that a network failure is never accepted as NO-LICENSE."""
        licrc = _licrc(licenses={"accepted": ["NO-LICENSE"]})
        dep = validate_dependency(_record(error="timeout"), licrc)

        assert dep.is_valid is False
        assert dep.error == "timeout"


class TestPreFilterAgreement:
    """The pre-retrieval filter and the validator use the same rules."""

    @pytest.mark.parametrize(
        "dependencies",
        [
            {"ignored": ["a", "c"]},
            {"ignore_dev_dependencies": True},
            {"ignore_optional_dependencies": True},
            {"ignored": ["b"], "ignore_dev_dependencies": True},
            {},
        ],
    )
    def test_survivors_are_never_ignored(self, dependencies: dict[str, Any]) -> None:
        """Test that no dependency surviving the filter is ignored later."""
        licrc = _licrc(dependencies=dependencies)
        candidates = [
            Dependency(name="a", version="1", is_dev=True),
            Dependency(name="b", version="1", is_optional=True),
            Dependency(name="c", version="1"),
            Dependency(name="d", version="1", is_dev=None, is_optional=None),
            Dependency(name="e", version="1", is_dev=False, is_optional=True),
        ]

        survivors = filter_dependencies(candidates, licrc).dependencies

        for dep in survivors:
            record = _record(
                name=dep.name,
                licenses=["MIT"],
                is_dev=dep.is_dev,
                is_optional=dep.is_optional,
            )
            assert validate_dependency(record, licrc).is_ignored is False
