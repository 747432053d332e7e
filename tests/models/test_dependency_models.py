"""Tests for dependency models."""

import pytest
from pydantic import ValidationError

from licensebat.models.dependency import (
    DEFAULT_NO_LICENSE_COMMENT,
    Comment,
    Dependency,
    LockedDependency,
    RetrievedDependency,
    SourceKind,
)


class TestDependency:
    """Tests for Dependency model."""

    def test_flags_default_to_unknown(self) -> None:
        """Test that dev and optional flags are None when not given."""
        dep = Dependency(name="serde", version="1.0.130")
        assert dep.is_dev is None
        assert dep.is_optional is None

    def test_key_is_name_and_version(self) -> None:
        """Test that a dependency is identified by name and version."""
        dep = Dependency(name="lodash", version="4.17.21", is_dev=True)
        assert dep.key == ("lodash", "4.17.21")

    def test_is_frozen(self) -> None:
        """Test that dependencies cannot be mutated."""
        dep = Dependency(name="lodash", version="4.17.21")
        with pytest.raises(ValidationError):
            dep.name = "underscore"  # type: ignore[misc]

    def test_rejects_extra_fields(self) -> None:
        """Test that unknown fields are rejected."""
        with pytest.raises(ValidationError):
            Dependency(name="a", version="1", license="MIT")  # type: ignore[call-arg]


class TestLockedDependency:
    """Tests for LockedDependency model."""

    def test_defaults_to_registry_source(self) -> None:
        """Test that the default source is the public registry."""
        dep = LockedDependency(name="a", version="1.0.0")
        assert dep.source is SourceKind.REGISTRY
        assert dep.source_url is None

    def test_is_a_dependency(self) -> None:
        """Test that a locked dependency can be filtered like any dependency."""
        dep = LockedDependency(name="a", version="1.0.0", source=SourceKind.GIT)
        assert isinstance(dep, Dependency)


class TestComment:
    """Tests for Comment model."""

    def test_removable(self) -> None:
        """Test removable comment constructor."""
        comment = Comment.removable("text")
        assert comment.text == "text"
        assert comment.remove_when_valid is True

    def test_non_removable(self) -> None:
        """Test non removable comment constructor."""
        assert Comment.non_removable("text").remove_when_valid is False


class TestRetrievedDependencyBuild:
    """Tests for RetrievedDependency.build defaults."""

    def test_with_licenses_is_valid(self) -> None:
        """Test that a record with licenses and no error is valid."""
        dep = RetrievedDependency.build(
            name="a", version="1", dependency_type="npm", licenses=["MIT"]
        )
        assert dep.is_valid is True
        assert dep.error is None
        assert dep.comment is None
        assert dep.validated is False
        assert dep.is_ignored is False

    def test_without_licenses_gets_no_license_error(self) -> None:
        """Test that missing licenses default the error and comment."""
        dep = RetrievedDependency.build(name="a", version="1", dependency_type="npm")
        assert dep.is_valid is False
        assert dep.licenses is None
        assert dep.error == "No License"
        assert dep.comment is not None
        assert dep.comment.text == DEFAULT_NO_LICENSE_COMMENT
        assert dep.comment.remove_when_valid is True

    def test_explicit_error_is_kept(self) -> None:
        """Test that a given error is not replaced by the default."""
        dep = RetrievedDependency.build(
            name="a", version="1", dependency_type="rust", error="Boom"
        )
        assert dep.error == "Boom"
        assert dep.is_valid is False

    def test_error_with_licenses_is_invalid(self) -> None:
        """Test that an error makes the record invalid even with licenses."""
        dep = RetrievedDependency.build(
            name="a",
            version="1",
            dependency_type="npm",
            licenses=["NO-LICENSE"],
            error="No License",
        )
        assert dep.is_valid is False
        assert dep.licenses == ["NO-LICENSE"]

    def test_explicit_comment_is_kept(self) -> None:
        """Test that a given comment is not replaced by the default."""
        comment = Comment.non_removable("look at this")
        dep = RetrievedDependency.build(
            name="a", version="1", dependency_type="npm", comment=comment
        )
        assert dep.comment == comment

    def test_assignment_is_validated(self) -> None:
        """Test that assigning a wrong type fails."""
        dep = RetrievedDependency.build(
            name="a", version="1", dependency_type="npm", licenses=["MIT"]
        )
        with pytest.raises(ValidationError):
            dep.licenses = "MIT"  # type: ignore[assignment]


class TestVisibleComment:
    """Tests for RetrievedDependency.visible_comment."""

    def _build(self, comment: Comment, valid: bool) -> RetrievedDependency:
        return RetrievedDependency.build(
            name="a",
            version="1",
            dependency_type="npm",
            licenses=["MIT"] if valid else None,
            comment=comment,
        )

    def test_removable_hidden_when_valid(self) -> None:
        """Test that removable comments disappear on valid records."""
        assert self._build(Comment.removable("x"), valid=True).visible_comment is None

    def test_removable_shown_when_invalid(self) -> None:
        """Test that removable comments stay on invalid records."""
        dep = self._build(Comment.removable("x"), valid=False)
        assert dep.visible_comment is not None

    def test_removable_hidden_when_ignored(self) -> None:
        """Test that removable comments disappear on ignored records."""
        dep = self._build(Comment.removable("x"), valid=False)
        dep.is_ignored = True
        assert dep.visible_comment is None

    def test_non_removable_always_shown(self) -> None:
        """Test that non removable comments stay on valid records."""
        dep = self._build(Comment.non_removable("x"), valid=True)
        assert dep.visible_comment is not None
        assert dep.visible_comment.text == "x"
