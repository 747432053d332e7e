"""Dependency Pydantic models for licensebat."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from licensebat.constants import NO_LICENSE_ERROR

DEFAULT_NO_LICENSE_COMMENT = (
    "Consider manually checking this dependency's license. Remember this: "
    "https://choosealicense.com/no-permission/ and ignore it if you feel "
    "confident about it to avoid this warning."
)


class Dependency(BaseModel):
    """Language agnostic dependency, identified by name and version.

    The dev and optional flags are None when the lockfile format
    cannot tell.
    """

    model_config = {"extra": "forbid", "frozen": True}

    name: str = Field(description="Dependency name")
    version: str = Field(description="Dependency version")
    is_dev: Optional[bool] = Field(
        default=None, description="True if it is a dev dependency"
    )
    is_optional: Optional[bool] = Field(
        default=None, description="True if it is an optional dependency"
    )

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the dependency: (name, version)."""
        return (self.name, self.version)


class SourceKind(str, Enum):
    """Where a locked dependency comes from."""

    REGISTRY = "registry"
    SDK = "sdk"
    GIT = "git"
    PATH = "path"
    UNKNOWN = "unknown"


class LockedDependency(Dependency):
    """A dependency as pinned by a lockfile, including its source."""

    source: SourceKind = Field(
        default=SourceKind.REGISTRY, description="Kind of source"
    )
    source_url: Optional[str] = Field(
        default=None, description="Raw source location declared in the lockfile"
    )


class Comment(BaseModel):
    """Advisory text attached to a retrieved dependency."""

    model_config = {"extra": "forbid"}

    text: str = Field(description="The comment text")
    remove_when_valid: bool = Field(
        default=False,
        description="If true, hide the comment once the dependency is valid",
    )

    @classmethod
    def removable(cls, text: str) -> Comment:
        """Build a comment hidden when the dependency is valid or ignored."""
        return cls(text=text, remove_when_valid=True)

    @classmethod
    def non_removable(cls, text: str) -> Comment:
        """Build a comment shown no matter the verdict."""
        return cls(text=text, remove_when_valid=False)


class RetrievedDependency(BaseModel):
    """A dependency whose license information has been retrieved.

    Created by a retriever and then mutated once by the policy validator.
    """

    model_config = {"extra": "forbid", "validate_assignment": True}

    name: str = Field(description="Dependency name")
    version: str = Field(description="Dependency version")
    dependency_type: str = Field(description="Ecosystem (npm, rust, dart...)")
    url: Optional[str] = Field(default=None, description="Package page url")
    licenses: Optional[list[str]] = Field(
        default=None, description="Licenses of the dependency"
    )
    validated: bool = Field(
        default=False, description="True once validated against the .licrc"
    )
    is_valid: bool = Field(default=False, description="Compliance verdict")
    is_ignored: bool = Field(
        default=False, description="True if ignored by the .licrc"
    )
    error: Optional[str] = Field(
        default=None, description="What went wrong while retrieving/validating"
    )
    comment: Optional[Comment] = Field(
        default=None, description="Advisory comment"
    )
    suggested_licenses: Optional[list[tuple[str, float]]] = Field(
        default=None, description="License text analysis results (name, score)"
    )
    is_dev: Optional[bool] = Field(default=None, description="Dev dependency")
    is_optional: Optional[bool] = Field(
        default=None, description="Optional dependency"
    )

    @classmethod
    def build(
        cls,
        name: str,
        version: str,
        dependency_type: str,
        url: Optional[str] = None,
        licenses: Optional[list[str]] = None,
        error: Optional[str] = None,
        comment: Optional[Comment] = None,
        suggested_licenses: Optional[list[tuple[str, float]]] = None,
        is_dev: Optional[bool] = None,
        is_optional: Optional[bool] = None,
    ) -> RetrievedDependency:
        """Create a freshly retrieved dependency, deriving its defaults.

        A dependency is valid only if it has licenses and no error.
        Without licenses, the error defaults to "No License" and a
        removable comment is attached unless one is given.
        """
        has_licenses = licenses is not None
        if error is None and not has_licenses:
            error = NO_LICENSE_ERROR
        if comment is None and not has_licenses:
            comment = Comment.removable(DEFAULT_NO_LICENSE_COMMENT)

        return cls(
            name=name,
            version=version,
            dependency_type=dependency_type,
            url=url,
            licenses=licenses,
            is_valid=has_licenses and error is None,
            error=error,
            comment=comment,
            suggested_licenses=suggested_licenses,
            is_dev=is_dev,
            is_optional=is_optional,
        )

    @property
    def is_compliant(self) -> bool:
        """True if the dependency does not need attention."""
        return self.is_ignored or self.is_valid

    @property
    def visible_comment(self) -> Optional[Comment]:
        """The comment to display, hiding removable ones when compliant."""
        if self.comment is None:
            return None
        if self.comment.remove_when_valid and self.is_compliant:
            return None
        return self.comment
