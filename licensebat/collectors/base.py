"""Base collector interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from typing import Any, NamedTuple, Optional

import httpx

from licensebat.analysis.corpus import LicenseStore
from licensebat.analysis.filtering import FilterResult, filter_dependencies
from licensebat.models.dependency import (
    Comment,
    LockedDependency,
    RetrievedDependency,
    SourceKind,
)
from licensebat.models.licrc import LicRc
from licensebat.retrievers.base import BaseRetriever

logger = logging.getLogger(__name__)

GIT_NOT_SUPPORTED_ERROR = "Git source is not supported"
GIT_NOT_SUPPORTED_COMMENT = (
    "Git projects are not supported yet. We're marking this as "
    "**invalid by default** so you check for yourself the validity of the "
    "license. Consider **adding this dependency to the ignored list** in the "
    "**.licrc** configuration file if you trust the source."
)
SOURCE_NOT_SUPPORTED_COMMENT = (
    "Only dependencies coming from the public registry are supported. We're "
    "marking this as **invalid by default** so you check for yourself the "
    "validity of the license. Consider **adding this dependency to the "
    "ignored list** in the **.licrc** configuration file if you trust the "
    "source."
)

RetrievalOperation = Coroutine[Any, Any, RetrievedDependency]


class Collection(NamedTuple):
    """Pending work for one dependency file.

    Attributes:
        operations: One pending retrieval per dependency left after
            filtering, to be driven by stream_unordered.
        filter_result: Outcome of the pre-retrieval filter.
    """

    operations: list[RetrievalOperation]
    filter_result: FilterResult


def _both(left: Optional[bool], right: Optional[bool]) -> Optional[bool]:
    if left is None or right is None:
        return left if right is None else right
    return left and right


def merge_duplicates(
    dependencies: list[LockedDependency],
) -> list[LockedDependency]:
    """Merge entries sharing the same (name, version).

    A merged dependency is dev (or optional) only if every occurrence is.
    The first occurrence's source wins. Order of first appearance is kept.
    """
    merged: dict[tuple[str, str], LockedDependency] = {}
    for dep in dependencies:
        existing = merged.get(dep.key)
        if existing is None:
            merged[dep.key] = dep
            continue
        merged[dep.key] = existing.model_copy(
            update={
                "is_dev": _both(existing.is_dev, dep.is_dev),
                "is_optional": _both(existing.is_optional, dep.is_optional),
            }
        )
    return list(merged.values())


class BaseCollector(ABC):
    """Abstract base class for lockfile collectors.

    A collector parses one lockfile format and binds every dependency
    coming from the public registry to its ecosystem retriever.
    Dependencies from other sources are answered locally.
    """

    name: str = ""
    dependency_filename: str = ""
    retriever_class: type[BaseRetriever]

    def __init__(self, retriever: BaseRetriever) -> None:
        self.retriever = retriever

    @classmethod
    def create(
        cls,
        client: Optional[httpx.AsyncClient] = None,
        store: Optional[LicenseStore] = None,
    ) -> BaseCollector:
        """Build the collector with its default retriever."""
        return cls(cls.retriever_class(client=client, store=store))

    @property
    def dependency_type(self) -> str:
        return self.retriever.dependency_type

    @abstractmethod
    def parse(self, text: str) -> list[LockedDependency]:
        """Parse lockfile content.

        Args:
            text: Content of the lockfile.

        Returns:
            Dependencies in lockfile order, possibly with duplicates.

        Raises:
            ParseError: If the lockfile is structurally invalid.
        """

    def collect(self, text: str, licrc: LicRc) -> Collection:
        """Parse a lockfile and prepare the retrieval of its dependencies.

        Dependencies the policy ignores are dropped before any network
        call is prepared.

        Raises:
            ParseError: If the lockfile is structurally invalid.
        """
        dependencies = merge_duplicates(self.parse(text))
        filter_result = filter_dependencies(dependencies, licrc)
        logger.debug(
            "%s: %d dependencies, %d ignored before retrieval",
            self.dependency_filename,
            len(dependencies),
            filter_result.ignored_count,
        )
        operations = [self.fetch(dep) for dep in filter_result.dependencies]
        return Collection(operations=operations, filter_result=filter_result)

    async def fetch(self, dependency: LockedDependency) -> RetrievedDependency:
        """Retrieve one dependency according to its source."""
        if dependency.source is SourceKind.REGISTRY:
            return await self.retriever.retrieve(dependency)

        if dependency.source is SourceKind.SDK:
            record = self.resolve_sdk(dependency)
        else:
            record = self.unsupported_record(dependency)
        record.is_dev = dependency.is_dev
        record.is_optional = dependency.is_optional
        return record

    def resolve_sdk(self, dependency: LockedDependency) -> RetrievedDependency:
        """Answer a dependency bundled with the language SDK.

        Ecosystems without SDK packages report them as unsupported.
        """
        return self.unsupported_record(dependency)

    def unsupported_record(self, dependency: LockedDependency) -> RetrievedDependency:
        """Invalid record for a source that is never fetched."""
        if dependency.source is SourceKind.GIT:
            error = GIT_NOT_SUPPORTED_ERROR
            comment = GIT_NOT_SUPPORTED_COMMENT
            url = dependency.source_url
        else:
            error = f"Not supported source {dependency.source.value}"
            comment = SOURCE_NOT_SUPPORTED_COMMENT
            url = None

        logger.debug("%s@%s: %s", dependency.name, dependency.version, error)
        return RetrievedDependency.build(
            name=dependency.name,
            version=dependency.version,
            dependency_type=self.dependency_type,
            url=url,
            error=error,
            comment=Comment.removable(comment),
        )
