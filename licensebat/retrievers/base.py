"""Base retriever interface and shared license classification."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import httpx

from licensebat.analysis.corpus import LicenseStore
from licensebat.analysis.licenses import is_exact_sentinel, same_license
from licensebat.constants import (
    LICENSE_MATCH_THRESHOLD,
    LOW_CONFIDENCE_ERROR,
    NO_LICENSE,
    NO_LICENSE_ERROR,
    USER_AGENT,
)
from licensebat.exceptions import RetrievalError
from licensebat.models.dependency import Comment, Dependency, RetrievedDependency

logger = logging.getLogger(__name__)

NO_LICENSE_COMMENT = (
    "Consider **ignoring** this specific dependency. "
    f"You can also accept the **{NO_LICENSE}** key to avoid these issues."
)
NO_CORPUS_ERROR = "No license corpus available"

REQUEST_TIMEOUT = httpx.Timeout(30.0)


class LicenseClassification(NamedTuple):
    """Outcome of classifying a license text.

    Attributes:
        licenses: Licenses to report, or None if unresolved.
        error: Error to report, if any.
        comment: Advisory comment, if any.
        suggested_licenses: Corpus analysis results as (name, score).
    """

    licenses: Optional[list[str]]
    error: Optional[str] = None
    comment: Optional[Comment] = None
    suggested_licenses: Optional[list[tuple[str, float]]] = None


def _percent(score: float) -> str:
    return f"{score * 100:.2f}%"


def classify_license_text(
    text: Optional[str],
    declared: Optional[str],
    store: Optional[LicenseStore],
    source: str,
) -> LicenseClassification:
    """Decide the license of a dependency from its declared name and text.

    - A declared exact sentinel (e.g. "MIT") is trusted as is
    - Without text, the declared name is used; without either, the
      dependency has no license
    - Without a corpus, the declared name is used unverified
    - A corpus match scoring at least 0.8 wins over the declared name
    - Below 0.8, the declared name is kept; without one the license
      stays unresolved

    Args:
        text: License text, None if it could not be obtained.
        declared: License name declared by the registry, if any.
        store: License corpus, None if unavailable.
        source: Where the declared name comes from, used in comments.

    Returns:
        LicenseClassification to build the record from.
    """
    if declared and is_exact_sentinel(declared):
        return LicenseClassification(licenses=[declared])

    if not text or not text.strip():
        if declared:
            return LicenseClassification(
                licenses=[declared],
                comment=Comment.removable(
                    f"Using the license declared in {source}. "
                    "We couldn't get the original license."
                ),
            )
        return LicenseClassification(
            licenses=[NO_LICENSE],
            error=NO_LICENSE_ERROR,
            comment=Comment.removable(NO_LICENSE_COMMENT),
        )

    if store is None:
        if declared:
            return LicenseClassification(
                licenses=[declared],
                comment=Comment.removable(
                    f"Using the license declared in {source}. "
                    "We couldn't verify it against the license text."
                ),
            )
        return LicenseClassification(licenses=None, error=NO_CORPUS_ERROR)

    match = store.analyze(text)
    suggested = [(match.name, match.score)]
    logger.debug("Corpus analysis: %s scored %.4f", match.name, match.score)

    if match.score >= LICENSE_MATCH_THRESHOLD:
        comment = None
        if not same_license(declared, match.name):
            comment = Comment.non_removable(
                f"{source} license: {declared or 'NOT DECLARED'}. "
                f"Our score for **{match.name}** is **{_percent(match.score)}**."
            )
        return LicenseClassification(
            licenses=[match.name], comment=comment, suggested_licenses=suggested
        )

    guess = (
        f"Our analysis, though, estimated that it could be **{match.name}** "
        f"with a **{_percent(match.score)}** score."
    )
    if declared:
        return LicenseClassification(
            licenses=[declared],
            comment=Comment.non_removable(
                f"Using the license declared in {source}. {guess}"
            ),
            suggested_licenses=suggested,
        )
    return LicenseClassification(
        licenses=None,
        error=LOW_CONFIDENCE_ERROR,
        comment=Comment.non_removable(f"No license declared in {source}. {guess}"),
        suggested_licenses=suggested,
    )


class BaseRetriever(ABC):
    """Abstract base class for license retrievers.

    A retriever resolves a (name, version) pair into exactly one
    RetrievedDependency. Subclasses implement _resolve() and may raise
    RetrievalError, httpx errors, decoding errors or lookup errors on an
    unexpected document shape from it: resolve() turns them into an error
    record instead of propagating them.
    """

    dependency_type: str = ""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        store: Optional[LicenseStore] = None,
    ) -> None:
        """Initialize the retriever.

        Args:
            client: Optional shared httpx.AsyncClient. If not provided,
                a new client is created for every request.
            store: Optional license corpus used to analyze license texts.
        """
        self.client = client
        self.store = store

    @abstractmethod
    def package_url(self, name: str, version: str) -> str:
        """Human facing page of the dependency."""

    @abstractmethod
    async def _resolve(self, name: str, version: str) -> RetrievedDependency:
        """Resolve license information, raising on failure."""

    async def resolve(self, name: str, version: str) -> RetrievedDependency:
        """Resolve license information for a dependency.

        Never raises for network, decoding or scraping failures: they
        are captured in the record's error with licenses set to None.

        Args:
            name: Dependency name.
            version: Dependency version.

        Returns:
            RetrievedDependency, not yet validated.
        """
        try:
            return await self._resolve(name, version)
        except (
            httpx.HTTPError,
            RetrievalError,
            ValueError,
            KeyError,
            TypeError,
            AttributeError,
        ) as e:
            logger.warning("Could not retrieve %s@%s: %s", name, version, e)
            return self.build_record(name, version, error=str(e) or type(e).__name__)

    async def retrieve(self, dependency: Dependency) -> RetrievedDependency:
        """Resolve a dependency, carrying over its dev and optional flags."""
        record = await self.resolve(dependency.name, dependency.version)
        record.is_dev = dependency.is_dev
        record.is_optional = dependency.is_optional
        return record

    def build_record(
        self,
        name: str,
        version: str,
        licenses: Optional[list[str]] = None,
        error: Optional[str] = None,
        comment: Optional[Comment] = None,
        suggested_licenses: Optional[list[tuple[str, float]]] = None,
    ) -> RetrievedDependency:
        """Build a record for this retriever's ecosystem."""
        return RetrievedDependency.build(
            name=name,
            version=version,
            dependency_type=self.dependency_type,
            url=self.package_url(name, version),
            licenses=licenses,
            error=error,
            comment=comment,
            suggested_licenses=suggested_licenses,
        )

    def no_license_record(self, name: str, version: str) -> RetrievedDependency:
        """Build the record of a dependency declaring no license at all."""
        return self.build_record(
            name,
            version,
            licenses=[NO_LICENSE],
            error=NO_LICENSE_ERROR,
            comment=Comment.removable(NO_LICENSE_COMMENT),
        )

    def classified_record(
        self,
        name: str,
        version: str,
        classification: LicenseClassification,
    ) -> RetrievedDependency:
        """Build a record from the outcome of classify_license_text."""
        return self.build_record(
            name,
            version,
            licenses=classification.licenses,
            error=classification.error,
            comment=classification.comment,
            suggested_licenses=classification.suggested_licenses,
        )

    async def _get(self, url: str) -> httpx.Response:
        """Send an identified GET request.

        Raises:
            RetrievalError: On an error status or a transport failure.
        """

        async def do_fetch(c: httpx.AsyncClient) -> httpx.Response:
            try:
                response = await c.get(
                    url,
                    headers={"User-Agent": USER_AGENT},
                    timeout=REQUEST_TIMEOUT,
                    follow_redirects=True,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                raise RetrievalError(
                    f"{url} returned HTTP {e.response.status_code}"
                ) from e
            except httpx.RequestError as e:
                raise RetrievalError(f"Failed to fetch {url}: {e}") from e

        if self.client is not None:
            return await do_fetch(self.client)

        async with httpx.AsyncClient() as new_client:
            return await do_fetch(new_client)
