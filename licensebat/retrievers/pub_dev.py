"""pub.dev license retriever for Dart packages.

pub.dev only shows an imprecise license name (e.g. "BSD-3-Clause (LICENSE)")
next to the license text, so the text is analyzed against the license
corpus whenever possible.
"""

from __future__ import annotations

import logging
from typing import Optional

from licensebat.models.dependency import RetrievedDependency
from licensebat.retrievers.base import BaseRetriever, classify_license_text
from licensebat.retrievers.html import HtmlElement, parse_html

logger = logging.getLogger(__name__)

PUB_DEV_URL = "https://pub.dev/packages"

# Official license text, tried in order
LICENSE_TEXT_SELECTORS = (
    ".detail-container.detail-body-main .highlight pre",
    ".detail-container.detail-body-main .tab-content",
)


def extract_declared_license(document: HtmlElement) -> Optional[str]:
    """Read the license name from the sidebar of a package page.

    The name is in the element following the `h3.title` "License"
    heading, before the " (" that introduces the file name.
    """
    for heading in document.find_all("h3", class_="title"):
        if heading.text().strip() != "License":
            continue
        sibling = heading.next_sibling_element()
        if sibling is None:
            return None
        text = sibling.text().strip()
        if " (" not in text:
            return None
        return text[: text.index(" (")].strip() or None
    return None


def extract_license_text(document: HtmlElement) -> Optional[str]:
    """Read the official license text of a package page."""
    for selector in LICENSE_TEXT_SELECTORS:
        element = document.select_one(selector)
        if element is not None:
            return element.text()
    return None


class PubDevRetriever(BaseRetriever):
    """Retriever that scrapes the license page of pub.dev packages."""

    dependency_type = "dart"

    def package_url(self, name: str, version: str) -> str:
        return f"{PUB_DEV_URL}/{name}/versions/{version}"

    async def _resolve(self, name: str, version: str) -> RetrievedDependency:
        response = await self._get(f"{self.package_url(name, version)}/license")
        document = parse_html(response.text)

        declared = extract_declared_license(document)
        text = extract_license_text(document)
        logger.debug(
            "%s@%s declares %s on pub.dev (license text found: %s)",
            name,
            version,
            declared,
            text is not None,
        )

        classification = classify_license_text(
            text, declared=declared, store=self.store, source="Pub Dev"
        )
        return self.classified_record(name, version, classification)
