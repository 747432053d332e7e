"""docs.rs license retriever for Rust crates.

docs.rs shows the normalized Cargo.toml of every published crate. The
`license` field is used directly; a `license-file` is fetched from the
same source view and analyzed against the license corpus.
"""

from __future__ import annotations

import logging
import tomllib
from typing import Optional

from licensebat.models.dependency import RetrievedDependency
from licensebat.retrievers.base import (
    NO_CORPUS_ERROR,
    BaseRetriever,
    classify_license_text,
)
from licensebat.retrievers.html import parse_html

logger = logging.getLogger(__name__)

DOCS_RS_URL = "https://docs.rs/crate"
CRATES_IO_PACKAGE_URL = "https://crates.io/crates"

# Code block holding a source file in the docs.rs source view
SOURCE_CODE_SELECTOR = "#source-code pre code"

LICENSE_KEYS = ("license", "license-file")

NO_CARGO_LICENSE_ERROR = (
    "No information found in Cargo.toml regarding license or license-file."
)
DOCS_RS_PARSE_ERROR = "Error trying to parse docs.rs"


def crate_source_url(name: str, version: str) -> str:
    """Base url of a crate's source view on docs.rs."""
    return f"{DOCS_RS_URL}/{name}/{version}/source/"


def extract_source_code(html: str) -> Optional[str]:
    """Get the raw content of a file shown in the docs.rs source view."""
    element = parse_html(html).select_one(SOURCE_CODE_SELECTOR)
    if element is None:
        return None
    return element.text()


def read_license_field(cargo_toml: str) -> Optional[tuple[str, str]]:
    """Find the license declaration of a Cargo.toml.

    `license` wins over `license-file` when both are present. Content that
    is not valid TOML is scanned line by line.

    Returns:
        Tuple of (key, value), or None if neither key is present.
    """
    try:
        package = tomllib.loads(cargo_toml).get("package", {})
    except tomllib.TOMLDecodeError:
        logger.debug("Cargo.toml is not valid TOML, scanning lines")
        return _scan_license_lines(cargo_toml)

    for key in LICENSE_KEYS:
        value = package.get(key)
        if isinstance(value, str) and value.strip():
            return key, value.strip()
    return None


def _scan_license_lines(text: str) -> Optional[tuple[str, str]]:
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key in LICENSE_KEYS:
            value = value.strip().strip("\"'")
            if value:
                return key, value
    return None


class DocsRsRetriever(BaseRetriever):
    """Retriever that scrapes crate metadata from docs.rs."""

    dependency_type = "rust"

    def package_url(self, name: str, version: str) -> str:
        return f"{CRATES_IO_PACKAGE_URL}/{name}/{version}"

    async def _resolve(self, name: str, version: str) -> RetrievedDependency:
        crate_url = crate_source_url(name, version)
        response = await self._get(f"{crate_url}Cargo.toml")

        cargo_toml = extract_source_code(response.text)
        if cargo_toml is None:
            logger.warning(
                "No Cargo.toml source found on docs.rs for %s@%s", name, version
            )
            return self.build_record(name, version, error=DOCS_RS_PARSE_ERROR)

        field = read_license_field(cargo_toml)
        if field is None:
            return self.build_record(name, version, error=NO_CARGO_LICENSE_ERROR)

        key, value = field
        if key == "license":
            return self.build_record(name, version, licenses=[value])
        return await self._resolve_license_file(name, version, crate_url, value)

    async def _resolve_license_file(
        self, name: str, version: str, crate_url: str, license_file: str
    ) -> RetrievedDependency:
        if self.store is None:
            logger.warning("No license corpus to analyze %s of %s", license_file, name)
            return self.build_record(
                name, version, error=f"{NO_CORPUS_ERROR} to analyze {license_file}"
            )

        license_url = f"{crate_url}{license_file}"
        response = await self._get(license_url)
        text = extract_source_code(response.text)
        if text is None:
            return self.build_record(
                name,
                version,
                error=f"Could not read {license_file}. Check the url: {license_url}",
            )

        classification = classify_license_text(
            text, declared=None, store=self.store, source="docs.rs"
        )
        return self.classified_record(name, version, classification)
