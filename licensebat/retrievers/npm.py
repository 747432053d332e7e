"""npm registry license retriever."""

from __future__ import annotations

import logging
from typing import Any, Optional

from licensebat.exceptions import RetrievalError
from licensebat.models.dependency import RetrievedDependency
from licensebat.retrievers.base import (
    NO_CORPUS_ERROR,
    BaseRetriever,
    classify_license_text,
)

logger = logging.getLogger(__name__)

NPM_REGISTRY_URL = "https://registry.npmjs.org"
NPM_PACKAGE_URL = "https://www.npmjs.com/package"
UNPKG_URL = "https://unpkg.com"

# Prefix of a license field pointing at a file instead of naming a license
SEE_LICENSE_IN = "SEE LICENSE IN "


def _license_name(value: Any) -> Optional[str]:
    """Read a license given as a string or as a {"type": ...} object."""
    if isinstance(value, str):
        name = value.replace('"', "").strip()
        return name or None
    if isinstance(value, dict):
        return _license_name(value.get("type"))
    return None


def extract_licenses(
    metadata: dict[str, Any], version: str
) -> Optional[list[str]]:
    """Extract the declared licenses of a version from registry metadata.

    Looks at the version's `licenses` field (list of strings or objects,
    or a single object), then its `license` field, then the package-level
    `license`.

    Args:
        metadata: Full package document from the npm registry.
        version: The version to look at.

    Returns:
        Declared license names, or None if nothing is declared.

    Raises:
        RetrievalError: If the version is not published or the metadata
            has an unexpected shape.
    """
    versions = metadata.get("versions") or {}
    if not isinstance(versions, dict):
        raise RetrievalError("Unexpected versions field in the npm registry")
    entry = versions.get(version)
    if not isinstance(entry, dict):
        raise RetrievalError(f"Version {version} not found in the npm registry")

    declared = entry.get("licenses")
    if isinstance(declared, (str, dict)):
        declared = [declared]
    if isinstance(declared, list):
        names = [name for name in map(_license_name, declared) if name]
        if names:
            return names

    for value in (entry.get("license"), metadata.get("license")):
        name = _license_name(value)
        if name:
            return [name]
    return None


class NpmRetriever(BaseRetriever):
    """Retriever that reads licenses from the npm registry."""

    dependency_type = "npm"

    def package_url(self, name: str, version: str) -> str:
        return f"{NPM_PACKAGE_URL}/{name}/v/{version}"

    async def _resolve(self, name: str, version: str) -> RetrievedDependency:
        # Scoped packages keep their "@" but the slash must be escaped
        url = f"{NPM_REGISTRY_URL}/{name.replace('/', '%2F')}"
        response = await self._get(url)
        metadata = response.json()
        if not isinstance(metadata, dict):
            raise RetrievalError(f"Unexpected npm registry response for {name}")

        licenses = extract_licenses(metadata, version)
        if licenses is None:
            return self.no_license_record(name, version)

        if len(licenses) == 1 and licenses[0].upper().startswith(SEE_LICENSE_IN):
            license_file = licenses[0][len(SEE_LICENSE_IN) :].strip()
            return await self._resolve_license_file(name, version, license_file)

        return self.build_record(name, version, licenses=licenses)

    async def _resolve_license_file(
        self, name: str, version: str, license_file: str
    ) -> RetrievedDependency:
        """Classify a license shipped as a file inside the package."""
        logger.debug("%s@%s declares its license in %s", name, version, license_file)
        if self.store is None:
            return self.build_record(
                name, version, error=f"{NO_CORPUS_ERROR} to analyze {license_file}"
            )

        response = await self._get(
            f"{UNPKG_URL}/{name}@{version}/{license_file.removeprefix('./')}"
        )
        classification = classify_license_text(
            response.text, declared=None, store=self.store, source="npm"
        )
        return self.classified_record(name, version, classification)
