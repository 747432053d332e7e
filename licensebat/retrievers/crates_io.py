"""crates.io API license retriever."""

from __future__ import annotations

from typing import Optional

import httpx

from licensebat.analysis.corpus import LicenseStore
from licensebat.exceptions import RetrievalError
from licensebat.models.dependency import RetrievedDependency
from licensebat.retrievers.base import BaseRetriever
from licensebat.retrievers.docs_rs import CRATES_IO_PACKAGE_URL, DocsRsRetriever

CRATES_IO_API_URL = "https://crates.io/api/v1/crates"

# License reported by crates.io when the crate only ships a license file
NON_STANDARD = "non-standard"

NO_CRATES_IO_LICENSE_ERROR = "No license found in Crates.io API"


class CratesIoRetriever(BaseRetriever):
    """Retriever that reads licenses from the crates.io API.

    Crates declaring a license-file are reported as "non-standard" by the
    API; those are delegated to docs.rs.
    """

    dependency_type = "rust"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        store: Optional[LicenseStore] = None,
        docs_rs: Optional[DocsRsRetriever] = None,
    ) -> None:
        super().__init__(client=client, store=store)
        self.docs_rs = docs_rs or DocsRsRetriever(client=client, store=store)

    def package_url(self, name: str, version: str) -> str:
        return f"{CRATES_IO_PACKAGE_URL}/{name}/{version}"

    async def _resolve(self, name: str, version: str) -> RetrievedDependency:
        response = await self._get(f"{CRATES_IO_API_URL}/{name}/{version}")
        data = response.json()
        if not isinstance(data, dict):
            raise RetrievalError(f"Unexpected crates.io response for {name}")

        crate_version = data.get("version") or {}
        if not isinstance(crate_version, dict):
            raise RetrievalError(f"Unexpected crates.io response for {name}")
        license_id = crate_version.get("license")
        if not isinstance(license_id, str) or not license_id.strip():
            return self.build_record(name, version, error=NO_CRATES_IO_LICENSE_ERROR)

        if license_id == NON_STANDARD:
            return await self.docs_rs.resolve(name, version)
        return self.build_record(name, version, licenses=[license_id])
