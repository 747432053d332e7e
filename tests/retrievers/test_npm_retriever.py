"""Tests for the npm registry retriever."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from licensebat.analysis.corpus import LicenseStore
from licensebat.constants import USER_AGENT
from licensebat.exceptions import RetrievalError
from licensebat.models.dependency import Dependency
from licensebat.retrievers.npm import NpmRetriever, extract_licenses

REGISTRY = "https://registry.npmjs.org"


def _metadata(version: str = "1.0.0", **entry: Any) -> dict[str, Any]:
    return {"name": "pkg", "versions": {version: {"version": version, **entry}}}


class TestExtractLicenses:
    """Tests for extract_licenses function."""

    def test_license_string(self) -> None:
        """Test the usual `license` string."""
        assert extract_licenses(_metadata(license="MIT"), "1.0.0") == ["MIT"]

    def test_license_object(self) -> None:
        """Test the legacy `license` object."""
        metadata = _metadata(license={"type": "ISC", "url": "https://x"})
        assert extract_licenses(metadata, "1.0.0") == ["ISC"]

    def test_licenses_list(self) -> None:
        """Test the legacy `licenses` list."""
        metadata = _metadata(licenses=[{"type": "MIT"}, {"type": "Apache-2.0"}])
        assert extract_licenses(metadata, "1.0.0") == ["MIT", "Apache-2.0"]

    def test_licenses_single_object(self) -> None:
        """Test a `licenses` field holding a single object."""
        metadata = _metadata(licenses={"type": "BSD-2-Clause"})
        assert extract_licenses(metadata, "1.0.0") == ["BSD-2-Clause"]

    def test_strips_quotes(self) -> None:
        """Test that stray quotes are removed."""
        assert extract_licenses(_metadata(license='"MIT"'), "1.0.0") == ["MIT"]

    def test_falls_back_to_package_license(self) -> None:
        """Test the package-level license when the version has none."""
        metadata = _metadata()
        metadata["license"] = "MIT"
        assert extract_licenses(metadata, "1.0.0") == ["MIT"]

    def test_nothing_declared(self) -> None:
        """Test that no declaration gives None."""
        assert extract_licenses(_metadata(license=""), "1.0.0") is None

    def test_unknown_version(self) -> None:
        """Test that an unpublished version is an error."""
        with pytest.raises(RetrievalError, match="Version 2.0.0 not found"):
            extract_licenses(_metadata(), "2.0.0")

    def test_versions_not_an_object(self) -> None:
        """Test that a malformed versions field is an error."""
        with pytest.raises(RetrievalError, match="Unexpected versions field"):
            extract_licenses({"versions": ["1.0.0"]}, "1.0.0")


class TestNpmRetriever:
    """Tests for NpmRetriever."""

    @pytest.mark.asyncio
    async def test_resolves_declared_license(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test a package declaring its license."""
        url = f"{REGISTRY}/lodash"
        client = make_client(
            {url: make_response(url, json=_metadata("4.17.21", license="MIT"))}
        )

        dep = await NpmRetriever(client=client).resolve("lodash", "4.17.21")

        assert dep.licenses == ["MIT"]
        assert dep.is_valid is True
        assert dep.error is None
        assert dep.dependency_type == "npm"
        assert dep.url == "https://www.npmjs.com/package/lodash/v/4.17.21"
        assert dep.validated is False

    @pytest.mark.asyncio
    async def test_sends_user_agent(self, make_client: Any, make_response: Any) -> None:
        """Test that requests identify licensebat."""
        url = f"{REGISTRY}/lodash"
        client = make_client({url: make_response(url, json=_metadata(license="MIT"))})

        await NpmRetriever(client=client).resolve("lodash", "1.0.0")

        _, kwargs = client.get.call_args
        assert kwargs["headers"]["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_escapes_scoped_names(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that the slash of scoped packages is escaped."""
        url = f"{REGISTRY}/@babel%2Fcore"
        client = make_client({url: make_response(url, json=_metadata(license="MIT"))})

        dep = await NpmRetriever(client=client).resolve("@babel/core", "1.0.0")

        assert dep.licenses == ["MIT"]
        assert dep.url == "https://www.npmjs.com/package/@babel/core/v/1.0.0"

    @pytest.mark.asyncio
    async def test_no_license(self, make_client: Any, make_response: Any) -> None:
        """Test a package without license."""
        url = f"{REGISTRY}/pkg"
        client = make_client({url: make_response(url, json=_metadata())})

        dep = await NpmRetriever(client=client).resolve("pkg", "1.0.0")

        assert dep.licenses == ["NO-LICENSE"]
        assert dep.error == "No License"
        assert dep.is_valid is False
        assert dep.comment is not None
        assert dep.comment.remove_when_valid is True

    @pytest.mark.asyncio
    async def test_http_error_is_captured(self, make_client: Any) -> None:
        """Test that a 404 gives an error record instead of raising."""
        dep = await NpmRetriever(client=make_client({})).resolve("missing", "1.0.0")

        assert dep.licenses is None
        assert dep.is_valid is False
        assert dep.error is not None
        assert "404" in dep.error

    @pytest.mark.asyncio
    async def test_transport_error_is_captured(self) -> None:
        """Test that a connection failure gives an error record."""
        client = MagicMock(spec=httpx.AsyncClient)
        client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        dep = await NpmRetriever(client=client).resolve("pkg", "1.0.0")

        assert dep.licenses is None
        assert dep.error is not None
        assert "Failed to fetch" in dep.error

    @pytest.mark.asyncio
    async def test_invalid_json_is_captured(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that unparseable metadata gives an error record."""
        url = f"{REGISTRY}/pkg"
        client = make_client({url: make_response(url, text="<html>oops</html>")})

        dep = await NpmRetriever(client=client).resolve("pkg", "1.0.0")

        assert dep.licenses is None
        assert dep.is_valid is False

    @pytest.mark.asyncio
    async def test_unknown_version_is_captured(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that an unpublished version gives an error record."""
        url = f"{REGISTRY}/pkg"
        client = make_client({url: make_response(url, json=_metadata("1.0.0"))})

        dep = await NpmRetriever(client=client).resolve("pkg", "9.9.9")

        assert dep.error == "Version 9.9.9 not found in the npm registry"

    @pytest.mark.asyncio
    async def test_malformed_metadata_is_captured(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that metadata of an unexpected shape gives an error record."""
        url = f"{REGISTRY}/pkg"
        client = make_client({url: make_response(url, json={"versions": ["1.0.0"]})})

        dep = await NpmRetriever(client=client).resolve("pkg", "1.0.0")

        assert dep.licenses is None
        assert dep.is_valid is False
        assert dep.error == "Unexpected versions field in the npm registry"

    @pytest.mark.asyncio
    async def test_see_license_in_file(
        self,
        make_client: Any,
        make_response: Any,
        store: LicenseStore,
        mit_text: str,
    ) -> None:
        """Test that a license file inside the package is analyzed."""
        url = f"{REGISTRY}/pkg"
        file_url = "https://unpkg.com/pkg@1.0.0/LICENSE.md"
        client = make_client(
            {
                url: make_response(
                    url, json=_metadata(license="SEE LICENSE IN ./LICENSE.md")
                ),
                file_url: make_response(file_url, text=mit_text),
            }
        )

        dep = await NpmRetriever(client=client, store=store).resolve("pkg", "1.0.0")

        assert dep.licenses == ["MIT"]
        assert dep.is_valid is True
        assert dep.suggested_licenses is not None

    @pytest.mark.asyncio
    async def test_see_license_in_without_corpus(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that a license file cannot be analyzed without corpus."""
        url = f"{REGISTRY}/pkg"
        client = make_client(
            {url: make_response(url, json=_metadata(license="SEE LICENSE IN LICENSE"))}
        )

        dep = await NpmRetriever(client=client).resolve("pkg", "1.0.0")

        assert dep.licenses is None
        assert dep.error == "No license corpus available to analyze LICENSE"
        client.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retrieve_carries_flags(
        self, make_client: Any, make_response: Any
    ) -> None:
        """Test that dev and optional flags survive retrieval."""
        url = f"{REGISTRY}/jest"
        client = make_client({url: make_response(url, json=_metadata(license="MIT"))})
        dependency = Dependency(name="jest", version="1.0.0", is_dev=True)

        dep = await NpmRetriever(client=client).retrieve(dependency)

        assert dep.is_dev is True
        assert dep.is_optional is None

    @pytest.mark.asyncio
    async def test_creates_client_when_none_given(self) -> None:
        """Test that a client is created per request without a shared one."""
        url = f"{REGISTRY}/pkg"
        response = httpx.Response(
            200, json=_metadata(license="MIT"), request=httpx.Request("GET", url)
        )

        with patch("licensebat.retrievers.base.httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=response
            )

            dep = await NpmRetriever().resolve("pkg", "1.0.0")

        assert dep.licenses == ["MIT"]
