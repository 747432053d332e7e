"""Shared fixtures for licensebat tests."""

from importlib import resources
from typing import Any, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from click.testing import CliRunner

from licensebat.analysis.corpus import LicenseStore, load_default_store

ResponseFactory = Callable[..., httpx.Response]
ClientFactory = Callable[[dict[str, httpx.Response]], MagicMock]


def _make_response(
    url: str,
    status_code: int = 200,
    json: Any = None,
    text: Optional[str] = None,
) -> httpx.Response:
    request = httpx.Request("GET", url)
    if json is not None:
        return httpx.Response(status_code, json=json, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


def _make_client(routes: dict[str, httpx.Response]) -> MagicMock:
    async def get(url: str, **kwargs: Any) -> httpx.Response:
        if url in routes:
            return routes[url]
        return _make_response(url, status_code=404)

    client = MagicMock(spec=httpx.AsyncClient)
    client.get = AsyncMock(side_effect=get)
    return client


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_response() -> ResponseFactory:
    """Build real httpx.Response objects bound to a GET request."""
    return _make_response


@pytest.fixture
def make_client() -> ClientFactory:
    """Build a mock AsyncClient answering GETs from a url -> response map.

    Unknown urls get a 404.
    """
    return _make_client


@pytest.fixture(scope="session")
def store() -> LicenseStore:
    """The license corpus bundled with licensebat."""
    bundled = load_default_store()
    assert bundled is not None
    return bundled


@pytest.fixture(scope="session")
def mit_text() -> str:
    """Full MIT license text with a filled-in copyright line."""
    text = (resources.files("licensebat") / "data" / "corpus" / "MIT.txt").read_text(
        encoding="utf-8"
    )
    return text.replace("<year> <copyright holders>", "2021 Jane Doe")


@pytest.fixture(scope="session")
def apache_text() -> str:
    """Full Apache-2.0 license text."""
    return (
        resources.files("licensebat") / "data" / "corpus" / "Apache-2.0.txt"
    ).read_text(encoding="utf-8")
