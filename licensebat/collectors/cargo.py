"""Cargo.lock collector."""

from __future__ import annotations

import tomllib
from typing import Optional

from licensebat.collectors.base import BaseCollector
from licensebat.exceptions import ParseError
from licensebat.models.dependency import LockedDependency, SourceKind
from licensebat.retrievers.docs_rs import DocsRsRetriever

# Index urls of the crates.io registry
CRATES_IO_SOURCES = (
    "registry+https://github.com/rust-lang/crates.io-index",
    "sparse+https://index.crates.io/",
)


def cargo_source_kind(source: Optional[str]) -> SourceKind:
    """Kind of source of a `[[package]]` entry.

    Only crates.io is retrieved: alternative registries are unknown,
    and packages without a source are local paths or workspace members.
    """
    if source is None:
        return SourceKind.PATH
    if source in CRATES_IO_SOURCES:
        return SourceKind.REGISTRY
    if source.startswith("git+"):
        return SourceKind.GIT
    return SourceKind.UNKNOWN


class CargoCollector(BaseCollector):
    """Collector for Rust `Cargo.lock` files.

    Cargo.lock does not tell dev dependencies apart, so the dev and
    optional flags are left unknown.
    """

    name = "rust"
    dependency_filename = "Cargo.lock"
    retriever_class = DocsRsRetriever

    def parse(self, text: str) -> list[LockedDependency]:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(f"Invalid {self.dependency_filename}: {e}") from e

        packages = data.get("package", [])
        if not isinstance(packages, list):
            raise ParseError(
                f"Invalid {self.dependency_filename}: 'package' must be an array"
            )

        found: list[LockedDependency] = []
        for package in packages:
            if not isinstance(package, dict) or not package.get("name"):
                raise ParseError(
                    f"Invalid {self.dependency_filename}: package without a name"
                )
            if not package.get("version"):
                raise ParseError(
                    f"Invalid {self.dependency_filename}: "
                    f"no version for '{package['name']}'"
                )
            source = package.get("source")
            found.append(
                LockedDependency(
                    name=package["name"],
                    version=str(package["version"]),
                    source=cargo_source_kind(source),
                    source_url=source,
                )
            )
        return found
