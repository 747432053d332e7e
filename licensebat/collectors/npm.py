"""package-lock.json collector."""

from __future__ import annotations

import json
from typing import Any, Optional

from licensebat.collectors.base import BaseCollector
from licensebat.exceptions import ParseError
from licensebat.models.dependency import LockedDependency, SourceKind
from licensebat.retrievers.npm import NpmRetriever

NODE_MODULES = "node_modules/"


def npm_source_kind(reference: Optional[str]) -> SourceKind:
    """Kind of source from a `resolved` url or a v1 `version` field."""
    if not reference:
        return SourceKind.REGISTRY
    if reference.startswith(("git+", "git:", "git@", "github:")):
        return SourceKind.GIT
    if reference.startswith(("file:", "link:")):
        return SourceKind.PATH
    return SourceKind.REGISTRY


def _flags(entry: dict[str, Any]) -> tuple[bool, bool]:
    """(is_dev, is_optional) of a lockfile entry.

    `devOptional` packages are needed by an optional production dependency,
    so they are treated as optional rather than dev.
    """
    is_dev = bool(entry.get("dev", False))
    is_optional = bool(entry.get("optional") or entry.get("devOptional"))
    return is_dev, is_optional


class NpmCollector(BaseCollector):
    """Collector for npm `package-lock.json` files (lockfileVersion 1 to 3)."""

    name = "npm"
    dependency_filename = "package-lock.json"
    retriever_class = NpmRetriever

    def parse(self, text: str) -> list[LockedDependency]:
        try:
            data = json.loads(text)
        except ValueError as e:
            raise ParseError(f"Invalid {self.dependency_filename}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(
                f"Invalid {self.dependency_filename}: expected an object at root level"
            )

        packages = data.get("packages")
        if packages is not None:
            if not isinstance(packages, dict):
                raise ParseError(
                    f"Invalid {self.dependency_filename}: 'packages' must be an object"
                )
            return self._parse_packages(packages)

        dependencies = data.get("dependencies") or {}
        if not isinstance(dependencies, dict):
            raise ParseError(
                f"Invalid {self.dependency_filename}: 'dependencies' must be an object"
            )
        found: list[LockedDependency] = []
        self._parse_dependency_tree(dependencies, found)
        return found

    def _parse_packages(self, packages: dict[str, Any]) -> list[LockedDependency]:
        """Parse the flat `packages` map of lockfileVersion 2 and 3."""
        found: list[LockedDependency] = []
        for path, entry in packages.items():
            # "" is the project itself; other keys without node_modules/
            # are workspace folders, reached through their link entries
            if NODE_MODULES not in path or not isinstance(entry, dict):
                continue

            name = entry.get("name") or path.rsplit(NODE_MODULES, 1)[1]
            is_dev, is_optional = _flags(entry)

            if entry.get("link"):
                target = packages.get(entry.get("resolved", ""), {})
                version = entry.get("version") or target.get("version") or "0.0.0"
                source = SourceKind.PATH
            else:
                version = entry.get("version")
                if not version:
                    raise ParseError(
                        f"Invalid {self.dependency_filename}: "
                        f"no version for '{path}'"
                    )
                source = npm_source_kind(entry.get("resolved") or version)

            found.append(
                LockedDependency(
                    name=name,
                    version=str(version),
                    is_dev=is_dev,
                    is_optional=is_optional,
                    source=source,
                    source_url=entry.get("resolved"),
                )
            )
        return found

    def _parse_dependency_tree(
        self, dependencies: dict[str, Any], found: list[LockedDependency]
    ) -> None:
        """Parse the nested `dependencies` tree of lockfileVersion 1."""
        for name, entry in dependencies.items():
            if not isinstance(entry, dict) or "version" not in entry:
                raise ParseError(
                    f"Invalid {self.dependency_filename}: no version for '{name}'"
                )
            version = str(entry["version"])
            is_dev, is_optional = _flags(entry)
            found.append(
                LockedDependency(
                    name=name,
                    version=version,
                    is_dev=is_dev,
                    is_optional=is_optional,
                    source=npm_source_kind(version),
                    source_url=entry.get("resolved"),
                )
            )
            nested = entry.get("dependencies")
            if isinstance(nested, dict):
                self._parse_dependency_tree(nested, found)
