"""pubspec.lock collector for Dart and Flutter projects."""

from __future__ import annotations

import yaml

from licensebat.collectors.base import BaseCollector
from licensebat.exceptions import ParseError
from licensebat.models.dependency import (
    Comment,
    LockedDependency,
    RetrievedDependency,
    SourceKind,
)
from licensebat.retrievers.pub_dev import PubDevRetriever

SDK_LICENSE = "BSD-3-Clause"
SDK_URL = "https://github.com/flutter/flutter"
SDK_COMMENT = (
    "SDK dependency. **You should accept this dependency**. "
    f"Consider adding **{SDK_LICENSE}** to the **.licrc** configuration file."
)

# Hosts of the public pub repository
PUB_HOSTS = ("https://pub.dev", "https://pub.dartlang.org")

PUB_SOURCES = {
    "hosted": SourceKind.REGISTRY,
    "sdk": SourceKind.SDK,
    "git": SourceKind.GIT,
    "path": SourceKind.PATH,
}


class PubCollector(BaseCollector):
    """Collector for Dart `pubspec.lock` files."""

    name = "dart"
    dependency_filename = "pubspec.lock"
    retriever_class = PubDevRetriever

    def parse(self, text: str) -> list[LockedDependency]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid {self.dependency_filename}: {e}") from e

        if data is None:
            return []
        if not isinstance(data, dict):
            raise ParseError(
                f"Invalid {self.dependency_filename}: expected a mapping at root level"
            )

        packages = data.get("packages") or {}
        if not isinstance(packages, dict):
            raise ParseError(
                f"Invalid {self.dependency_filename}: 'packages' must be a mapping"
            )

        found: list[LockedDependency] = []
        for key, entry in packages.items():
            if not isinstance(entry, dict) or "version" not in entry:
                raise ParseError(
                    f"Invalid {self.dependency_filename}: no version for '{key}'"
                )

            description = entry.get("description")
            name = str(key)
            source_url = None
            # SDK packages describe the SDK they come from ("flutter")
            if isinstance(description, str):
                source_url = description
            elif isinstance(description, dict):
                name = str(description.get("name") or key)
                source_url = description.get("url") or description.get("path")

            source = PUB_SOURCES.get(entry.get("source"), SourceKind.UNKNOWN)
            # Packages hosted on a private pub server are not retrieved
            if (
                source is SourceKind.REGISTRY
                and source_url
                and not str(source_url).startswith(PUB_HOSTS)
            ):
                source = SourceKind.UNKNOWN

            found.append(
                LockedDependency(
                    name=name,
                    version=str(entry["version"]),
                    is_dev=entry.get("dependency") == "direct dev",
                    source=source,
                    source_url=source_url,
                )
            )
        return found

    def resolve_sdk(self, dependency: LockedDependency) -> RetrievedDependency:
        """Packages shipped with the Flutter SDK share its license."""
        return RetrievedDependency.build(
            name=dependency.name,
            version=dependency.version,
            dependency_type=self.dependency_type,
            url=SDK_URL,
            licenses=[SDK_LICENSE],
            comment=Comment.removable(SDK_COMMENT),
        )
