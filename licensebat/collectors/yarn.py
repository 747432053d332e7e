"""yarn.lock collector, classic (v1) and Berry formats."""

from __future__ import annotations

import logging
import re
from typing import Optional

import yaml

from licensebat.collectors.base import BaseCollector
from licensebat.exceptions import ParseError
from licensebat.models.dependency import LockedDependency, SourceKind
from licensebat.retrievers.npm import NpmRetriever

logger = logging.getLogger(__name__)

BERRY_METADATA_KEY = "__metadata"

# `key "value"` or `key value` property line of a classic lockfile entry
_V1_PROPERTY = re.compile(r'^\s{2}([A-Za-z]+):?\s+"?([^"]*)"?\s*$')


def split_descriptor(descriptor: str) -> tuple[str, str]:
    """Split `name@range` into (name, range), keeping scoped names whole.

    Example: `@babel/core@npm:^7.0.0` -> (`@babel/core`, `npm:^7.0.0`)
    """
    descriptor = descriptor.strip().strip('"')
    index = descriptor.find("@", 1)
    if index == -1:
        return descriptor, ""
    return descriptor[:index], descriptor[index + 1 :]


def resolve_alias(name: str, reference: str) -> tuple[str, str]:
    """Follow an npm alias to the package it installs.

    Example: (`string-width-cjs`, `npm:string-width@^4.2.0`) ->
    (`string-width`, `^4.2.0`)
    """
    if reference.startswith("npm:"):
        real_name, real_reference = split_descriptor(reference[len("npm:") :])
        if real_name and real_reference:
            return real_name, real_reference
    return name, reference


def classic_source_kind(reference: str, resolved: Optional[str]) -> SourceKind:
    """Kind of source of a classic entry from its range and resolved url."""
    if reference.startswith(("file:", "link:")):
        return SourceKind.PATH
    if not resolved:
        return SourceKind.REGISTRY
    if resolved.startswith(("git+", "git:", "git@")):
        return SourceKind.GIT
    if "codeload.github.com" in resolved:
        return SourceKind.GIT
    if resolved.startswith("file:"):
        return SourceKind.PATH
    return SourceKind.REGISTRY


def berry_source_kind(reference: str) -> Optional[SourceKind]:
    """Kind of source of a Berry resolution, None for the root workspace."""
    if reference == "workspace:.":
        return None
    if reference.startswith(("npm:", "patch:")):
        return SourceKind.REGISTRY
    if reference.startswith(("workspace:", "file:", "link:", "portal:")):
        return SourceKind.PATH
    if reference.startswith(("git", "ssh:")) or "github.com" in reference:
        return SourceKind.GIT
    return SourceKind.UNKNOWN


class YarnCollector(BaseCollector):
    """Collector for `yarn.lock` files.

    Yarn lockfiles do not record whether a package is a dev or optional
    dependency, so those flags are left unknown.
    """

    name = "yarn"
    dependency_filename = "yarn.lock"
    retriever_class = NpmRetriever

    def parse(self, text: str) -> list[LockedDependency]:
        if re.search(rf"^\"?{BERRY_METADATA_KEY}\"?:", text, re.MULTILINE):
            return self._parse_berry(text)
        return self._parse_classic(text)

    def _parse_classic(self, text: str) -> list[LockedDependency]:
        found: list[LockedDependency] = []
        descriptors: list[str] = []
        properties: dict[str, str] = {}

        def flush() -> None:
            if not descriptors:
                return
            name, reference = resolve_alias(*split_descriptor(descriptors[0]))
            version = properties.get("version")
            if not name or not version:
                raise ParseError(
                    f"Invalid {self.dependency_filename}: "
                    f"no version for '{descriptors[0]}'"
                )
            resolved = properties.get("resolved")
            found.append(
                LockedDependency(
                    name=name,
                    version=version,
                    source=classic_source_kind(reference, resolved),
                    source_url=resolved,
                )
            )

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            if not line[0].isspace():
                if not line.rstrip().endswith(":"):
                    raise ParseError(
                        f"Invalid {self.dependency_filename}: "
                        f"unexpected line {line_number}: {line.strip()}"
                    )
                flush()
                descriptors = [d.strip() for d in line.rstrip()[:-1].split(",")]
                properties = {}
                continue
            match = _V1_PROPERTY.match(line)
            if match and match.group(1) not in properties:
                properties[match.group(1)] = match.group(2)

        flush()
        return found

    def _parse_berry(self, text: str) -> list[LockedDependency]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid {self.dependency_filename}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(
                f"Invalid {self.dependency_filename}: expected a mapping at root level"
            )

        found: list[LockedDependency] = []
        for key, entry in data.items():
            if key == BERRY_METADATA_KEY:
                continue
            if not isinstance(entry, dict) or "version" not in entry:
                raise ParseError(
                    f"Invalid {self.dependency_filename}: no version for '{key}'"
                )
            resolution = str(entry.get("resolution") or str(key).split(",")[0])
            name, reference = split_descriptor(resolution)
            source = berry_source_kind(reference)
            if source is None:
                logger.debug("Skipping root workspace %s", name)
                continue
            source_url = None if source is SourceKind.REGISTRY else reference
            found.append(
                LockedDependency(
                    name=name,
                    version=str(entry["version"]),
                    source=source,
                    source_url=source_url,
                )
            )
        return found
