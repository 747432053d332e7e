"""Lockfile collectors, one per supported dependency file."""

from __future__ import annotations

from pathlib import PurePath
from typing import Optional

import httpx

from licensebat.analysis.corpus import LicenseStore
from licensebat.collectors.base import BaseCollector, Collection, merge_duplicates
from licensebat.collectors.cargo import CargoCollector
from licensebat.collectors.npm import NpmCollector
from licensebat.collectors.pub import PubCollector
from licensebat.collectors.yarn import YarnCollector
from licensebat.exceptions import UnsupportedDependencyFileError

COLLECTORS: dict[str, type[BaseCollector]] = {
    collector.dependency_filename: collector
    for collector in (NpmCollector, YarnCollector, CargoCollector, PubCollector)
}


def get_collector(
    dependency_file: str,
    client: Optional[httpx.AsyncClient] = None,
    store: Optional[LicenseStore] = None,
) -> BaseCollector:
    """Pick the collector handling a dependency file, by file name.

    Args:
        dependency_file: Path or name of the lockfile.
        client: Optional shared httpx.AsyncClient for the retriever.
        store: Optional license corpus for the retriever.

    Returns:
        The collector, bound to its ecosystem retriever.

    Raises:
        UnsupportedDependencyFileError: If no collector handles the file.
    """
    filename = PurePath(dependency_file).name
    collector_class = COLLECTORS.get(filename)
    if collector_class is None:
        supported = ", ".join(sorted(COLLECTORS))
        raise UnsupportedDependencyFileError(
            f"Unsupported dependency file '{filename}'. Supported files: {supported}"
        )
    return collector_class.create(client=client, store=store)


__all__ = [
    "COLLECTORS",
    "BaseCollector",
    "CargoCollector",
    "Collection",
    "NpmCollector",
    "PubCollector",
    "YarnCollector",
    "get_collector",
    "merge_duplicates",
]
