"""Check pipeline: lockfile, collector, retrieval stream and validation."""

from __future__ import annotations

import logging
from contextlib import aclosing
from pathlib import Path
from typing import Optional

import httpx
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from licensebat.analysis.corpus import LicenseStore
from licensebat.analysis.policy import validate_dependency
from licensebat.collectors import get_collector
from licensebat.constants import DEFAULT_RETRIEVER_BUFFER_SIZE, USER_AGENT
from licensebat.exceptions import ScanError
from licensebat.executor import stream_unordered
from licensebat.models.dependency import RetrievedDependency
from licensebat.models.licrc import LicRc
from licensebat.models.report import CheckResult, IgnoredDependenciesSummary

logger = logging.getLogger(__name__)


def read_dependency_file(path: str) -> str:
    """Read the content of a dependency file.

    Raises:
        ScanError: If the file cannot be read.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ScanError(f"Cannot read dependency file '{path}': {e}") from e


async def check_dependencies(
    dependency_file: str,
    content: str,
    licrc: LicRc,
    store: Optional[LicenseStore] = None,
    client: Optional[httpx.AsyncClient] = None,
    console: Optional[Console] = None,
    show_progress: bool = True,
) -> CheckResult:
    """Check the dependencies of a lockfile against a policy.

    The lockfile is parsed and filtered before any request is sent, so
    an unsupported or malformed file fails fast. Retrievals then run
    concurrently, bounded by behavior.retriever_buffer_size, and each
    record is validated as soon as it arrives.

    Args:
        dependency_file: Path or name of the lockfile; picks the collector.
        content: Content of the lockfile.
        licrc: The policy.
        store: Optional license corpus for license text analysis.
        client: Optional shared httpx.AsyncClient. If not provided, one
            is created for the whole check.
        console: Optional Rich Console for progress display.
        show_progress: Whether to show progress indicator (default: True).

    Returns:
        CheckResult with one validated record per retrieved dependency,
        in completion order.

    Raises:
        UnsupportedDependencyFileError: If no collector handles the file.
        ParseError: If the lockfile is malformed.
    """
    limit = licrc.behavior.retriever_buffer_size or DEFAULT_RETRIEVER_BUFFER_SIZE
    if client is None:
        # One connection per retrieval in flight
        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            limits=httpx.Limits(max_connections=limit),
        ) as new_client:
            return await check_dependencies(
                dependency_file,
                content,
                licrc,
                store=store,
                client=new_client,
                console=console,
                show_progress=show_progress,
            )

    collector = get_collector(dependency_file, client=client, store=store)
    collection = collector.collect(content, licrc)
    filter_result = collection.filter_result
    total = len(collection.operations)
    logger.info(
        "Retrieving %d %s dependencies (%d in flight at most)",
        total,
        collector.dependency_type,
        limit,
    )

    dependencies: list[RetrievedDependency] = []
    show = console is not None and show_progress and total > 0
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
        disable=not show,
    ) as progress:
        task_id = progress.add_task(
            f"Retrieving licenses for {total} dependencies...", total=total
        )
        async with aclosing(stream_unordered(collection.operations, limit)) as stream:
            async for record in stream:
                dependencies.append(validate_dependency(record, licrc))
                progress.advance(task_id)

    ignored_summary = None
    if filter_result.ignored_count > 0:
        ignored_summary = IgnoredDependenciesSummary(
            ignored_count=filter_result.ignored_count,
            ignored_names=filter_result.ignored_names,
        )

    return CheckResult(
        dependency_file=dependency_file,
        dependency_type=collector.dependency_type,
        licrc=licrc,
        dependencies=dependencies,
        ignored_summary=ignored_summary,
    )
