"""CLI entry point for licensebat."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from licensebat import __version__
from licensebat.analysis.corpus import LicenseStore, load_store, write_corpus_snapshot
from licensebat.config import load_licrc
from licensebat.constants import EXIT_ERROR, EXIT_ISSUES, EXIT_SUCCESS
from licensebat.exceptions import ConfigurationError, LicensebatError
from licensebat.models.licrc import LicRc
from licensebat.models.report import CheckResult
from licensebat.output.report_json import ReportJsonFormatter
from licensebat.output.report_markdown import ReportMarkdownFormatter
from licensebat.scanner import check_dependencies, read_dependency_file

# Module-level console for consistent output
_console = Console()
# Separate console for progress, logs and errors (writes to stderr)
_error_console = Console(stderr=True)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Route licensebat logs to stderr through Rich."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger("licensebat")
    logger.handlers.clear()
    logger.addHandler(
        RichHandler(console=_error_console, show_path=False, show_time=False)
    )
    logger.setLevel(level)
    logger.propagate = False


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Licensebat - Check the licenses of your dependencies.

    Retrieves the license of every dependency of a lockfile and validates
    it against the rules of a .licrc file.

    \b
    Supported dependency files:
        package-lock.json, yarn.lock, Cargo.lock, pubspec.lock

    \b
    Examples:
        licensebat check --dependency-file package-lock.json
        licensebat check --dependency-file Cargo.lock --format json
        licensebat build-corpus license-list-data/json/details -o corpus.json
    """
    pass


@main.command()
@click.option(
    "--dependency-file",
    "dependency_file",
    type=click.Path(dir_okay=False),
    required=True,
    help="Lockfile to check (package-lock.json, yarn.lock, Cargo.lock, pubspec.lock).",
)
@click.option(
    "--licrc-file",
    "licrc_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to the .licrc file (default: .licrc in the current directory).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["markdown", "json"], case_sensitive=False),
    default="markdown",
    help="Output format for check results (default: markdown).",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write report to file instead of stdout.",
)
@click.option(
    "--corpus",
    "corpus_path",
    type=click.Path(exists=True),
    default=None,
    help="License corpus: a JSON snapshot, an SPDX json/details directory "
    "or a directory of <SPDX-ID>.txt files (default: bundled corpus).",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_flag",
    is_flag=True,
    default=False,
    help="Log retrieval and validation details.",
)
@click.option(
    "--quiet",
    "-q",
    "quiet_flag",
    is_flag=True,
    default=False,
    help="Suppress progress and warnings.",
)
def check(
    dependency_file: str,
    licrc_file: str | None,
    output_format: str,
    output_path: str | None,
    corpus_path: str | None,
    verbose_flag: bool,
    quiet_flag: bool,
) -> None:
    """Check the licenses of the dependencies in a lockfile.

    Exits with 0 when every dependency is compliant or ignored, 1 when
    some are not (unless behavior.do_not_block_pr is set) and 2 on error.

    \b
    Examples:
        licensebat check --dependency-file package-lock.json
        licensebat check --dependency-file yarn.lock --licrc-file ci/.licrc
        licensebat check --dependency-file Cargo.lock --format json -o report.json
        licensebat check --dependency-file pubspec.lock --corpus corpus.json
    """
    if verbose_flag and quiet_flag:
        raise click.UsageError("--verbose and --quiet are mutually exclusive.")

    _configure_logging(verbose_flag, quiet_flag)

    try:
        licrc = load_licrc(licrc_file)
        content = read_dependency_file(dependency_file)
        store = load_store(corpus_path)

        result = _run_check(
            dependency_file,
            content,
            licrc,
            store,
            show_progress=not quiet_flag and _error_console.is_terminal,
        )
        _display_result(result, output_format.lower(), output_path, quiet_flag)

        if result.blocks:
            sys.exit(EXIT_ISSUES)
        sys.exit(EXIT_SUCCESS)

    except LicensebatError as e:
        _display_error(e)
        sys.exit(EXIT_ERROR)


@main.command("build-corpus")
@click.argument(
    "spdx_directory",
    type=click.Path(exists=True, file_okay=False),
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    required=True,
    help="JSON file to write the corpus snapshot to.",
)
def build_corpus(spdx_directory: str, output_path: str) -> None:
    """Build a license corpus snapshot from SPDX license-list-data.

    SPDX_DIRECTORY is the json/details directory of a checkout of
    https://github.com/spdx/license-list-data.

    \b
    Examples:
        licensebat build-corpus license-list-data/json/details -o corpus.json
    """
    try:
        count = write_corpus_snapshot(Path(spdx_directory), Path(output_path))
    except LicensebatError as e:
        _display_error(e)
        sys.exit(EXIT_ERROR)

    _console.print(f"[green]Wrote {count} licenses to {output_path}[/green]")


def _run_check(
    dependency_file: str,
    content: str,
    licrc: LicRc,
    store: Optional[LicenseStore],
    show_progress: bool,
) -> CheckResult:
    """Execute the check.

    Args:
        dependency_file: Path of the lockfile.
        content: Content of the lockfile.
        licrc: The policy.
        store: License corpus, None if unavailable.
        show_progress: Whether to display a spinner on stderr.

    Returns:
        CheckResult with every retrieved dependency validated.
    """
    return asyncio.run(
        check_dependencies(
            dependency_file,
            content,
            licrc,
            store=store,
            console=_error_console,
            show_progress=show_progress,
        )
    )


def _write_output_to_file(content: str, path: str, quiet: bool) -> None:
    """Write report content to file.

    Args:
        content: The report content to write.
        path: The file path to write to.
        quiet: Whether to skip the confirmation message.

    Raises:
        ConfigurationError: If file cannot be written.
    """
    file_path = Path(path)

    try:
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write to file '{path}': {e}") from e

    if not quiet:
        _error_console.print(f"[green]Report written to {path}[/green]")


def _display_result(
    result: CheckResult,
    output_format: str,
    output_path: str | None,
    quiet: bool,
) -> None:
    """Display check results in the specified format.

    Args:
        result: The check result to display.
        output_format: Output format (markdown or json).
        output_path: Optional file path to write output to.
        quiet: Whether to skip non-essential messages.
    """
    if output_format == "json":
        content = ReportJsonFormatter().format_check_result(result)
    else:
        content = ReportMarkdownFormatter().format_check_result(result)

    if output_path:
        _write_output_to_file(content, output_path, quiet)
    else:
        click.echo(content)


def _display_error(error: LicensebatError) -> None:
    """Display error message to user on stderr."""
    error_type = type(error).__name__
    _error_console.print(f"[red bold]Error: {error_type}: {error}[/red bold]")


if __name__ == "__main__":
    main()
