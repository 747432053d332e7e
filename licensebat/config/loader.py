"""Policy file discovery and loading for licensebat."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from licensebat.config.defaults import (
    DEFAULT_LICRC_NAMES,
    YAML_SUFFIXES,
    get_default_licrc,
)
from licensebat.exceptions import ConfigurationError
from licensebat.models.licrc import LicRc

logger = logging.getLogger(__name__)


def find_licrc_file(start_dir: Path | None = None) -> Path | None:
    """Find a policy file in the specified directory.

    Searches for `.licrc` first, then the `.toml`, `.yaml` and `.yml`
    variants.

    Args:
        start_dir: Directory to search. Defaults to current working directory.

    Returns:
        Path to the policy file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()
    for name in DEFAULT_LICRC_NAMES:
        licrc_path = search_dir / name
        if licrc_path.exists():
            return licrc_path
    return None


def _parse_content(path: Path, content: str) -> Any:
    """Parse raw policy content as YAML or TOML depending on the file name."""
    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in '{path}': {e}") from e

    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML syntax in '{path}': {e}") from e


def load_licrc_file(path: Path) -> LicRc:
    """Load and validate a policy from a TOML or YAML file.

    Args:
        path: Path to the policy file.

    Returns:
        Validated LicRc instance.

    Raises:
        ConfigurationError: If file cannot be read, has invalid syntax,
            or fails Pydantic validation.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, PermissionError) as e:
        raise ConfigurationError(f"Cannot read policy file '{path}': {e}") from e

    # Handle empty files - return default policy
    if not content.strip():
        return get_default_licrc()

    data = _parse_content(path, content)

    # YAML that parses to None (just comments)
    if data is None:
        return get_default_licrc()

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid policy in '{path}': "
            f"expected a mapping at root level, got {type(data).__name__}"
        )

    try:
        licrc = LicRc.model_validate(data)
    except ValidationError as e:
        error_messages = _format_validation_errors(e)
        raise ConfigurationError(
            f"Invalid policy in '{path}': {error_messages}"
        ) from e

    logger.debug("Loaded policy from %s", path)
    return licrc


def _format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into a readable string.

    Args:
        error: The Pydantic ValidationError.

    Returns:
        Formatted error message string.
    """
    messages: list[str] = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"]) if err["loc"] else "root"
        msg = err["msg"]
        messages.append(f"{loc}: {msg}")
    return "; ".join(messages)


def load_licrc(licrc_path: str | None = None) -> LicRc:
    """Load the policy from file or use defaults.

    If a licrc_path is provided, loads from that file.
    Otherwise, searches for a policy file in the current directory.
    If no file is found, returns the default policy.

    Args:
        licrc_path: Optional path to the policy file.
            If provided, must exist and be valid.

    Returns:
        LicRc with loaded or default values.

    Raises:
        ConfigurationError: If the policy file is invalid.
    """
    if licrc_path is not None:
        return load_licrc_file(Path(licrc_path))

    discovered = find_licrc_file()
    if discovered is not None:
        return load_licrc_file(discovered)

    logger.debug("No policy file found, using defaults")
    return get_default_licrc()
