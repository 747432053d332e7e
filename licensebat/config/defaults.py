"""Default configuration values for licensebat."""

from __future__ import annotations

from licensebat.models.licrc import LicRc

# Default policy file names to search for, in order
DEFAULT_LICRC_NAMES = [".licrc", ".licrc.toml", ".licrc.yaml", ".licrc.yml"]

# Extensions loaded as YAML; everything else is TOML
YAML_SUFFIXES = (".yaml", ".yml")


def get_default_licrc() -> LicRc:
    """Get the default policy.

    Returns:
        LicRc with no accepted/unaccepted licenses and nothing ignored.
    """
    return LicRc()
