"""Policy (.licrc) handling for licensebat."""
from __future__ import annotations

from licensebat.config.defaults import DEFAULT_LICRC_NAMES, get_default_licrc
from licensebat.config.loader import (
    find_licrc_file,
    load_licrc,
    load_licrc_file,
)
from licensebat.models.licrc import LicRc

__all__ = [
    "DEFAULT_LICRC_NAMES",
    "LicRc",
    "find_licrc_file",
    "get_default_licrc",
    "load_licrc",
    "load_licrc_file",
]
