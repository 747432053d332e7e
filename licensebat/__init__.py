"""Licensebat - check your dependencies against your license policy."""

__version__ = "0.1.0"
