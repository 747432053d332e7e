"""Output formatters for licensebat."""

from licensebat.output.report_json import ReportJsonFormatter
from licensebat.output.report_markdown import ReportMarkdownFormatter

__all__ = ["ReportJsonFormatter", "ReportMarkdownFormatter"]
