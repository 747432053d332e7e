"""JSON output formatter for check results."""
import json
from datetime import datetime, timezone
from typing import Any

from licensebat import __version__
from licensebat.constants import LEGAL_DISCLAIMER
from licensebat.models.dependency import RetrievedDependency
from licensebat.models.report import CheckResult


class ReportJsonFormatter:
    """Format check results as JSON output.

    Intended for CI pipelines and other programmatic consumers.
    """

    def format_check_result(self, result: CheckResult) -> str:
        """Format check result as JSON string.

        Args:
            result: The check result to format.

        Returns:
            JSON string representation of the check result.
        """
        output = self._build_output(result)
        return json.dumps(output, indent=2)

    def _build_output(self, result: CheckResult) -> dict[str, Any]:
        return {
            "metadata": self._build_metadata(result),
            "summary": self._build_summary(result),
            "dependencies": [
                self._build_dependency(dep) for dep in result.visible_dependencies()
            ],
        }

    def _build_metadata(self, result: CheckResult) -> dict[str, Any]:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return {
            "generated_at": timestamp,
            "tool_version": __version__,
            "dependency_file": result.dependency_file,
            "dependency_type": result.dependency_type,
            "disclaimer": LEGAL_DISCLAIMER,
        }

    def _build_summary(self, result: CheckResult) -> dict[str, Any]:
        """Build summary section.

        Counts cover every retrieved dependency, including the ones the
        behavior flags hide from the dependencies list.
        """
        invalid = len(result.invalid_dependencies)
        ignored = sum(1 for dep in result.dependencies if dep.is_ignored)

        ignored_before_retrieval = None
        summary = result.ignored_summary
        if summary and summary.ignored_count > 0:
            ignored_before_retrieval = {
                "count": summary.ignored_count,
                "names": summary.ignored_names or [],
            }

        return {
            "total_dependencies": result.total_dependencies,
            "valid_dependencies": result.total_dependencies - invalid - ignored,
            "invalid_dependencies": invalid,
            "ignored_dependencies": ignored,
            "ignored_before_retrieval": ignored_before_retrieval,
            "has_issues": result.has_issues,
            "blocking": result.blocks,
            "status": "issues_found" if result.has_issues else "pass",
        }

    def _build_dependency(self, dep: RetrievedDependency) -> dict[str, Any]:
        comment = dep.visible_comment
        return {
            "name": dep.name,
            "version": dep.version,
            "dependency_type": dep.dependency_type,
            "url": dep.url,
            "licenses": dep.licenses,
            "is_valid": dep.is_valid,
            "is_ignored": dep.is_ignored,
            "is_dev": dep.is_dev,
            "is_optional": dep.is_optional,
            "error": dep.error,
            "comment": comment.text if comment else None,
            "suggested_licenses": (
                [
                    {"license": name, "score": round(score, 4)}
                    for name, score in dep.suggested_licenses
                ]
                if dep.suggested_licenses
                else None
            ),
        }
