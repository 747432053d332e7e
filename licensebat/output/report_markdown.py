"""Markdown output formatter for check results."""

from datetime import datetime, timezone

from licensebat.constants import LEGAL_DISCLAIMER
from licensebat.models.dependency import RetrievedDependency
from licensebat.models.report import CheckResult


def _cell(value: str) -> str:
    """Escape a value for a Markdown table cell."""
    return value.replace("|", "\\|").replace("\n", " ")


class ReportMarkdownFormatter:
    """Format check results as Markdown output.

    Suitable for pull request comments and compliance reviews.
    """

    def format_check_result(self, result: CheckResult) -> str:
        """Format check result as Markdown string.

        Args:
            result: The check result to format.

        Returns:
            Markdown string representation of the check result.
        """
        lines: list[str] = []

        lines.append("# Licensebat Report")
        lines.append("")

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        lines.append(f"*Generated: {timestamp} from `{result.dependency_file}`*")
        lines.append("")

        lines.extend(self._format_summary(result))
        lines.append("")

        lines.extend(self._format_disclaimer())
        lines.append("")

        dependencies = result.visible_dependencies()
        if not dependencies:
            lines.append("*No dependencies to show.*")
            return "\n".join(lines)

        lines.extend(self._format_dependencies(dependencies))
        lines.append("")

        commented = [dep for dep in dependencies if dep.visible_comment is not None]
        if commented:
            lines.extend(self._format_comments(commented))
            lines.append("")

        return "\n".join(lines)

    def _format_summary(self, result: CheckResult) -> list[str]:
        """Format summary section.

        Args:
            result: The check result.

        Returns:
            List of Markdown lines for the summary.
        """
        invalid = len(result.invalid_dependencies)
        ignored = sum(1 for dep in result.dependencies if dep.is_ignored)

        if result.has_issues:
            status = "⚠️ ISSUES FOUND"
            message = f"**{invalid} dependency(ies) require attention**"
            if not result.blocks:
                message += " (not blocking)"
        else:
            status = "✅ PASS"
            message = "All dependencies are compliant"

        lines = [
            "## Summary",
            "",
            "| Metric | Value |",
            "|--------|-------|",
            f"| Dependency Type | {result.dependency_type} |",
            f"| Dependencies Checked | {result.total_dependencies} |",
            f"| Valid | {result.total_dependencies - invalid - ignored} |",
            f"| Invalid | {invalid} |",
            f"| Ignored | {ignored} |",
        ]

        summary = result.ignored_summary
        if summary and summary.ignored_count > 0:
            lines.append(f"| Skipped Before Retrieval | {summary.ignored_count} |")

        lines.extend(
            [
                f"| **Status** | **{status}** |",
                "",
                f"> {message}",
            ]
        )

        if summary and summary.ignored_count > 0 and summary.ignored_names:
            names_str = ", ".join(summary.ignored_names)
            lines.extend(
                [
                    "",
                    f"> *{summary.ignored_count} dependencies skipped: {names_str}*",
                ]
            )

        return lines

    def _format_disclaimer(self) -> list[str]:
        return [
            "> **NOT LEGAL ADVICE**",
            ">",
            f"> {LEGAL_DISCLAIMER}",
        ]

    def _format_status(self, dep: RetrievedDependency) -> str:
        if dep.is_ignored:
            return "⚪ Ignored"
        if dep.is_valid:
            return "✅ Valid"
        return f"❌ {_cell(dep.error or 'Invalid')}"

    def _format_dependencies(
        self, dependencies: list[RetrievedDependency]
    ) -> list[str]:
        """Format dependencies table section.

        Args:
            dependencies: Dependencies to show, already sorted.

        Returns:
            List of Markdown lines for the dependencies table.
        """
        lines = [
            "## Dependencies",
            "",
            "| Dependency | Version | Licenses | Status |",
            "|------------|---------|----------|--------|",
        ]

        for dep in dependencies:
            name = f"[{_cell(dep.name)}]({dep.url})" if dep.url else _cell(dep.name)
            licenses = ", ".join(dep.licenses) if dep.licenses else "⚠️ Unknown"
            lines.append(
                f"| {name} | {_cell(dep.version)} | {_cell(licenses)} | "
                f"{self._format_status(dep)} |"
            )

        return lines

    def _format_comments(self, dependencies: list[RetrievedDependency]) -> list[str]:
        lines = ["## Comments", ""]
        for dep in dependencies:
            comment = dep.visible_comment
            if comment is not None:
                lines.append(f"- **{dep.name}@{dep.version}**: {comment.text}")
        return lines
